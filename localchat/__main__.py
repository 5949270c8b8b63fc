from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from localchat.app import ChatApplication
from localchat.config import load_settings
from localchat.exceptions import ConfigError, StorageDecryptError
from localchat.lc_types import Event, MessageDraft, NewMessageEvent

logger = logging.getLogger(__name__)


def log_event(event: Event) -> None:
    match event:
        case NewMessageEvent(message=message):
            logger.info("<- NEW_MESSAGE %s: %s", message.sender_id, message.content)
        case _:
            logger.info("<- %s", type(event).__name__)


async def run_demo(app: ChatApplication) -> None:
    auth = app.auth
    messages = app.messages

    for name, email in (("Alice", "alice@example.com"), ("Bob", "bob@example.com")):
        result = auth.signup(name, email, "", "password")
        logger.info("signup %s: %s", email, result.message)

    alice = auth.login("alice@example.com", "password").user
    bob = next(user for user in auth.get_all_users() if user.email == "bob@example.com")
    if alice is None:
        logger.error("Login failed")
        return

    messages.subscribe(log_event)

    chat = messages.find_direct_chat(alice.id, bob.id) or messages.create_chat(
        [alice.id, bob.id],
        bob.name,
        False,
        alice.id,
    )
    messages.send_message(MessageDraft(chat_id=chat.id, sender_id=alice.id, content="hi"))
    await app.drain()

    for bob_chat in messages.get_user_chats(bob.id):
        logger.info(
            "%s: last=%r unread=%d",
            bob_chat.name,
            bob_chat.last_message,
            bob_chat.unread_count,
        )

    messages.mark_chat_as_read(chat.id, bob.id)
    logger.info("after read: unread=%d", messages.get_unread_count(chat.id, bob.id))

    messages.unsubscribe(log_event)
    auth.logout()


async def main_async(config: Path | None) -> int:
    try:
        settings = load_settings(config)
    except ConfigError:
        logger.exception("Could not load settings")
        return 1

    logging.getLogger().setLevel(settings.log_level.upper())

    try:
        app = ChatApplication.from_settings(settings)
    except StorageDecryptError:
        logger.exception("Could not open storage")
        return 1

    async with app:
        await run_demo(app)

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(prog="localchat", description="Run the local chat demo")
    parser.add_argument("-c", "--config", type=Path, default=None, help="TOML settings file")
    args = parser.parse_args()

    logging.basicConfig(format="%(asctime)s %(message)s", level=logging.INFO)
    return asyncio.run(main_async(args.config))


if __name__ == "__main__":
    raise SystemExit(main())
