from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, TYPE_CHECKING

from localchat.avatars import chat_avatar
from localchat.exceptions import ChatNotFoundError, FileReadError, NotAParticipantError
from localchat.lc_types import (
    Attachment,
    Chat,
    ChatDeletedEvent,
    Message,
    MessageDraft,
    MessageType,
    NewChatEvent,
    NewMessageEvent,
)

if TYPE_CHECKING:
    from localchat.events.base import BaseEventBus, Listener
    from localchat.ids import IdGenerator
    from localchat.lc_types import User
    from localchat.store import PersistentStore

    FileSource = str | os.PathLike[str] | IO[bytes]

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEMO_GREETING = "Hey! How are you doing?"
DEMO_CHATS_LIMIT = 2


def _find_chat(chats: list[Chat], chat_id: str) -> Chat | None:
    return next((chat for chat in chats if chat.id == chat_id), None)


def _read_source(file: FileSource) -> tuple[str, bytes]:
    if isinstance(file, (str, os.PathLike)):
        path = Path(file)
        return path.name, path.read_bytes()

    name = Path(str(getattr(file, "name", "file"))).name
    return name, file.read()


class MessageService:
    def __init__(
        self,
        store: PersistentStore,
        id_generator: IdGenerator,
        event_bus: BaseEventBus,
    ) -> None:
        """
        Initialize the Message Service.

        :param store: Snapshot store holding chats and messages.
        :type store: PersistentStore
        :param id_generator: Id source shared with the other services.
        :type id_generator: IdGenerator
        :param event_bus: Channel the change events are published on.
        :type event_bus: BaseEventBus
        """
        self.store = store
        self.id_generator = id_generator
        self.event_bus = event_bus

    def create_chat(
        self,
        participant_ids: list[str],
        name: str,
        is_group: bool,
        created_by: str,
    ) -> Chat:
        if not participant_ids:
            msg = "A chat needs at least one participant"
            raise ValueError(msg)

        # Ordered set: keep the first occurrence of every id.
        participants = list(dict.fromkeys(participant_ids))

        chat = Chat(
            id=self.id_generator.next_id(),
            participants=participants,
            is_group=is_group,
            name=name,
            avatar_url=chat_avatar(name, participants, is_group=is_group),
            unread_count=0,
            unread_by_participant=dict.fromkeys(participants, 0),
            created_by=created_by,
            created_at=datetime.now(UTC),
        )

        with self.store.transaction():
            chats = self.store.load_chats()
            chats.append(chat)
            self.store.save_chats(chats)

        logger.info(
            "Chat %s created by %s with %d participants",
            chat.id,
            created_by,
            len(participants),
        )
        self.event_bus.publish(NewChatEvent(chat=chat))
        return chat

    def get_user_chats(self, user_id: str) -> list[Chat]:
        return [chat for chat in self.store.load_chats() if user_id in chat.participants]

    def get_chat(self, chat_id: str) -> Chat | None:
        return _find_chat(self.store.load_chats(), chat_id)

    def find_direct_chat(self, user_id: str, other_user_id: str) -> Chat | None:
        wanted = {user_id, other_user_id}
        return next(
            (
                chat
                for chat in self.get_user_chats(user_id)
                if not chat.is_group and set(chat.participants) == wanted
            ),
            None,
        )

    def get_chat_messages(self, chat_id: str) -> list[Message]:
        return self.store.load_messages().get(chat_id, [])

    def get_unread_count(self, chat_id: str, user_id: str) -> int:
        chat = self.get_chat(chat_id)
        if chat is None:
            raise ChatNotFoundError(chat_id=chat_id)

        return chat.unread_by_participant.get(user_id, 0)

    def send_message(self, draft: MessageDraft) -> Message:
        with self.store.transaction():
            chats = self.store.load_chats()
            chat = _find_chat(chats, draft.chat_id)

            if chat is None:
                raise ChatNotFoundError(chat_id=draft.chat_id)

            if draft.sender_id not in chat.participants:
                raise NotAParticipantError(chat_id=draft.chat_id, user_id=draft.sender_id)

            message = Message(
                id=self.id_generator.next_id(),
                chat_id=draft.chat_id,
                sender_id=draft.sender_id,
                content=draft.content,
                timestamp=datetime.now(UTC),
                type=draft.type,
                file_name=draft.file_name,
                file_size=draft.file_size,
                file_url=draft.file_url,
                is_read=False,
            )

            messages = self.store.load_messages()
            messages.setdefault(draft.chat_id, []).append(message)
            self.store.save_messages(messages)

            chat.last_message = message.content
            chat.last_message_time = message.timestamp
            for participant_id in chat.participants:
                if participant_id == draft.sender_id:
                    continue

                chat.unread_count += 1
                chat.unread_by_participant[participant_id] = (
                    chat.unread_by_participant.get(participant_id, 0) + 1
                )

            self.store.save_chats(chats)

        logger.info("Message %s sent to chat %s by %s", message.id, chat.id, draft.sender_id)
        self.event_bus.publish(NewMessageEvent(message=message))
        return message

    def mark_chat_as_read(self, chat_id: str, reader_id: str) -> None:
        with self.store.transaction():
            chats = self.store.load_chats()
            chat = _find_chat(chats, chat_id)

            if chat is None:
                raise ChatNotFoundError(chat_id=chat_id)

            chat.unread_count = 0
            if reader_id in chat.unread_by_participant:
                chat.unread_by_participant[reader_id] = 0
            self.store.save_chats(chats)

            messages = self.store.load_messages()
            chat_messages = messages.get(chat_id)
            if chat_messages:
                for message in chat_messages:
                    if message.sender_id != reader_id:
                        message.is_read = True
                self.store.save_messages(messages)

        logger.debug("Chat %s marked as read by %s", chat_id, reader_id)

    def delete_chat(self, chat_id: str, requesting_user_id: str) -> None:
        with self.store.transaction():
            chats = self.store.load_chats()
            chat = _find_chat(chats, chat_id)

            if chat is not None:
                if requesting_user_id not in chat.participants:
                    logger.warning(
                        "User %s is not a participant of chat %s, delete ignored",
                        requesting_user_id,
                        chat_id,
                    )
                    return

                self.store.save_chats([c for c in chats if c.id != chat_id])

            messages = self.store.load_messages()
            if messages.pop(chat_id, None) is not None:
                self.store.save_messages(messages)

        logger.info("Chat %s deleted by %s", chat_id, requesting_user_id)
        self.event_bus.publish(ChatDeletedEvent(chat_id=chat_id, user_id=requesting_user_id))

    async def upload_attachment(self, file: FileSource) -> Attachment:
        """
        Encode a file into a self-contained ``data:`` URL.

        Reading happens in a worker thread so the event loop keeps running.

        :raises FileReadError: The file could not be read.
        """
        try:
            name, data = await asyncio.to_thread(_read_source, file)
        except OSError as e:
            logger.exception("Upload of %s failed: %s", file, e.args)
            raise FileReadError(path=str(file)) from e

        mime_type = mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE
        url = f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

        return Attachment(file_name=name, file_size=len(data), mime_type=mime_type, url=url)

    async def upload_file(self, file: FileSource) -> str:
        attachment = await self.upload_attachment(file)
        return attachment.url

    async def send_file(
        self,
        chat_id: str,
        sender_id: str,
        file: FileSource,
        type: MessageType | None = None,  # noqa: A002
    ) -> Message:
        attachment = await self.upload_attachment(file)

        return self.send_message(
            MessageDraft(
                chat_id=chat_id,
                sender_id=sender_id,
                content=attachment.file_name,
                type=type or attachment.message_type,
                file_name=attachment.file_name,
                file_size=attachment.file_size,
                file_url=attachment.url,
            ),
        )

    def seed_demo_chats(self, user: User, others: list[User]) -> list[Chat]:
        """
        Give a user with no chats a couple of direct chats to start from.

        The first chat gets a greeting from the other side.
        """
        if self.get_user_chats(user.id):
            return []

        candidates = [other for other in others if other.id != user.id][:DEMO_CHATS_LIMIT]
        created: list[Chat] = []

        for index, other in enumerate(candidates):
            chat = self.create_chat([user.id, other.id], other.name, False, user.id)
            if index == 0:
                self.send_message(
                    MessageDraft(chat_id=chat.id, sender_id=other.id, content=DEMO_GREETING),
                )
            created.append(chat)

        return created

    def subscribe(self, listener: Listener) -> None:
        self.event_bus.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self.event_bus.unsubscribe(listener)
