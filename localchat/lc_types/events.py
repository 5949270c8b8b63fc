from typing import Union

from msgspec import Struct

from localchat.lc_types.chat import Chat
from localchat.lc_types.message import Message


class NewMessageEvent(Struct, kw_only=True, tag="NEW_MESSAGE", rename="camel"):
    message: Message


class NewChatEvent(Struct, kw_only=True, tag="NEW_CHAT", rename="camel"):
    chat: Chat


class ChatDeletedEvent(Struct, kw_only=True, tag="CHAT_DELETED", rename="camel"):
    chat_id: str
    user_id: str


Event = Union[NewMessageEvent | NewChatEvent | ChatDeletedEvent]  # noqa: UP007
