from datetime import datetime
from enum import StrEnum

from msgspec import Struct


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"


class Message(Struct, kw_only=True, rename="camel"):
    id: str
    chat_id: str
    sender_id: str
    content: str
    timestamp: datetime
    type: MessageType = MessageType.TEXT
    file_name: str | None = None
    file_size: int | None = None
    file_url: str | None = None
    is_read: bool = False


class MessageDraft(Struct, kw_only=True, rename="camel"):
    chat_id: str
    sender_id: str
    content: str
    type: MessageType = MessageType.TEXT
    file_name: str | None = None
    file_size: int | None = None
    file_url: str | None = None


class Attachment(Struct, kw_only=True, rename="camel"):
    file_name: str
    file_size: int
    mime_type: str
    url: str

    @property
    def message_type(self) -> MessageType:
        major = self.mime_type.partition("/")[0]
        match major:
            case "image":
                return MessageType.IMAGE
            case "video":
                return MessageType.VIDEO
            case "audio":
                return MessageType.AUDIO
            case _:
                return MessageType.FILE
