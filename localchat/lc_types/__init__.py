from .auth import AuthErrorCode, AuthResult, AuthState
from .chat import Chat
from .events import ChatDeletedEvent, Event, NewChatEvent, NewMessageEvent
from .message import Attachment, Message, MessageDraft, MessageType
from .user import User

__all__ = (
    "Attachment",
    "AuthErrorCode",
    "AuthResult",
    "AuthState",
    "Chat",
    "ChatDeletedEvent",
    "Event",
    "Message",
    "MessageDraft",
    "MessageType",
    "NewChatEvent",
    "NewMessageEvent",
    "User",
)
