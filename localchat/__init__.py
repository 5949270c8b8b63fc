from .app import ChatApplication
from .config import Settings, load_settings
from .exceptions import (
    ChatNotFoundError,
    ConfigError,
    DuplicateUserError,
    FileReadError,
    InvalidCredentialsError,
    LocalChatError,
    NotAParticipantError,
    StorageDecryptError,
)

__all__ = (
    "ChatApplication",
    "ChatNotFoundError",
    "ConfigError",
    "DuplicateUserError",
    "FileReadError",
    "InvalidCredentialsError",
    "LocalChatError",
    "NotAParticipantError",
    "Settings",
    "StorageDecryptError",
    "load_settings",
)
