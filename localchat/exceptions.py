from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class LocalChatError(Exception):
    pass


class DuplicateUserError(LocalChatError):
    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists")
        self.email: str = email


class InvalidCredentialsError(LocalChatError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Invalid email or password for {email}")
        self.email: str = email


class ChatNotFoundError(LocalChatError):
    def __init__(self, chat_id: str) -> None:
        super().__init__(f"Chat with chat_id {chat_id} not found")
        self.chat_id: str = chat_id


class NotAParticipantError(LocalChatError):
    def __init__(self, chat_id: str, user_id: str) -> None:
        super().__init__(f"User {user_id} is not a participant of chat {chat_id}")
        self.chat_id: str = chat_id
        self.user_id: str = user_id


class FileReadError(LocalChatError):
    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Failed to read file {path}")
        self.path: Path | str = path


class ConfigError(LocalChatError):
    pass


class StorageDecryptError(LocalChatError):
    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Storage {path} could not be decrypted with the given key")
        self.path: Path | str = path
