from enum import StrEnum

import msgspec
from msgspec import Struct

from localchat.lc_types.user import User


class AuthErrorCode(StrEnum):
    DUPLICATE_USER = "DUPLICATE_USER"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


class AuthState(Struct, kw_only=True, rename="camel"):
    current_user: User | None = None
    users: list[User] = msgspec.field(default_factory=list)
    recent_logins: list[str] = msgspec.field(default_factory=list)


class AuthResult(Struct, kw_only=True, rename="camel"):
    success: bool
    message: str
    user: User | None = None
    error: AuthErrorCode | None = None
