from .auth import AuthService, placeholder_digest
from .messages import MessageService

__all__ = (
    "AuthService",
    "MessageService",
    "placeholder_digest",
)
