from datetime import datetime

from msgspec import Struct


class User(Struct, kw_only=True, rename="camel"):
    id: str
    name: str
    email: str
    phone: str
    password_digest: str
    avatar_url: str | None = None
    created_at: datetime
    is_online: bool = False
