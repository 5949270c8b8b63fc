from datetime import datetime

import msgspec
from msgspec import Struct


class Chat(Struct, kw_only=True, rename="camel"):
    id: str
    participants: list[str]
    is_group: bool
    name: str
    avatar_url: str | None = None
    last_message: str | None = None
    last_message_time: datetime | None = None
    unread_count: int = 0
    unread_by_participant: dict[str, int] = msgspec.field(default_factory=dict)
    created_by: str
    created_at: datetime
