from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Literal

import msgspec
from msgspec import Struct

from localchat.exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOCALCHAT_"

# Environment variable -> (section, field). ``None`` section is the top level.
ENV_FIELDS: dict[str, tuple[str | None, str]] = {
    "STORAGE_BACKEND": ("storage", "backend"),
    "STORAGE_PATH": ("storage", "path"),
    "STORAGE_KEY": ("storage", "encryption_key"),
    "SQLITE_URL": ("storage", "sqlite_url"),
    "KEY_PREFIX": ("storage", "key_prefix"),
    "EVENT_DELAY": ("events", "delay"),
    "EVENT_MODE": ("events", "mode"),
    "RECENT_LOGINS_LIMIT": (None, "recent_logins_limit"),
    "LOG_LEVEL": (None, "log_level"),
}


class StorageSettings(Struct, kw_only=True, forbid_unknown_fields=True):
    backend: Literal["memory", "file", "sqlite"] = "memory"
    path: str = "localchat.json"
    encryption_key: str | None = None
    sqlite_url: str = "sqlite:///localchat.sqlite3"
    key_prefix: str = ""
    auth_key: str = "auth-state"
    chats_key: str = "chats"
    messages_key: str = "messages"


class EventSettings(Struct, kw_only=True, forbid_unknown_fields=True):
    mode: Literal["async", "immediate"] = "async"
    delay: float = 0.1


class Settings(Struct, kw_only=True, forbid_unknown_fields=True):
    storage: StorageSettings = msgspec.field(default_factory=StorageSettings)
    events: EventSettings = msgspec.field(default_factory=EventSettings)
    recent_logins_limit: int = 3
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.recent_logins_limit < 1:
            msg = "recent_logins_limit must be at least 1"
            raise ValueError(msg)

        if self.events.delay < 0:
            msg = "events.delay must not be negative"
            raise ValueError(msg)


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    for name, (section, field) in ENV_FIELDS.items():
        value = environ.get(ENV_PREFIX + name)
        if value is None:
            continue

        target = overrides if section is None else overrides.setdefault(section, {})
        target[field] = value

    return overrides


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """
    Build the settings from an optional TOML file and ``LOCALCHAT_*`` variables.

    Environment variables take precedence over the file.

    :param path: TOML file to read. Missing file means defaults.
    :type path: Path | None
    :param environ: Variables to read overrides from, ``os.environ`` by default.
    :type environ: Mapping[str, str] | None
    :raises ConfigError: The file is unreadable or a value is invalid.
    """
    raw: dict[str, Any] = {}

    if path is not None and path.exists():
        try:
            raw = msgspec.toml.decode(path.read_bytes(), type=dict[str, Any])
        except (OSError, msgspec.DecodeError) as e:
            msg = f"Failed to read settings from {path}"
            raise ConfigError(msg) from e

        logger.debug("Loaded settings from %s", path)

    raw = _merge(raw, _env_overrides(os.environ if environ is None else environ))

    try:
        # Environment values are strings, ``strict=False`` lets "0.5" become a float.
        return msgspec.convert(raw, type=Settings, strict=False)
    except (msgspec.ValidationError, ValueError) as e:
        msg = f"Invalid settings: {e}"
        raise ConfigError(msg) from e
