from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from localchat.config import Settings, load_settings
from localchat.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults() -> None:
    settings = load_settings(environ={})

    assert settings == Settings()
    assert settings.storage.backend == "memory"
    assert settings.events.delay == 0.1
    assert settings.recent_logins_limit == 3


def test_missing_file_means_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "absent.toml", environ={}) == Settings()


def test_toml_file_and_env_overrides(tmp_path: Path) -> None:
    path = tmp_path / "localchat.toml"
    path.write_text(
        'log_level = "DEBUG"\n'
        "recent_logins_limit = 5\n"
        "[storage]\n"
        'backend = "file"\n'
        'path = "chat.json"\n'
        "[events]\n"
        "delay = 0.2\n",
    )

    settings = load_settings(
        path,
        environ={"LOCALCHAT_EVENT_DELAY": "0.5", "LOCALCHAT_KEY_PREFIX": "whatsapp_"},
    )

    assert settings.log_level == "DEBUG"
    assert settings.recent_logins_limit == 5
    assert settings.storage.backend == "file"
    assert settings.storage.path == "chat.json"
    assert settings.storage.key_prefix == "whatsapp_"
    assert settings.events.delay == 0.5


@pytest.mark.parametrize(
    "environ",
    [
        {"LOCALCHAT_STORAGE_BACKEND": "redis"},
        {"LOCALCHAT_RECENT_LOGINS_LIMIT": "0"},
        {"LOCALCHAT_EVENT_DELAY": "soon"},
    ],
)
def test_invalid_values(environ: dict[str, str]) -> None:
    with pytest.raises(ConfigError):
        load_settings(environ=environ)


def test_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("storage = [")

    with pytest.raises(ConfigError):
        load_settings(path, environ={})


def test_unknown_field_rejected(tmp_path: Path) -> None:
    path = tmp_path / "extra.toml"
    path.write_text("[storage]\nflavour = 'vanilla'\n")

    with pytest.raises(ConfigError):
        load_settings(path, environ={})
