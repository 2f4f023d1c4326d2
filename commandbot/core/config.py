"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import Presence, bare_identity

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.commandbot").expanduser()
CONFIG_DIR_ENV = "COMMANDBOT_CONFIG_DIR"
ENV_FILE_NAME = ".env"
BOT_FILE = "bot.yaml"


@dataclass
class Config:
    account_id: str
    credential: str
    masters: List[str]
    name: Optional[str] = None
    is_public: bool = False
    presence: Optional[Presence] = None
    status: Optional[str] = None
    priority: Optional[int] = None
    startup_message: Optional[str] = None
    poll_interval: float = 1.0
    handler_timeout: Optional[float] = None
    slack_app_token: Optional[str] = None
    config_dir: Optional[Path] = None

    @property
    def display_name(self) -> str:
        return self.name or self.account_id.split("@", 1)[0]

    def validate(self) -> None:
        if not self.account_id:
            raise ConfigError("Bot account id is not set")
        if not self.credential:
            raise ConfigError("Bot credential is not set")
        if not self.masters:
            raise ConfigError("At least one master must be configured")


def resolve_config_dir(config_dir: Path | str | None) -> Path:
    """Resolve and validate the directory containing .env + bot.yaml."""
    raw = config_dir or os.getenv(CONFIG_DIR_ENV)
    target = (Path(raw).expanduser() if raw else DEFAULT_CONFIG_DIR).resolve()
    if not target.exists():
        raise ConfigError(
            f"Config directory {target} does not exist. "
            "Run `commandbot init` or create it and add .env and bot.yaml."
        )
    if not target.is_dir():
        raise ConfigError(f"Config directory {target} is not a directory")
    return target


def load_config(config_dir: Path | str | None = None) -> Config:
    """Load bot configuration from the provided or default directory."""
    root = resolve_config_dir(config_dir)
    return _load_config_from_root(root)


def _load_config_from_root(root: Path) -> Config:
    _load_env_file(root / ENV_FILE_NAME)
    data = _load_bot_file(root / BOT_FILE)

    account_id = str(data.get("account") or os.getenv("BOT_ACCOUNT_ID") or "").strip()
    if not account_id:
        raise ConfigError("bot.yaml must define account (or set BOT_ACCOUNT_ID)")

    poll_interval = _parse_optional_number(data.get("poll_interval"), float, "poll_interval")

    config = Config(
        account_id=account_id,
        credential=_require_env("BOT_CREDENTIAL"),
        masters=_parse_masters(data.get("masters", os.getenv("BOT_MASTERS"))),
        name=data.get("name"),
        is_public=_parse_bool(data.get("public", False), "public"),
        presence=_parse_presence(data.get("presence")),
        status=data.get("status"),
        priority=_parse_optional_number(data.get("priority"), int, "priority"),
        startup_message=data.get("startup_message"),
        poll_interval=1.0 if poll_interval is None else poll_interval,
        handler_timeout=_parse_optional_number(data.get("handler_timeout"), float, "handler_timeout"),
        slack_app_token=os.getenv("SLACK_APP_TOKEN"),
        config_dir=root,
    )
    config.validate()
    return config


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.warning("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _load_bot_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"{BOT_FILE} not found at {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {BOT_FILE} structure at {path}")
    return data


def _parse_masters(value: Any) -> List[str]:
    if value is None:
        raise ConfigError("masters must be set in bot.yaml (or BOT_MASTERS)")
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [str(item) for item in value]
    else:
        raise ConfigError(f"masters must be a string or a list, got {type(value).__name__}")

    masters = [bare_identity(item) for item in items if item.strip()]
    if not masters:
        raise ConfigError("At least one master must be configured")
    return masters


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "1", "false", "no", "0"):
        return value.lower() in ("true", "yes", "1")
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _parse_presence(value: Any) -> Optional[Presence]:
    if value in (None, "", "nil"):
        return None
    try:
        return Presence(str(value).lower())
    except ValueError as exc:
        allowed = ", ".join(p.value for p in Presence)
        raise ConfigError(f"Unsupported presence {value!r} (expected one of: {allowed})") from exc


def _parse_optional_number(value: Any, kind, key: str):
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc
