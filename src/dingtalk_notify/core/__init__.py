"""
Core configuration for dingtalk-notify.

Provides:
- Path constants (CONFIG_HOME, CONFIG_FILE, EXAMPLE_CONFIG_FILE)
- The DingTalkConfig model
- Config loading/saving functions
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from dingtalk_notify.notifications.config import EventsConfig, QuietHoursConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_HOME: Path = Path.home() / ".config" / "opencode"
CONFIG_FILE: Path = CONFIG_HOME / "dingtalk-notify.json"
EXAMPLE_CONFIG_FILE: Path = Path("config.example.json")


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class DingTalkConfig(BaseModel):
    """
    Resolved notifier configuration.

    Nested models carry their own defaults, so a user file that sets only
    ``events.idle`` keeps the other event toggles at their defaults.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    access_token: str = ""
    secret: str = ""
    notify_child_sessions: bool = False
    at_all: bool = False
    at_mobiles: list[str] = Field(default_factory=list)
    quiet_hours: QuietHoursConfig = Field(default_factory=QuietHoursConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)

    @field_validator("quiet_hours", "events", mode="before")
    @classmethod
    def _null_section_uses_defaults(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("at_mobiles", mode="before")
    @classmethod
    def _mobiles_as_strings(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            # numbers written without quotes
            return [str(m) if isinstance(m, int) and not isinstance(m, bool) else m for m in value]
        return value

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token and self.secret)


# ---------------------------------------------------------------------------
# Config loading/saving
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> DingTalkConfig:
    """Load configuration from the JSON file, or return defaults."""
    config_file = path or CONFIG_FILE
    try:
        data: Any = json.loads(config_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config root must be an object")
        return DingTalkConfig.model_validate(data)
    except FileNotFoundError:
        logger.debug("No config at %s, using defaults", config_file)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Ignoring invalid config %s, using defaults: %s", config_file, exc)
    return DingTalkConfig()


def save_config(config: DingTalkConfig, path: Path | None = None) -> None:
    """Save configuration as camelCase JSON."""
    config_file = path or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        json.dumps(config.model_dump(by_alias=True), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def mask_secret(value: str, keep: int = 10) -> str:
    """Show the ends of a credential, hide the middle."""
    if not value:
        return "(not set)"
    if len(value) <= keep * 2:
        return value[:2] + "..."
    return f"{value[:keep]}...{value[-keep:]}"


__all__ = [
    "CONFIG_HOME",
    "CONFIG_FILE",
    "EXAMPLE_CONFIG_FILE",
    "DingTalkConfig",
    "EventsConfig",
    "QuietHoursConfig",
    "load_config",
    "save_config",
    "mask_secret",
]
