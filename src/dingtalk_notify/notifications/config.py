"""
Configuration models for the notification gate.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class QuietHoursConfig(BaseModel):
    """Wall-clock window during which notifications are suppressed."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    enabled: bool = False
    start: str = "22:00"  # HH:MM, local time
    end: str = "08:00"


class EventsConfig(BaseModel):
    """Per-event-kind enable flags."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    idle: bool = True
    error: bool = True
    permission: bool = True
    question: bool = True

    def enabled(self, kind: str) -> bool:
        return bool(getattr(self, kind, False))
