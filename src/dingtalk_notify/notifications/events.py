"""
Notification events — the data flowing through the notification system.

Defines the event kinds the host reports, the parsed HostEvent model,
the session summary fetched from the host, and the OutboundMessage the
channel delivers.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


class EventKind(str, Enum):
    IDLE = "idle"
    ERROR = "error"
    PERMISSION = "permission"
    QUESTION = "question"


# host event type → kind
HOST_EVENT_TYPES: dict[str, EventKind] = {
    "session.idle": EventKind.IDLE,
    "session.error": EventKind.ERROR,
    "permission.updated": EventKind.PERMISSION,
}

QUESTION_TOOL = "question"


def normalize_error(error: Any) -> str | None:
    """Render an error payload (string or structured) as a string."""
    if error is None:
        return None
    if isinstance(error, str):
        return error
    try:
        return json.dumps(error, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(error)


class HostEvent(BaseModel):
    """A single lifecycle event reported by the host."""

    kind: EventKind
    session_id: str | None = None
    error: str | None = None

    @classmethod
    def from_host(cls, payload: dict[str, Any]) -> HostEvent | None:
        """
        Parse a raw host payload ``{"type": ..., "properties": {...}}``.

        Returns None for event types that never produce a notification.
        """
        kind = HOST_EVENT_TYPES.get(payload.get("type", ""))
        if kind is None:
            return None

        props = payload.get("properties") or {}
        if kind == EventKind.PERMISSION:
            return cls(kind=kind)

        return cls(
            kind=kind,
            session_id=props.get("sessionID") or None,
            error=normalize_error(props.get("error")) if kind == EventKind.ERROR else None,
        )


class SessionInfo(BaseModel):
    """The fields of a host session the notifier cares about."""

    id: str = ""
    title: str | None = None
    parent_id: str | None = None

    @property
    def is_root(self) -> bool:
        return not self.parent_id


class OutboundMessage(BaseModel):
    """A formatted chat message: title plus markdown body."""

    title: str
    text: str
