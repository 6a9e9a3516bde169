"""
Gate — decides whether an incoming event becomes a notification.

Three independent checks, all of which must pass: the per-kind toggle,
the quiet-hours window, and (for idle/error events) the parent-session
filter.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from dingtalk_notify.notifications.events import EventKind
from dingtalk_notify.notifications.host import SessionHost

if TYPE_CHECKING:
    from dingtalk_notify.core import DingTalkConfig
    from dingtalk_notify.notifications.config import QuietHoursConfig

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_ANCESTRY_KINDS = (EventKind.IDLE, EventKind.ERROR)


def parse_clock(value: str) -> int:
    """Convert ``"HH:MM"`` to minute-of-day. Raises ValueError if malformed."""
    hours, sep, minutes = value.strip().partition(":")
    if not sep:
        raise ValueError(f"expected HH:MM, got {value!r}")
    h, m = int(hours), int(minutes)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"clock value out of range: {value!r}")
    return h * 60 + m


def in_window(minute: int, start: int, end: int) -> bool:
    """Is ``minute`` inside [start, end), wrapping past midnight when start > end?"""
    if start > end:
        return minute >= start or minute < end
    return start <= minute < end


def is_quiet_hours(quiet: QuietHoursConfig, now: datetime | None = None) -> bool:
    if not quiet.enabled:
        return False

    try:
        start = parse_clock(quiet.start)
        end = parse_clock(quiet.end)
    except ValueError:
        logger.warning("Ignoring malformed quiet hours %s-%s", quiet.start, quiet.end)
        return False

    now = now or datetime.now()
    return in_window(now.hour * 60 + now.minute, start, end)


async def is_parent_session(host: SessionHost, session_id: str) -> bool:
    """True for root sessions, and whenever the host can't tell us."""
    try:
        session = await host.get_session(session_id)
    except Exception:
        logger.debug("Session lookup failed for %s, assuming parent", session_id, exc_info=True)
        return True
    return session.is_root


async def should_notify(
    kind: EventKind,
    config: DingTalkConfig,
    host: SessionHost,
    session_id: str | None = None,
    *,
    now: datetime | None = None,
) -> bool:
    if not config.events.enabled(kind.value):
        return False

    # applies to permission events as well
    if is_quiet_hours(config.quiet_hours, now):
        return False

    if kind in _ANCESTRY_KINDS and session_id and not config.notify_child_sessions:
        if not await is_parent_session(host, session_id):
            return False

    return True
