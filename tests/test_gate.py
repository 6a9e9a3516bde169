"""Tests for the notification gate: toggles, quiet hours, session ancestry."""

from datetime import datetime

import pytest

from conftest import FakeHost
from dingtalk_notify.core import DingTalkConfig
from dingtalk_notify.notifications.config import QuietHoursConfig
from dingtalk_notify.notifications.events import EventKind
from dingtalk_notify.notifications.gate import (
    in_window,
    is_parent_session,
    is_quiet_hours,
    parse_clock,
    should_notify,
)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 10, 18, hour, minute)


# ---------------------------------------------------------------------------
# Quiet hours
# ---------------------------------------------------------------------------


class TestParseClock:
    def test_valid(self):
        assert parse_clock("00:00") == 0
        assert parse_clock("08:00") == 480
        assert parse_clock("22:30") == 1350
        assert parse_clock("23:59") == 1439

    @pytest.mark.parametrize("value", ["", "2200", "25:00", "12:60", "ab:cd"])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            parse_clock(value)


class TestQuietHours:
    OVERNIGHT = QuietHoursConfig(enabled=True, start="22:00", end="08:00")

    @pytest.mark.parametrize("hour,minute,quiet", [
        (23, 30, True),
        (9, 0, False),
        (22, 0, True),   # start is inclusive
        (8, 0, False),   # end is exclusive
        (7, 59, True),
        (0, 0, True),
        (21, 59, False),
    ])
    def test_overnight_window(self, hour, minute, quiet):
        assert is_quiet_hours(self.OVERNIGHT, _at(hour, minute)) is quiet

    @pytest.mark.parametrize("hour,quiet", [(12, False), (13, True), (14, True), (15, False)])
    def test_same_day_window(self, hour, quiet):
        window = QuietHoursConfig(enabled=True, start="13:00", end="15:00")
        assert is_quiet_hours(window, _at(hour)) is quiet

    def test_disabled_never_quiet(self):
        window = QuietHoursConfig(enabled=False, start="00:00", end="23:59")
        assert is_quiet_hours(window, _at(12)) is False

    def test_equal_bounds_is_empty_window(self):
        assert in_window(600, 600, 600) is False

    def test_malformed_window_not_quiet(self):
        window = QuietHoursConfig(enabled=True, start="late", end="08:00")
        assert is_quiet_hours(window, _at(23)) is False


# ---------------------------------------------------------------------------
# Session ancestry
# ---------------------------------------------------------------------------


class TestParentSession:
    @pytest.mark.asyncio
    async def test_no_parent_is_root(self, root_session):
        host = FakeHost({"abc": root_session})
        assert await is_parent_session(host, "abc") is True

    @pytest.mark.asyncio
    async def test_parent_id_is_child(self, child_session):
        host = FakeHost({"child-1": child_session})
        assert await is_parent_session(host, "child-1") is False

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_open(self):
        host = FakeHost(fail=True)
        assert await is_parent_session(host, "abc") is True


# ---------------------------------------------------------------------------
# should_notify
# ---------------------------------------------------------------------------


class TestShouldNotify:
    @pytest.mark.asyncio
    async def test_root_idle_notifies(self, config, root_session):
        host = FakeHost({"abc": root_session})
        assert await should_notify(EventKind.IDLE, config, host, "abc") is True

    @pytest.mark.asyncio
    async def test_child_error_suppressed(self, config, child_session):
        host = FakeHost({"child-1": child_session})
        assert await should_notify(EventKind.ERROR, config, host, "child-1") is False

    @pytest.mark.asyncio
    async def test_child_allowed_when_configured(self, child_session):
        config = DingTalkConfig(notify_child_sessions=True)
        host = FakeHost({"child-1": child_session})
        assert await should_notify(EventKind.IDLE, config, host, "child-1") is True
        assert host.lookups == []

    @pytest.mark.asyncio
    async def test_disabled_kind(self, root_session):
        config = DingTalkConfig(events={"idle": False})
        host = FakeHost({"abc": root_session})
        assert await should_notify(EventKind.IDLE, config, host, "abc") is False
        assert await should_notify(EventKind.ERROR, config, host, "abc") is True

    @pytest.mark.asyncio
    async def test_permission_skips_ancestry(self, config):
        host = FakeHost(fail=True)
        assert await should_notify(EventKind.PERMISSION, config, host) is True
        assert await should_notify(EventKind.QUESTION, config, host) is True
        assert host.lookups == []

    @pytest.mark.asyncio
    async def test_quiet_hours_suppress_every_kind(self):
        config = DingTalkConfig(quiet_hours={"enabled": True, "start": "22:00", "end": "08:00"})
        host = FakeHost(fail=True)
        for kind in EventKind:
            assert await should_notify(kind, config, host, "abc", now=_at(23, 30)) is False
        assert await should_notify(EventKind.PERMISSION, config, host, now=_at(9)) is True
