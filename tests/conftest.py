"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil
from unittest.mock import AsyncMock, MagicMock

from dingtalk_notify.core import DingTalkConfig
from dingtalk_notify.notifications.events import SessionInfo
from dingtalk_notify.notifications.host import HostError


class FakeHost:
    """In-memory session host."""

    def __init__(self, sessions=None, fail=False):
        self.sessions = sessions or {}
        self.fail = fail
        self.lookups: list[str] = []

    async def get_session(self, session_id):
        self.lookups.append(session_id)
        if self.fail or session_id not in self.sessions:
            raise HostError(f"unknown session {session_id}")
        return self.sessions[session_id]


def make_http_client(json_body=None, json_error=None):
    """Mocked httpx.AsyncClient whose post() answers with ``json_body``."""
    mock_resp = MagicMock()
    if json_error is not None:
        mock_resp.json = MagicMock(side_effect=json_error)
    else:
        mock_resp.json = MagicMock(return_value=json_body)

    mock_client = AsyncMock()
    mock_client.post = AsyncMock(return_value=mock_resp)
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test artifacts."""
    dirpath = tempfile.mkdtemp()
    yield Path(dirpath)
    shutil.rmtree(dirpath, ignore_errors=True)


@pytest.fixture
def config():
    """Configured robot, quiet hours off, parent sessions only."""
    return DingTalkConfig(
        access_token="tok",
        secret="sec",
        quiet_hours={"enabled": False},
        notify_child_sessions=False,
    )


@pytest.fixture
def root_session():
    return SessionInfo(id="abc", title="Build", parent_id=None)


@pytest.fixture
def child_session():
    return SessionInfo(id="child-1", title="Subtask", parent_id="parent-1")
