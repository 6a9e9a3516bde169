"""
Host adapters — the capabilities the notifier needs from the OpenCode host.

SessionHost answers "what is this session?" and HostLogSink accepts
structured log records. OpencodeClient implements both over the host's
HTTP server API, and also streams the host's server-sent events.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

import httpx

from dingtalk_notify.notifications.events import SessionInfo

logger = logging.getLogger(__name__)

SERVICE_NAME = "dingtalk-notify"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class HostError(Exception):
    """The host could not answer a request."""


class SessionHost(Protocol):
    async def get_session(self, session_id: str) -> SessionInfo: ...


class HostLogSink(Protocol):
    async def log(
        self, level: str, message: str, extra: dict[str, Any] | None = None
    ) -> None: ...


class PluginLogger:
    """
    Logs through stdlib logging and mirrors each record to the host sink.

    The sink is best-effort: anything it raises is dropped here so that
    logging can never break event handling.
    """

    def __init__(
        self,
        sink: HostLogSink | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.sink = sink
        self._log = log or logger

    async def log(
        self, level: str, message: str, extra: dict[str, Any] | None = None
    ) -> None:
        if extra:
            self._log.log(_LEVELS.get(level, logging.INFO), "%s %s", message, extra)
        else:
            self._log.log(_LEVELS.get(level, logging.INFO), "%s", message)

        if self.sink is None:
            return
        try:
            await self.sink.log(level, message, extra)
        except Exception:
            self._log.debug("Host log sink failed", exc_info=True)

    async def info(self, message: str, extra: dict[str, Any] | None = None) -> None:
        await self.log("info", message, extra)

    async def warn(self, message: str, extra: dict[str, Any] | None = None) -> None:
        await self.log("warn", message, extra)

    async def error(self, message: str, extra: dict[str, Any] | None = None) -> None:
        await self.log("error", message, extra)


class OpencodeClient:
    """HTTP client for a running OpenCode server (``opencode serve``)."""

    def __init__(self, base_url: str, *, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_session(self, session_id: str) -> SessionInfo:
        client = self._client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        try:
            resp = await client.get(f"/session/{session_id}")
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise HostError(f"session lookup failed for {session_id}: {exc}") from exc
        finally:
            if not self._client:
                await client.aclose()

        if not isinstance(data, dict):
            raise HostError(f"unexpected session payload for {session_id}")
        return SessionInfo(
            id=data.get("id") or session_id,
            title=data.get("title"),
            parent_id=data.get("parentID"),
        )

    async def log(
        self, level: str, message: str, extra: dict[str, Any] | None = None
    ) -> None:
        body: dict[str, Any] = {"service": SERVICE_NAME, "level": level, "message": message}
        if extra:
            body["extra"] = extra

        client = self._client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        try:
            resp = await client.post("/log", json=body)
            resp.raise_for_status()
        finally:
            if not self._client:
                await client.aclose()

    async def events(self) -> AsyncIterator[dict[str, Any]]:
        """Yield decoded payloads from the host's server-sent event stream."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, read=None),
        ) as client:
            async with client.stream("GET", "/event") as resp:
                resp.raise_for_status()
                data_lines: list[str] = []
                async for line in resp.aiter_lines():
                    if line.startswith("data:"):
                        data_lines.append(line[5:].lstrip())
                        continue
                    if line or not data_lines:
                        continue
                    raw = "\n".join(data_lines)
                    data_lines = []
                    try:
                        payload = json.loads(raw)
                    except ValueError:
                        logger.debug("Skipping undecodable event: %r", raw[:200])
                        continue
                    if isinstance(payload, dict):
                        yield payload
