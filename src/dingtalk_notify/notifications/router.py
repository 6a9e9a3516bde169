"""
NotificationRouter — turns host events into delivered notifications.

Each event runs gate → session title lookup → formatter → channel, each
step awaited in order. Nothing raised inside a handler escapes to the
host.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dingtalk_notify.notifications.channel import DeliveryResult, NotificationChannel
from dingtalk_notify.notifications.channels.dingtalk import DingTalkChannel
from dingtalk_notify.notifications.events import (
    QUESTION_TOOL,
    EventKind,
    HostEvent,
    OutboundMessage,
)
from dingtalk_notify.notifications.formatter import format_message
from dingtalk_notify.notifications.gate import should_notify
from dingtalk_notify.notifications.host import PluginLogger, SessionHost

if TYPE_CHECKING:
    from dingtalk_notify.core import DingTalkConfig

logger = logging.getLogger(__name__)

_SESSION_KINDS = (EventKind.IDLE, EventKind.ERROR)


class NotificationRouter:
    """Dispatches host events through the gate to the DingTalk channel."""

    def __init__(
        self,
        config: DingTalkConfig,
        host: SessionHost,
        *,
        channel: NotificationChannel | None = None,
        log: PluginLogger | None = None,
    ) -> None:
        self.config = config
        self.host = host
        self.log = log or PluginLogger()
        self.channel = channel or DingTalkChannel.from_config(config, self.log)

    async def check_credentials(self) -> bool:
        """Warn once at startup when the robot isn't configured."""
        if self.config.has_credentials:
            return True
        await self.log.warn(
            "accessToken or secret not configured. "
            "Please set up ~/.config/opencode/dingtalk-notify.json"
        )
        return False

    async def handle_host_event(self, payload: dict[str, Any]) -> DeliveryResult | None:
        """Entry point for raw ``{"type", "properties"}`` host payloads."""
        try:
            event = HostEvent.from_host(payload)
        except Exception:
            logger.exception("Malformed host event: %r", payload.get("type"))
            return None
        if event is None:
            return None
        return await self.handle_event(event)

    async def handle_tool_before(
        self, tool: str, session_id: str | None = None
    ) -> DeliveryResult | None:
        """Pre-tool-execution hook; only the question tool notifies."""
        if tool != QUESTION_TOOL:
            return None
        logger.debug("Question asked in session %s", session_id)
        return await self.handle_event(HostEvent(kind=EventKind.QUESTION))

    async def handle_event(self, event: HostEvent) -> DeliveryResult | None:
        """
        Notify for one event if the gate allows it.

        Returns the delivery result, or None when nothing was sent.
        """
        if event.kind in _SESSION_KINDS and not event.session_id:
            return None

        try:
            if not await should_notify(event.kind, self.config, self.host, event.session_id):
                logger.debug("Suppressed %s event for %s", event.kind.value, event.session_id)
                return None

            title = None
            if event.kind in _SESSION_KINDS and event.session_id:
                title = await self._session_title(event.session_id)

            message = format_message(event.kind, title, event.session_id, event.error)
        except Exception:
            logger.exception("Failed to prepare %s notification", event.kind.value)
            return None

        return await self._safe_send(message)

    async def connect(self) -> None:
        for part in (self.channel, self.host):
            connect = getattr(part, "connect", None)
            if connect is None:
                continue
            try:
                await connect()
            except Exception:
                logger.exception("Failed to connect %s", type(part).__name__)

    async def disconnect(self) -> None:
        for part in (self.channel, self.host):
            disconnect = getattr(part, "disconnect", None)
            if disconnect is None:
                continue
            try:
                await disconnect()
            except Exception:
                logger.exception("Failed to disconnect %s", type(part).__name__)

    async def _session_title(self, session_id: str) -> str | None:
        try:
            session = await self.host.get_session(session_id)
        except Exception:
            logger.debug("Title lookup failed for %s", session_id, exc_info=True)
            return None
        return session.title or None

    async def _safe_send(self, message: OutboundMessage) -> DeliveryResult:
        """Send with error handling so a channel bug never reaches the host."""
        try:
            return await self.channel.send(message)
        except Exception as exc:
            logger.exception("Failed to send to channel %s", self.channel.name)
            return DeliveryResult(ok=False, errmsg=str(exc))
