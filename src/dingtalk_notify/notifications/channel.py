"""
NotificationChannel — abstract base class for delivery channels.

A channel turns an OutboundMessage into one delivery attempt and reports
the outcome as a DeliveryResult instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from dingtalk_notify.notifications.events import OutboundMessage


class DeliveryResult(BaseModel):
    """Outcome of one delivery attempt."""

    ok: bool
    errcode: int | None = None
    errmsg: str = ""


class NotificationChannel(ABC):
    """Base class for notification channels."""

    name: str = "unnamed"

    @abstractmethod
    async def send(self, message: OutboundMessage) -> DeliveryResult:
        """Deliver a message. Failures are reported, never raised."""
        ...

    async def connect(self) -> None:
        """Open a pooled connection. No-op by default."""

    async def disconnect(self) -> None:
        """Tear down connection. No-op by default."""
