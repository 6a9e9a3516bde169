"""
Notification pipeline for dingtalk-notify.

Gates host lifecycle events (session idle, session error, permission
request, question), formats them as markdown and delivers them to a
DingTalk group robot.
"""

from dingtalk_notify.notifications.channel import DeliveryResult, NotificationChannel
from dingtalk_notify.notifications.config import EventsConfig, QuietHoursConfig
from dingtalk_notify.notifications.events import (
    EventKind,
    HostEvent,
    OutboundMessage,
    SessionInfo,
)
from dingtalk_notify.notifications.router import NotificationRouter

__all__ = [
    "DeliveryResult",
    "EventKind",
    "EventsConfig",
    "HostEvent",
    "NotificationChannel",
    "NotificationRouter",
    "OutboundMessage",
    "QuietHoursConfig",
    "SessionInfo",
]
