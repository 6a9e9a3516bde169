"""
DingTalk channel — signed markdown messages to a group robot webhook.

Each request is signed with HMAC-SHA256 over ``"{timestamp}\\n{secret}"``
as the robot's "加签" security setting requires.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from dingtalk_notify.notifications.channel import DeliveryResult, NotificationChannel
from dingtalk_notify.notifications.events import OutboundMessage
from dingtalk_notify.notifications.host import PluginLogger

if TYPE_CHECKING:
    from dingtalk_notify.core import DingTalkConfig

DINGTALK_API = "https://oapi.dingtalk.com/robot/send"


def sign(secret: str, timestamp: int) -> str:
    """base64(HMAC-SHA256(key=secret, msg="{timestamp}\\n{secret}"))."""
    digest = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}\n{secret}".encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def build_payload(
    message: OutboundMessage,
    *,
    at_all: bool = False,
    at_mobiles: list[str] | None = None,
) -> dict[str, Any]:
    """Markdown payload with @-mention directives."""
    mobiles = list(at_mobiles or [])
    text = message.text

    if not at_all and mobiles:
        # only mention numbers the body doesn't already @
        missing = [m for m in mobiles if f"@{m}" not in message.text]
        if missing:
            text += "\n\n<!-- " + " ".join(f"@{m}" for m in missing) + " -->"

    return {
        "msgtype": "markdown",
        "markdown": {"title": message.title, "text": text},
        "at": {"atMobiles": mobiles, "isAtAll": at_all},
    }


class DingTalkChannel(NotificationChannel):
    """DingTalk group robot channel."""

    name: str = "dingtalk"

    def __init__(
        self,
        access_token: str,
        secret: str,
        *,
        at_all: bool = False,
        at_mobiles: list[str] | None = None,
        logger: PluginLogger | None = None,
        url: str = DINGTALK_API,
        timeout: float = 30.0,
    ) -> None:
        self.access_token = access_token
        self.secret = secret
        self.at_all = at_all
        self.at_mobiles = list(at_mobiles or [])
        self.logger = logger or PluginLogger()
        self.url = url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls, config: DingTalkConfig, logger: PluginLogger | None = None
    ) -> DingTalkChannel:
        return cls(
            config.access_token,
            config.secret,
            at_all=config.at_all,
            at_mobiles=config.at_mobiles,
            logger=logger,
        )

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def signed_url(self, timestamp: int) -> str:
        signature = quote(sign(self.secret, timestamp), safe="")
        return f"{self.url}?access_token={self.access_token}&timestamp={timestamp}&sign={signature}"

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        if not self.access_token:
            await self.logger.error("accessToken is not configured")
            return DeliveryResult(ok=False, errmsg="accessToken is not configured")
        if not self.secret:
            await self.logger.error("secret is not configured")
            return DeliveryResult(ok=False, errmsg="secret is not configured")

        payload = build_payload(message, at_all=self.at_all, at_mobiles=self.at_mobiles)
        timestamp = int(time.time() * 1000)

        client = self._client or httpx.AsyncClient(timeout=self.timeout)
        try:
            resp = await client.post(self.signed_url(timestamp), json=payload)
            result = resp.json()
            errcode = int(result.get("errcode", -1))
            errmsg = str(result.get("errmsg", ""))
        except Exception as exc:
            await self.logger.error("Error sending message", {"error": str(exc)})
            return DeliveryResult(ok=False, errmsg=str(exc))
        finally:
            if not self._client:
                await client.aclose()

        if errcode != 0:
            await self.logger.error(f"Failed to send message: {errmsg}")
            return DeliveryResult(ok=False, errcode=errcode, errmsg=errmsg)

        await self.logger.info(f"Message sent successfully: {message.title}")
        return DeliveryResult(ok=True, errcode=0, errmsg=errmsg)
