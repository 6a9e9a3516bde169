"""
Message templates, one per event kind.

Pure functions: no I/O, only the wall clock when ``now`` isn't given.
"""

from __future__ import annotations

from datetime import datetime

from dingtalk_notify.notifications.events import EventKind, OutboundMessage

MAX_TITLE_CHARS = 100
MAX_ERROR_CHARS = 500

DEFAULT_SESSION_TITLE = "未命名任务"
DEFAULT_ERROR_TEXT = "未知错误"

_TITLES = {
    EventKind.IDLE: "✅ OpenCode 任务完成",
    EventKind.ERROR: "❌ OpenCode 任务出错",
    EventKind.PERMISSION: "⏸️ OpenCode 需要权限",
    EventKind.QUESTION: "❓ OpenCode 有问题要问",
}


def format_timestamp(now: datetime | None = None) -> str:
    """Local time as zh-CN renders it: unpadded month and day."""
    now = now or datetime.now()
    return f"{now.year}/{now.month}/{now.day} {now:%H:%M:%S}"


def _idle_body(session_title: str, session_id: str, ts: str) -> str:
    return f"""## ✅ 任务完成

**任务名称:** {session_title}

**会话 ID:** `{session_id}`

**状态:** 任务执行完成，等待您审查结果

**时间:** {ts}

"""


def _error_body(session_title: str, session_id: str, error: str, ts: str) -> str:
    return f"""## ❌ 任务执行出错

**任务名称:** {session_title}

**会话 ID:** `{session_id}`

**错误信息:**
```
{error}
```

**时间:** {ts}

---
⚠️ 需要人工介入处理"""


def _permission_body(ts: str) -> str:
    return f"""## ⏸️ 等待权限确认

**状态:** OpenCode 需要您的权限才能继续执行

**时间:** {ts}

---
🔔 请及时处理，AI 正在等待您的响应"""


def _question_body(ts: str) -> str:
    return f"""## ❓ 需要您的输入

**状态:** OpenCode 有一个问题需要您回答

**时间:** {ts}

---
💬 请查看终端并回答问题"""


def format_message(
    kind: EventKind,
    session_title: str | None = None,
    session_id: str | None = None,
    error: str | None = None,
    *,
    now: datetime | None = None,
) -> OutboundMessage:
    """Build the title and markdown body for one event."""
    ts = format_timestamp(now)
    title = (session_title or DEFAULT_SESSION_TITLE)[:MAX_TITLE_CHARS]
    sid = session_id or ""

    if kind == EventKind.IDLE:
        text = _idle_body(title, sid, ts)
    elif kind == EventKind.ERROR:
        text = _error_body(title, sid, (error or DEFAULT_ERROR_TEXT)[:MAX_ERROR_CHARS], ts)
    elif kind == EventKind.PERMISSION:
        text = _permission_body(ts)
    else:
        text = _question_body(ts)

    return OutboundMessage(title=_TITLES[kind], text=text)


def format_test_message(now: datetime | None = None) -> OutboundMessage:
    """The message the ``test`` command sends."""
    return OutboundMessage(
        title="🧪 DingTalk-Notify 测试消息",
        text=f"""## 🧪 测试消息

**插件:** dingtalk-notify
**状态:** ✅ 配置正确，消息发送成功

**时间:** {format_timestamp(now)}

---
如果看到这条消息，说明插件配置正确，可以正常使用！""",
    )
