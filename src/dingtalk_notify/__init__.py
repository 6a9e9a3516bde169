"""dingtalk-notify — DingTalk group notifications for OpenCode sessions."""

__version__ = "0.1.0"
