"""
CLI — command-line entry points for dingtalk-notify.

Commands:
    dingtalk-notify test     — Send one diagnostic message using an example config
    dingtalk-notify hook     — Handle one host event read from stdin
    dingtalk-notify listen   — Follow a running OpenCode server's event stream
    dingtalk-notify config   — Show the resolved configuration
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dingtalk_notify import __version__

console = Console()

DEFAULT_HOST_URL = "http://127.0.0.1:4096"


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """dingtalk-notify — DingTalk group alerts for OpenCode sessions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: config.example.json in the current working directory)",
)
def test(config_path: Path | None) -> None:
    """Send a test message to check the robot credentials.

    Without --config, reads config.example.json from the current working
    directory, so run it from the project root or pass the path.
    """
    from dingtalk_notify.core import EXAMPLE_CONFIG_FILE, load_config, mask_secret
    from dingtalk_notify.notifications.channels.dingtalk import DingTalkChannel
    from dingtalk_notify.notifications.formatter import format_test_message

    console.print("\n[bold]Testing dingtalk-notify...[/bold]\n")

    config = load_config(config_path or EXAMPLE_CONFIG_FILE)
    if not config.has_credentials:
        console.print(
            f"[red]Error: Config not found or incomplete. Please check "
            f"{config_path or EXAMPLE_CONFIG_FILE}[/red]"
        )
        sys.exit(1)

    console.print("Configuration loaded:")
    console.print(f"  Access Token: {mask_secret(config.access_token)}")
    console.print(f"  Secret: {mask_secret(config.secret)}\n")

    channel = DingTalkChannel(config.access_token, config.secret)
    result = asyncio.run(channel.send(format_test_message()))

    if not result.ok:
        console.print(f"[red]Failed to send message: {result.errmsg}[/red]")
        sys.exit(1)

    console.print("[green]>[/green] Test message sent successfully!")
    console.print("  Please check your DingTalk group for the test message.")


@main.command(name="config")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
def show_config(config_path: Path | None) -> None:
    """Show the resolved configuration (credentials masked)."""
    from dingtalk_notify.core import CONFIG_FILE, load_config, mask_secret

    path = config_path or CONFIG_FILE
    config = load_config(path)

    table = Table(title=f"dingtalk-notify ({path})")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("accessToken", mask_secret(config.access_token))
    table.add_row("secret", mask_secret(config.secret))
    table.add_row("notifyChildSessions", str(config.notify_child_sessions))
    table.add_row("atAll", str(config.at_all))
    table.add_row("atMobiles", ", ".join(config.at_mobiles) or "-")
    quiet = config.quiet_hours
    table.add_row(
        "quietHours",
        f"{quiet.start}-{quiet.end}" + ("" if quiet.enabled else " (disabled)"),
    )
    enabled = [k for k, v in config.events.model_dump().items() if v]
    table.add_row("events", ", ".join(enabled) or "-")
    console.print(table)


# ---------------------------------------------------------------------------
# Event handling
# ---------------------------------------------------------------------------


async def _handle_stdin_event(router: Any, payload: dict[str, Any]) -> None:
    try:
        await router.connect()
        await router.check_credentials()
        if "tool" in payload:
            await router.handle_tool_before(payload["tool"], payload.get("sessionID"))
        else:
            await router.handle_host_event(payload)
    finally:
        await router.disconnect()


@main.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--host-url", envvar="OPENCODE_SERVER_URL", default=DEFAULT_HOST_URL, show_default=True)
def hook(config_path: Path | None, host_url: str) -> None:
    """Handle one host event (JSON on stdin). Always exits 0."""
    from dingtalk_notify.core import load_config
    from dingtalk_notify.notifications.host import OpencodeClient, PluginLogger
    from dingtalk_notify.notifications.router import NotificationRouter

    try:
        payload = json.loads(sys.stdin.read() or "{}")
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring malformed event on stdin")
        return
    if not isinstance(payload, dict):
        return

    client = OpencodeClient(host_url)
    router = NotificationRouter(load_config(config_path), client, log=PluginLogger(client))
    asyncio.run(_handle_stdin_event(router, payload))


async def _listen(router: Any, client: Any) -> None:
    await router.connect()
    await router.check_credentials()
    try:
        async for payload in client.events():
            await router.handle_host_event(payload)
    finally:
        await router.disconnect()


@main.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--host-url", envvar="OPENCODE_SERVER_URL", default=DEFAULT_HOST_URL, show_default=True)
def listen(config_path: Path | None, host_url: str) -> None:
    """Follow the host's event stream and notify until interrupted."""
    import httpx

    from dingtalk_notify.core import load_config
    from dingtalk_notify.notifications.host import OpencodeClient, PluginLogger
    from dingtalk_notify.notifications.router import NotificationRouter

    client = OpencodeClient(host_url)
    router = NotificationRouter(load_config(config_path), client, log=PluginLogger(client))

    console.print(f"[green]>[/green] Listening for events on {host_url}")
    try:
        asyncio.run(_listen(router, client))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")
    except httpx.HTTPError as exc:
        console.print(f"[red]Error: event stream failed: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
