"""Desktop notification of the termination summary."""

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass

from pykill.errors import NotificationError
from pykill.models import SelectionSet

logger = logging.getLogger(__name__)

APP_NAME = "pykill"
SUMMARY = "Killed processes"
ICON = "lock"
TIMEOUT_MS = 3000


@dataclass(slots=True, frozen=True)
class Notification:
    """A desktop notification."""

    body: str
    app_name: str = APP_NAME
    summary: str = SUMMARY
    icon: str = ICON
    timeout_ms: int = TIMEOUT_MS


def build_summary(selection: SelectionSet) -> str:
    """Comma-separated names of the selected processes, in selection order."""
    return ", ".join(selection.names)


def _applescript_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notification_command(notification: Notification, platform: str | None = None) -> list[str]:
    """Build the command line that displays ``notification`` on ``platform``."""
    if platform is None:
        platform = sys.platform
    if platform == "darwin":
        script = (
            f"display notification {_applescript_string(notification.body)} "
            f"with title {_applescript_string(notification.app_name)} "
            f"subtitle {_applescript_string(notification.summary)}"
        )
        return ["osascript", "-e", script]
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd")):
        return [
            "notify-send",
            f"--app-name={notification.app_name}",
            f"--icon={notification.icon}",
            f"--expire-time={notification.timeout_ms}",
            notification.summary,
            notification.body,
        ]
    raise NotificationError(f"desktop notifications are not supported on {platform}")


def send(notification: Notification) -> None:
    """
    Display ``notification``.

    Raises:
        NotificationError: The notifier is missing, failed or timed out.
    """
    command = notification_command(notification)
    if shutil.which(command[0]) is None:
        raise NotificationError(f"{command[0]} not found")
    try:
        subprocess.run(command, check=True, capture_output=True, timeout=10)
    except subprocess.CalledProcessError as error:
        stderr = error.stderr.decode(errors="replace").strip() if error.stderr else ""
        raise NotificationError(
            f"{command[0]} exited with status {error.returncode}" + (f": {stderr}" if stderr else "")
        ) from error
    except (subprocess.TimeoutExpired, OSError) as error:
        raise NotificationError(f"{command[0]} failed: {error}") from error
    logger.debug("Sent notification: %s", notification.body)


def notify_outcome(
    selection: SelectionSet, sender: Callable[[Notification], None] | None = None
) -> Notification | None:
    """
    Notify which processes were selected for termination.

    Does nothing for an empty selection. Delivery failures propagate.
    """
    if not selection:
        return None
    if sender is None:
        sender = send
    notification = Notification(body=build_summary(selection))
    sender(notification)
    return notification
