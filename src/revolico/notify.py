"""
Best-effort desktop notifications.

Gated by a permission the user grants once, like the browser's
Notification API. Uses ``notify-send`` when present, otherwise the
notification only reaches the log. Never raises.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from .config import NotificationPermission
from .context import ClientContext

logger = logging.getLogger("revolico.notify")

APP_TITLE = "Revolico GTM"


class Notifier:
    """Emits change notifications for one client context."""

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx

    @property
    def permission(self) -> NotificationPermission:
        return self.ctx.local_state.notification_permission

    def request_permission(self) -> NotificationPermission:
        """Grant notifications unless the user already denied them."""
        if self.permission == NotificationPermission.DEFAULT:
            self._set(NotificationPermission.GRANTED)
        return self.permission

    def grant(self) -> None:
        self._set(NotificationPermission.GRANTED)

    def deny(self) -> None:
        self._set(NotificationPermission.DENIED)

    def _set(self, permission: NotificationPermission) -> None:
        self.ctx.local_state.notification_permission = permission
        self.ctx.save_local_state()

    def notify(self, body: str, title: str = APP_TITLE) -> bool:
        """Show a notification if permitted.

        Returns:
            True if a desktop notification was dispatched.
        """
        if self.permission != NotificationPermission.GRANTED:
            return False

        logger.info("%s: %s", title, body)
        binary = shutil.which("notify-send")
        if binary is None:
            return False
        try:
            result = subprocess.run(
                [binary, title, body],
                capture_output=True, text=True, check=False, timeout=5,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("notify-send failed: %s", exc)
            return False
        return result.returncode == 0
