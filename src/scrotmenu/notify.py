"""Desktop notifications via libnotify (PyGObject).

Notifications are best-effort: a failure is logged and reported as False,
it never changes the outcome of the action being reported.
"""

import logging
from typing import Optional

from .config import APP_NAME

log = logging.getLogger(__name__)


class Notifier:
    """Sends desktop notifications for one run."""

    def __init__(self, enabled: bool = True, app_name: str = APP_NAME):
        self.enabled = enabled
        self.app_name = app_name
        self._initialized = False

    def send(self, summary: str, body: Optional[str] = None, icon: Optional[str] = None) -> bool:
        """Show a notification.

        Returns:
            True if the notification was handed to the notification daemon
        """
        if not self.enabled:
            log.debug("Notifications disabled, not sending %r", summary)
            return False
        try:
            import gi
            gi.require_version("Notify", "0.7")
            from gi.repository import Notify
            if not self._initialized:
                Notify.init(self.app_name)
                self._initialized = True
            notification = Notify.Notification.new(summary, body, icon)
            notification.show()
        except Exception as e:
            log.warning("Could not show notification %r: %s", summary, e)
            return False
        return True
