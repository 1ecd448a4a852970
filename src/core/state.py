from __future__ import annotations

import logging
from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warning/error


class AppState(QObject):
    """
    Everything one player session needs, constructed once in main.py and
    handed to every window and widget. There is no module-level player.
    """
    notification = Signal(object)   # emits Notify
    status_changed = Signal(str)    # generic status text

    def __init__(self, config=None):
        super().__init__()
        self.config = config
        self.db = None
        self.persistence = None
        self.store = None
        self.transport = None
        self.sequencer = None
        self.controller = None
        self.theme = "dark"
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        if notify_type == "warn":
            notify_type = "warning"
        logger.debug("notify[%s]: %s", notify_type, message)
        self.notification.emit(Notify(message=message, notify_type=notify_type))
