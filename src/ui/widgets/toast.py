from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import Qt, QTimer, QEasingCurve, QPoint, QPropertyAnimation
from PySide6.QtWidgets import (
    QWidget,
    QFrame,
    QLabel,
    QHBoxLayout,
    QGraphicsOpacityEffect,
)

KINDS = ("info", "success", "warning", "error")


@dataclass(frozen=True)
class ToastData:
    message: str
    notify_type: str = "info"  # one of KINDS
    timeout_ms: int = 3000


def toast_style(kind: str) -> tuple[str, str]:
    """Returns (border color, icon glyph) for a notification kind."""
    kind = (kind or "info").lower()
    if kind == "success":
        return "#16a34a", "✔"
    if kind == "warning":
        return "#f59e0b", "▲"
    if kind == "error":
        return "#ef4444", "✖"
    return "#38bdf8", "ℹ"


class ToastWidget(QFrame):
    def __init__(self, data: ToastData, parent: QWidget):
        super().__init__(parent)
        self.data = data
        border, glyph = toast_style(data.notify_type)

        self.setObjectName("Toast")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet(f"""
        QFrame#Toast {{
            background: #0b1222;
            border: 1px solid {border};
            border-radius: 12px;
        }}
        QLabel {{ color: #e5e7eb; font-size: 12px; }}
        QLabel#ToastIcon {{ color: {border}; font-size: 14px; }}
        """)

        row = QHBoxLayout(self)
        row.setContentsMargins(12, 8, 12, 8)
        row.setSpacing(8)
        icon = QLabel(glyph)
        icon.setObjectName("ToastIcon")
        self.lbl = QLabel(data.message)
        self.lbl.setWordWrap(True)
        row.addWidget(icon, 0, Qt.AlignmentFlag.AlignTop)
        row.addWidget(self.lbl, 1)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(0.0)
        self.setGraphicsEffect(self._opacity)
        self._anim: QPropertyAnimation | None = None

    def fade(self, start: float, end: float, on_done=None):
        self._anim = QPropertyAnimation(self._opacity, b"opacity", self)
        self._anim.setDuration(180)
        self._anim.setStartValue(start)
        self._anim.setEndValue(end)
        self._anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        if on_done is not None:
            self._anim.finished.connect(on_done)
        self._anim.start()


class ToastManager(QWidget):
    """
    Overlay that stacks toasts in the bottom-right corner of its host,
    newest at the bottom. Each toast dismisses itself after its timeout.
    """
    def __init__(self, host: QWidget, max_visible: int = 4):
        super().__init__(host)
        self.host = host
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._toasts: list[ToastWidget] = []
        self._margin = 16
        self._spacing = 8
        self._max_visible = max_visible
        self.raise_()
        self.show()

    def show_toast(self, message: str, notify_type: str = "info", timeout_ms: int = 3000):
        if notify_type not in KINDS:
            notify_type = "info"
        self.setGeometry(self.host.rect())
        self.raise_()

        toast = ToastWidget(ToastData(message, notify_type, timeout_ms), parent=self)
        toast.setFixedWidth(min(380, max(240, self.width() // 3)))
        self._toasts.append(toast)

        while len(self._toasts) > self._max_visible:
            old = self._toasts.pop(0)
            old.hide()
            old.deleteLater()

        self._layout_toasts()
        toast.show()
        toast.fade(0.0, 1.0)
        QTimer.singleShot(max(500, int(timeout_ms)), lambda: self._dismiss(toast))

    def _dismiss(self, toast: ToastWidget):
        if toast not in self._toasts:
            return

        def remove():
            if toast in self._toasts:
                self._toasts.remove(toast)
            toast.hide()
            toast.deleteLater()
            self._layout_toasts()

        toast.fade(1.0, 0.0, remove)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._layout_toasts()

    def _layout_toasts(self):
        self.setGeometry(self.host.rect())
        y = self.height() - self._margin
        for t in reversed(self._toasts):
            t.adjustSize()
            h = t.sizeHint().height()
            y -= h
            t.move(QPoint(self.width() - self._margin - t.width(), y))
            y -= self._spacing
