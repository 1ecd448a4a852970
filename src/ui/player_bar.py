# ui/player_bar.py
from __future__ import annotations

from PySide6.QtCore import Qt, QSize, Signal
from PySide6.QtGui import QIcon, QPixmap, QPainter
from PySide6.QtWidgets import (
    QWidget, QHBoxLayout, QVBoxLayout, QLabel, QToolButton, QSlider, QStyle, QStyleOptionSlider,
)
from PySide6.QtCore import QByteArray
from PySide6.QtSvg import QSvgRenderer

from core.models import RepeatMode
from core.utils import clamp, format_time


def _svg_icon(path_d: str, size: int = 20, color: str = "#e5e7eb") -> QIcon:
    svg = f"""
    <svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 24 24">
      <path d="{path_d}" fill="{color}"/>
    </svg>
    """.strip()

    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    pm = QPixmap(size, size)
    pm.fill(Qt.transparent)

    p = QPainter(pm)
    renderer.render(p)
    p.end()

    return QIcon(pm)


SVG_PREV = "M6 18V6h2v12H6zm3.5-6L18 6v12l-8.5-6z"
SVG_NEXT = "M16 6v12h2V6h-2zM6 18l8.5-6L6 6v12z"
SVG_PLAY = "M8 5v14l11-7L8 5z"
SVG_PAUSE = "M6 5h4v14H6V5zm8 0h4v14h-4V5z"
SVG_SHUFFLE = "M10.6 9.2 5.4 4 4 5.4l5.2 5.2 1.4-1.4zM14.5 4l2 2L4 18.6 5.4 20 18 7.5l2 2V4h-5.5zm.3 9.4-1.4 1.4 3.1 3.1-2 2H20v-5.5l-2 2-3.2-3z"
SVG_REPEAT = "M7 7h10v3l4-4-4-4v3H5v6h2V7zm10 10H7v-3l-4 4 4 4v-3h12v-6h-2v4z"
SVG_VOLUME = "M3 9v6h4l5 5V4L7 9H3zm13.5 3A4.5 4.5 0 0 0 14 8v8a4.5 4.5 0 0 0 2.5-4z"
SVG_MUTED = "M16.5 12A4.5 4.5 0 0 0 14 8v2.2l2.5 2.5V12zM19 12c0 .9-.2 1.8-.5 2.6l1.5 1.5A8.8 8.8 0 0 0 21 12a9 9 0 0 0-7-8.8v2.1A7 7 0 0 1 19 12zM4.3 3 3 4.3 7.7 9H3v6h4l5 5v-6.7l4.3 4.3a7 7 0 0 1-2.3 1.2v2.1a9 9 0 0 0 3.7-1.8l2 2 1.3-1.3L4.3 3zM12 4 9.9 6.1 12 8.2V4z"

ACCENT = "#38bdf8"
IDLE = "#e5e7eb"


class SeekSlider(QSlider):
    """Progress slider that also jumps to a clicked point on the groove."""
    clickedAt = Signal(float)   # fraction 0..1

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or self.maximum() <= 0 or self.width() <= 0:
            super().mousePressEvent(event)
            return

        opt = QStyleOptionSlider()
        self.initStyleOption(opt)
        handle = self.style().subControlRect(
            QStyle.ComplexControl.CC_Slider, opt, QStyle.SubControl.SC_SliderHandle, self
        )
        pos = event.position().toPoint()
        if handle.contains(pos):
            # Grabbing the handle starts a normal drag.
            super().mousePressEvent(event)
            return

        fraction = clamp(pos.x() / self.width(), 0.0, 1.0)
        self.setValue(int(round(fraction * self.maximum())))
        self.clickedAt.emit(fraction)
        event.accept()


class PlayerBar(QWidget):
    """
    Transport controls and the now-playing strip.

    The progress slider works in milliseconds. Pressing it starts a scrub
    on the transport so position updates stop overwriting the drag; the
    release commits the final position.
    """

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self.controller = app_state.controller
        self.transport = app_state.transport

        self._dragging = False
        self._shown_track = None

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 6, 8, 6)
        root.setSpacing(4)

        # --- now playing ---
        self.lbl_title = QLabel("Choose a song")
        self.lbl_title.setObjectName("NowPlaying")
        self.lbl_title.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.lbl_meta = QLabel("Unknown Artist • Unknown Album")
        self.lbl_meta.setObjectName("NowPlayingMeta")

        # --- buttons ---
        self.btn_shuffle = self._tool_button("BtnShuffle", SVG_SHUFFLE, 18, "Shuffle")
        self.btn_shuffle.setCheckable(True)
        self.btn_prev = self._tool_button("BtnPrev", SVG_PREV, 20, "Previous")
        self.btn_play = self._tool_button("BtnPlay", SVG_PLAY, 22, "Play")
        self.btn_next = self._tool_button("BtnNext", SVG_NEXT, 20, "Next")
        self.btn_repeat = self._tool_button("BtnRepeat", SVG_REPEAT, 18, "Repeat off")
        self.btn_mute = self._tool_button("BtnMute", SVG_VOLUME, 18, "Mute")

        # --- labels ---
        self.lbl_time = QLabel("0:00")
        self.lbl_dur = QLabel("0:00")
        self.lbl_volume = QLabel("70%")

        # --- sliders ---
        self.slider = SeekSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.setSingleStep(1000)
        self.slider.setPageStep(5000)

        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setFixedWidth(110)

        info_row = QHBoxLayout()
        info_row.addWidget(self.lbl_title, 1)
        info_row.addWidget(self.lbl_meta)
        root.addLayout(info_row)

        controls = QHBoxLayout()
        controls.setSpacing(10)
        controls.addWidget(self.btn_shuffle)
        controls.addWidget(self.btn_prev)
        controls.addWidget(self.btn_play)
        controls.addWidget(self.btn_next)
        controls.addWidget(self.btn_repeat)
        controls.addSpacing(6)
        controls.addWidget(self.lbl_time)
        controls.addWidget(self.slider, 3)
        controls.addWidget(self.lbl_dur)
        controls.addSpacing(6)
        controls.addWidget(self.btn_mute)
        controls.addWidget(self.volume_slider)
        controls.addWidget(self.lbl_volume)
        root.addLayout(controls)

        # --- signals ---
        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self.slider.sliderMoved.connect(self._on_slider_moved)
        self.slider.clickedAt.connect(self._on_slider_clicked)
        self.volume_slider.valueChanged.connect(self._on_volume_slider)

        if self.controller:
            self.btn_play.clicked.connect(self.controller.toggle_play_pause)
            self.btn_prev.clicked.connect(self.controller.previous)
            self.btn_next.clicked.connect(self.controller.next)
            self.btn_shuffle.clicked.connect(lambda _checked=False: self.controller.toggle_shuffle())
            self.btn_repeat.clicked.connect(lambda _checked=False: self.controller.cycle_repeat())
            self.btn_mute.clicked.connect(self.controller.toggle_mute)
            self.controller.modesChanged.connect(self._on_modes_changed)
            self.controller.selectionChanged.connect(self._on_selection_changed)

        if self.transport:
            self.transport.playingChanged.connect(self._set_playing)
            self.transport.positionChanged.connect(self._on_position)
            self.transport.metadataReady.connect(self._on_duration)
            self.transport.volumeChanged.connect(self._on_volume_changed)
            state = self.transport.state
            self._on_volume_changed(state.volume, state.muted)

        self.setObjectName("PlayerBar")
        self._apply_styles()

    def _tool_button(self, name: str, path_d: str, size: int, tip: str) -> QToolButton:
        btn = QToolButton()
        btn.setObjectName(name)
        btn.setIcon(_svg_icon(path_d, size))
        btn.setIconSize(QSize(size, size))
        btn.setToolTip(tip)
        return btn

    # --- slider handling ---
    def _on_slider_pressed(self):
        self._dragging = True
        if self.transport:
            self.transport.begin_scrub()

    def _on_slider_moved(self, value: int):
        self.lbl_time.setText(format_time(value / 1000.0))
        if self.transport:
            self.transport.scrub_to(value / 1000.0)

    def _on_slider_released(self):
        self._dragging = False
        if self.transport:
            self.transport.end_scrub(self.slider.value() / 1000.0)

    def _on_slider_clicked(self, fraction: float):
        if self.transport:
            self.transport.seek_fraction(fraction)

    def _on_volume_slider(self, value: int):
        if not self.controller:
            return
        if self.transport and self.transport.state.muted and value > 0:
            self.transport.set_muted(False)
        self.controller.set_volume(value / 100.0)

    # --- player updates ---
    def _on_selection_changed(self, _index: int):
        track = self.controller.selected_track if self.controller else None
        if track is self._shown_track:
            return
        self._shown_track = track

        if track is None:
            self.lbl_title.setText("Choose a song")
            self.lbl_meta.setText("Unknown Artist • Unknown Album")
            self._reset_progress("0:00")
            self._set_playing(False)
            return

        self.lbl_title.setText(track.title)
        self.lbl_meta.setText(f"{track.artist} • {track.album}")
        t = self.transport
        if t and t.loaded_resource is track.source and t.duration:
            self._on_duration(t.duration)
            self._on_position(t.position)
        else:
            self._reset_progress(track.duration_label)

    def _reset_progress(self, duration_label: str):
        self.slider.setRange(0, 0)
        self.slider.setValue(0)
        self.lbl_time.setText("0:00")
        self.lbl_dur.setText(duration_label or "0:00")

    def _set_playing(self, playing: bool):
        if playing:
            self.btn_play.setIcon(_svg_icon(SVG_PAUSE, 22))
            self.btn_play.setToolTip("Pause")
        else:
            self.btn_play.setIcon(_svg_icon(SVG_PLAY, 22))
            self.btn_play.setToolTip("Play")

    def _on_duration(self, seconds: float):
        self.slider.setRange(0, max(0, int(seconds * 1000)))
        self.lbl_dur.setText(format_time(seconds))

    def _on_position(self, seconds: float):
        if self._dragging:
            return
        self.lbl_time.setText(format_time(seconds))
        self.slider.setValue(int(seconds * 1000))

    def _on_modes_changed(self, shuffle: bool, repeat):
        self.btn_shuffle.setChecked(bool(shuffle))
        self.btn_shuffle.setIcon(_svg_icon(SVG_SHUFFLE, 18, ACCENT if shuffle else IDLE))

        mode = RepeatMode(repeat)
        self.btn_repeat.setIcon(_svg_icon(SVG_REPEAT, 18, IDLE if mode is RepeatMode.OFF else ACCENT))
        self.btn_repeat.setText("1" if mode is RepeatMode.ONE else "")
        self.btn_repeat.setToolTip(mode.label)

    def _on_volume_changed(self, volume: float, muted: bool):
        shown = 0 if muted else int(round(volume * 100))
        self.volume_slider.blockSignals(True)
        self.volume_slider.setValue(shown)
        self.volume_slider.blockSignals(False)
        self.lbl_volume.setText(f"{shown}%")
        self.btn_mute.setIcon(_svg_icon(SVG_MUTED if muted or volume == 0 else SVG_VOLUME, 18))
        self.btn_mute.setToolTip("Unmute" if muted else "Mute")

    def _apply_styles(self):
        self.setStyleSheet("""
        QToolButton {
            border: 1px solid transparent;
            background: transparent;
            padding: 6px;
            border-radius: 10px;
        }
        QToolButton:hover {
            border-color: #1f2937;
        }
        QToolButton#BtnPlay {
            border: 1px solid #1f2937;
            border-radius: 999px;
            padding: 8px;
        }
        QToolButton#BtnPlay:hover {
            border-color: #38bdf8;
        }

        QSlider::groove:horizontal {
            height: 4px;
            background: #1f2937;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            width: 12px;
            height: 12px;
            margin: -4px 0;
            border-radius: 6px;
            background: #38bdf8;
        }
        QSlider::sub-page:horizontal {
            background: #38bdf8;
            border-radius: 2px;
        }

        QLabel {
            font-size: 11px;
        }
        QLabel#NowPlaying {
            font-size: 13px;
            font-weight: 600;
        }
        """)
