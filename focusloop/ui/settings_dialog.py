"""Settings dialog for FocusLoop.

A modal dialog for timer durations, the long-break cadence, auto-advance,
sound and notifications.  Every change is written to disk immediately and
announced through ``settings_changed`` so the app can apply it to the
running timer.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton, QFrame, QWidget,
)

from ..settings import Settings, save_settings


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences."""

    settings_changed = pyqtSignal(object)

    def __init__(self, settings: Settings, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(400)
        self.setModal(True)

        self._settings = settings
        self._populating = False

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer"))
        timer_form = QFormLayout()
        timer_form.setHorizontalSpacing(20)
        timer_form.setVerticalSpacing(10)

        self._focus_spin = self._minutes_spin(1, 120)
        timer_form.addRow("Focus:", self._focus_spin)
        self._short_spin = self._minutes_spin(1, 60)
        timer_form.addRow("Short break:", self._short_spin)
        self._long_spin = self._minutes_spin(1, 90)
        timer_form.addRow("Long break:", self._long_spin)

        self._interval_spin = QSpinBox()
        self._interval_spin.setRange(0, 12)
        self._interval_spin.setSpecialValueText("Never")
        self._interval_spin.setToolTip("Focus sessions between long breaks")
        self._interval_spin.valueChanged.connect(self._on_changed)
        timer_form.addRow("Long break every:", self._interval_spin)

        self._auto_cb = QCheckBox("Move to the next session automatically")
        self._auto_cb.toggled.connect(self._on_changed)
        timer_form.addRow("", self._auto_cb)
        root.addLayout(timer_form)

        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = QFormLayout()
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(10)

        self._sound_cb = QCheckBox("Play a sound when a session ends")
        self._sound_cb.toggled.connect(self._on_changed)
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        vol_row.setSpacing(10)
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        self._vol_slider.valueChanged.connect(self._on_changed)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)
        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Desktop notifications")
        self._notif_cb.toggled.connect(self._on_changed)
        snd_form.addRow("", self._notif_cb)
        root.addLayout(snd_form)

        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    def _minutes_spin(self, low: int, high: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setSuffix(" min")
        spin.valueChanged.connect(self._on_changed)
        return spin

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE / SAVE
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        self._populating = True
        try:
            self._focus_spin.setValue(s.focus_duration // 60)
            self._short_spin.setValue(s.short_break_duration // 60)
            self._long_spin.setValue(s.long_break_duration // 60)
            # what the spins show for each duration, to spot real edits
            self._shown_minutes = {
                "focus_duration": self._focus_spin.value(),
                "short_break_duration": self._short_spin.value(),
                "long_break_duration": self._long_spin.value(),
            }
            self._interval_spin.setValue(s.long_break_interval)
            self._auto_cb.setChecked(s.auto_advance)
            self._sound_cb.setChecked(s.sound_enabled)
            self._vol_slider.setValue(s.sound_volume)
            self._vol_label.setText(f"{s.sound_volume}%")
            self._notif_cb.setChecked(s.notifications_enabled)
        finally:
            self._populating = False

    def _on_changed(self) -> None:
        if self._populating:
            return
        s = self._settings
        self._apply_minutes("focus_duration", self._focus_spin)
        self._apply_minutes("short_break_duration", self._short_spin)
        self._apply_minutes("long_break_duration", self._long_spin)
        s.long_break_interval = self._interval_spin.value()
        s.auto_advance = self._auto_cb.isChecked()
        s.sound_enabled = self._sound_cb.isChecked()
        s.sound_volume = self._vol_slider.value()
        s.notifications_enabled = self._notif_cb.isChecked()
        self._vol_label.setText(f"{s.sound_volume}%")
        save_settings(s)
        self.settings_changed.emit(s)

    def _apply_minutes(self, name: str, spin: QSpinBox) -> None:
        """Write a duration back only if its spin box was actually changed.

        Durations that are not whole minutes (e.g. hand-edited seconds)
        survive edits to unrelated fields.
        """
        if spin.value() == self._shown_minutes[name]:
            return
        setattr(self._settings, name, spin.value() * 60)
        self._shown_minutes[name] = spin.value()

    @property
    def settings(self) -> Settings:
        return self._settings
