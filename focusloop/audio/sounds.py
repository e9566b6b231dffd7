"""Completion sounds, synthesized with numpy and played with QSoundEffect.

Both sounds are generated programmatically as WAV files from sine waves
shaped by an ADSR envelope, then cached in the app directory so later
launches skip synthesis.

Sound names
-----------
- ``focus_complete``: bright ascending arpeggio, time for a break
- ``break_complete``: soft bell, back to focus
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_DIR
from ..timer.engine import Mode


logger = logging.getLogger(__name__)

SOUNDS_DIR = APP_DIR / "sounds"

SOUND_NAMES = ("focus_complete", "break_complete")

SAMPLE_RATE = 44100


def sound_for(mode: Mode) -> str:
    """Name of the sound played when a ``mode`` session finishes."""
    return "focus_complete" if mode == Mode.FOCUS else "break_complete"


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 array in -1..1 to 16-bit mono PCM WAV bytes."""
    int_samples = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_arpeggio() -> bytes:
    """Focus complete: C5, E5, G5 then a held C6."""
    notes = [523.25, 659.25, 783.99, 1046.50]
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        if i == len(notes) - 1:
            tone = _sine(freq, 0.35) * 0.5
            env = _make_envelope(len(tone), attack=80, decay=300, sustain_level=0.5, release=600)
            parts.append(tone * env)
        else:
            tone = _sine(freq, 0.10) * 0.5
            env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
            parts.append(tone * env)
            parts.append(np.zeros(int(SAMPLE_RATE * 0.02)))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_bell() -> bytes:
    """Break complete: A4 with one octave overtone, slow decay."""
    duration = 1.0
    combined = _sine(440.0, duration) * 0.35 + _sine(880.0, duration) * 0.08
    env = _make_envelope(
        len(combined),
        attack=int(SAMPLE_RATE * 0.08),
        decay=int(SAMPLE_RATE * 0.3),
        sustain_level=0.25,
        release=int(SAMPLE_RATE * 0.55),
    )
    return _to_wav_bytes(combined * env)


_GENERATORS: dict[str, callable] = {
    "focus_complete": _generate_arpeggio,
    "break_complete": _generate_bell,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesizes, caches and plays the completion sounds.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("focus_complete")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files into the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError as exc:
            logger.warning("Could not write sounds to %s: %s", self._sounds_dir, exc)

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
