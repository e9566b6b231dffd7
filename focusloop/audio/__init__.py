"""Audio package."""

from .sounds import SoundManager, SOUND_NAMES, sound_for

__all__ = ["SoundManager", "SOUND_NAMES", "sound_for"]
