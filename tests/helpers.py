"""Shared test helpers for FocusLoop."""

from focusloop.timer.engine import TimerEngine


class FakeClock:
    """Controllable stand-in for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeSoundManager:
    """Records play() calls instead of touching the audio device."""

    def __init__(self):
        self.played: list[str] = []
        self.volume = 70
        self.enabled = True

    def set_volume(self, level: int) -> None:
        self.volume = level

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def play(self, name: str) -> None:
        if self.enabled:
            self.played.append(name)


def finish_session(engine: TimerEngine, clock: FakeClock) -> bool:
    """Start (if needed) and run the current session to zero."""
    engine.start()
    clock.advance(engine.remaining)
    return engine.tick()
