"""Shared test helpers for droplet."""

from droplet.timer.engine import TimerEngine, Phase


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


class RecordingNotifier:
    """Stands in for the tray notifier; remembers which phases ended."""

    def __init__(self):
        self.phases: list[Phase] = []

    def notify_phase_ended(self, phase: Phase) -> None:
        self.phases.append(phase)


class ExplodingNotifier:
    def notify_phase_ended(self, phase: Phase) -> None:
        raise RuntimeError("notification backend is down")


def run_to_zero(engine: TimerEngine) -> None:
    """Fast-forward a running phase to its final tick."""
    engine._remaining = 1
    engine.tick()


def complete_phase(engine: TimerEngine) -> None:
    """Start (or continue) the current phase and let it reach zero."""
    engine.toggle_start_pause()
    run_to_zero(engine)
    engine.continue_to_next_phase()
