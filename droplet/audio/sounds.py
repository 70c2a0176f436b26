"""Phase-end chimes: numpy synthesis + QSoundEffect playback.

Sounds are generated as WAV files using sine-wave synthesis with ADSR
envelopes and cached to disk so later launches skip the synthesis.

Sound names
-----------
- ``work_complete``      : bright arpeggio, work phase finished
- ``break_complete``     : short ascending chime, break finished
- ``long_break_complete``: soft bell, long break finished
"""

from __future__ import annotations

import io
import logging
import wave
from collections.abc import Callable
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "work_complete",
    "break_complete",
    "long_break_complete",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(
    length: int, attack: int, decay: int, sustain: float, release: int,
) -> np.ndarray:
    """Piecewise-linear ADSR shape; stage lengths in samples."""
    a = min(attack, length)
    d = min(a + decay, length)
    r = max(length - release, d)
    return np.interp(
        np.arange(length),
        [0, a, d, r, max(r, length - 1)],
        [0.0, 1.0, sustain, sustain, 0.0],
    )


def _partials(tones: list[tuple[float, float]], seconds: float) -> np.ndarray:
    """Sum of ``(frequency, amplitude)`` sine partials."""
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return sum(amp * np.sin(2 * np.pi * freq * t) for freq, amp in tones)


def _note(
    freq: float, seconds: float, amp: float, *,
    attack: int, decay: int, sustain: float, release: int,
) -> np.ndarray:
    tone = _partials([(freq, amp)], seconds)
    return tone * _envelope(len(tone), attack, decay, sustain, release)


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _encode_wav(samples: np.ndarray) -> bytes:
    """16-bit mono PCM WAV from floats in -1..1."""
    peak = np.iinfo(np.int16).max
    pcm = np.round(np.clip(samples, -1.0, 1.0) * peak).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setparams((1, 2, SAMPLE_RATE, len(pcm), "NONE", "not compressed"))
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_work_complete() -> bytes:
    """Arpeggio C5→E5→G5 and a held C6."""
    parts: list[np.ndarray] = []
    for freq in (523.25, 659.25, 783.99):
        parts.append(
            _note(freq, 0.10, 0.5, attack=60, decay=150, sustain=0.3, release=200)
        )
        parts.append(_silence(0.02))
    parts.append(
        _note(1046.50, 0.35, 0.5, attack=80, decay=300, sustain=0.5, release=600)
    )
    return _encode_wav(np.concatenate(parts))


def _generate_break_complete() -> bytes:
    """Three ascending notes G4→C5→E5, a nudge back to focus."""
    parts: list[np.ndarray] = []
    for freq in (392.00, 523.25, 659.25):
        parts.append(
            _note(freq, 0.12, 0.6, attack=100, decay=200, sustain=0.4, release=300)
        )
        parts.append(_silence(0.03))
    parts.append(_silence(0.05))
    return _encode_wav(np.concatenate(parts))


def _generate_long_break_complete() -> bytes:
    """Soft bell: A4 with a quiet octave overtone, slow attack, long tail."""
    bell = _partials([(440.0, 0.35), (880.0, 0.08)], 1.0)
    env = _envelope(
        len(bell),
        attack=int(SAMPLE_RATE * 0.08),
        decay=int(SAMPLE_RATE * 0.3),
        sustain=0.25,
        release=int(SAMPLE_RATE * 0.55),
    )
    return _encode_wav(bell * env)


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "work_complete": _generate_work_complete,
    "break_complete": _generate_break_complete,
    "long_break_complete": _generate_long_break_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Synthesizes, caches and plays the phase-end chimes.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("work_complete")
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
        if effect is None:
            logger.debug("No sound loaded for %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def loaded(self) -> tuple[str, ...]:
        return tuple(self._effects)

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files into the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, gen_fn in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(gen_fn())
        except OSError:
            logger.warning(
                "Could not write sounds to %s; chimes disabled",
                self._sounds_dir, exc_info=True,
            )

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
