"""Tests for phase-end notifications and chime synthesis.

Covers:
- Notifier message selection, settings toggles, deferred delivery
- Delivery failures logged and contained
- SoundManager WAV generation and playback API
- Engine → Notifier wiring
"""

from __future__ import annotations

import logging
import wave

import pytest
from PyQt6 import sip

from droplet.audio.sounds import (
    SoundManager,
    SOUND_NAMES,
    SAMPLE_RATE,
    _envelope,
    _generate_work_complete,
    _generate_break_complete,
    _generate_long_break_complete,
)
from droplet.notifications import Notifier, PHASE_MESSAGES
from droplet.settings import Settings
from droplet.timer.engine import TimerEngine, Phase

from helpers import SignalCollector, run_to_zero


class FakeTray:
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def showMessage(self, title, msg):
        self.messages.append((title, msg))


class BrokenTray:
    def showMessage(self, title, msg):
        raise OSError("tray went away")


class FakeSounds:
    def __init__(self):
        self.played: list[str] = []

    def play(self, name):
        self.played.append(name)


# ═══════════════════════════════════════════════════════════════════════
#  MESSAGES
# ═══════════════════════════════════════════════════════════════════════


class TestPhaseMessages:
    def test_one_message_per_phase(self):
        assert set(PHASE_MESSAGES) == set(Phase)

    def test_work_message(self):
        msg = PHASE_MESSAGES[Phase.WORK]
        assert msg.title.startswith("Work Session Complete!")
        assert msg.body == "Time for a break. You've earned it!"

    def test_break_messages(self):
        assert PHASE_MESSAGES[Phase.SHORT_BREAK].title.startswith("Break Over!")
        assert PHASE_MESSAGES[Phase.LONG_BREAK].title.startswith("Long Break Over!")

    def test_sounds_exist(self):
        for msg in PHASE_MESSAGES.values():
            assert msg.sound in SOUND_NAMES


# ═══════════════════════════════════════════════════════════════════════
#  NOTIFIER
# ═══════════════════════════════════════════════════════════════════════


class TestNotifier:
    def test_deliver_shows_message_and_plays_sound(self, qapp):
        tray, sounds = FakeTray(), FakeSounds()
        n = Notifier(Settings(), tray=tray, sounds=sounds)
        n._deliver(Phase.SHORT_BREAK)
        assert tray.messages == [(
            PHASE_MESSAGES[Phase.SHORT_BREAK].title,
            PHASE_MESSAGES[Phase.SHORT_BREAK].body,
        )]
        assert sounds.played == ["break_complete"]

    def test_notifications_disabled(self, qapp):
        tray, sounds = FakeTray(), FakeSounds()
        n = Notifier(Settings(notifications_enabled=False), tray=tray, sounds=sounds)
        n._deliver(Phase.WORK)
        assert tray.messages == []
        assert sounds.played == ["work_complete"]

    def test_sound_disabled(self, qapp):
        tray, sounds = FakeTray(), FakeSounds()
        n = Notifier(Settings(sound_enabled=False), tray=tray, sounds=sounds)
        n._deliver(Phase.LONG_BREAK)
        assert len(tray.messages) == 1
        assert sounds.played == []

    def test_settings_read_at_delivery(self, qapp):
        s = Settings()
        tray = FakeTray()
        n = Notifier(s, tray=tray)
        s.notifications_enabled = False
        n._deliver(Phase.WORK)
        assert tray.messages == []

    def test_no_tray_no_sounds(self, qapp):
        n = Notifier(Settings())
        c = SignalCollector()
        n.delivered.connect(c)
        n._deliver(Phase.WORK)
        assert c.items == [Phase.WORK]

    def test_notify_is_deferred(self, qapp):
        tray = FakeTray()
        n = Notifier(Settings(), tray=tray)
        n.notify_phase_ended(Phase.WORK)
        assert tray.messages == []  # nothing until the event loop runs

    def test_notify_delivers_on_event_loop(self, qapp):
        tray = FakeTray()
        n = Notifier(Settings(), tray=tray)
        n.notify_phase_ended(Phase.WORK)
        for _ in range(5):
            qapp.processEvents()
        assert len(tray.messages) == 1

    def test_pending_delivery_dropped_with_notifier(self, qapp):
        tray = FakeTray()
        n = Notifier(Settings(), tray=tray)
        n.notify_phase_ended(Phase.WORK)
        sip.delete(n)
        for _ in range(5):
            qapp.processEvents()
        assert tray.messages == []

    def test_delivery_failure_is_logged(self, qapp, caplog):
        n = Notifier(Settings(), tray=BrokenTray())
        c = SignalCollector()
        n.delivered.connect(c)
        with caplog.at_level(logging.ERROR, logger="droplet.notifications"):
            n._deliver(Phase.WORK)
        assert "Failed to deliver work notification" in caplog.text
        assert len(c) == 0

    def test_set_tray(self, qapp):
        n = Notifier(Settings())
        tray = FakeTray()
        n.set_tray(tray)
        n._deliver(Phase.WORK)
        assert len(tray.messages) == 1


class TestEngineNotifierWiring:
    def test_engine_phase_end_reaches_tray(self, qapp):
        s = Settings(auto_start_next_session=False)
        tray = FakeTray()
        notifier = Notifier(s, tray=tray)
        engine = TimerEngine(s, notifier)

        engine.toggle_start_pause()
        run_to_zero(engine)
        for _ in range(5):
            qapp.processEvents()

        assert [t for t, _ in tray.messages] == [PHASE_MESSAGES[Phase.WORK].title]

    def test_broken_tray_does_not_affect_engine(self, qapp):
        s = Settings(auto_start_next_session=True)
        engine = TimerEngine(s, Notifier(s, tray=BrokenTray()))
        engine.toggle_start_pause()
        run_to_zero(engine)
        for _ in range(5):
            qapp.processEvents()
        assert engine.phase == Phase.SHORT_BREAK
        assert engine.is_running


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


def _read_wav(data: bytes, tmp_path) -> wave.Wave_read:
    path = tmp_path / "chime.wav"
    path.write_bytes(data)
    return wave.open(str(path), "rb")


class TestSynthesis:
    @pytest.mark.parametrize("gen", [
        _generate_work_complete,
        _generate_break_complete,
        _generate_long_break_complete,
    ])
    def test_valid_mono_16bit(self, gen, tmp_path):
        with _read_wav(gen(), tmp_path) as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == SAMPLE_RATE
            assert wf.getnframes() > 0

    def test_long_break_bell_is_one_second(self, tmp_path):
        with _read_wav(_generate_long_break_complete(), tmp_path) as wf:
            assert wf.getnframes() == SAMPLE_RATE

    def test_envelope_shape(self):
        env = _envelope(1000, attack=100, decay=200, sustain=0.5, release=300)
        assert env[0] == pytest.approx(0.0)
        assert env[100] == pytest.approx(1.0)
        assert env[500] == pytest.approx(0.5)
        assert env[-1] == pytest.approx(0.0)
        assert env.max() <= 1.0


class TestSoundManager:
    def test_generates_cache(self, qapp, tmp_path):
        SoundManager(sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            assert (tmp_path / f"{name}.wav").exists()

    def test_reuses_existing_files(self, qapp, tmp_path):
        SoundManager(sounds_dir=tmp_path)
        path = tmp_path / "work_complete.wav"
        mtime = path.stat().st_mtime_ns
        SoundManager(sounds_dir=tmp_path)
        assert path.stat().st_mtime_ns == mtime

    def test_loads_all_effects(self, qapp, tmp_path):
        mgr = SoundManager(sounds_dir=tmp_path)
        assert set(mgr.loaded) == set(SOUND_NAMES)

    def test_volume_clamped(self, qapp, tmp_path):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.set_volume(150)
        assert mgr.volume == 100
        mgr.set_volume(-10)
        assert mgr.volume == 0

    def test_enable_toggle(self, qapp, tmp_path):
        mgr = SoundManager(sounds_dir=tmp_path)
        mgr.set_enabled(False)
        assert mgr.enabled is False
        mgr.play("work_complete")  # silently ignored

    def test_unknown_sound_is_noop(self, qapp, tmp_path):
        SoundManager(sounds_dir=tmp_path).play("nope")

    def test_default_dir_is_patched_app_dir(self, qapp, isolated_app_dir):
        SoundManager()
        assert (isolated_app_dir / "sounds" / "work_complete.wav").exists()
