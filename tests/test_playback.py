# tests/test_playback.py
# -*- coding: utf-8 -*-
"""
Machine à états de lecture (sans base : méditations factices, backend virtuel).

L'executor synchrone exécute le comptage d'écoute immédiatement,
ce qui rend les assertions déterministes.
"""

import logging
from concurrent.futures import Executor, Future
from types import SimpleNamespace

import pytest

from mindscape.errors import SynthesisError
from mindscape.services.playback import PlaybackController, PlaybackState, VirtualAudioBackend
from mindscape.services.speech_service import SpeechService, StubSpeechProvider


class SyncExecutor(Executor):
    def submit(self, fn, *args, **kwargs):
        f = Future()
        try:
            f.set_result(fn(*args, **kwargs))
        except Exception as e:
            f.set_exception(e)
        return f


class FailingSpeech:
    def synthesize(self, script, **kwargs):
        raise SynthesisError("TTS Error: quota")


def meditation(mid="m1", duration=10, background="ocean_waves", audio_url=None, voice="female"):
    return SimpleNamespace(
        id=mid,
        title=f"Meditation {mid}",
        type="sleep",
        duration=duration,
        script="Relax. [PAUSE 2] [BREATHE]",
        audio_url=audio_url,
        settings={"voice": voice, "background": background, "visual": "beach"},
    )


@pytest.fixture
def plays():
    return []


@pytest.fixture
def backend():
    return VirtualAudioBackend()


@pytest.fixture
def player(backend, plays):
    return PlaybackController(
        speech=SpeechService(provider=StubSpeechProvider()),
        backend=backend,
        play_recorder=plays.append,
        executor=SyncExecutor(),
    )


def test_initial_state_is_idle(player):
    snap = player.snapshot()
    assert snap.state is PlaybackState.IDLE
    assert snap.meditation_id is None
    assert (snap.elapsed, snap.duration) == (0.0, 0.0)

def test_full_cycle_counts_one_play(player, plays, backend):
    snap = player.play(meditation())
    assert snap.state is PlaybackState.PLAYING
    assert snap.source.startswith("data:audio/wav;base64,")
    assert snap.background == "ocean_waves"

    player.pause()
    assert player.state is PlaybackState.PAUSED
    assert backend.playing_tracks() == []

    player.resume()
    assert player.state is PlaybackState.PLAYING
    assert len(backend.playing_tracks()) == 2

    for _ in range(3):
        player.pause()
        player.resume()

    player.stop()
    assert player.state is PlaybackState.IDLE
    assert player.elapsed == 0.0
    assert player.current_meditation is None
    assert plays == ["m1"]
    assert all(t.released for t in backend.opened)

def test_background_track_loops_at_reduced_volume(player, backend):
    player.play(meditation(background="rain"))
    primary, bg = backend.opened
    assert primary.loop is False and primary.volume == 1.0
    assert bg.loop is True and bg.volume == 0.3
    assert bg.source.endswith("rain.mp3")

def test_silence_opens_no_background_track(player, backend):
    snap = player.play(meditation(background="silence"))
    assert len(backend.opened) == 1
    assert snap.background is None

def test_unknown_background_is_ignored(player, backend):
    player.play(meditation(background="thunder"))
    assert len(backend.opened) == 1

def test_sounds_dir_from_env(player, backend, monkeypatch):
    monkeypatch.setenv("MINDSCAPE_SOUNDS_DIR", "/srv/sounds")
    player.play(meditation(background="forest_sounds"))
    assert backend.opened[1].source == "/srv/sounds/forest_sounds.mp3"

def test_seek_is_clamped(player):
    player.play(meditation(duration=10))
    assert player.seek_to(-5) == 0.0
    assert player.seek_to(9999) == 600.0
    assert player.elapsed == 600.0
    assert player.seek_to(42) == 42.0

def test_seek_while_paused_moves_primary_only(player, backend):
    player.play(meditation())
    player.pause()
    player.seek_to(30)
    primary, bg = backend.opened
    assert primary.position == 30.0
    assert bg.position == 0.0
    assert player.state is PlaybackState.PAUSED

def test_seek_when_idle_is_ignored(player):
    assert player.seek_to(100) == 0.0
    assert player.state is PlaybackState.IDLE

def test_reported_duration_overrides_declared(player):
    player.play(meditation(duration=10))
    player.on_loaded_metadata(float("inf"))
    assert player.duration == 600.0
    player.on_loaded_metadata(125.5)
    assert player.duration == 125.5
    assert player.seek_to(9999) == 125.5

def test_time_update_tracks_elapsed(player):
    player.play(meditation())
    player.on_time_update(12.5)
    assert player.snapshot().elapsed == 12.5

def test_playing_b_stops_a(player, plays, backend):
    player.play(meditation("a"))
    first = list(backend.opened)
    player.play(meditation("b"))

    assert player.current_meditation.id == "b"
    assert all(t.released and not t.playing for t in first)
    assert len(backend.playing_tracks()) == 2
    assert plays == ["a", "b"]

def test_pause_and_resume_from_wrong_state_are_noops(player):
    player.pause()
    player.resume()
    assert player.state is PlaybackState.IDLE

    player.play(meditation())
    player.resume()
    assert player.state is PlaybackState.PLAYING

def test_stop_when_idle_is_noop(player, plays):
    player.stop()
    assert player.state is PlaybackState.IDLE
    assert plays == []

def test_ended_returns_to_idle(player):
    player.play(meditation())
    player.on_ended()
    assert player.state is PlaybackState.IDLE

def test_synthesis_failure_returns_to_idle_without_count(backend, plays):
    player = PlaybackController(speech=FailingSpeech(), backend=backend,
                                play_recorder=plays.append, executor=SyncExecutor())
    with pytest.raises(SynthesisError):
        player.play(meditation())
    assert player.state is PlaybackState.IDLE
    assert backend.opened == []
    assert plays == []

def test_unsupported_voice_is_a_synthesis_error(player, plays):
    with pytest.raises(SynthesisError):
        player.play(meditation(voice="robot"))
    assert player.state is PlaybackState.IDLE
    assert plays == []

def test_existing_audio_url_skips_synthesis(backend, plays):
    player = PlaybackController(speech=FailingSpeech(), backend=backend,
                                play_recorder=plays.append, executor=SyncExecutor())
    snap = player.play(meditation(audio_url="https://cdn.example.com/m1.mp3"))
    assert snap.state is PlaybackState.PLAYING
    assert backend.opened[0].source == "https://cdn.example.com/m1.mp3"
    assert plays == ["m1"]

def test_recorder_failure_is_only_logged(backend, caplog):
    def broken(_mid):
        raise RuntimeError("db down")

    player = PlaybackController(speech=SpeechService(provider=StubSpeechProvider()), backend=backend,
                                play_recorder=broken, executor=SyncExecutor())
    with caplog.at_level(logging.ERROR, logger="mindscape.services.playback"):
        snap = player.play(meditation())
    assert snap.state is PlaybackState.PLAYING
    assert "Comptage d'écoute échoué pour m1" in caplog.text

def test_per_play_recorder_overrides_default(player, plays):
    community_plays = []
    player.play(meditation("orig"), play_recorder=lambda _mid: community_plays.append("c1"))
    assert community_plays == ["c1"]
    assert plays == []

def test_no_recorder_means_no_count(backend):
    player = PlaybackController(speech=SpeechService(provider=StubSpeechProvider()),
                                backend=backend, executor=SyncExecutor())
    assert player.play(meditation()).state is PlaybackState.PLAYING

def test_close_releases_audio(backend):
    player = PlaybackController(speech=SpeechService(provider=StubSpeechProvider()), backend=backend)
    player.play(meditation())
    player.close()
    assert player.state is PlaybackState.IDLE
    assert backend.playing_tracks() == []
