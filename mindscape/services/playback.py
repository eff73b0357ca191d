# mindscape/services/playback.py
# -*- coding: utf-8 -*-
"""
Machine à états de lecture : "qu'est-ce qui joue en ce moment".

    IDLE --play--> LOADING --audio prête--> PLAYING <--pause/resume--> PAUSED
      ^                |                       |                          |
      +--échec synth.--+                       +----stop / fin audio------+

Une seule méditation active à la fois : play() arrête la précédente avant de démarrer.
La narration (piste principale) et l'ambiance (piste en boucle, volume réduit)
sont deux flux distincts qui se mettent en pause et reprennent ensemble.

Le comptage d'écoute est demandé une seule fois par démarrage, sans attendre :
la requête part dans un executor et son échec éventuel est seulement journalisé.

Le contrôleur n'est pas un singleton : c'est un objet détenu explicitement
(ex. st.session_state) et seul écrivain de son état ; snapshot() fournit une vue figée.
"""

from __future__ import annotations

import functools
import logging
import math
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from mindscape.errors import SynthesisError
from mindscape.services.catalog import Voice, background_sound_path
from mindscape.services.speech_service import SpeechService

logger = logging.getLogger(__name__)

BACKGROUND_VOLUME = 0.3
NARRATION_RATE = 0.9
NARRATION_PITCH = 1.0


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackSnapshot:
    state: PlaybackState
    meditation_id: Optional[str]
    elapsed: float
    duration: float
    background: Optional[str]
    source: Optional[str]


# -----------------------------------------------------------------------------
# Backend audio
# -----------------------------------------------------------------------------

class AudioTrack(Protocol):
    def play(self) -> None: ...
    def pause(self) -> None: ...
    def stop(self) -> None: ...
    def seek(self, seconds: float) -> None: ...
    def release(self) -> None: ...


class AudioBackend(Protocol):
    def open(self, source: str, *, loop: bool = False, volume: float = 1.0) -> AudioTrack: ...


class VirtualTrack:
    """Piste en mémoire : garde l'état demandé, ne produit aucun son."""

    def __init__(self, source: str, loop: bool = False, volume: float = 1.0) -> None:
        self.source = source
        self.loop = loop
        self.volume = volume
        self.playing = False
        self.position = 0.0
        self.released = False

    def play(self) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def stop(self) -> None:
        self.playing = False
        self.position = 0.0

    def seek(self, seconds: float) -> None:
        self.position = seconds

    def release(self) -> None:
        self.stop()
        self.released = True


class VirtualAudioBackend:
    """Backend par défaut (UI Streamlit, tests) : l'UI lit la source depuis le snapshot."""

    def __init__(self) -> None:
        self.opened: List[VirtualTrack] = []

    def open(self, source: str, *, loop: bool = False, volume: float = 1.0) -> VirtualTrack:
        track = VirtualTrack(source, loop=loop, volume=volume)
        self.opened.append(track)
        return track

    def playing_tracks(self) -> List[VirtualTrack]:
        return [t for t in self.opened if t.playing]


# -----------------------------------------------------------------------------
# Contrôleur
# -----------------------------------------------------------------------------

def _log_play_count_result(meditation_id: str, future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Comptage d'écoute échoué pour %s (non rejoué)", meditation_id, exc_info=exc)


class PlaybackController:
    def __init__(
        self,
        speech: Optional[SpeechService] = None,
        backend: Optional[AudioBackend] = None,
        play_recorder: Optional[Callable[[str], None]] = None,
        executor: Optional[Executor] = None,
        background_volume: float = BACKGROUND_VOLUME,
    ) -> None:
        self._speech = speech or SpeechService()
        self._backend = backend or VirtualAudioBackend()
        self._record_play = play_recorder
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="play-count")
        self.background_volume = background_volume

        self._state = PlaybackState.IDLE
        self._meditation = None
        self._source: Optional[str] = None
        self._primary: Optional[AudioTrack] = None
        self._background: Optional[AudioTrack] = None
        self._background_id: Optional[str] = None
        self._elapsed = 0.0
        self._reported_duration: Optional[float] = None

    # --- vues en lecture seule ---------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_meditation(self):
        return self._meditation

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def duration(self) -> float:
        """Durée rapportée par le flux si connue, sinon la durée déclarée (minutes -> s)."""
        if self._reported_duration is not None:
            return self._reported_duration
        if self._meditation is not None:
            return float(self._meditation.duration) * 60.0
        return 0.0

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            state=self._state,
            meditation_id=getattr(self._meditation, "id", None),
            elapsed=self._elapsed,
            duration=self.duration,
            background=self._background_id,
            source=self._source,
        )

    # --- commandes -----------------------------------------------------------

    def play(self, meditation, *, play_recorder: Optional[Callable[[str], None]] = None) -> PlaybackSnapshot:
        """
        Démarre `meditation` (arrête d'abord la lecture en cours).

        `play_recorder` remplace le compteur par défaut pour cette lecture
        (ex. écoute depuis la communauté -> compteur communautaire).

        Raises:
            SynthesisError: audio impossible à produire ; retour à IDLE, rien n'est compté.
        """
        if self._state is not PlaybackState.IDLE:
            self.stop()

        self._state = PlaybackState.LOADING
        self._meditation = meditation
        settings = meditation.settings or {}

        try:
            source = meditation.audio_url or self._speech.synthesize(
                meditation.script,
                voice=settings.get("voice") or Voice.FEMALE.value,
                rate=NARRATION_RATE,
                pitch=NARRATION_PITCH,
            )
        except Exception as e:
            self._reset()
            if isinstance(e, SynthesisError):
                raise
            raise SynthesisError(f"TTS Error: {e}") from e

        try:
            self._primary = self._backend.open(source)
            bg_path = background_sound_path(settings.get("background"))
            if bg_path:
                self._background = self._backend.open(bg_path, loop=True, volume=self.background_volume)
                self._background_id = settings.get("background")
            self._primary.play()
            if self._background is not None:
                self._background.play()
        except Exception:
            self._release_tracks()
            self._reset()
            raise

        self._source = source
        self._state = PlaybackState.PLAYING
        logger.info("Lecture de %s (ambiance: %s)", meditation.id, self._background_id or "aucune")
        self._request_play_count(meditation.id, play_recorder or self._record_play)
        return self.snapshot()

    def pause(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self._primary.pause()
        if self._background is not None:
            self._background.pause()
        self._state = PlaybackState.PAUSED

    def resume(self) -> None:
        if self._state is not PlaybackState.PAUSED:
            return
        self._primary.play()
        if self._background is not None:
            self._background.play()
        self._state = PlaybackState.PLAYING

    def stop(self) -> None:
        if self._state is PlaybackState.IDLE:
            return
        stopped = getattr(self._meditation, "id", None)
        self._release_tracks()
        self._reset()
        logger.info("Lecture arrêtée (%s)", stopped)

    def seek_to(self, seconds: float) -> float:
        """Position bornée à [0, durée], piste principale seulement. Renvoie la position retenue."""
        if self._state not in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            return self._elapsed
        target = min(max(float(seconds), 0.0), self.duration)
        self._primary.seek(target)
        self._elapsed = target
        return target

    def close(self) -> None:
        """Démontage : libère l'audio tout de suite, n'attend pas les écritures en vol."""
        self.stop()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # --- événements du flux audio (indicatifs) -------------------------------

    def on_time_update(self, seconds: float) -> None:
        if self._state in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            self._elapsed = max(0.0, float(seconds))

    def on_loaded_metadata(self, duration: float) -> None:
        if self._meditation is not None and duration and math.isfinite(duration) and duration > 0:
            self._reported_duration = float(duration)

    def on_ended(self) -> None:
        self.stop()

    # --- interne ---------------------------------------------------------------

    def _request_play_count(self, meditation_id: str, recorder: Optional[Callable[[str], None]]) -> None:
        if recorder is None:
            return
        try:
            future = self._executor.submit(recorder, meditation_id)
        except Exception:
            logger.exception("Comptage d'écoute non planifié pour %s", meditation_id)
            return
        future.add_done_callback(functools.partial(_log_play_count_result, meditation_id))

    def _release_tracks(self) -> None:
        for track in (self._primary, self._background):
            if track is not None:
                track.stop()
                track.release()

    def _reset(self) -> None:
        self._state = PlaybackState.IDLE
        self._meditation = None
        self._source = None
        self._primary = None
        self._background = None
        self._background_id = None
        self._elapsed = 0.0
        self._reported_duration = None
