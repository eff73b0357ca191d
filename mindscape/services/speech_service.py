# mindscape/services/speech_service.py
# -*- coding: utf-8 -*-
"""
Synthèse vocale des scripts de méditation.

Deux providers :
- StubSpeechProvider : offline, renvoie une data URL déterministe (tests/MVP).
- OpenAISpeechProvider : endpoint /v1/audio/speech d'OpenAI (si OPENAI_API_KEY présent).

Les marqueurs de rythme du script sont convertis en silences ("...") avant synthèse.
"""

from __future__ import annotations

import base64
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from mindscape.errors import SynthesisError
from mindscape.services.catalog import Voice

logger = logging.getLogger(__name__)

_PAUSE_RE = re.compile(r"\[PAUSE (\d+)\]")
MAX_PAUSE_SECONDS = 30


def process_pacing_markers(text: str) -> str:
    """[PAUSE n] -> silences proportionnels (n plafonné), [BREATHE] -> consigne, [LONG_PAUSE] -> long silence."""
    out = _PAUSE_RE.sub(
        lambda m: "... " + "..." * min(int(m.group(1)), MAX_PAUSE_SECONDS) + " ", text
    )
    out = out.replace("[BREATHE]", "... breathe in... and breathe out... ")
    return out.replace("[LONG_PAUSE]", ".......... ")


@dataclass(frozen=True)
class SpeechOptions:
    voice: str = Voice.FEMALE.value
    rate: float = 0.9  # un peu plus lent pour la méditation
    pitch: float = 1.0
    volume: float = 1.0


class StubSpeechProvider:
    """Pas d'audio réel : encode le texte traité dans une data URL."""

    def synthesize(self, text: str, options: SpeechOptions) -> str:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        return f"data:audio/wav;base64,{encoded}"


class OpenAISpeechProvider:
    """
    Client pour l'endpoint audio/speech d'OpenAI.

    Variables d'environnement supportées:
        OPENAI_API_KEY      : clé secrète (obligatoire)
        TTS_MODEL           : par défaut 'tts-1'
        TTS_API_URL         : URL override
        OPENAI_TIMEOUT_SEC  : par défaut 60
    """

    VOICES = {Voice.MALE.value: "onyx", Voice.FEMALE.value: "nova"}

    def __init__(self) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY manquant pour OpenAISpeechProvider.")
        self.model = os.getenv("TTS_MODEL", "tts-1").strip()
        self.api_url = os.getenv("TTS_API_URL", "https://api.openai.com/v1/audio/speech").strip()
        self.timeout_sec = float(os.getenv("OPENAI_TIMEOUT_SEC", "60"))

    def synthesize(self, text: str, options: SpeechOptions) -> str:
        payload = {
            "model": self.model,
            "input": text,
            "voice": self.VOICES[options.voice],
            "speed": options.rate,
            "response_format": "mp3",
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        with httpx.Client(timeout=self.timeout_sec) as client:
            resp = client.post(self.api_url, headers=headers, json=payload)
            resp.raise_for_status()
            audio = resp.content
        return "data:audio/mpeg;base64," + base64.b64encode(audio).decode("ascii")


class SpeechService:
    """
    Façade : TTS_PROVIDER=openai -> OpenAISpeechProvider, sinon stub.
    Toute erreur ressort en SynthesisError.
    """

    def __init__(self, provider: Optional[object] = None) -> None:
        if provider is not None:
            self._provider = provider
            return

        prov = os.getenv("TTS_PROVIDER", "stub").strip().lower()
        if prov == "openai":
            try:
                self._provider = OpenAISpeechProvider()
            except RuntimeError as e:
                logger.warning("Config TTS incomplète, repli sur le stub : %s", e)
                self._provider = StubSpeechProvider()
        else:
            self._provider = StubSpeechProvider()

    def synthesize(self, script: str, *, voice: str = Voice.FEMALE.value,
                   rate: float = 0.9, pitch: float = 1.0, volume: float = 1.0) -> str:
        """Renvoie une référence audio jouable (URL ou data URL)."""
        if not script or not script.strip():
            raise SynthesisError("Nothing to synthesize: empty script")
        try:
            Voice(voice)
        except ValueError:
            raise SynthesisError(f"Unsupported voice: {voice!r}") from None

        options = SpeechOptions(voice=voice, rate=rate, pitch=pitch, volume=volume)
        try:
            return self._provider.synthesize(process_pacing_markers(script), options)
        except Exception as e:
            raise SynthesisError(f"TTS Error: {e}") from e
