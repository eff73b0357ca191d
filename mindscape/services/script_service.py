# mindscape/services/script_service.py
# -*- coding: utf-8 -*-
"""
Service de génération de scripts de méditation.

Deux providers :
- StubScriptProvider : offline, déterministe, idéal pour tests/MVP.
- OpenAIScriptProvider : API chat completions d'OpenAI (si OPENAI_API_KEY présent).

Usage:
    from mindscape.services.script_service import ScriptService, GenerationRequest

    svc = ScriptService()  # auto: stub si pas de clé
    script = svc.generate(GenerationRequest(type="sleep", duration=10))
    print(script)

Les scripts contiennent des marqueurs de rythme consommés par la synthèse vocale :
[PAUSE n] (pause de n secondes), [BREATHE] (respiration guidée), [LONG_PAUSE].
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import httpx

from mindscape.errors import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert meditation guide who creates personalized, calming meditation scripts. "
    "Your scripts are gentle, supportive, and designed to help people find inner peace and achieve their goals."
)

# Consignes spécifiques par type (repli : aucune consigne supplémentaire)
TYPE_FOCUS = {
    "manifestation": [
        "Visualization of goals being achieved",
        "Positive affirmations about success",
        "Feeling emotions of already having what you desire",
        "Clear mental imagery of the desired outcome",
    ],
    "relaxation": [
        "Progressive muscle relaxation",
        "Deep breathing exercises",
        "Release of tension and stress",
        "Calming imagery of peaceful places",
        "Body scan for complete relaxation",
    ],
    "sleep": [
        "Gentle body relaxation from head to toe",
        "Slow, rhythmic breathing patterns",
        "Peaceful, dreamy imagery",
        "Letting go of the day's concerns",
        "Transition to restful sleep",
    ],
    "visualization": [
        "Vivid sensory descriptions",
        "Engaging all five senses",
        "Journey through beautiful, peaceful environments",
        "Clear, detailed visual scenes",
        "Immersive experience",
    ],
    "affirmations": [
        "Self-empowering statements",
        "Building confidence and self-worth",
        "Reinforcing positive beliefs",
        "Personal strength and capability",
        "Overcoming limiting beliefs",
    ],
    "mindfulness": [
        "Attention to breath and body sensations",
        "Observing thoughts without judgment",
        "Awareness of the present moment",
        "Gentle return to focus when mind wanders",
        "Cultivation of inner peace",
    ],
}


@dataclass(frozen=True)
class GenerationRequest:
    type: str
    duration: int  # minutes
    customization: dict = field(default_factory=dict)
    user_preferences: dict = field(default_factory=dict)


def build_prompt(req: GenerationRequest) -> str:
    main_minutes = max(1, req.duration - 3)
    lines = [
        f"Create a {req.duration}-minute {req.type} meditation script.",
        "",
        "Structure the meditation with:",
        "1. Opening/grounding (1-2 minutes)",
        f"2. Main practice ({main_minutes} minutes)",
        "3. Closing/integration (1-2 minutes)",
        "",
        "Use calming language, include proper pacing markers [PAUSE 3], [BREATHE], and natural transitions.",
        "Write in second person (you) and present tense.",
        "Make the language gentle, supportive, and encouraging.",
    ]

    focus = TYPE_FOCUS.get(req.type)
    if focus:
        lines += ["", f"Focus on {req.type}:"] + [f"- {f}" for f in focus]

    c = req.customization or {}
    for key, label in (("goals", "Specific focus on"), ("timeline", "Timeline context"),
                       ("category", "Category"), ("currentSituation", "Current situation")):
        if c.get(key):
            lines.append(f"- {label}: {c[key]}")

    lines += [
        "",
        "Please respond with ONLY the meditation script text, no additional formatting or explanations.",
        "The script should be natural and flowing, suitable for text-to-speech conversion.",
        "Include pause markers like [PAUSE 3] for 3-second pauses, [BREATHE] for breathing cues.",
    ]
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Provider: Stub (déterministe, offline)
# -----------------------------------------------------------------------------

class StubScriptProvider:
    """
    Assemble un script court à partir du type et de la personnalisation, sans réseau.
    Déterministe -> parfait pour tests/unit et usage local.
    """

    def generate(self, req: GenerationRequest) -> str:
        parts = [
            f"Welcome to your {req.duration}-minute {req.type} meditation.",
            "Find a comfortable position and gently close your eyes. [PAUSE 3]",
            "[BREATHE]",
        ]
        goals = (req.customization or {}).get("goals")
        if goals:
            parts.append(f"Today we focus on: {goals}. [PAUSE 2]")
        for line in TYPE_FOCUS.get(req.type, ["Rest in this quiet moment"]):
            parts.append(f"{line}. [PAUSE 5]")
        parts += [
            "[LONG_PAUSE]",
            "Slowly bring your awareness back to the room. [BREATHE]",
            "When you are ready, open your eyes.",
        ]
        return "\n".join(parts)


# -----------------------------------------------------------------------------
# Provider: OpenAI chat completions
# -----------------------------------------------------------------------------

class OpenAIScriptProvider:
    """
    Client simple pour l'API chat completions d'OpenAI.

    Variables d'environnement supportées:
        OPENAI_API_KEY      : clé secrète (obligatoire)
        OPENAI_MODEL        : par défaut 'gpt-4o-mini'
        OPENAI_API_URL      : URL override (par défaut l'endpoint public)
        OPENAI_MAX_TOKENS   : int (par défaut 2000)
        OPENAI_TEMPERATURE  : float (par défaut 0.7)
        OPENAI_TIMEOUT_SEC  : int/float (par défaut 60)

    Notes:
        - Une erreur réseau est relevée telle quelle ; ScriptService la convertit
          en GenerationError.
    """

    def __init__(self) -> None:
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY manquant pour OpenAIScriptProvider.")

        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
        self.api_url = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions").strip()
        self.max_tokens = int(os.getenv("OPENAI_MAX_TOKENS", "2000"))
        self.temperature = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
        self.timeout_sec = float(os.getenv("OPENAI_TIMEOUT_SEC", "60"))

        self._headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, req: GenerationRequest) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(req)},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        with httpx.Client(timeout=self.timeout_sec) as client:
            resp = client.post(self.api_url, headers=self._headers, json=payload)
            resp.raise_for_status()
            data = resp.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        return (content or "").strip()


# -----------------------------------------------------------------------------
# Façade principale
# -----------------------------------------------------------------------------

class ScriptService:
    """
    Façade qui choisit automatiquement le provider selon l'environnement :
      - SCRIPT_PROVIDER=openai -> OpenAIScriptProvider (si OPENAI_API_KEY présent)
      - sinon                  -> StubScriptProvider (par défaut)

    On peut forcer un provider en passant `provider=...` dans __init__.
    """

    def __init__(self, provider: Optional[object] = None) -> None:
        if provider is not None:
            self._provider = provider
            return

        prov = os.getenv("SCRIPT_PROVIDER", "stub").strip().lower()
        if prov == "openai":
            try:
                self._provider = OpenAIScriptProvider()
            except RuntimeError as e:
                logger.warning("Config OpenAI incomplète, repli sur le stub : %s", e)
                self._provider = StubScriptProvider()
        else:
            self._provider = StubScriptProvider()

    def generate(self, req: GenerationRequest) -> str:
        """
        Génère le script narré (avec marqueurs de rythme).

        Raises:
            GenerationError: erreur du provider ou script vide.
        """
        try:
            script = self._provider.generate(req)
        except Exception as e:
            logger.exception("Échec de génération du script (%s, %s min)", req.type, req.duration)
            raise GenerationError(f"Failed to generate meditation script: {e}") from e
        if not script or not script.strip():
            raise GenerationError("No script generated")
        return script
