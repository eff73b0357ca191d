# mindscape/services/catalog.py
# -*- coding: utf-8 -*-
"""
Catalogue fixe de Mindscape : types de méditation, voix, sons d'ambiance, décors.

Les tables d'apparence sont indexées par énumération avec un repli défini :
une clé inconnue (donnée ancienne, saisie libre) donne toujours un visuel par défaut.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from mindscape.errors import InvalidArgument


class MeditationType(str, Enum):
    MANIFESTATION = "manifestation"
    RELAXATION = "relaxation"
    SLEEP = "sleep"
    VISUALIZATION = "visualization"
    AFFIRMATIONS = "affirmations"
    MINDFULNESS = "mindfulness"


class Voice(str, Enum):
    MALE = "male"
    FEMALE = "female"


class BackgroundSound(str, Enum):
    OCEAN_WAVES = "ocean_waves"
    FOREST_SOUNDS = "forest_sounds"
    RAIN = "rain"
    WHITE_NOISE = "white_noise"
    AMBIENT_MUSIC = "ambient_music"
    SILENCE = "silence"  # sentinelle : pas de piste d'ambiance


class VisualEnvironment(str, Enum):
    BEACH = "beach"
    MOUNTAINS = "mountains"
    FOREST = "forest"


@dataclass(frozen=True)
class TypeInfo:
    name: str
    description: str
    min_minutes: int
    max_minutes: int


TYPE_INFO: Dict[MeditationType, TypeInfo] = {
    MeditationType.MANIFESTATION: TypeInfo("Manifestation", "Goal-specific statements and visualization", 5, 30),
    MeditationType.RELAXATION: TypeInfo("Relaxation", "Stress relief and deep calming techniques", 5, 30),
    MeditationType.SLEEP: TypeInfo("Sleep", "Bedtime stories and sleep-inducing practices", 10, 60),
    MeditationType.VISUALIZATION: TypeInfo("Visualization", "Guided imagery and mental rehearsal", 10, 25),
    MeditationType.AFFIRMATIONS: TypeInfo("Affirmations", "Positive self-talk and confidence building", 5, 20),
    MeditationType.MINDFULNESS: TypeInfo("Mindfulness", "Present moment awareness and breathing", 5, 30),
}

DURATION_CHOICES = (5, 10, 15, 20, 30)

DEFAULT_SETTINGS = {
    "voice": Voice.FEMALE.value,
    "background": BackgroundSound.OCEAN_WAVES.value,
    "visual": VisualEnvironment.BEACH.value,
}

BACKGROUND_LABELS: Dict[BackgroundSound, str] = {
    BackgroundSound.OCEAN_WAVES: "Ocean Waves",
    BackgroundSound.FOREST_SOUNDS: "Forest Sounds",
    BackgroundSound.RAIN: "Rain",
    BackgroundSound.WHITE_NOISE: "White Noise",
    BackgroundSound.AMBIENT_MUSIC: "Ambient Music",
    BackgroundSound.SILENCE: "Silence",
}

# -----------------------------------------------------------------------------
# Tables d'apparence (clé inconnue -> repli)
# -----------------------------------------------------------------------------

TYPE_COLORS: Dict[MeditationType, str] = {
    MeditationType.MANIFESTATION: "#a855f7",
    MeditationType.RELAXATION: "#3b82f6",
    MeditationType.SLEEP: "#6366f1",
    MeditationType.VISUALIZATION: "#10b981",
    MeditationType.AFFIRMATIONS: "#f59e0b",
    MeditationType.MINDFULNESS: "#f43f5e",
}
FALLBACK_COLOR = "#6b7280"

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=400&h=225&fit=crop"

TYPE_IMAGES: Dict[MeditationType, str] = {
    MeditationType.MANIFESTATION: _UNSPLASH.format("1500382017468-9049fed747ef"),
    MeditationType.RELAXATION: _UNSPLASH.format("1544427920-c49ccfb85579"),
    MeditationType.SLEEP: _UNSPLASH.format("1419242902214-272b3f66ee7a"),
    MeditationType.VISUALIZATION: _UNSPLASH.format("1506905925346-21bda4d32df4"),
    MeditationType.AFFIRMATIONS: _UNSPLASH.format("1500382017468-9049fed747ef"),
    MeditationType.MINDFULNESS: _UNSPLASH.format("1544427920-c49ccfb85579"),
}

VISUAL_IMAGES: Dict[VisualEnvironment, str] = {
    VisualEnvironment.BEACH: _UNSPLASH.format("1507525428034-b723cf961d3e"),
    VisualEnvironment.MOUNTAINS: _UNSPLASH.format("1506905925346-21bda4d32df4"),
    VisualEnvironment.FOREST: _UNSPLASH.format("1441974231531-c6227db76b6e"),
}


def _lookup(enum_cls, table, key, fallback):
    try:
        return table[enum_cls(key)]
    except (ValueError, KeyError):
        return fallback


def type_color(type_: Optional[str]) -> str:
    return _lookup(MeditationType, TYPE_COLORS, type_, FALLBACK_COLOR)


def type_image(type_: Optional[str]) -> str:
    return _lookup(MeditationType, TYPE_IMAGES, type_, TYPE_IMAGES[MeditationType.RELAXATION])


def visual_image(visual: Optional[str]) -> str:
    return _lookup(VisualEnvironment, VISUAL_IMAGES, visual, VISUAL_IMAGES[VisualEnvironment.BEACH])


def background_label(background: Optional[str]) -> str:
    return _lookup(BackgroundSound, BACKGROUND_LABELS, background, str(background or "").replace("_", " "))


def background_sound_path(background: Optional[str]) -> Optional[str]:
    """Chemin du fichier d'ambiance, None pour 'silence' ou un id inconnu."""
    try:
        sound = BackgroundSound(background)
    except ValueError:
        return None
    if sound is BackgroundSound.SILENCE:
        return None
    sounds_dir = os.getenv("MINDSCAPE_SOUNDS_DIR", "sounds")
    return f"{sounds_dir}/{sound.value}.mp3"


# -----------------------------------------------------------------------------
# Validation des entrées utilisateur
# -----------------------------------------------------------------------------

def parse_type(value) -> MeditationType:
    try:
        return MeditationType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in MeditationType)
        raise InvalidArgument(f"Type de méditation inconnu: {value!r} (attendu: {allowed})") from None


def normalize_settings(settings: Optional[dict]) -> dict:
    """Complète avec les valeurs par défaut et valide voix / ambiance / décor."""
    merged = dict(DEFAULT_SETTINGS)
    merged.update({k: v for k, v in (settings or {}).items() if v is not None})
    for key, enum_cls in (("voice", Voice), ("background", BackgroundSound), ("visual", VisualEnvironment)):
        try:
            enum_cls(merged[key])
        except ValueError:
            raise InvalidArgument(f"Valeur invalide pour {key}: {merged[key]!r}") from None
    return merged


def default_title(type_: MeditationType) -> str:
    return f"{TYPE_INFO[type_].name} Meditation"


def default_description(type_: MeditationType, customization: Optional[dict]) -> str:
    goals = (customization or {}).get("goals")
    return goals or f"A personalized {type_.value} meditation"
