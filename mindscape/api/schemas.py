"""
Schémas de l'API Mindscape

Chaque modèle Pydantic décrit un corps de requête ou une réponse JSON.
Les clés JSON sont en camelCase (userId, playCount, isFavorite...), les attributs en snake_case.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# -----------------------------
# Réponses
# -----------------------------

class UserOut(ApiModel):
    id: str
    email: str
    name: str
    auth_provider: str
    created_at: datetime
    meditation_count: int
    preferences: Dict[str, Any] = Field(default_factory=dict)

class MeditationOut(ApiModel):
    id: str
    user_id: str
    type: str
    title: str
    description: Optional[str] = None
    duration: int = Field(..., description="Durée en minutes")
    script: str
    audio_url: Optional[str] = None
    settings: Dict[str, Any]
    customization: Optional[Dict[str, Any]] = None
    created_at: datetime
    play_count: int
    is_shared: bool
    is_favorite: bool

class CommunityMeditationOut(ApiModel):
    id: str
    original_meditation_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    type: str
    duration: int
    play_count: int
    rating: float = Field(..., description="Moyenne des notes (1 décimale), 0 sans note")
    rating_count: int
    created_at: datetime

class SuccessOut(BaseModel):
    success: bool = True

# -----------------------------
# Requêtes
# -----------------------------

class Settings(ApiModel):
    voice: Optional[str] = None
    background: Optional[str] = None
    visual: Optional[str] = None

class Customization(ApiModel):
    goals: Optional[str] = None
    timeline: Optional[str] = None
    category: Optional[str] = None
    current_situation: Optional[str] = None

class GenerateRequest(ApiModel):
    # champs optionnels : le service répond 400 (et non 422) s'ils manquent
    type: Optional[str] = None
    duration: Optional[int] = None
    customization: Optional[Customization] = None
    settings: Optional[Settings] = None

class FavoriteRequest(ApiModel):
    is_favorite: bool

class ShareRequest(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None

class RateRequest(ApiModel):
    # validé par le service (InvalidArgument -> 400)
    rating: Any = None

class PreferencesRequest(ApiModel):
    preferences: Dict[str, Any] = Field(default_factory=dict)
