# mindscape/services/library_service.py
# -*- coding: utf-8 -*-
"""Bibliothèque privée : génération, lecture, favoris, suppression (avec contrôle du propriétaire)."""

from __future__ import annotations

import logging
from typing import Optional

from mindscape.errors import InvalidArgument, NotFound, PermissionDenied
from mindscape.persistence.repositories.meditations_repo import MeditationRepository
from mindscape.services import catalog
from mindscape.services.script_service import GenerationRequest, ScriptService

logger = logging.getLogger(__name__)


class LibraryService:
    def __init__(self, meditations: Optional[MeditationRepository] = None,
                 scripts: Optional[ScriptService] = None) -> None:
        self.meditations = meditations or MeditationRepository()
        self.scripts = scripts or ScriptService()

    def generate(self, user, type_, duration, customization: Optional[dict] = None,
                 settings: Optional[dict] = None):
        if not type_ or not duration:
            raise InvalidArgument("Type and duration are required")
        mtype = catalog.parse_type(type_)
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise InvalidArgument(f"Durée invalide: {duration!r} (entier de minutes > 0)")
        resolved_settings = catalog.normalize_settings(settings)
        customization = customization or None

        script = self.scripts.generate(GenerationRequest(
            type=mtype.value,
            duration=duration,
            customization=customization or {},
            user_preferences=dict(user.preferences or {}),
        ))

        m = self.meditations.create(
            user.id,
            type=mtype.value,
            title=catalog.default_title(mtype),
            description=catalog.default_description(mtype, customization),
            duration=duration,
            script=script,
            settings=resolved_settings,
            customization=customization,
        )
        logger.info("Méditation %s générée (%s, %d min) pour %s", m.id, m.type, m.duration, user.id)
        return m

    def list_for_user(self, user_id: str):
        return self.meditations.list_for_user(user_id)

    def get_owned(self, meditation_id: str, user_id: str):
        m = self.meditations.get(meditation_id)
        if m is None:
            raise NotFound("Meditation not found")
        if m.user_id != user_id:
            raise PermissionDenied("Access denied")
        return m

    def record_play(self, meditation_id: str, user_id: str) -> None:
        self.get_owned(meditation_id, user_id)
        self.meditations.increment_play_count(meditation_id)

    def set_favorite(self, meditation_id: str, user_id: str, is_favorite: bool):
        self.get_owned(meditation_id, user_id)
        return self.meditations.set_favorite(meditation_id, is_favorite)

    def delete(self, meditation_id: str, user_id: str) -> None:
        self.get_owned(meditation_id, user_id)
        if not self.meditations.delete(meditation_id):
            raise NotFound("Meditation not found")
        logger.info("Méditation %s supprimée par %s", meditation_id, user_id)
