# mindscape/services/community_service.py
# -*- coding: utf-8 -*-
"""
Partage et notation communautaire.

- share : publie une copie (projection) d'une méditation privée, réservé au propriétaire.
- rate  : une note par (utilisateur, méditation communautaire), moyenne recalculée
          dans la même transaction que l'upsert de la note.
- Les compteurs d'écoute communautaires sont indépendants de ceux de l'original.
"""

from __future__ import annotations

import logging
from typing import Optional

from mindscape.errors import InvalidArgument, NotFound, PermissionDenied
from mindscape.persistence.repositories.community_repo import CommunityRepository
from mindscape.persistence.repositories.meditations_repo import MeditationRepository

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating) -> int:
    """Entier (pas un booléen) dans [1, 5], sinon InvalidArgument."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not (MIN_RATING <= rating <= MAX_RATING):
        raise InvalidArgument(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


class CommunityService:
    def __init__(self, community: Optional[CommunityRepository] = None,
                 meditations: Optional[MeditationRepository] = None) -> None:
        self.community = community or CommunityRepository()
        self.meditations = meditations or MeditationRepository()

    def share(self, meditation_id: str, caller_id: str,
              title: Optional[str] = None, description: Optional[str] = None):
        """
        Publie la méditation dans le catalogue communautaire.

        Non idempotent : deux partages créent deux entrées (aucune clé de dédoublonnage).
        """
        m = self.meditations.get(meditation_id)
        if m is None:
            raise NotFound("Meditation not found")
        if m.user_id != caller_id:
            raise PermissionDenied("Access denied")

        cm = self.community.share(
            meditation_id,
            title=title or m.title,
            description=description or m.description,
            type=m.type,
            duration=m.duration,
        )
        logger.info("Méditation %s partagée -> communauté %s", meditation_id, cm.id)
        return cm

    def rate(self, community_id: str, user_id: str, rating) -> None:
        rating = validate_rating(rating)
        cm = self.community.rate(community_id, user_id, rating)
        logger.info("Note %d sur %s par %s (moyenne %.1f, %d notes)",
                    rating, community_id, user_id, cm.rating, cm.rating_count)

    def get(self, community_id: str):
        cm = self.community.get(community_id)
        if cm is None:
            raise NotFound("Community meditation not found")
        return cm

    def get_original(self, community_id: str):
        """Méditation d'origine (script jouable) ; NotFound si elle a été supprimée depuis."""
        cm = self.get(community_id)
        m = self.meditations.get(cm.original_meditation_id) if cm.original_meditation_id else None
        if m is None:
            raise NotFound("Original meditation no longer available")
        return m

    def get_user_rating(self, community_id: str, user_id: str) -> Optional[int]:
        r = self.community.get_user_rating(community_id, user_id)
        return r.rating if r else None

    def list_recent(self, limit: int = 20):
        return self.community.list_recent(limit=limit)

    def list_popular(self, limit: int = 10):
        return self.community.list_popular(limit=limit)

    def record_community_play(self, community_id: str) -> None:
        self.community.increment_play_count(community_id)
