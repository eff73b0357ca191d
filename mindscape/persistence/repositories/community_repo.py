# mindscape/persistence/repositories/community_repo.py
# -*- coding: utf-8 -*-
from contextlib import contextmanager
import threading

from sqlalchemy import select, update, func, and_
from sqlalchemy.exc import IntegrityError
from mindscape.persistence.db import get_session
from mindscape.persistence.models import CommunityMeditation, MeditationRating, Meditation
from mindscape.errors import NotFound, StorageError


class _KeyedLocks:
    """Un verrou par identifiant : sérialise les notes d'une même méditation dans ce process."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # id -> [verrou, nb de détenteurs/attendants] ; l'entrée disparaît au dernier relâchement
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


_rating_locks = _KeyedLocks()


class CommunityRepository:
    def share(self, meditation_id: str, **fields) -> CommunityMeditation:
        """Crée la copie communautaire et marque l'original partagé (tout ou rien)."""
        with get_session() as s:
            cm = CommunityMeditation(original_meditation_id=meditation_id, **fields)
            s.add(cm)
            res = s.execute(
                update(Meditation)
                .where(Meditation.id == meditation_id)
                .values(is_shared=True)
            )
            if res.rowcount == 0:
                raise NotFound(f"Méditation introuvable: {meditation_id}")
            s.flush(); s.refresh(cm); s.expunge(cm)
            return cm

    def get(self, community_id: str) -> CommunityMeditation | None:
        with get_session() as s:
            cm = s.get(CommunityMeditation, community_id)
            if not cm:
                return None
            s.expunge(cm)
            return cm

    def list_recent(self, limit: int = 20):
        with get_session() as s:
            stmt = select(CommunityMeditation).order_by(CommunityMeditation.created_at.desc()).limit(limit)
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def list_popular(self, limit: int = 10):
        with get_session() as s:
            stmt = (
                select(CommunityMeditation)
                .order_by(CommunityMeditation.play_count.desc(), CommunityMeditation.created_at.desc())
                .limit(limit)
            )
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def increment_play_count(self, community_id: str) -> None:
        with get_session() as s:
            res = s.execute(
                update(CommunityMeditation)
                .where(CommunityMeditation.id == community_id)
                .values(play_count=CommunityMeditation.play_count + 1)
            )
            if res.rowcount == 0:
                raise NotFound(f"Méditation communautaire introuvable: {community_id}")

    def get_user_rating(self, community_id: str, user_id: str) -> MeditationRating | None:
        with get_session() as s:
            r = s.scalar(select(MeditationRating).where(and_(
                MeditationRating.user_id == user_id,
                MeditationRating.community_meditation_id == community_id,
            )).limit(1))
            if not r:
                return None
            s.expunge(r)
            return r

    def rate(self, community_id: str, user_id: str, rating: int) -> CommunityMeditation:
        """
        Upsert de la note (user, méditation) puis recalcul de la moyenne.

        Ligne communautaire verrouillée (FOR UPDATE) + verrou par id dans le process :
        deux notes concurrentes sur la même cible ne perdent pas de mise à jour.
        Si une insertion concurrente gagne la contrainte unique, on rejoue une fois
        (la 2e passe trouve la ligne et la met à jour).
        """
        with _rating_locks.hold(community_id):
            try:
                return self._rate_once(community_id, user_id, rating)
            except StorageError as e:
                if not isinstance(e.__cause__, IntegrityError):
                    raise
                return self._rate_once(community_id, user_id, rating)

    def _rate_once(self, community_id: str, user_id: str, rating: int) -> CommunityMeditation:
        with get_session() as s:
            cm = s.scalar(
                select(CommunityMeditation)
                .where(CommunityMeditation.id == community_id)
                .with_for_update()
            )
            if cm is None:
                raise NotFound(f"Méditation communautaire introuvable: {community_id}")

            existing = s.scalar(select(MeditationRating).where(and_(
                MeditationRating.user_id == user_id,
                MeditationRating.community_meditation_id == community_id,
            )).limit(1))
            if existing:
                existing.rating = rating
            else:
                s.add(MeditationRating(user_id=user_id, community_meditation_id=community_id, rating=rating))
                cm.rating_count = CommunityMeditation.rating_count + 1
            s.flush()

            total, count = s.execute(
                select(func.sum(MeditationRating.rating), func.count(MeditationRating.id))
                .where(MeditationRating.community_meditation_id == community_id)
            ).one()
            cm.rating = round(float(total) / count, 1) if count else 0.0
            s.flush(); s.refresh(cm); s.expunge(cm)
            return cm
