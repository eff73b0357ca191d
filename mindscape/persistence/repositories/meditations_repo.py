# mindscape/persistence/repositories/meditations_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, update, case
from mindscape.persistence.db import get_session
from mindscape.persistence.models import Meditation, CommunityMeditation, User
from mindscape.errors import NotFound

class MeditationRepository:
    def create(self, user_id: str, **fields) -> Meditation:
        """Insère la méditation et incrémente le compteur du propriétaire (même transaction)."""
        with get_session() as s:
            m = Meditation(user_id=user_id, **fields)
            s.add(m)
            s.execute(
                update(User)
                .where(User.id == user_id)
                .values(meditation_count=User.meditation_count + 1)
            )
            s.flush(); s.refresh(m); s.expunge(m)
            return m

    def get(self, meditation_id: str) -> Meditation | None:
        with get_session() as s:
            m = s.get(Meditation, meditation_id)
            if not m:
                return None
            s.expunge(m)
            return m

    def list_for_user(self, user_id: str):
        with get_session() as s:
            stmt = (
                select(Meditation)
                .where(Meditation.user_id == user_id)
                .order_by(Meditation.created_at.desc())
            )
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def increment_play_count(self, meditation_id: str) -> None:
        with get_session() as s:
            res = s.execute(
                update(Meditation)
                .where(Meditation.id == meditation_id)
                .values(play_count=Meditation.play_count + 1)
            )
            if res.rowcount == 0:
                raise NotFound(f"Méditation introuvable: {meditation_id}")

    def set_favorite(self, meditation_id: str, is_favorite: bool) -> Meditation:
        with get_session() as s:
            m = s.get(Meditation, meditation_id)
            if not m:
                raise NotFound(f"Méditation introuvable: {meditation_id}")
            m.is_favorite = bool(is_favorite)
            s.add(m); s.flush(); s.refresh(m); s.expunge(m)
            return m

    def delete(self, meditation_id: str) -> bool:
        with get_session() as s:
            m = s.get(Meditation, meditation_id)
            if not m:
                return False
            # les copies communautaires restent, seule la référence saute
            s.execute(
                update(CommunityMeditation)
                .where(CommunityMeditation.original_meditation_id == meditation_id)
                .values(original_meditation_id=None)
            )
            s.execute(
                update(User)
                .where(User.id == m.user_id)
                .values(meditation_count=case(
                    (User.meditation_count > 0, User.meditation_count - 1),
                    else_=0,
                ))
            )
            s.delete(m)
            return True
