# mindscape/persistence/repositories/users_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from mindscape.persistence.db import get_session
from mindscape.persistence.models import User
from mindscape.errors import NotFound

class UserRepository:
    def create(self, email: str, name: str | None = None, auth_provider: str = "email",
               external_uid: str | None = None, preferences: dict | None = None) -> User:
        with get_session() as s:
            u = User(
                email=email.strip().lower(),
                name=(name or email).strip(),
                auth_provider=auth_provider,
                external_uid=external_uid,
                preferences=dict(preferences or {}),
            )
            s.add(u)
            s.flush(); s.refresh(u); s.expunge(u)
            return u

    def get(self, user_id: str) -> User | None:
        with get_session() as s:
            u = s.get(User, user_id)
            if not u:
                return None
            s.expunge(u)
            return u

    def get_by_email(self, email: str) -> User | None:
        with get_session() as s:
            u = s.scalar(select(User).where(User.email == email.strip().lower()))
            if not u:
                return None
            s.expunge(u)
            return u

    def get_by_external_uid(self, external_uid: str) -> User | None:
        with get_session() as s:
            u = s.scalar(select(User).where(User.external_uid == external_uid))
            if not u:
                return None
            s.expunge(u)
            return u

    def get_or_create(self, email: str, name: str | None = None, auth_provider: str = "email") -> User:
        u = self.get_by_email(email)
        return u or self.create(email=email, name=name, auth_provider=auth_provider)

    def update_preferences(self, user_id: str, preferences: dict) -> User:
        with get_session() as s:
            u = s.get(User, user_id)
            if not u:
                raise NotFound(f"Utilisateur introuvable: {user_id}")
            # nouveau dict : la colonne JSON n'est pas suivie en mutation
            u.preferences = dict(preferences or {})
            s.add(u)
            s.flush(); s.refresh(u); s.expunge(u)
            return u
