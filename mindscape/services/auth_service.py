# mindscape/services/auth_service.py
# -*- coding: utf-8 -*-
"""
Échange d'un jeton Bearer (fournisseur d'identité externe) contre un User interne.

Deux vérificateurs :
- StubTokenVerifier : développement local, le jeton EST l'identité ("uid" ou "uid:email").
- FirebaseTokenVerifier : API Identity Toolkit (accounts:lookup) via httpx.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx

from mindscape.errors import Unauthenticated
from mindscape.persistence.repositories.users_repo import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    name: Optional[str] = None


class StubTokenVerifier:
    provider_tag = "stub"

    def verify(self, token: str) -> Identity:
        uid, _, email = token.partition(":")
        uid = uid.strip()
        if not uid:
            raise Unauthenticated("Invalid token")
        return Identity(uid=uid, email=(email.strip() or f"{uid}@mindscape.local"))


class FirebaseTokenVerifier:
    """
    Variables d'environnement supportées:
        FIREBASE_API_KEY      : clé web du projet (obligatoire)
        FIREBASE_LOOKUP_URL   : URL override
        FIREBASE_TIMEOUT_SEC  : par défaut 10
    """

    provider_tag = "firebase"

    def __init__(self) -> None:
        self.api_key = os.getenv("FIREBASE_API_KEY", "").strip()
        if not self.api_key:
            raise RuntimeError("FIREBASE_API_KEY manquant pour FirebaseTokenVerifier.")
        self.lookup_url = os.getenv(
            "FIREBASE_LOOKUP_URL", "https://identitytoolkit.googleapis.com/v1/accounts:lookup"
        ).strip()
        self.timeout_sec = float(os.getenv("FIREBASE_TIMEOUT_SEC", "10"))

    def verify(self, token: str) -> Identity:
        try:
            with httpx.Client(timeout=self.timeout_sec) as client:
                resp = client.post(self.lookup_url, params={"key": self.api_key}, json={"idToken": token})
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise Unauthenticated("Invalid token") from e

        users = data.get("users") or []
        if not users or not users[0].get("localId") or not users[0].get("email"):
            raise Unauthenticated("Invalid token")
        u = users[0]
        return Identity(uid=u["localId"], email=u["email"], name=u.get("displayName"))


class AuthService:
    """AUTH_PROVIDER=firebase -> FirebaseTokenVerifier, sinon stub."""

    def __init__(self, verifier: Optional[object] = None, users: Optional[UserRepository] = None) -> None:
        self.users = users or UserRepository()
        if verifier is not None:
            self._verifier = verifier
            return

        prov = os.getenv("AUTH_PROVIDER", "stub").strip().lower()
        if prov == "firebase":
            self._verifier = FirebaseTokenVerifier()
        else:
            self._verifier = StubTokenVerifier()

    def authenticate(self, authorization: Optional[str]):
        """En-tête 'Authorization' -> User (créé à la première connexion)."""
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("No token provided")
        token = authorization[len("Bearer "):].strip()
        if not token:
            raise Unauthenticated("No token provided")

        identity = self._verifier.verify(token)

        user = self.users.get_by_external_uid(identity.uid)
        if user is None:
            user = self.users.create(
                email=identity.email,
                name=identity.name or identity.email,
                auth_provider=getattr(self._verifier, "provider_tag", "external"),
                external_uid=identity.uid,
            )
            logger.info("Nouvel utilisateur %s (%s)", user.id, user.email)
        return user
