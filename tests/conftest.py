# tests/conftest.py
# -*- coding: utf-8 -*-
"""
Fixtures partagées : une base SQLite temporaire par test.

- DB_URL pointe vers un fichier tmp AVANT de (re)charger les modules d'infra,
- db/models/repositories sont rechargés pour utiliser le nouvel engine,
- les services sont construits avec ces repositories (stub pour le LLM).
"""

import importlib
from dataclasses import dataclass

import pytest


@dataclass
class Env:
    users: object
    meditations: object
    community: object
    library: object
    community_svc: object


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Aucun provider réel : on nettoie les variables qui pourraient en activer un."""
    for key in [
        "SCRIPT_PROVIDER",
        "TTS_PROVIDER",
        "AUTH_PROVIDER",
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_API_URL",
        "TTS_MODEL",
        "TTS_API_URL",
        "FIREBASE_API_KEY",
        "MINDSCAPE_SOUNDS_DIR",
    ]:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def env(tmp_path, monkeypatch) -> Env:
    db_path = tmp_path / "test_mindscape.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path}")

    import mindscape.persistence.db as db
    import mindscape.persistence.models as models
    importlib.reload(db)
    importlib.reload(models)

    db.init_db(models.Base, drop_and_recreate=True)

    import mindscape.persistence.repositories.users_repo as users_repo
    import mindscape.persistence.repositories.meditations_repo as meditations_repo
    import mindscape.persistence.repositories.community_repo as community_repo
    importlib.reload(users_repo)
    importlib.reload(meditations_repo)
    importlib.reload(community_repo)

    from mindscape.services.community_service import CommunityService
    from mindscape.services.library_service import LibraryService
    from mindscape.services.script_service import ScriptService, StubScriptProvider

    users = users_repo.UserRepository()
    meditations = meditations_repo.MeditationRepository()
    community = community_repo.CommunityRepository()

    return Env(
        users=users,
        meditations=meditations,
        community=community,
        library=LibraryService(meditations=meditations, scripts=ScriptService(provider=StubScriptProvider())),
        community_svc=CommunityService(community=community, meditations=meditations),
    )


@pytest.fixture
def make_meditation(env):
    """Fabrique une méditation persistée pour un utilisateur (sans passer par le LLM)."""
    def _make(user, type_="sleep", duration=20, title=None, **extra):
        fields = dict(
            type=type_,
            title=title or f"{type_.title()} Meditation",
            description=f"A personalized {type_} meditation",
            duration=duration,
            script="Breathe. [PAUSE 3] [BREATHE]",
            settings={"voice": "female", "background": "ocean_waves", "visual": "beach"},
        )
        fields.update(extra)
        return env.meditations.create(user.id, **fields)
    return _make
