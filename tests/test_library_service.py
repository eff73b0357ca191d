# tests/test_library_service.py
# -*- coding: utf-8 -*-
"""Bibliothèque privée : génération (stub), contrôle du propriétaire, favoris, suppression."""

import pytest

from mindscape.errors import GenerationError, InvalidArgument, NotFound, PermissionDenied
from mindscape.services.library_service import LibraryService
from mindscape.services.script_service import ScriptService


def test_generate_persists_meditation_with_defaults(env):
    u = env.users.create("gen@example.com")
    m = env.library.generate(u, "sleep", 10)

    assert m.type == "sleep"
    assert m.title == "Sleep Meditation"
    assert m.description == "A personalized sleep meditation"
    assert m.duration == 10
    assert "[PAUSE" in m.script
    assert m.settings == {"voice": "female", "background": "ocean_waves", "visual": "beach"}
    assert m.play_count == 0
    assert env.users.get(u.id).meditation_count == 1

def test_generate_uses_goals_as_description(env):
    u = env.users.create("goals@example.com")
    m = env.library.generate(u, "manifestation", 15,
                             customization={"goals": "Run a marathon"},
                             settings={"voice": "male", "background": "silence"})
    assert m.description == "Run a marathon"
    assert "Run a marathon" in m.script
    assert m.settings["voice"] == "male"
    assert m.settings["background"] == "silence"
    assert m.settings["visual"] == "beach"
    assert m.customization == {"goals": "Run a marathon"}

@pytest.mark.parametrize("type_, duration", [
    (None, 10),
    ("sleep", None),
    ("yoga", 10),
    ("sleep", -5),
    ("sleep", "10"),
])
def test_generate_rejects_invalid_input(env, type_, duration):
    u = env.users.create("bad@example.com")
    with pytest.raises(InvalidArgument):
        env.library.generate(u, type_, duration)
    assert env.library.list_for_user(u.id) == []

def test_generate_rejects_invalid_settings(env):
    u = env.users.create("bad@example.com")
    with pytest.raises(InvalidArgument):
        env.library.generate(u, "sleep", 10, settings={"voice": "robot"})

def test_generate_provider_failure_persists_nothing(env):
    class Boom:
        def generate(self, req):
            raise RuntimeError("quota")

    lib = LibraryService(meditations=env.meditations, scripts=ScriptService(provider=Boom()))
    u = env.users.create("boom@example.com")
    with pytest.raises(GenerationError):
        lib.generate(u, "sleep", 10)
    assert lib.list_for_user(u.id) == []
    assert env.users.get(u.id).meditation_count == 0

def test_get_owned_checks_owner(env, make_meditation):
    owner = env.users.create("o@example.com")
    other = env.users.create("x@example.com")
    m = make_meditation(owner)

    assert env.library.get_owned(m.id, owner.id).id == m.id
    with pytest.raises(PermissionDenied, match="Access denied"):
        env.library.get_owned(m.id, other.id)
    with pytest.raises(NotFound, match="Meditation not found"):
        env.library.get_owned("missing", owner.id)

def test_record_play_increments(env, make_meditation):
    owner = env.users.create("o@example.com")
    m = make_meditation(owner)
    env.library.record_play(m.id, owner.id)
    assert env.meditations.get(m.id).play_count == 1

def test_record_play_by_other_user_denied(env, make_meditation):
    owner = env.users.create("o@example.com")
    other = env.users.create("x@example.com")
    m = make_meditation(owner)
    with pytest.raises(PermissionDenied):
        env.library.record_play(m.id, other.id)
    assert env.meditations.get(m.id).play_count == 0

def test_set_favorite(env, make_meditation):
    owner = env.users.create("o@example.com")
    m = make_meditation(owner)
    assert env.library.set_favorite(m.id, owner.id, True).is_favorite is True
    assert env.meditations.get(m.id).is_favorite is True
    env.library.set_favorite(m.id, owner.id, False)
    assert env.meditations.get(m.id).is_favorite is False

def test_delete_by_owner_only(env, make_meditation):
    owner = env.users.create("o@example.com")
    other = env.users.create("x@example.com")
    m = make_meditation(owner)

    with pytest.raises(PermissionDenied):
        env.library.delete(m.id, other.id)
    assert env.meditations.get(m.id) is not None

    env.library.delete(m.id, owner.id)
    assert env.meditations.get(m.id) is None
    with pytest.raises(NotFound):
        env.library.delete(m.id, owner.id)
