# tests/test_catalog.py
# -*- coding: utf-8 -*-
import pytest

from mindscape.errors import InvalidArgument
from mindscape.services import catalog
from mindscape.services.catalog import MeditationType


def test_every_type_has_info_color_and_image():
    for t in MeditationType:
        assert t in catalog.TYPE_INFO
        assert catalog.type_color(t.value) == catalog.TYPE_COLORS[t]
        assert catalog.type_image(t.value).startswith("https://")

@pytest.mark.parametrize("key", ["yoga", "", None])
def test_unknown_keys_fall_back(key):
    assert catalog.type_color(key) == catalog.FALLBACK_COLOR
    assert catalog.type_image(key) == catalog.TYPE_IMAGES[MeditationType.RELAXATION]
    assert catalog.visual_image(key) == catalog.VISUAL_IMAGES[catalog.VisualEnvironment.BEACH]

def test_background_label():
    assert catalog.background_label("ocean_waves") == "Ocean Waves"
    assert catalog.background_label("summer_breeze") == "summer breeze"

def test_background_sound_path():
    assert catalog.background_sound_path("rain") == "sounds/rain.mp3"
    assert catalog.background_sound_path("silence") is None
    assert catalog.background_sound_path("thunder") is None
    assert catalog.background_sound_path(None) is None

def test_parse_type():
    assert catalog.parse_type("sleep") is MeditationType.SLEEP
    with pytest.raises(InvalidArgument):
        catalog.parse_type("yoga")

def test_normalize_settings_fills_defaults():
    assert catalog.normalize_settings(None) == catalog.DEFAULT_SETTINGS
    merged = catalog.normalize_settings({"voice": "male", "visual": None})
    assert merged == {"voice": "male", "background": "ocean_waves", "visual": "beach"}

@pytest.mark.parametrize("settings", [
    {"voice": "robot"},
    {"background": "thunder"},
    {"visual": "desert"},
])
def test_normalize_settings_rejects_unknown_values(settings):
    with pytest.raises(InvalidArgument):
        catalog.normalize_settings(settings)

def test_default_title_and_description():
    assert catalog.default_title(MeditationType.MINDFULNESS) == "Mindfulness Meditation"
    assert catalog.default_description(MeditationType.SLEEP, None) == "A personalized sleep meditation"
    assert catalog.default_description(MeditationType.SLEEP, {"goals": "Rest"}) == "Rest"
