"""
Pytest configuration for the skill emulator test suite.

Shared fixtures point at the interaction models and skill handlers under
``tests/resources``.
"""

import sys
from pathlib import Path

import pytest

RESOURCES = Path(__file__).parent / "resources"
MODELS = RESOURCES / "models"
SKILLS = RESOURCES / "skills"
SCRIPTS = RESOURCES / "scripts"

# Skill handlers are plain modules; make them importable as "pet_match", etc.
if str(SKILLS) not in sys.path:
    sys.path.insert(0, str(SKILLS))


@pytest.fixture
def resources() -> Path:
    return RESOURCES


@pytest.fixture
def pet_match_model_path() -> Path:
    return MODELS / "pet-match.json"


@pytest.fixture
def audio_model_path() -> Path:
    return MODELS / "audio-player.json"


@pytest.fixture
def schema_paths():
    return MODELS / "schema.json", MODELS / "utterances.txt"


@pytest.fixture
def scripts_dir() -> Path:
    return SCRIPTS


@pytest.fixture(autouse=True)
def _reset_audio_skill():
    """The audio skill keeps per-user playback state at module level."""
    yield
    module = sys.modules.get("audio_player")
    if module is not None:
        module.last_played.clear()
