"""Integration tests: the emulator drives a skill served over HTTP.

The skill is a FastAPI app reached through ``httpx.ASGITransport``, so the
full request/response path (JSON encoding, status handling, envelope
validation) runs without opening a socket.
"""

import audio_player
import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pet_match import handler as pet_match_handler

from skill_emulator.audio import AudioPlayerActivity
from skill_emulator.builder import EmulatorBuilder
from skill_emulator.emulator import SkillEmulator
from skill_emulator.errors import SkillInvocationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_app() -> FastAPI:
    app = FastAPI()

    @app.post("/pet-match")
    async def pet_match(request: Request) -> JSONResponse:
        return JSONResponse(pet_match_handler(await request.json(), None))

    @app.post("/audio")
    async def audio(request: Request) -> JSONResponse:
        return JSONResponse(audio_player.handler(await request.json(), None))

    @app.post("/broken")
    async def broken() -> PlainTextResponse:
        return PlainTextResponse("boom", status_code=500)

    @app.post("/garbage")
    async def garbage() -> PlainTextResponse:
        return PlainTextResponse("this is not json")

    return app


def _make_emulator(model_path, path: str) -> SkillEmulator:
    return (
        EmulatorBuilder()
        .interaction_model_file(model_path)
        .skill_url(f"http://skill.test{path}")
        .transport(httpx.ASGITransport(app=_make_app()))
        .create()
    )


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_remote_dialog(pet_match_model_path):
    emulator = _make_emulator(pet_match_model_path, "/pet-match")

    welcome = await emulator.launch()
    assert welcome.prompt().startswith("Welcome to pet match")

    delegate = await emulator.utter("a small dog please")
    assert delegate.directive("Dialog.Delegate") is not None

    await emulator.utter("find me a quiet dog")
    done = await emulator.utter("I want a dog with some energy")
    assert done.prompt() == "A small quiet dog with some energy energy"
    assert emulator.session is None


@pytest.mark.asyncio
async def test_remote_audio_notifications(audio_model_path):
    emulator = _make_emulator(audio_model_path, "/audio")

    await emulator.utter("play the podcast")
    await emulator.utter("ignore that")

    types = [r["request"]["type"] for r in emulator.request_log]
    assert types == [
        "IntentRequest",
        "AudioPlayer.PlaybackStarted",
        "AudioPlayer.PlaybackStopped",
        "IntentRequest",
        "AudioPlayer.PlaybackStarted",
    ]
    assert emulator.audio_player.activity == AudioPlayerActivity.PLAYING


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_remote_error_status(pet_match_model_path):
    emulator = _make_emulator(pet_match_model_path, "/broken")
    with pytest.raises(SkillInvocationError, match="Invalid response: 500") as exc_info:
        await emulator.launch()
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_remote_invalid_json(pet_match_model_path):
    emulator = _make_emulator(pet_match_model_path, "/garbage")
    with pytest.raises(SkillInvocationError, match="invalid JSON"):
        await emulator.launch()


@pytest.mark.asyncio
async def test_remote_unknown_route(pet_match_model_path):
    emulator = _make_emulator(pet_match_model_path, "/missing")
    with pytest.raises(SkillInvocationError) as exc_info:
        await emulator.utter("help")
    assert exc_info.value.status_code == 404
