import os

import pytest
from fastapi.testclient import TestClient
from langchain_core.runnables import RunnableLambda

# Importing main builds the module-level app, which needs credentials.
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("ELEVENLABS_API_KEY", "test-elevenlabs-key")
os.environ.setdefault("ELEVENLABS_VOICE_ID", "test-voice")

from app.core.config import Settings  # noqa: E402
from app.services.motivation import QuoteGenerator  # noqa: E402
from app.services.speech import SpeechSynthesizer  # noqa: E402
from main import create_app  # noqa: E402

VOICE_ID = "voice-123"
AUDIO_CHUNKS = (b"ID3\x04\x00", b"\xff\xfb\x90\x00", b"frame-data")


class FakeTextToSpeech:
    def __init__(self, chunks, error=None):
        self.chunks = list(chunks)
        self.error = error
        self.calls = []

    async def convert(self, voice_id, **kwargs):
        self.calls.append({"voice_id": voice_id, **kwargs})
        if self.error is not None:
            raise self.error
        for chunk in self.chunks:
            yield chunk


class FakeElevenLabs:
    def __init__(self, chunks=AUDIO_CHUNKS, error=None):
        self.text_to_speech = FakeTextToSpeech(chunks, error)


class ScriptedModel:
    """Stands in for the chat model: records prompts and replays canned replies."""

    def __init__(self, *replies, error=None):
        self.replies = list(replies)
        self.error = error
        self.prompts = []

    def _respond(self, prompt_value):
        self.prompts.append(prompt_value.to_string())
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)

    def as_runnable(self):
        return RunnableLambda(self._respond)


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-gemini-key",
        elevenlabs_api_key="test-elevenlabs-key",
        elevenlabs_voice_id=VOICE_ID,
        _env_file=None,
    )


@pytest.fixture
def build_app(settings):
    def _build(model: ScriptedModel, tts: FakeElevenLabs | None = None):
        tts = tts or FakeElevenLabs()
        return create_app(
            settings,
            quote_generator=QuoteGenerator(model.as_runnable()),
            speech_synthesizer=SpeechSynthesizer(tts, voice_id=VOICE_ID),
        )

    return _build


@pytest.fixture
def build_client(build_app):
    def _build(model: ScriptedModel, tts: FakeElevenLabs | None = None) -> TestClient:
        return TestClient(build_app(model, tts))

    return _build
