# Shared fixtures: force the offline client before the app is imported,
# and provide a scriptable fake model client.

import copy
import json
import os
import sys
from pathlib import Path

import pytest

os.environ["LLM_PROVIDER"] = "echo"
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Make project root importable (so `evplan` is on sys.path)
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from evplan.generate.clients.echo_dev_client import SAMPLE_PLAN  # noqa: E402
from evplan.generate.types import ModelResponse, SpeechResponse  # noqa: E402


class FakeClient:
    """Model client that returns whatever the test scripted, or raises."""
    engine = "fake"

    def __init__(self, plan_text=None, chunks=None, chat_text="B", audio_base64=None, error=None):
        self.model = "fake-model"
        self.plan_text = plan_text
        self.chunks = chunks or []
        self.chat_text = chat_text
        self.audio_base64 = audio_base64
        self.error = error
        self.requests = []
        self.on_chat = None

    def set_model(self, model, purpose="plan"):
        self.model = model

    def generate_plan(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return ModelResponse(text=self.plan_text, grounding_chunks=list(self.chunks), meta={"engine": "fake"})

    def chat(self, request):
        self.requests.append(request)
        if self.on_chat:
            self.on_chat(request)
        if self.error:
            raise self.error
        return ModelResponse(text=self.chat_text, grounding_chunks=list(self.chunks))

    def synthesize_speech(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return SpeechResponse(audio_base64=self.audio_base64)


@pytest.fixture
def plan_body():
    return copy.deepcopy(SAMPLE_PLAN)


@pytest.fixture
def plan_text(plan_body):
    return json.dumps(plan_body)


@pytest.fixture
def mixed_chunks():
    return [
        {"web": {"uri": "https://example.com/iso-6469", "title": "ISO 6469"}},
        {
            "maps": {
                "uri": "https://maps.example.com/place/ev-shop",
                "title": "EV Conversion Shop",
                "placeAnswerSources": {
                    "reviewSnippets": [
                        {"uri": "https://maps.example.com/review/1", "title": "Great work"},
                    ]
                },
            }
        },
        {},
        "not-a-chunk",
    ]
