# Client for the Gemini API (google-genai SDK).
# Same interface as the other clients: generate_plan / chat / synthesize_speech.

import base64
import os
from typing import Any, List, Optional

from google import genai
from google.genai import types

from evplan.errors import TransportError
from evplan.log import get_logger
from evplan.plan.schema import to_gemini_schema
from ..types import (
    ChatMessage,
    ChatRequest,
    ModelResponse,
    PlanRequest,
    SpeechRequest,
    SpeechResponse,
)

logger = get_logger("evplan.gemini")

DEFAULT_PLAN_MODEL = "gemini-2.5-pro"
DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_SPEECH_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_VOICE = "Kore"


def _grounding_chunks(resp: Any) -> List[Any]:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    return list(getattr(metadata, "grounding_chunks", None) or [])


def _inline_audio(resp: Any) -> Optional[bytes]:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data:
            return inline.data
    return None


def _to_content(message: ChatMessage) -> types.Content:
    return types.Content(
        role=message.role,
        parts=[types.Part.from_text(text=p.text) for p in message.parts],
    )


class GeminiClient:
    engine = "gemini"

    def __init__(
        self,
        model: str = DEFAULT_PLAN_MODEL,
        api_key: Optional[str] = None,
        chat_model: str = DEFAULT_CHAT_MODEL,
        speech_model: str = DEFAULT_SPEECH_MODEL,
    ):
        self.model = model
        self.chat_model = chat_model
        self.speech_model = speech_model
        self.client = genai.Client(api_key=api_key or os.getenv("GEMINI_API_KEY"))

    def set_model(self, model: str, purpose: str = "plan"):
        """Replace the default model for one kind of call: plan, chat or speech."""
        if purpose == "plan":
            self.model = model
        elif purpose == "chat":
            self.chat_model = model
        elif purpose == "speech":
            self.speech_model = model
        else:
            raise ValueError(f"Unknown model purpose: {purpose!r}")

    def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig):
        try:
            return self.client.models.generate_content(model=model, contents=contents, config=config)
        except Exception as e:
            logger.error("Gemini call to %s failed: %r", model, e)
            raise TransportError(f"Gemini request failed: {e}", cause=e) from e

    def generate_plan(self, request: PlanRequest) -> ModelResponse:
        model = request.model or self.model
        config = types.GenerateContentConfig(
            system_instruction=request.system_instruction or None,
            response_mime_type="application/json",
            response_schema=to_gemini_schema(request.schema),
            tools=[types.Tool(google_search=types.GoogleSearch())] if request.grounding_enabled else None,
            thinking_config=(
                types.ThinkingConfig(thinking_budget=request.thinking_budget)
                if request.extended_reasoning and request.thinking_budget
                else None
            ),
        )
        contents = [
            types.Part.from_text(text=request.prompt),
            types.Part.from_bytes(data=request.image.data, mime_type=request.image.mime_type),
        ]
        resp = self._generate(model, contents, config)
        return ModelResponse(
            text=resp.text,
            grounding_chunks=_grounding_chunks(resp),
            meta={"engine": self.engine, "model": model},
        )

    def chat(self, request: ChatRequest) -> ModelResponse:
        model = request.model or self.chat_model
        tools = None
        if request.grounding_enabled:
            tools = [
                types.Tool(google_search=types.GoogleSearch()),
                types.Tool(google_maps=types.GoogleMaps()),
            ]
        config = types.GenerateContentConfig(
            system_instruction=request.system_instruction or None,
            tools=tools,
        )
        contents = [_to_content(m) for m in request.history]
        contents.append(_to_content(ChatMessage.user(request.message)))
        resp = self._generate(model, contents, config)
        return ModelResponse(
            text=resp.text,
            grounding_chunks=_grounding_chunks(resp),
            meta={"engine": self.engine, "model": model},
        )

    def synthesize_speech(self, request: SpeechRequest) -> SpeechResponse:
        model = request.model or self.speech_model
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=request.voice or DEFAULT_VOICE),
                ),
            ),
        )
        resp = self._generate(model, [types.Part.from_text(text=request.text)], config)
        data = _inline_audio(resp)
        # the SDK hands back raw bytes; the speech contract is base64 text
        if isinstance(data, bytes):
            data = base64.b64encode(data).decode("ascii")
        return SpeechResponse(audio_base64=data, meta={"engine": self.engine, "model": model})
