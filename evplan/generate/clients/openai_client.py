# Client for the OpenAI API.
# Follows the same interface as GeminiClient. OpenAI chat completions do
# not return grounding chunks, so citations from this client are always empty.

import base64
import os
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from evplan.errors import TransportError
from evplan.log import get_logger
from ..types import ChatRequest, ModelResponse, PlanRequest, SpeechRequest, SpeechResponse

logger = get_logger("evplan.openai")

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_SPEECH_MODEL = "gpt-4o-mini-tts"
DEFAULT_VOICE = "alloy"


class OpenAIClient:
    engine = "openai"

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: Optional[str] = None,
        chat_model: str = DEFAULT_CHAT_MODEL,
        speech_model: str = DEFAULT_SPEECH_MODEL,
    ):
        self.model = model
        self.chat_model = chat_model
        self.speech_model = speech_model
        self.client = OpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"))

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

    def _complete(self, model: str, messages: List[Dict[str, Any]], **kwargs) -> str:
        try:
            resp = self.client.chat.completions.create(model=model, messages=messages, **kwargs)
        except OpenAIError as e:
            logger.error("OpenAI call to %s failed: %r", model, e)
            raise TransportError(f"OpenAI request failed: {e}", cause=e) from e
        return (resp.choices[0].message.content or "").strip()

    def generate_plan(self, request: PlanRequest) -> ModelResponse:
        model = request.model or self.model
        image_b64 = base64.b64encode(request.image.data).decode("ascii")
        messages: List[Dict[str, Any]] = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": request.prompt},
                {"type": "image_url", "image_url": {"url": f"data:{request.image.mime_type};base64,{image_b64}"}},
            ],
        })
        text = self._complete(
            model,
            messages,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "conversion_plan", "schema": request.schema, "strict": False},
            },
        )
        return ModelResponse(text=text, grounding_chunks=[], meta={"engine": self.engine, "model": model})

    def chat(self, request: ChatRequest) -> ModelResponse:
        model = request.model or self.chat_model
        messages: List[Dict[str, Any]] = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        for m in request.history:
            messages.append({"role": "assistant" if m.role == "model" else "user", "content": m.text})
        messages.append({"role": "user", "content": request.message})
        text = self._complete(model, messages)
        return ModelResponse(text=text, grounding_chunks=[], meta={"engine": self.engine, "model": model})

    def synthesize_speech(self, request: SpeechRequest) -> SpeechResponse:
        model = request.model or self.speech_model
        try:
            # pcm = 24 kHz, 16-bit signed little-endian, mono
            resp = self.client.audio.speech.create(
                model=model,
                voice=request.voice or DEFAULT_VOICE,
                input=request.text,
                response_format="pcm",
            )
            data = resp.content
        except OpenAIError as e:
            logger.error("OpenAI speech call failed: %r", e)
            raise TransportError(f"OpenAI speech request failed: {e}", cause=e) from e
        audio_b64 = base64.b64encode(data).decode("ascii") if data else None
        return SpeechResponse(audio_base64=audio_b64, meta={"engine": self.engine, "model": model})
