# PlanGenerator: the one place that talks to a model client.
# - accepts any model client (Gemini, OpenAI, Echo)
# - plan:   request -> decode_response -> normalize_citations -> assemble_plan -> audit_plan
# - chat:   optimistic user turn, then model turn with citations
# - speech: payload -> decode_audio at the configured rate/channels

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from evplan.audio.pcm import DecodedAudio, decode_audio
from evplan.errors import MalformedResponse, NoAudioData
from evplan.log import get_logger
from evplan.plan.assembler import assemble_plan, audit_plan
from evplan.plan.citations import normalize_citations
from evplan.plan.decoder import decode_response
from evplan.plan.schema import CONVERSION_PLAN_SCHEMA
from .history import ConversationHistory
from .prompts import CHAT_SYSTEM_INSTRUCTION, PLAN_SYSTEM_INSTRUCTION, SPEECH_PREFIX, build_speech_prompt
from .types import (
    ChatMessage,
    ChatRequest,
    ImageInput,
    PlanRequest,
    PlanResult,
    SpeechRequest,
)

logger = get_logger("evplan.generator")

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


class PlanGenerator:
    def __init__(self, model_client, config_path: str | os.PathLike = DEFAULT_CONFIG_PATH, strict: bool = False):
        self.model_client = model_client
        self.config_path = Path(config_path)
        self.strict = strict
        self.cfg = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @property
    def engine(self) -> str:
        return getattr(self.model_client, "engine", "")

    def _model_for(self, purpose: str) -> Optional[str]:
        models = (self.cfg.get("models") or {}).get(self.engine) or {}
        return models.get(purpose)

    @property
    def speech_cfg(self) -> Dict[str, Any]:
        return self.cfg.get("speech") or {}

    # -------------------------
    # Conversion plan
    # -------------------------
    def generate_plan(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        extended_reasoning: bool = False,
        grounding: bool = True,
    ) -> PlanResult:
        if not prompt or not prompt.strip():
            raise ValueError("prompt must not be empty")
        if not image_bytes:
            raise ValueError("image must not be empty")

        request = PlanRequest(
            prompt=prompt.strip(),
            image=ImageInput(data=image_bytes, mime_type=mime_type),
            schema=CONVERSION_PLAN_SCHEMA,
            system_instruction=(self.cfg.get("plan_system_prompt") or PLAN_SYSTEM_INSTRUCTION).strip(),
            grounding_enabled=grounding,
            extended_reasoning=extended_reasoning,
            thinking_budget=self.cfg.get("thinking_budget") if extended_reasoning else None,
            model=self._model_for("plan"),
        )
        logger.info(
            "Generating plan (image=%d bytes, %s, reasoning=%s, grounding=%s)",
            len(image_bytes), mime_type, extended_reasoning, grounding,
        )
        response = self.model_client.generate_plan(request)

        body = decode_response(response.text)
        citations = normalize_citations(response.grounding_chunks)
        plan = assemble_plan(body, citations)
        issues = audit_plan(plan)
        if issues and self.strict:
            raise MalformedResponse(f"Plan failed validation: {'; '.join(issues)}")

        logger.info("Plan ready: %d BOM item(s), %d citation(s), %d issue(s)",
                    len(plan.bom or []), len(citations), len(issues))
        return PlanResult(plan=plan, issues=issues, meta=dict(response.meta))

    # -------------------------
    # Chat
    # -------------------------
    def send_chat(self, history: ConversationHistory, message: str, grounding: bool = True) -> ChatMessage:
        """
        Two-phase append: the user turn goes in before the model call, the
        model turn after it. If the call fails the user turn stays and the
        error propagates.
        """
        if not message or not message.strip():
            raise ValueError("message must not be empty")

        prior = history.messages
        history.append_user(message)

        request = ChatRequest(
            history=prior,
            message=message,
            grounding_enabled=grounding,
            system_instruction=(self.cfg.get("chat_system_prompt") or CHAT_SYSTEM_INSTRUCTION).strip(),
            model=self._model_for("chat"),
        )
        response = self.model_client.chat(request)
        if response.text is None:
            raise MalformedResponse("Chat response carried no text.")

        citations = normalize_citations(response.grounding_chunks)
        return history.append_model(response.text, citations)

    # -------------------------
    # Speech
    # -------------------------
    def synthesize_speech(self, text: str) -> DecodedAudio:
        if not text or not text.strip():
            raise ValueError("text must not be empty")

        prefix = self.cfg.get("speech_prefix") or SPEECH_PREFIX
        request = SpeechRequest(
            text=build_speech_prompt(text.strip(), prefix),
            voice=(self.speech_cfg.get("voices") or {}).get(self.engine),
            model=self._model_for("speech"),
        )
        response = self.model_client.synthesize_speech(request)
        if not response.audio_base64:
            raise NoAudioData("No audio data received from the speech model.")

        audio = decode_audio(
            response.audio_base64,
            sample_rate=int(self.speech_cfg.get("sample_rate", 24000)),
            channel_count=int(self.speech_cfg.get("channels", 1)),
        )
        logger.info("Decoded %d frame(s) of speech", audio.frame_count)
        return audio
