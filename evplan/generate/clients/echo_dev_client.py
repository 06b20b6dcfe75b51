# Offline model client for local dev and tests, no API calls.
# Plans come from a canned document, chat echoes the message back,
# speech is a short clip of silence.

import base64
import json
from typing import Any, Dict, List

from ..types import ChatRequest, ModelResponse, PlanRequest, SpeechRequest, SpeechResponse

SAMPLE_PLAN: Dict[str, Any] = {
    "summary": "Convert a 1972 VW Beetle to a 96V LFP electric drivetrain.",
    "vehicle": {"make": "Volkswagen", "model": "Beetle", "year": 1972},
    "drivetrain": {"motor": "HPEVS AC-34", "inverter": "Curtis 1238-7601", "gearRatio": 3.88},
    "battery": {"chemistry": "LFP", "voltage": 96.0, "capacity_kWh": 20.5, "packLayout": "2 x 15S front/rear split"},
    "safety": {
        "standards": ["ISO 6469-3", "SAE J1766"],
        "risks": [
            {"code": "HV-ISO", "severity": "HIGH", "remediation": "Install insulation monitoring and an HV service disconnect."},
            {"code": "MASS-DIST", "severity": "MEDIUM", "remediation": "Split the pack to keep the stock weight balance."},
        ],
    },
    "bom": [
        {"sku": "AC-34", "qty": 1, "unitCost": 4200.0, "description": "AC induction motor"},
        {"sku": "LFP-100AH", "qty": 30, "unitCost": 180.0, "description": "Prismatic LFP cell"},
    ],
    "laborHours": 80,
    "cost": {"parts": 9600.0, "labor": 6400.0, "overhead": 500.0, "total": 16500.0},
}

SAMPLE_CHUNKS: List[Dict[str, Any]] = [
    {"web": {"uri": "https://www.iso.org/standard/68667.html", "title": "ISO 6469-3:2021"}},
]

SILENCE_SECONDS = 0.25


class EchoDevClient:
    engine = "echo"

    def __init__(self, sample_rate: int = 24000):
        self.model = "echo-dev"
        self.sample_rate = sample_rate

    def set_model(self, model: str, purpose: str = "plan"):
        # one canned engine serves every purpose
        self.model = model

    def _meta(self, **extra) -> Dict[str, Any]:
        return {"engine": self.engine, "model": self.model, **extra}

    def generate_plan(self, request: PlanRequest) -> ModelResponse:
        chunks = SAMPLE_CHUNKS if request.grounding_enabled else []
        return ModelResponse(
            text=json.dumps(SAMPLE_PLAN),
            grounding_chunks=list(chunks),
            meta=self._meta(prompt=request.prompt, reasoning=request.extended_reasoning),
        )

    def chat(self, request: ChatRequest) -> ModelResponse:
        text = f"[ECHO RESPONSE]\n{request.message}"
        return ModelResponse(text=text, grounding_chunks=[], meta=self._meta(turns=len(request.history)))

    def synthesize_speech(self, request: SpeechRequest) -> SpeechResponse:
        frames = int(self.sample_rate * SILENCE_SECONDS)
        pcm = bytes(frames * 2)
        return SpeechResponse(audio_base64=base64.b64encode(pcm).decode("ascii"), meta=self._meta())
