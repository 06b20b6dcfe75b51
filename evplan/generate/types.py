# Typed descriptors exchanged between the generator and model clients,
# plus the chat turn shape kept in conversation history.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from evplan.plan.types import Citation, ConversionPlan

ROLES = ("user", "model")


@dataclass(frozen=True)
class Part:
    text: str


@dataclass(frozen=True)
class ChatMessage:
    """Single chat turn: user or model."""
    role: str
    parts: Tuple[Part, ...]
    citations: Optional[Tuple[Citation, ...]] = None

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Invalid chat role: {self.role!r}")

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        return cls(role="user", parts=(Part(text=text),))

    @classmethod
    def model(cls, text: str, citations: Sequence[Citation] = ()) -> "ChatMessage":
        return cls(role="model", parts=(Part(text=text),), citations=tuple(citations) or None)

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"role": self.role, "parts": [{"text": p.text} for p in self.parts]}
        if self.citations:
            d["citations"] = [c.model_dump() for c in self.citations]
        return d


@dataclass(frozen=True)
class ImageInput:
    data: bytes
    mime_type: str


@dataclass
class PlanRequest:
    """Everything a client needs to ask for a conversion plan."""
    prompt: str
    image: ImageInput
    schema: Dict[str, Any]
    system_instruction: str = ""
    grounding_enabled: bool = True
    extended_reasoning: bool = False
    thinking_budget: Optional[int] = None
    model: Optional[str] = None


@dataclass
class ChatRequest:
    history: Sequence[ChatMessage]
    message: str
    grounding_enabled: bool = True
    system_instruction: str = ""
    model: Optional[str] = None


@dataclass
class SpeechRequest:
    text: str
    voice: Optional[str] = None
    model: Optional[str] = None


@dataclass
class ModelResponse:
    """Text answer plus any grounding chunks returned alongside it."""
    text: Optional[str]
    grounding_chunks: List[Any] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SpeechResponse:
    audio_base64: Optional[str]
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PlanResult:
    """Assembled plan and the audit issues found in it."""
    plan: ConversionPlan
    issues: List[str]
    meta: Dict[str, Any] = field(default_factory=dict)
