# Generator package

# Makes generate/ importable and exposes key interfaces.

from .generator import PlanGenerator
from .history import ConversationHistory
from .types import ChatMessage, Part, PlanResult, ModelResponse, SpeechResponse
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "PlanGenerator",
    "ConversationHistory",
    "ChatMessage",
    "Part",
    "PlanResult",
    "ModelResponse",
    "SpeechResponse",
    "EchoDevClient",
]
