# Append-only conversation log for one session.

from __future__ import annotations
import threading
from typing import Iterator, List, Sequence, Tuple

from evplan.plan.types import Citation
from .types import ChatMessage


class ConversationHistory:
    """
    Ordered chat turns. Turns are only ever appended; nothing here edits,
    reorders or removes an existing turn. reset() is the one way to empty
    it and belongs to a full session reset.
    """

    def __init__(self, messages: Sequence[ChatMessage] = ()):
        self._messages: List[ChatMessage] = list(messages)
        self._lock = threading.Lock()

    def append(self, message: ChatMessage) -> ChatMessage:
        with self._lock:
            self._messages.append(message)
        return message

    def append_user(self, text: str) -> ChatMessage:
        return self.append(ChatMessage.user(text))

    def append_model(self, text: str, citations: Sequence[Citation] = ()) -> ChatMessage:
        return self.append(ChatMessage.model(text, citations))

    def reset(self) -> None:
        with self._lock:
            self._messages = []

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        with self._lock:
            return tuple(self._messages)

    def to_list(self) -> List[dict]:
        return [m.to_dict() for m in self.messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)
