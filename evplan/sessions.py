# In-memory per-session state: chat history and the active plan slot.
# Nothing here is persisted; a process restart forgets every session.

from __future__ import annotations
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

from evplan.generate.history import ConversationHistory
from evplan.log import get_logger
from evplan.plan.types import ConversionPlan

logger = get_logger("evplan.sessions")


@dataclass
class Session:
    id: str
    history: ConversationHistory = field(default_factory=ConversationHistory)
    plan: Optional[ConversionPlan] = None
    issues: List[str] = field(default_factory=list)
    plan_token: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def begin_plan_request(self) -> int:
        """Clear the current plan and return the token for the new request."""
        with self._lock:
            self.plan = None
            self.issues = []
            self.plan_token += 1
            return self.plan_token

    def complete_plan(self, token: int, plan: ConversionPlan, issues: List[str]) -> bool:
        """Store `plan` only if `token` still names the latest request."""
        with self._lock:
            if token != self.plan_token:
                return False
            self.plan = plan
            self.issues = list(issues)
            return True

    def reset(self) -> None:
        self.history.reset()
        with self._lock:
            self.plan = None
            self.issues = []
            self.plan_token += 1


class SessionStore:
    """
    Sessions keyed by id, capped at `max_sessions`.
    Looking a session up marks it recently used; once the cap is passed the
    least recently used session is forgotten.
    """

    def __init__(self, max_sessions: int = 1000):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def get_or_create(self, session_id: Optional[str] = None) -> Session:
        with self._lock:
            sid = session_id or uuid.uuid4().hex
            session = self._sessions.get(sid)
            if session is None:
                session = Session(id=sid)
                self._sessions[sid] = session
                while len(self._sessions) > self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info("Evicted least recently used session %s", evicted)
            else:
                self._sessions.move_to_end(sid)
            return session

    def drop(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
