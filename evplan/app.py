# ============================================================
# EV.AI FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Plan generation from an uploaded vehicle photo + goal
#   - Follow-up chat with grounded citations
#   - Text-to-speech returned as WAV
#   - Support for Gemini, OpenAI, or Echo clients
# ============================================================

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

# --- Local imports ---
from evplan import __version__
from evplan.audio import get_audio_output
from evplan.errors import CopilotError
from evplan.generate import ChatMessage, ConversationHistory, EchoDevClient, Part, PlanGenerator
from evplan.log import get_logger
from evplan.plan.citations import normalize_citations
from evplan.sessions import SessionStore
from evplan.settings import settings

logger = get_logger("evplan.app")


# ------------------------------------------------------------
# 🔧 Model client selection
# ------------------------------------------------------------
def build_model_client(provider: str):
    if provider == "gemini":
        from evplan.generate.clients.gemini_client import GeminiClient
        return GeminiClient(api_key=settings.GEMINI_API_KEY)
    if provider == "openai":
        from evplan.generate.clients.openai_client import OpenAIClient
        return OpenAIClient(api_key=settings.OPENAI_API_KEY)
    if provider == "echo":
        return EchoDevClient()
    raise ValueError(f"Unknown LLM_PROVIDER: {provider!r}")


model_client = build_model_client(settings.resolve_provider())
plan_gen = PlanGenerator(model_client=model_client, strict=settings.STRICT_PLAN_VALIDATION)
sessions = SessionStore(max_sessions=settings.MAX_SESSIONS)

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="EV.AI Copilot API", version=__version__)


@app.exception_handler(CopilotError)
async def copilot_error_handler(request: Request, exc: CopilotError):
    # full detail to the log, one generic message per kind to the caller
    logger.error("%s on %s: %s", exc.code, request.url.path, exc, exc_info=exc.cause)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.user_message})


# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class PartModel(BaseModel):
    text: str


class CitationModel(BaseModel):
    uri: str
    title: str


class ChatTurn(BaseModel):
    role: str
    parts: List[PartModel]
    citations: Optional[List[CitationModel]] = None

    def to_message(self) -> ChatMessage:
        # citations go back through the normalizer so they stay normalizer-built
        cites = normalize_citations([{"web": c.model_dump()} for c in self.citations or []])
        return ChatMessage(
            role=self.role,
            parts=tuple(Part(text=p.text) for p in self.parts),
            citations=tuple(cites) or None,
        )


class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = None
    history: Optional[List[ChatTurn]] = None
    grounding: Optional[bool] = None


class ChatPayload(BaseModel):
    session_id: Optional[str]
    message: Dict[str, Any]
    history: List[Dict[str, Any]]


class PlanPayload(BaseModel):
    session_id: str
    plan: Dict[str, Any]
    issues: List[str]
    bom_total: float
    applied: bool
    meta: Dict[str, Any]


class SpeechRequest(BaseModel):
    text: str


# ------------------------------------------------------------
# 🚗 Plan generation
# ------------------------------------------------------------
@app.post("/plan", response_model=PlanPayload)
def generate_plan(
    image: UploadFile = File(...),
    prompt: str = Form(...),
    thinking: bool = Form(False),
    session_id: Optional[str] = Form(None),
):
    mime_type = image.content_type or ""
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Expected an image upload, got {mime_type or 'unknown'}")
    data = image.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image is too large")

    session = sessions.get_or_create(session_id)
    # the previous plan is gone before the call; a failure leaves no plan
    token = session.begin_plan_request()
    try:
        result = plan_gen.generate_plan(
            image_bytes=data,
            mime_type=mime_type,
            prompt=prompt,
            extended_reasoning=thinking,
            grounding=settings.GROUNDING_ENABLED,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    applied = session.complete_plan(token, result.plan, result.issues)
    if not applied:
        logger.info("Discarding stale plan result for session %s", session.id)
    return PlanPayload(
        session_id=session.id,
        plan=result.plan.to_json_dict(),
        issues=result.issues,
        bom_total=result.plan.bom_total,
        applied=applied,
        meta=result.meta,
    )


# ------------------------------------------------------------
# 💬 Chat
# ------------------------------------------------------------
@app.post("/chat", response_model=ChatPayload)
def chat(req: ChatRequest):
    grounding = settings.GROUNDING_ENABLED if req.grounding is None else req.grounding
    if req.history is not None:
        # stateless call: caller owns the history
        session_id = None
        try:
            history = ConversationHistory([t.to_message() for t in req.history])
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    else:
        session = sessions.get_or_create(req.session_id)
        session_id = session.id
        history = session.history

    try:
        reply = plan_gen.send_chat(history, req.message, grounding=grounding)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ChatPayload(session_id=session_id, message=reply.to_dict(), history=history.to_list())


# ------------------------------------------------------------
# 🔊 Text to speech
# ------------------------------------------------------------
@app.post("/speech")
def speech(req: SpeechRequest):
    try:
        audio = plan_gen.synthesize_speech(req.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    wav = get_audio_output().play(audio)
    return Response(content=wav, media_type="audio/wav")


# ------------------------------------------------------------
# 🗂️ Sessions
# ------------------------------------------------------------
@app.get("/sessions/{session_id}")
def get_session(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return {
        "session_id": session.id,
        "history": session.history.to_list(),
        "plan": session.plan.to_json_dict() if session.plan else None,
        "issues": session.issues,
    }


@app.delete("/sessions/{session_id}")
def reset_session(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    session.reset()
    sessions.drop(session_id)
    return {"session_id": session_id, "reset": True}


# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "engine": getattr(model_client, "engine", type(model_client).__name__),
    }


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}


@app.get("/")
def hello():
    return {"message": "EV.AI copilot service running."}
