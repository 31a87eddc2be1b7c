from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from api.schemas.chat import (
    ChatHistoryResponse,
    ChatMessageRead,
    ClearHistoryResponse,
    MemoryResponse,
    SessionStatsResponse,
)
from app.chat.brain import get_chat_brain
from app.chat.contracts import ChatMessageRequest, ChatResponse
from app.config import get_settings
from app.core.context import session_context
from db.deps import get_db
from db.repos.memory_repo import delete_memory, get_or_create_memory
from db.repos.messages_repo import list_messages

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("/message", response_model=ChatResponse)
def chat_message(req: ChatMessageRequest, db: Session = Depends(get_db)) -> ChatResponse:
    with session_context(req.session_id):
        return get_chat_brain(db, req.session_id).process_message(req.message)


def _sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=True)}\n\n"


@router.post("/message/stream")
def chat_message_stream(req: ChatMessageRequest, db: Session = Depends(get_db)) -> StreamingResponse:
    def event_stream():
        yield _sse_event({"type": "status", "status": "processing"})
        with session_context(req.session_id):
            response = get_chat_brain(db, req.session_id).process_message(req.message)
        message = response.message or ""
        for i in range(0, len(message), 48):
            chunk = message[i : i + 48]
            yield _sse_event({"type": "delta", "content": chunk})
        yield _sse_event({"type": "final", "response": response.model_dump(mode="json")})

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.get("/{session_id}/history", response_model=ChatHistoryResponse)
def chat_history(
    session_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> ChatHistoryResponse:
    rows = list_messages(db, session_id=session_id, limit=limit or get_settings().chat_history_limit)
    return ChatHistoryResponse(
        session_id=session_id,
        messages=[ChatMessageRead.model_validate(r) for r in rows],
    )


@router.delete("/{session_id}/history", response_model=ClearHistoryResponse)
def clear_chat_history(session_id: str, db: Session = Depends(get_db)) -> ClearHistoryResponse:
    removed = get_chat_brain(db, session_id).clear_history()
    logger.info("chat history cleared removed=%s", removed)
    return ClearHistoryResponse(session_id=session_id, removed=removed)


@router.get("/{session_id}/stats", response_model=SessionStatsResponse)
def chat_stats(session_id: str, db: Session = Depends(get_db)) -> SessionStatsResponse:
    stats = get_chat_brain(db, session_id).get_session_stats()
    return SessionStatsResponse(session_id=session_id, **stats)


@router.get("/{session_id}/memory", response_model=MemoryResponse)
def chat_memory(session_id: str, db: Session = Depends(get_db)) -> MemoryResponse:
    return MemoryResponse.model_validate(get_or_create_memory(db, session_id=session_id))


@router.delete("/{session_id}/memory", status_code=204)
def clear_chat_memory(session_id: str, db: Session = Depends(get_db)) -> None:
    if not delete_memory(db, session_id=session_id):
        raise HTTPException(status_code=404, detail="memory not found")
