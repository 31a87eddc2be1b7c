from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from api.schemas.intent import IntentParseRequest, ParsedIntent
from app.config import get_settings
from llm.client import LLMUnavailableError, get_llm_client

router = APIRouter(prefix="/intent", tags=["intent"])
logger = logging.getLogger(__name__)


@router.post("/parse", response_model=ParsedIntent)
def parse_intent(req: IntentParseRequest) -> ParsedIntent:
    if not req.message or not req.message.strip():
        raise HTTPException(status_code=400, detail="Missing message")
    if not get_settings().OPENAI_API_KEY:
        raise HTTPException(status_code=500, detail="Missing OPENAI_API_KEY")

    try:
        plan = get_llm_client().parse_swap_intent(req.message)
    except LLMUnavailableError as e:
        logger.warning("intent parse upstream failure: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return ParsedIntent(**plan)
