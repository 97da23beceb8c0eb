# api/career.py
from __future__ import annotations

import time
import traceback
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

import settings
from core.auth_utils import get_current_user_id
from core.career_config import CareerConfigCache
from core.chat_orchestrator import (
    discovery_chat,
    discovery_progress,
    job_search_terms_for_chat,
    make_response,
)
from core.conversation_locks import ConversationLocks
from core.database import get_async_session
from core.errors import CareerError, Unauthorized, ValidationError
from core.rate_limit import TokenBucketLimiter
from core.turns import Turn
from jobs.catalog import get_catalog, get_role
from jobs.job_cards import role_card, role_detail
from memory.career_store import (
    current_step,
    delete_career_chat,
    list_saved_career_chats,
    load_career_turns,
    mark_career_chat_saved,
    turn_to_dict,
)
from telemetry.logger import log_event

chat_limiter = TokenBucketLimiter(rate=20, per_seconds=60, capacity=30)  # 20/min, burst 30

router = APIRouter(prefix="/career", tags=["career"])


# ----------------------------
# Request models
# ----------------------------
class TurnIn(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: Optional[str] = ""
    step: Optional[str] = None


class CareerChatRequest(BaseModel):
    chatId: str = Field(min_length=1, max_length=64)
    messages: List[TurnIn] = Field(default_factory=list)
    message: Optional[str] = None


class ChatIdRequest(BaseModel):
    chatId: str = Field(min_length=1, max_length=64)


class SaveChatRequest(ChatIdRequest):
    title: Optional[str] = Field(default=None, max_length=200)


# ----------------------------
# Dependencies (collaborators live on app.state)
# ----------------------------
def get_language_model(request: Request):
    return request.app.state.llm


def get_config_cache(request: Request) -> CareerConfigCache:
    return request.app.state.config_cache


def get_conversation_locks(request: Request) -> ConversationLocks:
    return request.app.state.conversation_locks


# ----------------------------
# Helpers
# ----------------------------
def _friendly_error_message(error_code: str) -> str:
    mapping = {
        "UPSTREAM": "I'm having trouble reaching my career coach brain right now. Want to try again in a moment?",
        "VALIDATION": "I didn't catch that. Could you send your answer again?",
        "PERSISTENCE": "I couldn't save that part of our conversation. Please try again.",
        "INTERNAL": "Something slipped on my end. Want to try again?",
    }
    return mapping.get(error_code, mapping["INTERNAL"])


def _error_response(error_code: str) -> Dict[str, Any]:
    return make_response(
        _friendly_error_message(error_code),
        mode="chat",
        debug={"error_code": error_code},
    )


def _raise_http(e: CareerError) -> None:
    raise HTTPException(status_code=e.status_code, detail=e.message) from e


async def _history_for(req: CareerChatRequest, uid: str, session: AsyncSession) -> List[Any]:
    """
    Client-held history wins; otherwise reload the log and append `message`.
    """
    if req.messages:
        return list(req.messages)

    msg = (req.message or "").strip()
    if not msg:
        raise ValidationError("Either messages or message is required")

    stored = await load_career_turns(session, req.chatId, uid)
    return [*stored, Turn(role="user", content=msg)]


# ----------------------------
# Routes
# ----------------------------
@router.post("/chat")
async def career_chat(
    req: CareerChatRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
    llm=Depends(get_language_model),
    config_cache: CareerConfigCache = Depends(get_config_cache),
    locks: ConversationLocks = Depends(get_conversation_locks),
):
    """
    Front door for the discover step:
    - Always return a stable payload
    - No product logic here (that lives in the orchestrator)
    - One in-flight request per chat
    """
    uid = str(user_id)
    t0 = time.time()

    if not chat_limiter.allow(f"career_chat:{uid}"):
        raise HTTPException(
            status_code=429,
            detail="Too many messages. Try again shortly.",
            headers={"Retry-After": str(int(chat_limiter.retry_after(f"career_chat:{uid}")) + 1)},
        )

    log_event("career_chat_received", {"client_history": len(req.messages)}, user_id=uid, chat_id=req.chatId)

    try:
        async with locks.hold(req.chatId):
            history = await _history_for(req, uid, session)
            out = await discovery_chat(
                user_id=uid,
                chat_id=req.chatId,
                turns=history,
                session=session,
                llm=llm,
                config_cache=config_cache,
            )
    except Unauthorized as e:
        log_event("career_chat_error", {"error_code": e.error_code}, user_id=uid, chat_id=req.chatId)
        _raise_http(e)
    except CareerError as e:
        log_event("career_chat_error", {"error_code": e.error_code}, user_id=uid, chat_id=req.chatId)
        return _error_response(e.error_code)
    except Exception as e:
        if settings.DEBUG:
            print(f"[ERROR] career_chat failed:\n{traceback.format_exc()}")
        log_event("career_chat_error", {"error_code": "INTERNAL", "detail": repr(e)}, user_id=uid, chat_id=req.chatId)
        return _error_response("INTERNAL")

    log_event(
        "career_chat_responded",
        {
            "mode": out["mode"],
            "phase": out["phase"].get("phase"),
            "jobs_count": len(out["jobs"]),
            "latency_ms": int((time.time() - t0) * 1000),
        },
        user_id=uid,
        chat_id=req.chatId,
    )
    return out


@router.get("/progress")
async def progress(
    chatId: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        return await discovery_progress(user_id=str(user_id), chat_id=chatId, session=session)
    except CareerError as e:
        _raise_http(e)


@router.get("/check-step")
async def check_step(
    chatId: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        return {"currentStep": await current_step(session, chatId, str(user_id))}
    except CareerError as e:
        _raise_http(e)


@router.get("/chats")
async def saved_chats(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        return {"chats": await list_saved_career_chats(session, str(user_id))}
    except CareerError as e:
        _raise_http(e)


@router.get("/chats/{chat_id}/messages")
async def chat_messages(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        turns = await load_career_turns(session, chat_id, str(user_id))
    except CareerError as e:
        _raise_http(e)
    return {"messages": [turn_to_dict(t) for t in turns]}


@router.post("/save")
async def save_chat(
    req: SaveChatRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        chat = await mark_career_chat_saved(session, req.chatId, str(user_id), title=req.title)
    except CareerError as e:
        _raise_http(e)
    return {"ok": True, "chatId": chat.id, "title": chat.title}


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
):
    try:
        await delete_career_chat(session, chat_id, str(user_id))
    except CareerError as e:
        _raise_http(e)
    log_event("career_chat_deleted", {}, user_id=str(user_id), chat_id=chat_id)
    return {"ok": True}


@router.post("/generate-job-terms")
async def generate_job_terms(
    req: ChatIdRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
    llm=Depends(get_language_model),
    config_cache: CareerConfigCache = Depends(get_config_cache),
):
    try:
        term = await job_search_terms_for_chat(
            user_id=str(user_id),
            chat_id=req.chatId,
            session=session,
            llm=llm,
            config_cache=config_cache,
        )
    except CareerError as e:
        _raise_http(e)
    return {"success": True, "jobSearchTerms": term}


@router.get("/catalog")
async def catalog(user_id: str = Depends(get_current_user_id)):
    return {"roles": [role_card(r) for r in get_catalog()]}


@router.get("/catalog/{role_id}")
async def catalog_role(role_id: str, user_id: str = Depends(get_current_user_id)):
    role = get_role(role_id)
    if role is None:
        raise HTTPException(status_code=404, detail="Role not found")
    return {"role": role_detail(role)}
