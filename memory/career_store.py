# memory/career_store.py
from __future__ import annotations

import functools
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import PersistenceError, Unauthorized, ValidationError
from core.turns import Turn
from models.career_chat import CareerChat, CareerMessage, utcnow
from telemetry.logger import log_event

DEFAULT_STEP = "discover"
DISCOVERY_TITLE = "Career Discovery Session"


def _persistence(fn):
    """Roll back and re-raise driver/ORM failures as PersistenceError."""

    @functools.wraps(fn)
    async def wrapper(session: AsyncSession, *args, **kwargs):
        try:
            return await fn(session, *args, **kwargs)
        except SQLAlchemyError as e:
            await session.rollback()
            log_event("persistence_error", {"op": fn.__name__, "error": type(e).__name__})
            raise PersistenceError(f"{fn.__name__} failed") from e

    return wrapper


async def _get_owned_chat(session: AsyncSession, chat_id: str, user_id: str) -> Optional[CareerChat]:
    chat = await session.get(CareerChat, str(chat_id))
    if chat is not None and chat.user_id != str(user_id):
        raise Unauthorized("Chat belongs to another user")
    return chat


# -----------------------
# Chats
# -----------------------
@_persistence
async def ensure_career_chat(session: AsyncSession, chat_id: str, user_id: str) -> CareerChat:
    chat = await _get_owned_chat(session, chat_id, user_id)
    if chat is not None:
        return chat

    now = utcnow()
    chat = CareerChat(id=str(chat_id), user_id=str(user_id), title=None, saved=False, created_at=now, updated_at=now)
    session.add(chat)
    await session.commit()
    return chat


@_persistence
async def update_career_chat_title(session: AsyncSession, chat_id: str, user_id: str, title: str) -> None:
    chat = await _get_owned_chat(session, chat_id, user_id)
    if chat is None:
        raise ValidationError("Career chat not found")
    chat.title = title
    chat.updated_at = utcnow()
    await session.commit()


@_persistence
async def mark_career_chat_saved(
    session: AsyncSession, chat_id: str, user_id: str, title: Optional[str] = None
) -> CareerChat:
    chat = await _get_owned_chat(session, chat_id, user_id)
    if chat is None:
        raise ValidationError("Career chat not found")
    chat.saved = True
    if title:
        chat.title = title.strip()
    chat.updated_at = utcnow()
    await session.commit()
    return chat


@_persistence
async def list_saved_career_chats(session: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    result = await session.execute(
        select(CareerChat)
        .where(CareerChat.user_id == str(user_id), CareerChat.saved.is_(True))
        .order_by(CareerChat.created_at.desc())
    )
    return [chat_to_dict(c) for c in result.scalars().all()]


@_persistence
async def delete_career_chat(session: AsyncSession, chat_id: str, user_id: str) -> None:
    chat = await _get_owned_chat(session, chat_id, user_id)
    if chat is None:
        raise ValidationError("Career chat not found")
    await session.execute(delete(CareerMessage).where(CareerMessage.chat_id == str(chat_id)))
    await session.delete(chat)
    await session.commit()


@_persistence
async def save_job_search_terms(session: AsyncSession, chat_id: str, user_id: str, terms: str) -> None:
    chat = await _get_owned_chat(session, chat_id, user_id)
    if chat is None:
        raise ValidationError("Career chat not found")
    chat.job_search_terms = terms
    chat.updated_at = utcnow()
    await session.commit()


# -----------------------
# Messages
# -----------------------
@_persistence
async def append_career_messages(
    session: AsyncSession,
    chat_id: str,
    user_id: str,
    turns: Sequence[Turn],
) -> None:
    now = utcnow()
    for t in turns:
        session.add(
            CareerMessage(
                chat_id=str(chat_id),
                user_id=str(user_id),
                role=t.role,
                content=t.content,
                step=t.step or DEFAULT_STEP,
                created_at=t.created_at or now,
            )
        )
    chat = await session.get(CareerChat, str(chat_id))
    if chat is not None:
        chat.updated_at = now
    await session.commit()


@_persistence
async def load_career_turns(session: AsyncSession, chat_id: str, user_id: str) -> List[Turn]:
    """The per-conversation log, oldest first."""
    result = await session.execute(
        select(CareerMessage)
        .where(CareerMessage.chat_id == str(chat_id), CareerMessage.user_id == str(user_id))
        .order_by(CareerMessage.created_at.asc(), CareerMessage.id.asc())
    )
    return [
        Turn(role=m.role, content=m.content or "", step=m.step, created_at=m.created_at)
        for m in result.scalars().all()
    ]


@_persistence
async def current_step(session: AsyncSession, chat_id: str, user_id: str) -> str:
    result = await session.execute(
        select(CareerMessage.step)
        .where(
            CareerMessage.chat_id == str(chat_id),
            CareerMessage.user_id == str(user_id),
            CareerMessage.role == "assistant",
        )
        .order_by(CareerMessage.created_at.desc(), CareerMessage.id.desc())
        .limit(1)
    )
    step = result.scalars().first()
    return step or DEFAULT_STEP


def chat_to_dict(chat: CareerChat) -> Dict[str, Any]:
    return {
        "id": chat.id,
        "title": chat.title,
        "saved": bool(chat.saved),
        "jobSearchTerms": chat.job_search_terms,
        "createdAt": chat.created_at.isoformat() if chat.created_at else None,
        "updatedAt": chat.updated_at.isoformat() if chat.updated_at else None,
    }


def turn_to_dict(turn: Turn) -> Dict[str, Any]:
    return {
        "role": turn.role,
        "content": turn.content,
        "step": turn.step,
        "createdAt": turn.created_at.isoformat() if turn.created_at else None,
    }
