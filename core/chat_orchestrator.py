# core/chat_orchestrator.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ai.generation import generate_free_reply, generate_job_search_term
from core.career_config import CareerConfigCache
from core.errors import ValidationError
from core.state_machine import (
    AskQuestion,
    FreeConversation,
    PresentMatches,
    count_answers,
    describe_phase,
    extract_discovery_answers,
    fixed_text_for,
    phase_for_count,
    phase_tag,
)
from core.turns import Turn, normalize_turns
from jobs.job_cards import render_matches_text, to_job_cards
from jobs.job_matching import JobMatch, match_jobs_to_answers
from memory.career_store import (
    DEFAULT_STEP,
    DISCOVERY_TITLE,
    append_career_messages,
    ensure_career_chat,
    load_career_turns,
    save_job_search_terms,
    update_career_chat_title,
)
from telemetry.logger import log_event


# -------------------------------------------------------------------
# Response helpers
# -------------------------------------------------------------------
def make_response(
    assistantText: str,
    mode: str = "chat",
    phase: Optional[Dict[str, Any]] = None,
    jobs: Optional[list] = None,
    debug: Optional[dict] = None,
) -> Dict[str, Any]:
    return {
        "assistantText": assistantText,
        "mode": mode,
        "phase": phase or {},
        "jobs": jobs or [],
        "debug": debug or {},
    }


def current_matches(turns: Iterable[Turn]) -> List[JobMatch]:
    return match_jobs_to_answers(extract_discovery_answers(turns))


# -------------------------------------------------------------------
# Main entry
# -------------------------------------------------------------------
async def discovery_chat(
    *,
    user_id: str,
    chat_id: str,
    turns: Iterable[Any],
    session: AsyncSession,
    llm,
    config_cache: CareerConfigCache,
) -> Dict[str, Any]:
    """
    One request of the discover step.

    `turns` is the full history with the new user turn last. The phase is
    recomputed from it; nothing about the flow position is stored. The new
    user turn and the reply are appended to the log together, after the
    reply exists, so a failed generation leaves the log untouched.
    """
    history = normalize_turns(turns)
    chat = await ensure_career_chat(session, chat_id, user_id)

    n = count_answers(history)
    phase = phase_for_count(n)
    jobs: List[Dict[str, Any]] = []

    if isinstance(phase, PresentMatches):
        matches = current_matches(history)
        text = render_matches_text(matches)
        jobs = to_job_cards(matches)
        mode = "matches"
    elif isinstance(phase, FreeConversation) and not phase.opening:
        config = await config_cache.get()
        text = await generate_free_reply(llm, config.discover_prompt, history, current_matches(history))
        mode = "chat"
    else:
        literal = fixed_text_for(phase)
        text = await llm.echo(literal)
        mode = "question" if isinstance(phase, AskQuestion) else "follow_up"

    new_turns: List[Turn] = []
    last = history[-1] if history else None
    if last is not None and last.role == "user" and last.content.strip():
        new_turns.append(Turn(role="user", content=last.content, step=DEFAULT_STEP))
    new_turns.append(Turn(role="assistant", content=text, step=DEFAULT_STEP))
    await append_career_messages(session, chat_id, user_id, new_turns)

    if not chat.title:
        await update_career_chat_title(session, chat_id, user_id, DISCOVERY_TITLE)

    described = describe_phase(phase)
    log_event(
        "discovery_turn",
        {"phase": phase_tag(phase), "answers": n, "history_len": len(history), "jobs_count": len(jobs)},
        user_id=str(user_id),
        chat_id=str(chat_id),
    )

    return make_response(
        text,
        mode=mode,
        phase=described,
        jobs=jobs,
        debug={"intent": phase_tag(phase), "answers": n},
    )


async def discovery_progress(*, user_id: str, chat_id: str, session: AsyncSession) -> Dict[str, Any]:
    turns = await load_career_turns(session, chat_id, user_id)
    n = count_answers(turns)
    return {**describe_phase(phase_for_count(n)), "answered": n}


async def job_search_terms_for_chat(
    *,
    user_id: str,
    chat_id: str,
    session: AsyncSession,
    llm,
    config_cache: CareerConfigCache,
) -> str:
    turns = await load_career_turns(session, chat_id, user_id)
    if not turns:
        raise ValidationError("Career chat has no messages")

    config = await config_cache.get()
    term = await generate_job_search_term(llm, config.job_search_terms_prompt, turns, current_matches(turns))
    await save_job_search_terms(session, chat_id, user_id, term)
    log_event("job_search_terms_generated", {"words": len(term.split())}, user_id=str(user_id), chat_id=str(chat_id))
    return term
