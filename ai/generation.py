# ai/generation.py
from typing import List, Sequence

from core.turns import Turn
from jobs.job_cards import summarize_matches_for_prompt
from jobs.job_matching import JobMatch
from settings import CHAT_HISTORY_LIMIT

FALLBACK_SEARCH_TERM = "instructional designer"
MAX_SEARCH_TERM_WORDS = 3


def _history(turns: Sequence[Turn], limit: int) -> List[dict]:
    # system turns in the log are not replayed to the model
    msgs = [{"role": t.role, "content": t.content} for t in turns if t.role != "system" and t.content.strip()]
    return msgs[-limit:] if limit > 0 else msgs


async def generate_free_reply(
    llm,
    system_prompt: str,
    turns: Sequence[Turn],
    matches: Sequence[JobMatch],
) -> str:
    """
    Open-ended reply after the structured flow is over.
    The user's matches ride along in the system instruction.
    """
    system = (
        f"{system_prompt}\n\n"
        f"USER'S TOP MATCHES:\n{summarize_matches_for_prompt(matches)}"
    )
    return await llm.complete(system, _history(turns, CHAT_HISTORY_LIMIT))


def _clean_term(text: str) -> str:
    term = (text or "").strip().splitlines()[0] if (text or "").strip() else ""
    term = term.strip().strip("\"'.").strip().lower()
    if not term or len(term.split()) > MAX_SEARCH_TERM_WORDS:
        return ""
    return term


async def generate_job_search_term(
    llm,
    prompt: str,
    turns: Sequence[Turn],
    matches: Sequence[JobMatch],
) -> str:
    conversation = "\n".join(f"{t.role}: {t.content}" for t in turns if t.content.strip())
    content = f"Conversation context:\n{conversation}\n\nYour suggestion:"

    raw = await llm.complete(
        prompt,
        [{"role": "user", "content": content}],
        temperature=0.0,
        max_tokens=50,
    )
    term = _clean_term(raw)
    if term:
        return term
    if matches:
        return matches[0].job.title.lower()
    return FALLBACK_SEARCH_TERM
