# core/turns.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from core.errors import ValidationError

ROLES = ("user", "assistant", "system")

# Client "kick-off" pings that must not count as answers.
TRIGGER_TOKENS = frozenset({"start", "begin"})


@dataclass(frozen=True)
class Turn:
    role: str
    content: str = ""
    step: Optional[str] = None
    created_at: Optional[datetime] = None


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def as_turn(obj: Any) -> Turn:
    """
    Coerce a dict, request model or ORM row into a Turn.

    Content is coerced (missing / non-string -> ""), role is not:
    an unknown role is a caller bug and fails fast.
    """
    if isinstance(obj, Turn):
        return obj

    role = _field(obj, "role")
    role = role.strip().lower() if isinstance(role, str) else ""
    if role not in ROLES:
        raise ValidationError(f"Unknown turn role: {role or '<missing>'}")

    content = _field(obj, "content")
    if not isinstance(content, str):
        content = ""

    step = _field(obj, "step")
    created_at = _field(obj, "created_at")
    return Turn(
        role=role,
        content=content,
        step=step if isinstance(step, str) and step else None,
        created_at=created_at if isinstance(created_at, datetime) else None,
    )


def normalize_turns(items: Optional[Iterable[Any]]) -> List[Turn]:
    return [as_turn(t) for t in (items or [])]


def is_qualifying(turn: Turn) -> bool:
    """A user turn that counts as an answer: non-blank and not a trigger token."""
    if turn.role != "user":
        return False
    text = (turn.content or "").strip()
    if not text:
        return False
    return text not in TRIGGER_TOKENS


def qualifying_turns(turns: Iterable[Turn]) -> List[Turn]:
    return [t for t in turns if is_qualifying(t)]
