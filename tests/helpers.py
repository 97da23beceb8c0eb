"""Shared fixtures for the test suite."""

from __future__ import annotations

import os
import tempfile
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import models.career_chat  # noqa: F401  (registers tables)
from core.database import Base
from core.turns import Turn

ANSWERS = (
    "Seeing students finally understand a hard concept",
    "A quiet office or remote setup",
    "Organization and clear communication",
    "Structured projects with a collaborative team",
    "Stability and helping people",
    "I'd prefer existing skills, no new degrees",
    "Around 50k",
    "Need to stay near my kids' school",
)


def user(content: str) -> Turn:
    return Turn(role="user", content=content)


def assistant(content: str) -> Turn:
    return Turn(role="assistant", content=content)


def conversation(answers: Sequence[str], *, with_questions: bool = True) -> List[Turn]:
    """Alternating assistant/user turns, the way a real discovery chat looks."""
    turns: List[Turn] = []
    for i, a in enumerate(answers):
        if with_questions:
            turns.append(assistant(f"question {i + 1}"))
        turns.append(user(a))
    return turns


class FakeLanguageModel:
    def __init__(self, reply: str = "Happy to tell you more.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.echoed: List[str] = []
        self.calls: List[Dict[str, Any]] = []

    async def echo(self, text: str) -> str:
        self.echoed.append(text)
        return text

    async def complete(self, system, messages, *, temperature=None, max_tokens=None) -> str:
        self.calls.append(
            {"system": system, "messages": list(messages), "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        return self.reply


class TempDatabase:
    """File-backed sqlite so sessions from different event loops can share it."""

    def __init__(self) -> None:
        self._dir = tempfile.TemporaryDirectory()
        path = os.path.join(self._dir.name, "test.db")
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
        self.sessionmaker = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        self._dir.cleanup()
