# models/career_chat.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from core.database import Base


def utcnow() -> datetime:
    # naive UTC, the columns carry no offset
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CareerChat(Base):
    __tablename__ = "career_chats"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)

    title = Column(String(200), nullable=True)
    saved = Column(Boolean, nullable=False, default=False)
    job_search_terms = Column(String(200), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class CareerMessage(Base):
    __tablename__ = "career_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    chat_id = Column(String(64), ForeignKey("career_chats.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)

    role = Column(String(20), nullable=False)  # user | assistant | system
    content = Column(Text, nullable=False, default="")
    step = Column(String(32), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)


Index("ix_career_messages_chat_order", CareerMessage.chat_id, CareerMessage.created_at, CareerMessage.id)
