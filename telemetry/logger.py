# telemetry/logger.py
from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import settings


def _conn() -> sqlite3.Connection:
    c = sqlite3.connect(settings.TELEMETRY_DB)
    c.execute(
        """
        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            ts TEXT NOT NULL,
            user_id TEXT,
            chat_id TEXT,
            event TEXT NOT NULL,
            payload TEXT NOT NULL
        )
        """
    )
    c.commit()
    return c


def log_event(
    event: str,
    payload: Dict[str, Any],
    user_id: Optional[str] = None,
    chat_id: Optional[str] = None,
) -> None:
    """
    Telemetry must NEVER crash production logic.
    Payloads carry metadata (phase, counts, latency, error codes), never raw answers.
    """
    try:
        ts = datetime.now(timezone.utc).isoformat()
        with _conn() as c:
            c.execute(
                "INSERT INTO events (ts, user_id, chat_id, event, payload) VALUES (?, ?, ?, ?, ?)",
                (ts, user_id, chat_id, event, json.dumps(payload, ensure_ascii=False, default=str)),
            )
            c.commit()
    except Exception as e:
        if settings.DEBUG:
            print(f"[DEBUG] telemetry write failed for {event}: {e!r}")
