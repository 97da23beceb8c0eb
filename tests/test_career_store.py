"""Tests for the per-conversation log and chat records."""

from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from core.errors import Unauthorized, ValidationError
from core.turns import Turn
from memory.career_store import (
    DEFAULT_STEP,
    append_career_messages,
    current_step,
    delete_career_chat,
    ensure_career_chat,
    list_saved_career_chats,
    load_career_turns,
    mark_career_chat_saved,
    save_job_search_terms,
    turn_to_dict,
    update_career_chat_title,
)

from tests.helpers import TempDatabase, assistant, user


class CareerStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = TempDatabase()
        await self.db.create_all()
        self.session = self.db.sessionmaker()

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.db.dispose()

    async def test_ensure_is_idempotent(self) -> None:
        first = await ensure_career_chat(self.session, "chat-1", "u1")
        second = await ensure_career_chat(self.session, "chat-1", "u1")
        self.assertEqual(first.id, second.id)
        self.assertFalse(second.saved)
        self.assertIsNone(second.title)

    async def test_other_users_chat_is_unauthorized(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        with self.assertRaises(Unauthorized):
            await ensure_career_chat(self.session, "chat-1", "u2")
        with self.assertRaises(Unauthorized):
            await delete_career_chat(self.session, "chat-1", "u2")

    async def test_log_is_append_only_and_ordered(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        await append_career_messages(self.session, "chat-1", "u1", [assistant("q1"), user("a1")])
        await append_career_messages(self.session, "chat-1", "u1", [assistant("q2")])

        turns = await load_career_turns(self.session, "chat-1", "u1")
        self.assertEqual([(t.role, t.content) for t in turns], [("assistant", "q1"), ("user", "a1"), ("assistant", "q2")])
        self.assertTrue(all(t.step == DEFAULT_STEP for t in turns))
        self.assertEqual(await load_career_turns(self.session, "chat-1", "u2"), [])

    async def test_explicit_timestamps_order_the_log(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        t0 = datetime(2024, 1, 1, 12, 0, 0)
        await append_career_messages(
            self.session,
            "chat-1",
            "u1",
            [Turn(role="user", content="later", created_at=t0 + timedelta(seconds=5))],
        )
        await append_career_messages(self.session, "chat-1", "u1", [Turn(role="user", content="earlier", created_at=t0)])
        turns = await load_career_turns(self.session, "chat-1", "u1")
        self.assertEqual([t.content for t in turns], ["earlier", "later"])
        self.assertEqual(turn_to_dict(turns[0])["createdAt"], t0.isoformat())

    async def test_default_timestamps_are_naive_utc(self) -> None:
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        chat = await ensure_career_chat(self.session, "chat-1", "u1")
        await append_career_messages(self.session, "chat-1", "u1", [user("hello")])
        after = datetime.now(timezone.utc).replace(tzinfo=None)

        stored = (await load_career_turns(self.session, "chat-1", "u1"))[0]
        for stamp in (chat.created_at, stored.created_at):
            self.assertIsNone(stamp.tzinfo)
            self.assertTrue(before <= stamp <= after)

    async def test_current_step(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        self.assertEqual(await current_step(self.session, "chat-1", "u1"), DEFAULT_STEP)
        await append_career_messages(
            self.session, "chat-1", "u1", [Turn(role="assistant", content="x", step="explore")]
        )
        self.assertEqual(await current_step(self.session, "chat-1", "u1"), "explore")

    async def test_save_list_and_delete(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        await ensure_career_chat(self.session, "chat-2", "u1")
        await append_career_messages(self.session, "chat-1", "u1", [user("hello")])
        await update_career_chat_title(self.session, "chat-2", "u1", "Untitled")

        chat = await mark_career_chat_saved(self.session, "chat-1", "u1", title="  My plan ")
        self.assertEqual(chat.title, "My plan")

        saved = await list_saved_career_chats(self.session, "u1")
        self.assertEqual([c["id"] for c in saved], ["chat-1"])
        self.assertTrue(saved[0]["saved"])

        await delete_career_chat(self.session, "chat-1", "u1")
        self.assertEqual(await load_career_turns(self.session, "chat-1", "u1"), [])
        self.assertEqual(await list_saved_career_chats(self.session, "u1"), [])

    async def test_missing_chat_is_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            await mark_career_chat_saved(self.session, "nope", "u1")
        with self.assertRaises(ValidationError):
            await save_job_search_terms(self.session, "nope", "u1", "trainer")

    async def test_job_search_terms_are_stored(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        await save_job_search_terms(self.session, "chat-1", "u1", "corporate trainer")
        await mark_career_chat_saved(self.session, "chat-1", "u1")
        saved = await list_saved_career_chats(self.session, "u1")
        self.assertEqual(saved[0]["jobSearchTerms"], "corporate trainer")


if __name__ == "__main__":
    unittest.main()
