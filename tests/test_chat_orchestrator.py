"""Tests for one discover-step request end to end (minus HTTP)."""

from __future__ import annotations

import unittest

from core.career_config import CareerConfigCache
from core.chat_orchestrator import (
    current_matches,
    discovery_chat,
    discovery_progress,
    job_search_terms_for_chat,
)
from core.errors import UpstreamServiceError, ValidationError
from core.state_machine import (
    CLOSING_INVITATION_TEXT,
    DISCOVERY_QUESTIONS,
    NEXT_OR_BOOKMARK_TEXT,
    WHICH_CURIOUS_TEXT,
)
from jobs.job_cards import MATCHES_INTRO
from memory.career_store import (
    DISCOVERY_TITLE,
    ensure_career_chat,
    list_saved_career_chats,
    load_career_turns,
    mark_career_chat_saved,
)

from tests.helpers import ANSWERS, FakeLanguageModel, TempDatabase, conversation, user


class DiscoveryChatTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = TempDatabase()
        await self.db.create_all()
        self.session = self.db.sessionmaker()
        self.llm = FakeLanguageModel()
        self.config = CareerConfigCache()

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.db.dispose()

    async def _chat(self, turns, chat_id: str = "chat-1"):
        return await discovery_chat(
            user_id="u1",
            chat_id=chat_id,
            turns=turns,
            session=self.session,
            llm=self.llm,
            config_cache=self.config,
        )

    async def test_empty_history_asks_first_question(self) -> None:
        out = await self._chat([])
        self.assertEqual(out["assistantText"], DISCOVERY_QUESTIONS[0])
        self.assertEqual(out["mode"], "question")
        self.assertEqual(out["phase"]["question"], 1)
        self.assertEqual(out["jobs"], [])
        self.assertEqual(self.llm.echoed, [DISCOVERY_QUESTIONS[0]])
        self.assertEqual(self.llm.calls, [])

        stored = await load_career_turns(self.session, "chat-1", "u1")
        self.assertEqual([(t.role, t.content) for t in stored], [("assistant", DISCOVERY_QUESTIONS[0])])

    async def test_trigger_token_is_persisted_but_not_counted(self) -> None:
        out = await self._chat([user("begin")])
        self.assertEqual(out["assistantText"], DISCOVERY_QUESTIONS[0])
        stored = await load_career_turns(self.session, "chat-1", "u1")
        self.assertEqual([t.role for t in stored], ["user", "assistant"])

    async def test_each_answer_advances_one_question(self) -> None:
        out = await self._chat(conversation(ANSWERS[:3]))
        self.assertEqual(out["assistantText"], DISCOVERY_QUESTIONS[3])
        self.assertEqual(out["debug"], {"intent": "ask_question", "answers": 3})

    async def test_eighth_answer_presents_matches(self) -> None:
        turns = conversation(ANSWERS)
        out = await self._chat(turns)
        self.assertEqual(out["mode"], "matches")
        self.assertEqual(len(out["jobs"]), 3)
        self.assertTrue(out["assistantText"].startswith(MATCHES_INTRO))

        expected = current_matches(turns)
        self.assertEqual([j["id"] for j in out["jobs"]], [m.job.id for m in expected])
        self.assertEqual([j["rank"] for j in out["jobs"]], [1, 2, 3])
        self.assertEqual(self.llm.echoed, [])
        self.assertEqual(self.llm.calls, [])

    async def test_follow_ups_and_closing_invitation(self) -> None:
        nine = list(ANSWERS) + ["Instructional Designer"]
        out = await self._chat(conversation(nine))
        self.assertEqual((out["assistantText"], out["mode"]), (WHICH_CURIOUS_TEXT, "follow_up"))

        out = await self._chat(conversation(nine + ["Tell me more"]), chat_id="chat-2")
        self.assertEqual(out["assistantText"], NEXT_OR_BOOKMARK_TEXT)

        out = await self._chat(conversation(nine + ["Tell me more", "Bookmark it"]), chat_id="chat-3")
        self.assertEqual(out["assistantText"], CLOSING_INVITATION_TEXT)
        self.assertEqual(self.llm.calls, [])

    async def test_free_conversation_uses_model_with_matches(self) -> None:
        turns = conversation(list(ANSWERS) + ["a", "b", "c", "How do I start?"])
        out = await self._chat(turns)
        self.assertEqual(out["mode"], "chat")
        self.assertEqual(out["assistantText"], self.llm.reply)
        self.assertEqual(len(self.llm.calls), 1)

        call = self.llm.calls[0]
        self.assertIn("USER'S TOP MATCHES:", call["system"])
        self.assertIn(current_matches(turns)[0].job.title, call["system"])
        self.assertEqual(call["messages"][-1], {"role": "user", "content": "How do I start?"})

    async def test_generation_failure_leaves_log_untouched(self) -> None:
        self.llm = FakeLanguageModel(error=UpstreamServiceError("model down"))
        turns = conversation(list(ANSWERS) + ["a", "b", "c", "d"])
        with self.assertRaises(UpstreamServiceError):
            await self._chat(turns)
        self.assertEqual(await load_career_turns(self.session, "chat-1", "u1"), [])

    async def test_title_is_set_once(self) -> None:
        await self._chat([])
        await mark_career_chat_saved(self.session, "chat-1", "u1")
        chats = await list_saved_career_chats(self.session, "u1")
        self.assertEqual(chats[0]["title"], DISCOVERY_TITLE)

    async def test_resumed_chat_lands_on_same_question(self) -> None:
        # replay a chat turn by turn, then resume it from the stored log
        turns = []
        for answer in ANSWERS[:4]:
            out = await self._chat(turns + [user(answer)])
            turns = await load_career_turns(self.session, "chat-1", "u1")
        progress = await discovery_progress(user_id="u1", chat_id="chat-1", session=self.session)
        self.assertEqual(progress["answered"], 4)
        self.assertEqual(progress["question"], 5)
        self.assertEqual(out["assistantText"], DISCOVERY_QUESTIONS[4])


class JobSearchTermsTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.db = TempDatabase()
        await self.db.create_all()
        self.session = self.db.sessionmaker()
        self.config = CareerConfigCache()

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.db.dispose()

    async def _seed(self) -> None:
        llm = FakeLanguageModel()
        await discovery_chat(
            user_id="u1",
            chat_id="chat-1",
            turns=conversation(ANSWERS),
            session=self.session,
            llm=llm,
            config_cache=self.config,
        )

    async def _terms(self, llm) -> str:
        return await job_search_terms_for_chat(
            user_id="u1", chat_id="chat-1", session=self.session, llm=llm, config_cache=self.config
        )

    async def test_model_term_is_cleaned_and_saved(self) -> None:
        await self._seed()
        llm = FakeLanguageModel(reply='"Corporate Trainer."\nbecause you like people')
        self.assertEqual(await self._terms(llm), "corporate trainer")
        self.assertEqual(llm.calls[0]["temperature"], 0.0)

        await mark_career_chat_saved(self.session, "chat-1", "u1")
        chats = await list_saved_career_chats(self.session, "u1")
        self.assertEqual(chats[0]["jobSearchTerms"], "corporate trainer")

    async def test_rambling_reply_falls_back_to_top_match(self) -> None:
        await self._seed()
        turns = await load_career_turns(self.session, "chat-1", "u1")
        llm = FakeLanguageModel(reply="you should really look at many different kinds of roles")
        self.assertEqual(await self._terms(llm), current_matches(turns)[0].job.title.lower())

    async def test_empty_chat_is_rejected(self) -> None:
        await ensure_career_chat(self.session, "chat-1", "u1")
        with self.assertRaises(ValidationError):
            await self._terms(FakeLanguageModel())


if __name__ == "__main__":
    unittest.main()
