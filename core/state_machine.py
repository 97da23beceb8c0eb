# core/state_machine.py
"""
Discovery flow state, derived from the message log on every request.

Nothing here is stored: the phase is a pure function of how many qualifying
user turns the conversation holds, so a resumed chat (or a restarted process)
lands on exactly the same question it would have reached incrementally.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

from core.turns import Turn, qualifying_turns

DISCOVERY_QUESTIONS = (
    "What kind of work feels most meaningful to you? Think about the moments in teaching that made you feel most fulfilled.",
    "Describe your ideal work environment. Are you drawn to an office, remote work, a school setting, or something else?",
    "What skills do colleagues, parents, or students most often praise you for?",
    "What type of work do you enjoy most: working independently, collaborating with a team, leading projects, or a mix?",
    "What values matter most to you in your next role (for example impact, stability, creativity, flexibility, or growth)?",
    "How open are you to additional training or certifications, or would you prefer to rely on your existing skills?",
    "What salary range are you hoping for in your next role?",
    "Are there any constraints we should keep in mind, like location, schedule, family commitments, or timing?",
)

TOTAL_QUESTIONS = len(DISCOVERY_QUESTIONS)

WHICH_CURIOUS_TEXT = (
    "Which of these roles are you most curious about? "
    "Tell me and I'll share what the work really looks like day to day."
)

NEXT_OR_BOOKMARK_TEXT = (
    "Would you like to explore another role from your matches, "
    "or bookmark this one so you can come back to it later?"
)

CLOSING_INVITATION_TEXT = (
    "You've completed the discovery step. "
    "Ask me anything about your matches, how to get started, or what the transition could look like for you."
)

# Answer fields in question order.
ANSWER_FIELDS = (
    "meaningful_work",
    "work_environment",
    "praised_skills",
    "work_type",
    "values",
    "training_openness",
    "salary_expectation",
    "constraints",
)


@dataclass(frozen=True)
class DiscoveryAnswers:
    meaningful_work: Optional[str] = None
    work_environment: Optional[str] = None
    praised_skills: Optional[str] = None
    work_type: Optional[str] = None
    values: Optional[str] = None
    training_openness: Optional[str] = None
    salary_expectation: Optional[str] = None
    constraints: Optional[str] = None

    def as_list(self) -> list:
        return [getattr(self, f) for f in ANSWER_FIELDS]


# -------------------------------------------------------------------
# Phases
# -------------------------------------------------------------------
@dataclass(frozen=True)
class AskQuestion:
    number: int  # 1-based


@dataclass(frozen=True)
class PresentMatches:
    pass


@dataclass(frozen=True)
class AskWhichCurious:
    pass


@dataclass(frozen=True)
class AskNextOrBookmark:
    pass


@dataclass(frozen=True)
class FreeConversation:
    opening: bool = False  # first free turn gets the closing invitation


Phase = Union[AskQuestion, PresentMatches, AskWhichCurious, AskNextOrBookmark, FreeConversation]


def count_answers(turns: Iterable[Turn]) -> int:
    return len(qualifying_turns(turns))


def phase_for_count(n: int) -> Phase:
    if n < TOTAL_QUESTIONS:
        return AskQuestion(max(n, 0) + 1)
    if n == TOTAL_QUESTIONS:
        return PresentMatches()
    if n == TOTAL_QUESTIONS + 1:
        return AskWhichCurious()
    if n == TOTAL_QUESTIONS + 2:
        return AskNextOrBookmark()
    return FreeConversation(opening=(n == TOTAL_QUESTIONS + 3))


def resolve_phase(turns: Iterable[Turn]) -> Phase:
    return phase_for_count(count_answers(turns))


def extract_discovery_answers(turns: Iterable[Turn]) -> DiscoveryAnswers:
    """
    Positional assignment: the i-th qualifying user turn answers question i.
    A reply that is really a clarifying question is still recorded as the answer.
    """
    answers = [t.content for t in qualifying_turns(turns)][:TOTAL_QUESTIONS]
    return DiscoveryAnswers(**dict(zip(ANSWER_FIELDS, answers)))


def fixed_text_for(phase: Phase) -> Optional[str]:
    if isinstance(phase, AskQuestion):
        return DISCOVERY_QUESTIONS[phase.number - 1]
    if isinstance(phase, AskWhichCurious):
        return WHICH_CURIOUS_TEXT
    if isinstance(phase, AskNextOrBookmark):
        return NEXT_OR_BOOKMARK_TEXT
    if isinstance(phase, FreeConversation) and phase.opening:
        return CLOSING_INVITATION_TEXT
    return None


def phase_tag(phase: Phase) -> str:
    if isinstance(phase, AskQuestion):
        return "ask_question"
    if isinstance(phase, PresentMatches):
        return "present_matches"
    if isinstance(phase, AskWhichCurious):
        return "ask_which_curious"
    if isinstance(phase, AskNextOrBookmark):
        return "ask_next_or_bookmark"
    if isinstance(phase, FreeConversation):
        return "free_conversation"
    raise TypeError(f"Unknown phase: {phase!r}")


def describe_phase(phase: Phase) -> Dict[str, Any]:
    out: Dict[str, Any] = {"phase": phase_tag(phase), "totalQuestions": TOTAL_QUESTIONS}
    if isinstance(phase, AskQuestion):
        out["question"] = phase.number
        out["text"] = DISCOVERY_QUESTIONS[phase.number - 1]
    else:
        out["question"] = None
    return out
