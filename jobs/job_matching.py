# jobs/job_matching.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from core.state_machine import DiscoveryAnswers
from jobs.catalog import JobRole, get_catalog

# -------------------------------------------------------------------
# Keyword-weighted scoring of catalog roles against discovery answers
# -------------------------------------------------------------------

BASE_SCORE = 20

SKILL_WEIGHT = 30
VALUE_WEIGHT = 25
WORK_STYLE_WEIGHT = 25
ENVIRONMENT_WEIGHT = 20

SALARY_BONUS = 10
OPEN_TO_TRAINING_BONUS = 5
LOW_RESKILLING_BONUS = 10

PERFECT_FIT = "Perfect Fit"
STRONG_FIT = "Strong Fit"
GOOD_FIT = "Good Fit"

PERFECT_FIT_MIN = 80
STRONG_FIT_MIN = 60

MAX_REASONS = 3
TOP_N = 3

DEFAULT_REASON = "Good career transition opportunity for teachers"

# (expectation anchor, role salary markers). Substring checks, first hit wins.
SALARY_BUCKETS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("50", ("50", "55", "60")),
    ("60", ("60", "65", "70")),
    ("70", ("70", "75", "80")),
)


@dataclass(frozen=True)
class JobMatch:
    job: JobRole
    score: int
    fit_level: str
    reasons: Tuple[str, ...]


def _answers_blob(answers: DiscoveryAnswers) -> str:
    return " ".join(a for a in answers.as_list() if a).lower()


def _matched(keywords: Sequence[str], blob: str) -> List[str]:
    return [k for k in keywords if k.lower() in blob]


def _salary_aligns(expectation: str, salary_range: str) -> bool:
    expected = expectation.lower()
    job_salary = salary_range.lower()
    # each bucket is tried in turn until one lines up
    return any(
        anchor in expected and any(m in job_salary for m in markers)
        for anchor, markers in SALARY_BUCKETS
    )


def fit_level_for(score: int) -> str:
    if score >= PERFECT_FIT_MIN:
        return PERFECT_FIT
    if score >= STRONG_FIT_MIN:
        return STRONG_FIT
    return GOOD_FIT


def score_role(job: JobRole, answers: DiscoveryAnswers, blob: Optional[str] = None) -> JobMatch:
    """
    Score one role. Field boundaries are not kept: all answers are matched
    as one lowercase blob. The score is not clamped.
    """
    if blob is None:
        blob = _answers_blob(answers)

    crit = job.match_criteria
    score = float(BASE_SCORE)
    reasons: List[str] = []

    # 1) Skills
    skills = _matched(crit.skill_keywords, blob)
    if skills:
        score += len(skills) / len(crit.skill_keywords) * SKILL_WEIGHT
        reasons.append(f"Your skills align with {', '.join(skills)}")

    # 2) Values
    values = _matched(crit.value_keywords, blob)
    if values:
        score += len(values) / len(crit.value_keywords) * VALUE_WEIGHT
        reasons.append(f"Your values match this role's focus on {', '.join(values)}")

    # 3) Work style
    styles = _matched(crit.work_style_keywords, blob)
    if styles:
        score += len(styles) / len(crit.work_style_keywords) * WORK_STYLE_WEIGHT
        reasons.append("Your preferred work style matches this role")

    # 4) Environment
    envs = _matched(crit.environment_keywords, blob)
    if envs:
        score += len(envs) / len(crit.environment_keywords) * ENVIRONMENT_WEIGHT
        reasons.append("The work environment aligns with your preferences")

    # 5) Salary (decade-anchor heuristic, not numeric parsing)
    if answers.salary_expectation and _salary_aligns(answers.salary_expectation, job.salary_range):
        score += SALARY_BONUS
        reasons.append("Salary expectations align")

    # 6) Reskilling preference
    if answers.training_openness:
        openness = answers.training_openness.lower()
        if "yes" in openness or "open" in openness:
            score += OPEN_TO_TRAINING_BONUS
        elif "no" in openness or "prefer existing" in openness:
            if job.requirements.reskilling == "low":
                score += LOW_RESKILLING_BONUS
                reasons.append("Minimal additional training required")

    final = int(round(score))
    return JobMatch(
        job=job,
        score=final,
        fit_level=fit_level_for(final),
        reasons=tuple(reasons[:MAX_REASONS]) if reasons else (DEFAULT_REASON,),
    )


def match_jobs_to_answers(
    answers: DiscoveryAnswers,
    catalog: Optional[Iterable[JobRole]] = None,
    limit: int = TOP_N,
) -> List[JobMatch]:
    """
    Rank every catalog role and return the top `limit`, highest score first.
    Equal scores keep catalog declaration order.
    """
    roles = list(catalog if catalog is not None else get_catalog())
    blob = _answers_blob(answers)

    scored = [(score_role(job, answers, blob), idx) for idx, job in enumerate(roles)]
    scored.sort(key=lambda pair: (-pair[0].score, pair[1]))
    return [m for m, _ in scored[:limit]]
