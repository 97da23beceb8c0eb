# jobs/job_cards.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from jobs.catalog import JobRole
from jobs.job_matching import JobMatch

# -------------------------------------------------------------------
# Match -> card payloads (API) and the fixed chat rendering
# -------------------------------------------------------------------

MATCHES_INTRO = "Based on your answers, here are the career paths that fit you best:"


def _resources(job: JobRole) -> Dict[str, Any]:
    res = job.resources
    out: Dict[str, Any] = {
        "searchQuery": res.search_query,
        "jobBoardLink": res.job_board_link,
    }
    if res.day_in_life_video:
        out["dayInLifeVideo"] = res.day_in_life_video
    if res.blog_post:
        out["blogPost"] = res.blog_post
    return out


def role_card(job: JobRole) -> Dict[str, Any]:
    return {
        "id": job.id,
        "title": job.title,
        "shortDescription": job.short_description,
        "salaryRange": job.salary_range,
        "reskilling": job.requirements.reskilling,
    }


def role_detail(job: JobRole) -> Dict[str, Any]:
    return {
        **role_card(job),
        "detailedDescription": job.detailed_description,
        "skills": list(job.requirements.skills),
        "workStyle": list(job.requirements.work_style),
        "values": list(job.requirements.values),
        "resources": _resources(job),
    }


def to_job_cards(matches: Sequence[JobMatch]) -> List[Dict[str, Any]]:
    cards: List[Dict[str, Any]] = []
    for rank, m in enumerate(matches, start=1):
        cards.append(
            {
                "rank": rank,
                **role_card(m.job),
                "detailedDescription": m.job.detailed_description,
                "fitLevel": m.fit_level,
                "score": m.score,
                "reasons": list(m.reasons),
                "resources": _resources(m.job),
            }
        )
    return cards


def render_matches_text(matches: Sequence[JobMatch]) -> str:
    """
    Fixed template for the assistant turn that presents the matches.
    This text is what gets stored in the conversation log.
    """
    blocks = [MATCHES_INTRO]
    for rank, m in enumerate(matches, start=1):
        blocks.append(
            f"{rank}. {m.job.title} ({m.fit_level}, {m.score}% match)\n"
            f"{m.job.short_description}\n"
            f"Salary: {m.job.salary_range}\n"
            f"Why it fits: {'; '.join(m.reasons)}"
        )
    return "\n\n".join(blocks)


def summarize_matches_for_prompt(matches: Sequence[JobMatch]) -> str:
    if not matches:
        return "No matches computed yet."
    lines = []
    for rank, m in enumerate(matches, start=1):
        lines.append(
            f"{rank}. {m.job.title} | {m.fit_level} ({m.score}) | {m.job.salary_range} | "
            f"reskilling: {m.job.requirements.reskilling} | {m.job.detailed_description}"
        )
    return "\n".join(lines)
