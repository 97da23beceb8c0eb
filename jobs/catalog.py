# jobs/catalog.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from settings import JOB_CATALOG_PATH

RESKILLING_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class RoleRequirements:
    skills: Tuple[str, ...]
    work_style: Tuple[str, ...]
    values: Tuple[str, ...]
    reskilling: str  # low | medium | high


@dataclass(frozen=True)
class RoleResources:
    search_query: str
    job_board_link: str
    day_in_life_video: Optional[str] = None
    blog_post: Optional[str] = None


@dataclass(frozen=True)
class MatchCriteria:
    skill_keywords: Tuple[str, ...]
    value_keywords: Tuple[str, ...]
    work_style_keywords: Tuple[str, ...]
    environment_keywords: Tuple[str, ...]


@dataclass(frozen=True)
class JobRole:
    id: str
    title: str
    short_description: str
    detailed_description: str
    salary_range: str
    requirements: RoleRequirements
    resources: RoleResources
    match_criteria: MatchCriteria


# -----------------------------
# Dataset path + loading
# -----------------------------
def _catalog_path() -> str:
    if JOB_CATALOG_PATH:
        return os.path.abspath(JOB_CATALOG_PATH)
    here = os.path.dirname(__file__)
    return os.path.join(here, "data", "job_roles.json")


def _strs(values: Any) -> Tuple[str, ...]:
    return tuple(v.strip() for v in (values or []) if isinstance(v, str) and v.strip())


def _role_from_dict(raw: Dict[str, Any]) -> JobRole:
    req = raw.get("requirements") or {}
    res = raw.get("resources") or {}
    crit = raw.get("matchCriteria") or {}

    reskilling = str(req.get("reskilling") or "medium").strip().lower()
    if reskilling not in RESKILLING_LEVELS:
        raise ValueError(f"Role {raw.get('id')!r}: unknown reskilling level {reskilling!r}")

    return JobRole(
        id=str(raw["id"]),
        title=str(raw["title"]),
        short_description=str(raw.get("shortDescription") or ""),
        detailed_description=str(raw.get("detailedDescription") or ""),
        salary_range=str(raw.get("salaryRange") or ""),
        requirements=RoleRequirements(
            skills=_strs(req.get("skills")),
            work_style=_strs(req.get("workStyle")),
            values=_strs(req.get("values")),
            reskilling=reskilling,
        ),
        resources=RoleResources(
            search_query=str(res.get("searchQuery") or ""),
            job_board_link=str(res.get("jobBoardLink") or ""),
            day_in_life_video=res.get("dayInLifeVideo"),
            blog_post=res.get("blogPost"),
        ),
        match_criteria=MatchCriteria(
            skill_keywords=_strs(crit.get("skillKeywords")),
            value_keywords=_strs(crit.get("valueKeywords")),
            work_style_keywords=_strs(crit.get("workStyleKeywords")),
            environment_keywords=_strs(crit.get("environmentKeywords")),
        ),
    )


def load_catalog(path: str) -> Tuple[JobRole, ...]:
    """
    Parse a catalog file. Declaration order is preserved and is the
    tie-break order used when ranking matches.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    roles = tuple(_role_from_dict(r) for r in (data.get("roles") or []))
    if not roles:
        raise ValueError(f"Job catalog at {path} has no roles")

    ids = [r.id for r in roles]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Job catalog at {path} has duplicate role ids")
    return roles


@lru_cache(maxsize=1)
def get_catalog() -> Tuple[JobRole, ...]:
    return load_catalog(_catalog_path())


def get_role(role_id: str) -> Optional[JobRole]:
    for role in get_catalog():
        if role.id == role_id:
            return role
    return None
