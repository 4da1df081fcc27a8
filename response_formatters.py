"""Presentation of upstream postings for the connector and extended tool conventions.

The connector shapes (``search``/``fetch``) are fixed by the consuming client
and serialised as-is. The extended shapes go through :func:`compact_json`,
which drops ``None`` values to keep responses small.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

import mcp.types as types

NO_RESULTS_MESSAGE = (
    "No exact matches found. Try expanding your location, broadening your search query, "
    "or lowering seniority level. Visit https://consultant.dev/alerts to get notified when "
    "matching roles appear."
)

FACET_LIMIT = 10
SKILL_PREVIEW_LIMIT = 5


def strip_none(value: Any) -> Any:
    """Recursively drop mapping entries whose value is ``None``."""
    if isinstance(value, dict):
        return {key: strip_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, (list, tuple)):
        return [strip_none(item) for item in value]
    return value


def compact_json(value: Any) -> str:
    return json.dumps(strip_none(value), ensure_ascii=False, separators=(",", ":"))


def plain_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def text_result(text: str) -> Dict[str, Any]:
    """Wrap ``text`` in a ``tools/call`` result with a single text content block."""
    content = types.TextContent(type="text", text=text)
    return {"content": [content.model_dump(by_alias=True, exclude_none=True)]}


def date_part(timestamp: Optional[str]) -> Optional[str]:
    if not timestamp:
        return None
    return timestamp.split("T")[0]


def posting_url(job: Dict[str, Any], site_url: str) -> str:
    return job.get("url") or f"{site_url}/assignments/{job.get('id')}"


def _skill_preview(job: Dict[str, Any]) -> Optional[List[str]]:
    skills = job.get("skills")
    return skills[:SKILL_PREVIEW_LIMIT] if skills is not None else None


def _skill_list(skills: Optional[List[Any]]) -> str:
    """Comma-joined skill names; null entries are skipped."""
    if not skills:
        return ""
    return ", ".join(str(skill) for skill in skills if skill is not None)


# Connector convention


def connector_search_results(jobs: Iterable[Dict[str, Any]], site_url: str) -> Dict[str, Any]:
    return {
        "results": [
            {
                "id": job.get("id"),
                "title": f"{job.get('title')} at {job.get('company')} - {job.get('location')}",
                "url": posting_url(job, site_url),
            }
            for job in jobs
        ]
    }


def connector_document(job: Dict[str, Any], site_url: str) -> Dict[str, Any]:
    """Full posting as a connector document: text block plus metadata."""
    skills = job.get("skills")
    text = (
        f"{job.get('title')}\n\n"
        f"Company: {job.get('company')}\n"
        f"Location: {job.get('location')}\n"
        f"Role: {job.get('role') or 'N/A'}\n"
        f"Seniority: {job.get('seniority_level') or 'N/A'}\n"
        f"Posted: {date_part(job.get('posted')) or 'N/A'}\n"
        f"Deadline: {date_part(job.get('deadline')) or 'N/A'}\n"
        f"Skills: {_skill_list(skills) or 'N/A'}\n\n"
        f"{job.get('description') or 'No description available.'}"
    )
    return {
        "id": job.get("id"),
        "title": f"{job.get('title')} at {job.get('company')}",
        "text": text,
        "url": posting_url(job, site_url),
        "metadata": {
            "company": job.get("company"),
            "location": job.get("location"),
            "role": job.get("role"),
            "seniority": job.get("seniority_level"),
            "posted": date_part(job.get("posted")),
            "source": job.get("source"),
        },
    }


def connector_placeholder(job_id: str, title: str, text: str) -> Dict[str, Any]:
    return {"id": job_id, "title": title, "text": text, "url": ""}


# Extended convention


def assignment_summary(job: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": job.get("id"),
        "title": job.get("title"),
        "company": job.get("company"),
        "location": job.get("location"),
        "posted": date_part(job.get("posted")),
        "deadline": date_part(job.get("deadline")),
        "skills": _skill_preview(job),
    }


def recent_assignment(job: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": job.get("id"),
        "title": job.get("title"),
        "company": job.get("company"),
        "location": job.get("location"),
        "posted": date_part(job.get("posted")),
        "skills": _skill_preview(job),
    }


def assignment_detail(job: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": job.get("id"),
        "title": job.get("title"),
        "company": job.get("company"),
        "location": job.get("location"),
        "description": job.get("description"),
        "url": job.get("url"),
        "posted": date_part(job.get("posted")),
        "deadline": date_part(job.get("deadline")),
        "role": job.get("role"),
        "seniority_level": job.get("seniority_level"),
        "employment_type": job.get("employment_type"),
        "skills": job.get("skills"),
    }


def top_facets(entries: Optional[List[Dict[str, Any]]], limit: int = FACET_LIMIT) -> Optional[List[Dict[str, Any]]]:
    """Highest-count facet entries first; ties keep the upstream order."""
    if entries is None:
        return None
    ranked = sorted(entries, key=lambda entry: entry.get("count") or 0, reverse=True)
    return ranked[:limit]


def available_filters(facets: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "roles": top_facets(facets.get("roles")),
        "locations": top_facets(facets.get("locations")),
        "seniority_levels": facets.get("seniority_levels"),
        "employment_types": facets.get("employment_types"),
        "companies": top_facets(facets.get("companies")),
    }
