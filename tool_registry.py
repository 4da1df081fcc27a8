"""Static catalogue of the tools exposed over MCP and their argument models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import mcp.types as types

from assignment_models import (
    ConnectorFetchArgs,
    ConnectorSearchArgs,
    GetAssignmentArgs,
    GetAvailableFiltersArgs,
    GetRecentAssignmentsArgs,
    SearchAssignmentsArgs,
    ToolArguments,
    UnknownToolError,
)

# Connector tools (fixed search/fetch contract used by ChatGPT connectors)
_CONNECTOR_TOOLS = [
    types.Tool(
        name="search",
        description=(
            "Search for IT consultant jobs, freelance assignments, and contract work in the "
            "Nordic region. Returns a list of matching job postings."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (e.g., 'Python developer Stockholm', 'DevOps remote')",
                },
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="fetch",
        description=(
            "Get full details of a specific job posting by its ID, including complete "
            "description and how to apply."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The job ID to fetch"},
            },
            "required": ["id"],
        },
    ),
]

# Extended tools for Claude and other MCP clients
_EXTENDED_TOOLS = [
    types.Tool(
        name="search_assignments",
        description=(
            "Search for IT consultant jobs in Sweden. Location names like 'Stockholm', "
            "'Göteborg', 'Malmö' are automatically resolved to coordinates for precise "
            "filtering within 50km radius. Use this when users ask to find jobs, look for "
            "work, search for assignments, or want employment opportunities."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query for job title, description, or skills (e.g., 'backend developer', 'data engineer')",
                },
                "sort": {
                    "type": "string",
                    "enum": ["quality", "posted", "deadline"],
                    "default": "quality",
                    "description": "Sort by: quality (relevance), posted (newest), deadline (soonest)",
                },
                "page": {"type": "number", "minimum": 1, "default": 1},
                "limit": {"type": "number", "minimum": 1, "maximum": 20, "default": 10},
                "role": {
                    "type": "string",
                    "description": "Filter by job role (e.g., 'Backend Developer', 'Data Engineer', 'DevOps Engineer')",
                },
                "location": {
                    "type": "string",
                    "description": (
                        "City or region name (e.g., 'Stockholm', 'Göteborg', 'Malmö', 'Remote'). "
                        "Auto-resolved to geo-coordinates for precise 50km radius filtering."
                    ),
                },
                "geo_lat": {"type": "number", "description": "Latitude for geo-filtering (overrides location)"},
                "geo_lon": {"type": "number", "description": "Longitude for geo-filtering (overrides location)"},
                "geo_radius": {"type": "number", "description": "Search radius in km (default: 50)"},
                "seniority": {
                    "type": "string",
                    "enum": ["junior", "regular", "senior", "lead"],
                    "description": "Filter by experience level",
                },
                "employment_type": {
                    "type": "string",
                    "description": "Filter by employment type (e.g., 'contractor', 'freelance')",
                },
                "skills": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by required skills (e.g., ['Python', 'AWS', 'Kubernetes'])",
                },
            },
        },
    ),
    types.Tool(
        name="get_assignment",
        description=(
            "Get full details of a specific job or assignment by its ID, including complete "
            "description, requirements, and application information."
        ),
        inputSchema={
            "type": "object",
            "properties": {"id": {"type": "string", "description": "The job/assignment ID"}},
            "required": ["id"],
        },
    ),
    types.Tool(
        name="get_available_filters",
        description=(
            "Get available filter options for job searches, including lists of roles, "
            "locations, seniority levels, employment types, and companies with job counts. "
            "Useful for discovering what jobs are available before searching."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="get_recent_assignments",
        description=(
            "Get the most recently posted jobs and assignments. Use this when users want to "
            "see new job postings, latest opportunities, or fresh listings."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "number",
                    "minimum": 1,
                    "maximum": 20,
                    "default": 10,
                    "description": "Number of recent jobs to return",
                }
            },
        },
    ),
]

TOOLS: List[types.Tool] = _CONNECTOR_TOOLS + _EXTENDED_TOOLS

ARGUMENT_MODELS: Dict[str, Type[ToolArguments]] = {
    "search": ConnectorSearchArgs,
    "fetch": ConnectorFetchArgs,
    "search_assignments": SearchAssignmentsArgs,
    "get_assignment": GetAssignmentArgs,
    "get_available_filters": GetAvailableFiltersArgs,
    "get_recent_assignments": GetRecentAssignmentsArgs,
}


def tool_names() -> List[str]:
    return [tool.name for tool in TOOLS]


def list_tools() -> List[Dict[str, Any]]:
    """Tool descriptors in the wire shape returned by ``tools/list``."""
    return [tool.model_dump(by_alias=True, exclude_none=True) for tool in TOOLS]


def validate_arguments(name: str, arguments: Optional[Dict[str, Any]]) -> ToolArguments:
    """Validate ``arguments`` for tool ``name``.

    Raises UnknownToolError for unregistered names and pydantic.ValidationError
    for argument sets that do not match the tool's model.
    """
    model = ARGUMENT_MODELS.get(name)
    if model is None:
        raise UnknownToolError(name)
    return model.model_validate(arguments or {})
