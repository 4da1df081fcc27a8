#!/usr/bin/env python3
"""
Data models for tool arguments and lookups in the Consultant Jobs MCP server
"""

from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolArguments(BaseModel):
    """Base class for tool argument sets; unknown fields and type coercion are rejected"""

    model_config = ConfigDict(extra="forbid", strict=True)


class ConnectorSearchArgs(ToolArguments):
    query: str


class ConnectorFetchArgs(ToolArguments):
    id: str


class SearchAssignmentsArgs(ToolArguments):
    """Arguments for the extended search_assignments tool"""

    query: Optional[str] = None
    sort: Literal["quality", "posted", "deadline"] = "quality"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=20)
    role: Optional[str] = None
    location: Optional[str] = None
    geo_lat: Optional[float] = None
    geo_lon: Optional[float] = None
    geo_radius: Optional[float] = None
    seniority: Optional[Literal["junior", "regular", "senior", "lead"]] = None
    employment_type: Optional[str] = None
    skills: Optional[List[str]] = None


class GetAssignmentArgs(ToolArguments):
    id: str


class GetAvailableFiltersArgs(ToolArguments):
    pass


class GetRecentAssignmentsArgs(ToolArguments):
    limit: int = Field(default=10, ge=1, le=20)


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair for geo-filtered searches"""
    lat: float
    lon: float


class UpstreamError(Exception):
    """Raised when the job-search API cannot be reached or answers with an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnknownToolError(Exception):
    """Raised when tools/call names a tool that is not registered"""

    def __init__(self, name):
        super().__init__(f"Unknown tool: {name}")
        self.name = name
