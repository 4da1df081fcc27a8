#!/usr/bin/env python3
"""
Consultant Jobs MCP tools

Tool handlers for searching consultant.dev assignments. Two conventions are
served from the same upstream calls: the connector tools ``search``/``fetch``
with their fixed shapes, and the extended tools for other MCP clients.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from assignment_models import (
    ConnectorFetchArgs,
    ConnectorSearchArgs,
    GetAssignmentArgs,
    GetAvailableFiltersArgs,
    GetRecentAssignmentsArgs,
    SearchAssignmentsArgs,
    ToolArguments,
    UnknownToolError,
    UpstreamError,
)
from config_utils import get_site_url
from job_fetcher import JobSearchClient
from location_resolver import LocationResolver, is_remote
import response_formatters as fmt
from tool_registry import validate_arguments

logger = logging.getLogger("consultant-jobs-server")

DEFAULT_GEO_RADIUS = 50
CONNECTOR_PAGE_SIZE = "10"

ToolHandler = Callable[[ToolArguments], Awaitable[Dict[str, Any]]]


def _format_number(value: float) -> str:
    """Render numbers for query strings without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class AssignmentTools:
    """Executes validated tool calls against the job-search API"""

    def __init__(
        self,
        client: Optional[JobSearchClient] = None,
        resolver: Optional[LocationResolver] = None,
        site_url: Optional[str] = None,
    ):
        self.client = client or JobSearchClient()
        self.resolver = resolver or LocationResolver()
        self.site_url = site_url or get_site_url()
        self._handlers: Dict[str, ToolHandler] = {
            "search": self.connector_search,
            "fetch": self.connector_fetch,
            "search_assignments": self.search_assignments,
            "get_assignment": self.get_assignment,
            "get_available_filters": self.get_available_filters,
            "get_recent_assignments": self.get_recent_assignments,
        }

    async def call(self, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Validate ``arguments`` and run tool ``name``.

        Raises UnknownToolError for unregistered tools and lets validation
        errors propagate to the caller.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(name)
        logger.info("Tool called: %s with arguments: %s", name, arguments)
        return await handler(validate_arguments(name, arguments))

    # Shared upstream core

    async def _search(self, params: Dict[str, str]) -> Dict[str, Any]:
        return await asyncio.to_thread(self.client.search, params)

    async def _get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        data = await asyncio.to_thread(self.client.get_job, job_id)
        if not isinstance(data, dict):
            return None
        return data.get("job")

    # Connector convention

    async def connector_search(self, args: ConnectorSearchArgs) -> Dict[str, Any]:
        try:
            data = await self._search({"q": args.query, "limit": CONNECTOR_PAGE_SIZE})
        except UpstreamError as e:
            logger.warning("search failed for query %r: %s", args.query, e)
            data = {}

        jobs = data.get("results") if data.get("success") else None
        if not jobs:
            return fmt.text_result(fmt.plain_json({"results": []}))
        return fmt.text_result(fmt.plain_json(fmt.connector_search_results(jobs, self.site_url)))

    async def connector_fetch(self, args: ConnectorFetchArgs) -> Dict[str, Any]:
        try:
            job = await self._get_job(args.id)
            if not job:
                document = fmt.connector_placeholder(args.id, "Not found", "Job not found")
            else:
                document = fmt.connector_document(job, self.site_url)
        except UpstreamError as e:
            logger.warning("fetch failed for job %s: %s", args.id, e)
            document = fmt.connector_placeholder(args.id, "Error", "Failed to fetch job")
        except Exception:
            logger.exception("fetch could not present job %s", args.id)
            document = fmt.connector_placeholder(args.id, "Error", "Failed to fetch job")
        return fmt.text_result(fmt.plain_json(document))

    # Extended convention

    def _location_params(self, args: SearchAssignmentsArgs) -> Dict[str, str]:
        radius = _format_number(args.geo_radius or DEFAULT_GEO_RADIUS)

        if args.geo_lat and args.geo_lon:
            return {
                "geo_lat": _format_number(args.geo_lat),
                "geo_lon": _format_number(args.geo_lon),
                "geo_radius": radius,
            }

        if not args.location:
            return {}

        if is_remote(args.location):
            return {"location": args.location}

        coords = self.resolver.resolve(args.location)
        if coords is None:
            logger.debug("No coordinates for %r; filtering by location name", args.location)
            return {"location": args.location}

        return {
            "geo_lat": _format_number(coords.lat),
            "geo_lon": _format_number(coords.lon),
            "geo_radius": radius,
        }

    def build_search_params(self, args: SearchAssignmentsArgs) -> Dict[str, str]:
        """Translate search_assignments arguments into upstream query parameters."""
        params = {
            "sort": args.sort,
            "page": str(args.page),
            "limit": str(args.limit),
        }
        params.update(self._location_params(args))

        if args.query:
            params["q"] = args.query
        if args.role:
            params["role"] = args.role
        if args.seniority:
            params["seniority"] = args.seniority
        if args.employment_type:
            params["employment_type"] = args.employment_type
        if args.skills:
            params["skills"] = ",".join(args.skills)
        return params

    async def search_assignments(self, args: SearchAssignmentsArgs) -> Dict[str, Any]:
        await self.resolver.load()
        params = self.build_search_params(args)

        try:
            data = await self._search(params)
        except UpstreamError as e:
            logger.error("search_assignments failed with params %s: %s", params, e)
            return fmt.text_result("Search failed.")

        if not data.get("success"):
            return fmt.text_result("Search failed.")

        jobs = data.get("results") or []
        if not jobs:
            logger.info("search_assignments returned no results for params %s", params)
            return fmt.text_result(fmt.NO_RESULTS_MESSAGE)

        results = [fmt.assignment_summary(job) for job in jobs]
        return fmt.text_result(
            fmt.compact_json({"total": len(results), "page": args.page, "results": results})
        )

    async def get_assignment(self, args: GetAssignmentArgs) -> Dict[str, Any]:
        not_found = f"Assignment '{args.id}' not found."
        try:
            job = await self._get_job(args.id)
            if not job:
                return fmt.text_result(not_found)
            return fmt.text_result(fmt.compact_json(fmt.assignment_detail(job)))
        except UpstreamError as e:
            logger.warning("get_assignment failed for %s: %s", args.id, e)
        except Exception:
            logger.exception("get_assignment could not present %s", args.id)
        return fmt.text_result(not_found)

    async def get_available_filters(self, args: GetAvailableFiltersArgs) -> Dict[str, Any]:
        try:
            data = await self._search({"limit": "1"})
        except UpstreamError as e:
            logger.error("get_available_filters failed: %s", e)
            return fmt.text_result("Failed to fetch filters.")

        if not data.get("success"):
            return fmt.text_result("Failed to fetch filters.")
        return fmt.text_result(fmt.compact_json(fmt.available_filters(data.get("facets") or {})))

    async def get_recent_assignments(self, args: GetRecentAssignmentsArgs) -> Dict[str, Any]:
        try:
            data = await self._search({"sort": "posted", "limit": str(args.limit)})
        except UpstreamError as e:
            logger.error("get_recent_assignments failed: %s", e)
            return fmt.text_result("Failed to fetch recent assignments.")

        if not data.get("success"):
            return fmt.text_result("Failed to fetch recent assignments.")

        results = [fmt.recent_assignment(job) for job in data.get("results") or []]
        return fmt.text_result(fmt.compact_json({"results": results}))
