"""HTTP client for the consultant.dev job-search API."""

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

import requests

from assignment_models import UpstreamError
from config_utils import get_api_base_url, get_request_timeout

logger = logging.getLogger(__name__)

USER_AGENT = "MCP-Consultant-Jobs/1.0"


def build_url(base_url: str, endpoint: str, params: Optional[Mapping[str, str]] = None) -> str:
    """Join ``endpoint`` onto ``base_url`` and append the non-empty ``params``."""
    url = f"{base_url}{endpoint}"
    query = urlencode([(key, value) for key, value in (params or {}).items() if value])
    return f"{url}?{query}" if query else url


def fetch_json(url: str, session=None, timeout: Optional[float] = None) -> Any:
    """GET ``url`` and decode the JSON body, mapping every failure to UpstreamError."""
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        logger.error("Request failed for URL %s: %s", url, e)
        raise UpstreamError(f"API request failed: {e}") from e

    if not response.ok:
        logger.warning("Upstream returned status %s for URL %s", response.status_code, url)
        raise UpstreamError(f"API error: {response.status_code}", status_code=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        logger.error("Invalid JSON from URL %s: %s", url, e)
        raise UpstreamError(f"Invalid API response: {e}") from e


class JobSearchClient:
    """Thin wrapper around the ``/search`` and ``/job/{id}`` endpoints"""

    def __init__(self, base_url: Optional[str] = None, session=None, timeout: Optional[float] = None):
        self.base_url = base_url or get_api_base_url()
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else get_request_timeout()

    def fetch(self, endpoint: str, params: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        url = build_url(self.base_url, endpoint, params)
        logger.debug("Fetching %s", url)
        return fetch_json(url, session=self.session, timeout=self.timeout)

    def search(self, params: Mapping[str, str]) -> Dict[str, Any]:
        """Run a search; the response carries ``success``, ``results`` and ``facets``."""
        return self.fetch("/search", params)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        """Fetch one posting; the response carries ``job`` and ``similarJobs``."""
        return self.fetch(f"/job/{quote(str(job_id), safe='')}")
