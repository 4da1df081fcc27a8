import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from consultant_server import AssignmentTools  # noqa: E402
from jsonrpc_dispatcher import JsonRpcDispatcher  # noqa: E402
from location_resolver import LocationResolver  # noqa: E402
from session_manager import SessionManager  # noqa: E402

SITE_URL = "https://consultant.example"

LOCATION_DATA = {
    "län": {
        "01": {"name": "Stockholms län", "lat": 59.33, "lon": 18.07},
        "12": {"name": "Skåne län", "lat": 55.99, "lon": 13.6},
    },
    "kommuner": {
        "1480": {"name": "Göteborg", "lat": 57.7089, "lon": 11.9746},
    },
    "cities": {
        "Stockholm": {"lat": 59.3293, "lon": 18.0686},
    },
}

SAMPLE_JOB = {
    "id": "abc123",
    "title": "Backend Developer",
    "company": "Acme AB",
    "location": "Stockholm",
    "description": "Build APIs in Python.",
    "url": "https://jobs.example.com/abc123",
    "posted": "2024-05-01T08:30:00Z",
    "deadline": "2024-06-01T00:00:00Z",
    "source": "example-board",
    "role": "Backend Developer",
    "seniority_level": "senior",
    "employment_type": "contractor",
    "skills": ["Python", "AWS", "Docker", "Kubernetes", "Terraform", "Go"],
}


class FakeJobSearchClient:
    """Records upstream calls and replays canned responses."""

    def __init__(self, search_response=None, job_response=None, error=None):
        self.search_response = search_response if search_response is not None else {
            "success": True,
            "results": [],
            "facets": {},
        }
        self.job_response = job_response if job_response is not None else {}
        self.error = error
        self.search_calls = []
        self.job_calls = []

    def search(self, params):
        self.search_calls.append(dict(params))
        if self.error is not None:
            raise self.error
        return self.search_response

    def get_job(self, job_id):
        self.job_calls.append(job_id)
        if self.error is not None:
            raise self.error
        return self.job_response


@pytest.fixture
def fake_client():
    return FakeJobSearchClient()


@pytest.fixture
def resolver():
    return LocationResolver(data_url="https://example.test/coords.json", fetcher=lambda url: LOCATION_DATA)


@pytest.fixture
def tools(fake_client, resolver):
    return AssignmentTools(client=fake_client, resolver=resolver, site_url=SITE_URL)


@pytest.fixture
def sessions():
    return SessionManager()


@pytest.fixture
def dispatcher(tools, sessions):
    return JsonRpcDispatcher(tools, sessions)
