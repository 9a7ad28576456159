"""
Shared fakes for the upstream GitHub API.

FakeSession stands in for requests.Session: it serves canned pages keyed by
URL path and page number and records every call it receives.
"""

import threading
from urllib.parse import urlparse

import pytest

from config import Settings

API_BASE = "https://api.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload if payload is not None else []

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self):
        self.pages = {}
        self.errors = {}
        self.calls = []
        self._lock = threading.Lock()

    def add_pages(self, path, *pages):
        for number, items in enumerate(pages, start=1):
            self.pages[(path, number)] = items

    def fail(self, path, status_code, reason):
        self.errors[path] = FakeResponse(status_code, reason=reason)

    def get(self, url, headers=None, params=None, timeout=None):
        path = urlparse(url).path
        page = (params or {}).get("page", 1)
        with self._lock:
            self.calls.append({"path": path, "page": page, "headers": headers, "params": params})
        if path in self.errors:
            return self.errors[path]
        return FakeResponse(200, self.pages.get((path, page), []))

    def calls_to(self, path):
        return [c for c in self.calls if c["path"] == path]


def add_org(session, org, repos):
    """Register an org whose repos map name -> list of (login, contributions)."""
    session.add_pages(f"/orgs/{org}/repos", [{"name": name} for name in repos])
    for name, contributors in repos.items():
        session.add_pages(
            f"/repos/{org}/{name}/contributors",
            [{"login": login, "contributions": n} for login, n in contributors],
        )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def settings():
    return Settings(github_token="test-token", github_api_base=API_BASE, fetch_max_workers=4)
