"""
Paginated GitHub REST fetcher.

Walks `per_page=100` listings page by page until the API returns an empty
page. There is deliberately no retry or backoff: the first failing page
aborts the whole listing with UpstreamError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
USER_AGENT = "Github-Contributor-Fetcher"

# GitHub answers 409 on the contributors endpoint for repositories with no commits.
EMPTY_REPOSITORY_STATUS = 409


class UpstreamError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None, reason: str = ""):
        super().__init__(message)
        self.status = status
        self.reason = reason


class GitHubClient:
    def __init__(
        self,
        token: str,
        *,
        api_base: str = "https://api.github.com",
        api_version: str = "2022-11-28",
        session: Optional[requests.Session] = None,
        user_agent: str = USER_AGENT,
    ):
        self.api_base = api_base.rstrip("/")
        # Without an injected session each page goes through requests.get, which
        # opens its own Session, so pool threads never share connection state.
        self.session = session
        self._headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": api_version,
        }

    # -----------------------------
    # Public listings
    # -----------------------------
    def fetch_repositories(self, org: str) -> List[Dict[str, Any]]:
        _require_org(org)
        return self._fetch_paginated(f"/orgs/{org}/repos", "Failed to fetch repos")

    def fetch_contributors(self, org: str, repo_name: str) -> List[Dict[str, Any]]:
        _require_org(org)
        return self._fetch_paginated(
            f"/repos/{org}/{repo_name}/contributors",
            "Failed to fetch contributors",
            empty_status=EMPTY_REPOSITORY_STATUS,
        )

    # -----------------------------
    # Pagination
    # -----------------------------
    def _fetch_paginated(self, path: str, failure: str, *, empty_status: Optional[int] = None) -> List[Dict[str, Any]]:
        url = f"{self.api_base}{path}"
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            logger.debug("GET %s page=%d", path, page)
            try:
                resp = (self.session or requests).get(
                    url,
                    headers=self._headers,
                    params={"per_page": PAGE_SIZE, "page": page},
                )
            except requests.RequestException as e:
                raise UpstreamError(f"{failure}: {e}") from e

            if empty_status is not None and resp.status_code == empty_status:
                logger.debug("%s reported no commits (HTTP %d)", path, resp.status_code)
                return []
            if not resp.ok:
                reason = resp.reason or str(resp.status_code)
                raise UpstreamError(f"{failure}: {reason}", status=resp.status_code, reason=reason)

            data = resp.json()
            if not data:
                break
            items.extend(data)
            page += 1

        logger.debug("%s: %d items over %d page(s)", path, len(items), page - 1)
        return items


def _require_org(org: str) -> None:
    if not org:
        raise ValueError("Organization name must be non-empty.")
