from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Dict, Iterable, List

from github_client import GitHubClient

logger = logging.getLogger(__name__)


def merge_contributions(pages: Iterable[Iterable[Dict[str, Any]]]) -> Dict[str, Any]:
    """
    Sum contribution counts per login across per-repository contributor lists.

    Logins keep the order they are first seen in, and the final sort is
    stable, so equal totals stay in discovery order.
    """
    totals: Dict[str, int] = {}
    for contributors in pages:
        for user in contributors:
            login = user["login"]
            totals[login] = totals.get(login, 0) + int(user.get("contributions") or 0)

    aggregated = [{"login": login, "contributions": count} for login, count in totals.items()]
    aggregated.sort(key=lambda c: c["contributions"], reverse=True)
    return {"count": len(aggregated), "contributors": aggregated}


class ContributionAggregator:
    def __init__(self, client: GitHubClient, max_workers: int = 8):
        self.client = client
        self.max_workers = max_workers

    def aggregate(self, org: str) -> Dict[str, Any]:
        repos = self.client.fetch_repositories(org)
        names = [repo["name"] for repo in repos]
        logger.info("Fetching contributors for %d repositories in %s", len(names), org)

        pages: List[List[Dict[str, Any]]] = []
        if names:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names))) as executor:
                futures = [executor.submit(self.client.fetch_contributors, org, name) for name in names]
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
                for future in done:
                    if future.exception() is not None:
                        for p in pending:
                            p.cancel()
                        raise future.exception()
                # Results in repository order so ties are deterministic.
                pages = [future.result() for future in futures]

        result = merge_contributions(pages)
        logger.info("%s: %d distinct contributors", org, result["count"])
        return result
