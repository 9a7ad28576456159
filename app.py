"""
CommitBoard (Flask)

What it does:
- Accepts a GitHub organization name
- Lists every repository of the organization and each repository's contributors
- Sums contributions per user across all repositories, sorted descending
- Serves the ranking as JSON or as an HTML table
- Caches each organization's ranking in memory for CACHE_TTL seconds

Setup:
  pip install -e .

Run:
  export GITHUB_TOKEN="github_pat_..."   # required
  python app.py
  open http://localhost:8080

Endpoints:
  GET /                          -> organization form
  GET /org?org=&format=json|html -> redirects to /org/<org>[?html=true]
  GET /org/<org>[?html=true]     -> aggregated contributors (JSON or HTML table)
  GET /healthz                   -> liveness + cache info
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify, redirect, render_template, request, url_for
from markupsafe import escape

from aggregator import ContributionAggregator
from config import ConfigError, Settings, load_settings
from github_client import GitHubClient, UpstreamError
from result_cache import ResultCache

logger = logging.getLogger(__name__)

# Organization logins share GitHub's username rules: alnum and hyphen, max 39.
ORG_RE = re.compile(r"^[A-Za-z0-9-]{1,39}$")


# -----------------------------
# App factory
# -----------------------------
def create_app(
    settings: Settings,
    *,
    client: Optional[GitHubClient] = None,
    cache: Optional[ResultCache] = None,
) -> Flask:
    app = Flask(__name__)

    if client is None:
        client = GitHubClient(
            settings.github_token,
            api_base=settings.github_api_base,
            api_version=settings.github_api_version,
        )
    if cache is None:
        cache = ResultCache(settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)

    app.extensions["commitboard"] = {
        "settings": settings,
        "cache": cache,
        "aggregator": ContributionAggregator(client, max_workers=settings.fetch_max_workers),
    }

    _register_routes(app)
    return app


def _state() -> Dict[str, Any]:
    return current_app.extensions["commitboard"]


def contributors_for(org: str) -> Dict[str, Any]:
    state = _state()
    aggregator: ContributionAggregator = state["aggregator"]
    return state["cache"].get_or_compute(org, lambda: aggregator.aggregate(org))


# -----------------------------
# Flask routes
# -----------------------------
def _register_routes(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def home():
        return render_template("index.html")

    @app.route("/org", methods=["GET"])
    def org_form():
        org = (request.args.get("org") or "").strip()
        if not org:
            return jsonify({"error": "Missing 'org'."}), 400
        if request.args.get("format") == "html":
            return redirect(url_for("org_contributors", org_name=org, html="true"))
        return redirect(url_for("org_contributors", org_name=org))

    @app.route("/org/<org_name>", methods=["GET"])
    def org_contributors(org_name: str):
        org = org_name.lower()
        if not ORG_RE.match(org):
            return jsonify({"error": "Invalid GitHub organization name."}), 400

        try:
            result = contributors_for(org)
        except UpstreamError as e:
            logger.warning("Aggregation for %s failed: %s", org, e)
            return _error_page(str(e))
        except Exception as e:
            logger.exception("Unexpected error aggregating %s", org)
            return _error_page(f"Unexpected server error: {e}")

        if request.args.get("html") == "true":
            return render_template("contributors.html", org=org, result=result)
        return jsonify(result)

    @app.route("/healthz", methods=["GET"])
    def healthz():
        state = _state()
        return jsonify(
            {
                "ok": True,
                "cache_ttl_seconds": state["settings"].cache_ttl_seconds,
                "cached_orgs": len(state["cache"]),
            }
        )


def _error_page(message: str):
    return f"<pre>Error: {escape(message)}</pre>", 500, {"Content-Type": "text/html; charset=utf-8"}


# -----------------------------
# Process startup
# -----------------------------
def main() -> None:
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("%s", e)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("Server running at http://localhost:%d", settings.port)
    app.run(host="0.0.0.0", port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
