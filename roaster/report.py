from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from roaster.aggregate import aggregate
from roaster.config import AppConfig
from roaster.errors import NotFound, RateLimited, UpstreamError, UpstreamFailure
from roaster.github import ActivityClient
from roaster.models import RoastResult, normalize_identity
from roaster.roast import roast


@dataclass(frozen=True)
class RoastReport:
    username: str
    roast: RoastResult
    total_commits: int
    repos_analyzed: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "roast": self.roast.render(),
            "lines": list(self.roast.lines),
            "stats": {
                "total_commits": self.total_commits,
                "repos_analyzed": self.repos_analyzed,
            },
        }


def roast_user(identity: str, client: ActivityClient, config: AppConfig | None = None) -> RoastReport:
    config = config or AppConfig()
    username = normalize_identity(identity)

    result = aggregate(
        username,
        client,
        repo_limit=config.repo_limit,
        lookback_days=config.lookback_days,
    )

    return RoastReport(
        username=username,
        roast=roast(result.commits, tz=config.tz),
        total_commits=result.total_commits,
        repos_analyzed=result.repos_considered,
    )


def error_payload(exc: Exception) -> tuple[int, dict[str, Any]]:
    if isinstance(exc, NotFound):
        return exc.status, {"error": "GitHub user not found"}

    if isinstance(exc, RateLimited):
        payload: dict[str, Any] = {
            "error": "GitHub API rate limit exceeded",
            "solution": exc.hint,
        }
        if exc.reset_at is not None:
            payload["reset_time"] = format_reset_time(exc.reset_at)
        return exc.status, payload

    if isinstance(exc, UpstreamError):
        return exc.status, {"error": "Failed to fetch GitHub data", "details": exc.message}

    if isinstance(exc, UpstreamFailure):
        return exc.status, {"error": "Failed to fetch GitHub data", "details": str(exc)}

    if isinstance(exc, ValueError):
        return 400, {"error": str(exc) or "username is required"}

    raise TypeError(f"Unsupported error type: {type(exc).__name__}")


def format_reset_time(reset_at: datetime) -> str:
    return reset_at.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")


def render_report(report: RoastReport) -> str:
    lines = [
        f"# Roast of {report.username}",
        "",
        report.roast.render(),
        "",
        (
            f"Commits analyzed: {report.total_commits} | "
            f"Repositories analyzed: {report.repos_analyzed}"
        ),
        "",
    ]
    return "\n".join(lines)


def render_error(exc: Exception) -> str:
    status, payload = error_payload(exc)
    lines = [f"Error ({status}): {payload['error']}"]
    if payload.get("details"):
        lines.append(f"  details: {payload['details']}")
    if payload.get("solution"):
        lines.append(f"  solution: {payload['solution']}")
    if payload.get("reset_time"):
        lines.append(f"  reset time: {payload['reset_time']}")
    return "\n".join(lines)
