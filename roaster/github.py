from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import quote

import requests

from roaster.errors import NotFound, RateLimited, UpstreamError, UpstreamFailure
from roaster.models import CommitRecord, RepositoryRef, UserInfo

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
COMMITS_PER_PAGE = 100

UNAUTHENTICATED_HINT = "Provide a GitHub token (GITHUB_TOKEN) to raise the API rate limit"
AUTHENTICATED_HINT = "Wait for the GitHub rate limit window to reset and try again"


class ActivityClient(Protocol):
    def get_user(self, login: str) -> UserInfo: ...

    def list_repositories(
        self,
        login: str,
        owned_only: bool = True,
        sort: str = "updated",
        limit: int = 10,
    ) -> list[RepositoryRef]: ...

    def list_commits(self, owner: str, repo: str, since: datetime) -> list[CommitRecord]: ...


class GitHubClient:
    def __init__(
        self,
        token: str | None = None,
        session: requests.Session | None = None,
        base_url: str = API_BASE,
        timeout: int = 30,
    ) -> None:
        self.token = token or None
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def get_user(self, login: str) -> UserInfo:
        data = self._get_json(f"/users/{quote(login, safe='')}")
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected user payload for {login}")

        return UserInfo(
            login=str(data.get("login") or login),
            name=data.get("name") or None,
            public_repos=int(data.get("public_repos") or 0),
        )

    def list_repositories(
        self,
        login: str,
        owned_only: bool = True,
        sort: str = "updated",
        limit: int = 10,
    ) -> list[RepositoryRef]:
        params = {
            "type": "owner" if owned_only else "all",
            "sort": sort,
            "direction": "desc",
            "per_page": limit,
        }
        data = self._get_json(f"/users/{quote(login, safe='')}/repos", params=params)
        if not isinstance(data, list):
            raise UpstreamError(f"Unexpected repository payload for {login}")

        repos: list[RepositoryRef] = []
        for item in data[:limit]:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            repos.append(
                RepositoryRef(
                    name=str(item["name"]),
                    last_updated=_parse_timestamp(item.get("updated_at")),
                )
            )
        return repos

    def list_commits(self, owner: str, repo: str, since: datetime) -> list[CommitRecord]:
        params = {
            "since": _format_since(since),
            "per_page": COMMITS_PER_PAGE,
        }
        path = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/commits"
        data = self._get_json(path, params=params)
        if not isinstance(data, list):
            raise UpstreamError(f"Unexpected commit payload for {owner}/{repo}")

        commits: list[CommitRecord] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            commit_obj = item.get("commit") or {}
            author_obj = commit_obj.get("author") or {}
            committer_obj = commit_obj.get("committer") or {}

            committed_at = _parse_timestamp(author_obj.get("date")) or _parse_timestamp(
                committer_obj.get("date")
            )
            if committed_at is None:
                logger.debug("Skipping commit %s in %s/%s without a date", item.get("sha"), owner, repo)
                continue

            commits.append(
                CommitRecord(
                    message=str(commit_obj.get("message") or ""),
                    committed_at=committed_at,
                    sha=str(item.get("sha") or ""),
                    repo=repo,
                )
            )
        return commits

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamError(f"GitHub request failed for {url}: {exc}") from exc

        if response.status_code >= 400:
            raise self._classify(response)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"GitHub returned invalid JSON for {url}") from exc

    def _classify(self, response: requests.Response) -> UpstreamFailure:
        status = response.status_code
        message = _error_message(response)

        if status == 404:
            return NotFound(message or "Not Found")

        if status == 429 or (status == 403 and _is_rate_limited(response, message)):
            reset_at = _parse_reset(response.headers.get("X-RateLimit-Reset"))
            logger.warning("GitHub rate limit hit (reset at %s)", reset_at or "unknown")
            hint = AUTHENTICATED_HINT if self.authenticated else UNAUTHENTICATED_HINT
            return RateLimited(hint, reset_at=reset_at)

        return UpstreamError(f"GitHub API error ({status}): {message}", status_code=status)


def build_client(token: str | None = None) -> GitHubClient:
    if not token:
        logger.warning("Using unauthenticated GitHub API; rate limits will apply")
    return GitHubClient(token=token)


def _is_rate_limited(response: requests.Response, message: str) -> bool:
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    if response.headers.get("Retry-After"):
        return True
    return "rate limit" in message.lower()


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return (response.text or "").strip()[:200]


def _parse_reset(raw_value: str | None) -> datetime | None:
    if not raw_value:
        return None
    try:
        return datetime.fromtimestamp(int(raw_value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def _parse_timestamp(raw_value: Any) -> datetime | None:
    if not raw_value:
        return None
    try:
        dt = datetime.fromisoformat(str(raw_value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _format_since(since: datetime) -> str:
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
