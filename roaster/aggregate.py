from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from roaster.errors import UpstreamFailure
from roaster.github import ActivityClient
from roaster.models import AggregationResult, normalize_identity

logger = logging.getLogger(__name__)

REPO_LIMIT = 10
LOOKBACK_DAYS = 30


def aggregate(
    identity: str,
    client: ActivityClient,
    *,
    now: datetime | None = None,
    repo_limit: int = REPO_LIMIT,
    lookback_days: int = LOOKBACK_DAYS,
) -> AggregationResult:
    identity = normalize_identity(identity)

    client.get_user(identity)
    repos = client.list_repositories(identity, owned_only=True, sort="updated", limit=repo_limit)

    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=lookback_days)

    result = AggregationResult(repos_considered=len(repos))
    for repo in repos:
        try:
            commits = client.list_commits(identity, repo.name, since=since)
        except UpstreamFailure as exc:
            logger.debug("Skipping commits for %s/%s: %s", identity, repo.name, exc)
            continue
        result.commits.extend(commits)

    logger.info(
        "Collected %d commits from %d repositories for %s",
        result.total_commits,
        result.repos_considered,
        identity,
    )
    return result
