from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserInfo:
    login: str
    name: str | None = None
    public_repos: int = 0


@dataclass(frozen=True)
class RepositoryRef:
    name: str
    last_updated: datetime | None = None


@dataclass(frozen=True)
class CommitRecord:
    message: str
    committed_at: datetime
    sha: str = ""
    repo: str = ""


@dataclass
class AggregationResult:
    commits: list[CommitRecord] = field(default_factory=list)
    repos_considered: int = 0

    @property
    def total_commits(self) -> int:
        return len(self.commits)


@dataclass(frozen=True)
class RoastResult:
    lines: tuple[str, ...]

    def render(self) -> str:
        return "\n\n".join(self.lines)


def normalize_identity(identity: str | None) -> str:
    if not identity or not identity.strip():
        raise ValueError("username is required")
    return identity
