from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable

from roaster.models import CommitRecord, RoastResult

NO_ACTIVITY_LINE = "Wow, you haven't committed anything recently. Are you even a developer?"
CLEAN_LINE = "Your commits are suspiciously clean. Are you even trying?"

SLEEP_LINE = "Over 50% of your commits are late at night. Do you even sleep?"
STRESS_LINE = "Found {count} swear words in commits. Someone needs a stress ball!"
MERGE_LINE = "You merge more than you code. Git plumber much?"
FIX_LINE = "Most of your commits are fixes. Maybe test before committing?"
GENERIC_LINE = "Your commit messages are as generic as a motivational poster."

FIX_WORDS = ("fix", "bug", "error")
MERGE_WORDS = ("merge", "pull")
PROFANITY_WORDS = ("fuck", "shit", "damn", "wtf")
GENERIC_PREFIXES = ("update", "changes")

LATE_NIGHT_START = 22
LATE_NIGHT_END = 4


@dataclass(frozen=True)
class RoastMetrics:
    total: int
    late_night: int
    fix: int
    merge: int
    profanity: int
    generic: int


def is_late_night(commit: CommitRecord, tz: tzinfo | None = None) -> bool:
    committed_at = commit.committed_at.astimezone(tz) if tz else commit.committed_at
    return committed_at.hour >= LATE_NIGHT_START or committed_at.hour <= LATE_NIGHT_END


def compute_metrics(commits: Iterable[CommitRecord], tz: tzinfo | None = None) -> RoastMetrics:
    total = late_night = fix = merge = profanity = generic = 0

    for commit in commits:
        total += 1
        message = commit.message.lower()

        if is_late_night(commit, tz):
            late_night += 1
        if _contains_any(message, FIX_WORDS):
            fix += 1
        if _contains_any(message, MERGE_WORDS):
            merge += 1
        if _contains_any(message, PROFANITY_WORDS):
            profanity += 1
        if message.startswith(GENERIC_PREFIXES):
            generic += 1

    return RoastMetrics(
        total=total,
        late_night=late_night,
        fix=fix,
        merge=merge,
        profanity=profanity,
        generic=generic,
    )


def roast(commits: Iterable[CommitRecord], tz: tzinfo | None = None) -> RoastResult:
    commits = list(commits)
    if not commits:
        return RoastResult(lines=(NO_ACTIVITY_LINE,))

    return RoastResult(lines=tuple(_roast_lines(compute_metrics(commits, tz))))


def _roast_lines(metrics: RoastMetrics) -> list[str]:
    # Order of checks is the order of the rendered lines.
    lines: list[str] = []
    if metrics.late_night > metrics.total // 2:
        lines.append(SLEEP_LINE)
    if metrics.profanity > 0:
        lines.append(STRESS_LINE.format(count=metrics.profanity))
    if metrics.merge > metrics.total // 3:
        lines.append(MERGE_LINE)
    if metrics.fix > metrics.total // 2:
        lines.append(FIX_LINE)
    if metrics.generic > metrics.total // 3:
        lines.append(GENERIC_LINE)

    return lines or [CLEAN_LINE]


def _contains_any(message: str, words: tuple[str, ...]) -> bool:
    return any(word in message for word in words)
