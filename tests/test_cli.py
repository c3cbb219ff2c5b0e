from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from roaster import cli
from roaster.errors import NotFound, RateLimited, UpstreamError
from roaster.models import CommitRecord, RepositoryRef, UserInfo
from roaster.roast import SLEEP_LINE


class FakeClient:
    def __init__(self, user_error: Exception | None = None) -> None:
        self.user_error = user_error

    def get_user(self, login: str) -> UserInfo:
        if self.user_error:
            raise self.user_error
        return UserInfo(login=login)

    def list_repositories(self, login, owned_only=True, sort="updated", limit=10):
        return [RepositoryRef(name="repo-a")]

    def list_commits(self, owner, repo, since):
        return [
            CommitRecord(message="add", committed_at=datetime(2026, 10, 10, 2, tzinfo=timezone.utc)),
        ]


@pytest.fixture
def tokens(monkeypatch: pytest.MonkeyPatch) -> list:
    seen: list = []
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return seen


def _patch_client(monkeypatch: pytest.MonkeyPatch, client: FakeClient, tokens: list) -> None:
    def fake_build_client(token=None):
        tokens.append(token)
        return client

    monkeypatch.setattr("roaster.cli.build_client", fake_build_client)


def test_prints_roast_and_stats(monkeypatch, capsys, tokens) -> None:
    _patch_client(monkeypatch, FakeClient(), tokens)

    exit_code = cli.main(["octocat", "--github-token", "ghp_cli"])

    out = capsys.readouterr().out
    assert exit_code == cli.EXIT_OK
    assert SLEEP_LINE in out
    assert "Commits analyzed: 1 | Repositories analyzed: 1" in out
    assert tokens == ["ghp_cli"]


def test_json_output(monkeypatch, capsys, tokens) -> None:
    _patch_client(monkeypatch, FakeClient(), tokens)

    exit_code = cli.main(["octocat", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == cli.EXIT_OK
    assert payload["username"] == "octocat"
    assert payload["stats"] == {"total_commits": 1, "repos_analyzed": 1}
    assert tokens == [None]


@pytest.mark.parametrize(
    ("error", "expected_code", "expected_status"),
    [
        (NotFound("Not Found"), cli.EXIT_NOT_FOUND, 404),
        (RateLimited("Provide a token"), cli.EXIT_RATE_LIMITED, 429),
        (UpstreamError("boom"), cli.EXIT_UPSTREAM, 500),
    ],
)
def test_upstream_errors_map_to_exit_codes(monkeypatch, capsys, tokens, error, expected_code, expected_status) -> None:
    _patch_client(monkeypatch, FakeClient(user_error=error), tokens)

    exit_code = cli.main(["octocat", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == expected_code
    assert payload["status"] == expected_status


def test_config_file_token_is_used(monkeypatch, capsys, tokens, tmp_path: Path) -> None:
    config_path = tmp_path / "roaster.yaml"
    config_path.write_text("github_token: ghp_file\nrepo_limit: 3\n", encoding="utf-8")
    _patch_client(monkeypatch, FakeClient(), tokens)

    exit_code = cli.main(["octocat", "--config", str(config_path)])

    assert exit_code == cli.EXIT_OK
    assert tokens == ["ghp_file"]


def test_invalid_config_reports_error(monkeypatch, capsys, tokens) -> None:
    _patch_client(monkeypatch, FakeClient(), tokens)

    exit_code = cli.main(["octocat", "--repo-limit", "0"])

    assert exit_code == cli.EXIT_CONFIG
    assert "Configuration error" in capsys.readouterr().out
    assert tokens == []


def test_blank_username_is_rejected(monkeypatch, capsys, tokens) -> None:
    _patch_client(monkeypatch, FakeClient(), tokens)

    exit_code = cli.main(["  "])

    assert exit_code == cli.EXIT_CONFIG
    assert "username is required" in capsys.readouterr().out
