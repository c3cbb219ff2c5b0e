from __future__ import annotations

import argparse
import json
import logging

from roaster.config import AppConfig, apply_overrides, load_app_config
from roaster.errors import NotFound, RateLimited, UpstreamFailure
from roaster.github import build_client
from roaster.report import error_payload, render_error, render_report, roast_user

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_NOT_FOUND = 2
EXIT_RATE_LIMITED = 3
EXIT_UPSTREAM = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Roast a GitHub user based on their recent commits")
    parser.add_argument("username", help="GitHub login to roast")
    parser.add_argument("--config", default=None, help="Optional roaster config YAML")
    parser.add_argument("--github-token", default=None, help="GitHub token override")
    parser.add_argument("--timezone", default=None, help="IANA timezone used for commit hours")
    parser.add_argument("--repo-limit", type=int, default=None, help="Number of recent repos to scan")
    parser.add_argument("--lookback-days", type=int, default=None, help="Trailing commit window in days")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = apply_overrides(
            load_app_config(args.config),
            github_token=args.github_token,
            timezone=args.timezone,
            repo_limit=args.repo_limit,
            lookback_days=args.lookback_days,
        )
    except (FileNotFoundError, ValueError) as exc:
        print(f"Configuration error: {exc}")
        return EXIT_CONFIG

    return _run(args.username, config, as_json=args.json)


def _run(username: str, config: AppConfig, as_json: bool) -> int:
    client = build_client(config.github_token)

    try:
        report = roast_user(username, client, config)
    except (UpstreamFailure, ValueError) as exc:
        if as_json:
            status, payload = error_payload(exc)
            print(json.dumps({"status": status, **payload}, indent=2))
        else:
            print(render_error(exc))
        return _exit_code(exc)

    if as_json:
        print(json.dumps(report.to_payload(), indent=2))
    else:
        print(render_report(report), end="")
    return EXIT_OK


def _exit_code(exc: Exception) -> int:
    if isinstance(exc, NotFound):
        return EXIT_NOT_FOUND
    if isinstance(exc, RateLimited):
        return EXIT_RATE_LIMITED
    if isinstance(exc, UpstreamFailure):
        return EXIT_UPSTREAM
    return EXIT_CONFIG


if __name__ == "__main__":
    raise SystemExit(main())
