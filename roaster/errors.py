from __future__ import annotations

from datetime import datetime


class UpstreamFailure(Exception):
    status = 500


class NotFound(UpstreamFailure):
    status = 404


class RateLimited(UpstreamFailure):
    status = 429

    def __init__(self, hint: str, reset_at: datetime | None = None) -> None:
        super().__init__(hint)
        self.hint = hint
        self.reset_at = reset_at


class UpstreamError(UpstreamFailure):
    status = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
