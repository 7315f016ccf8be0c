from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ApiError(AppError):
    """REST call answered with a non-success status or an unusable body."""

    def __init__(self, detail: str = "", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


class AuthError(AppError):
    """Bearer token is missing or cannot be decoded."""


class TransportError(AppError):
    """Realtime connection is unavailable."""


class NotFoundError(AppError):
    pass
