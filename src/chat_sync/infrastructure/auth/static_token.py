from __future__ import annotations


class StaticTokenProvider:
    """TokenProvider over a fixed token, e.g. one taken from the environment."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def get_auth_token(self) -> str | None:
        return self._token

    def set_auth_token(self, token: str | None) -> None:
        self._token = token
