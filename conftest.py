"""Root conftest: pins the test environment before chat_sync.config is imported.

Values from ``.env.test`` override the defaults below; real environment
variables override both.
"""
from __future__ import annotations

import os
from pathlib import Path

TEST_ENV = {
    "CACHE_BACKEND": "memory",
    "CHAT_API_URL": "http://chat.test",
    "CHAT_AUTH_TOKEN": "",
}


def _read_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not path.exists():
        return values
    for raw in path.read_text().splitlines():
        entry = raw.strip()
        if entry and not entry.startswith("#") and "=" in entry:
            key, value = entry.split("=", 1)
            values[key.strip()] = value.strip()
    return values


for _key, _value in {**TEST_ENV, **_read_env_file(Path(__file__).parent / ".env.test")}.items():
    os.environ.setdefault(_key, _value)
