from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from backup_lifespan.models import Backup


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from real settings files and LIFESPAN_* variables."""
    for var in ("LIFESPAN_CONFIG", "LIFESPAN_GENERATIONS", "LIFESPAN_TARSNAP_BINARY", "LOG_FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture()
def backup() -> Callable[..., Backup]:
    """Factory: backup("name", 2018, 7, 1, 12) -> Backup at that UTC time."""

    def _make(name: str, *args: int) -> Backup:
        return Backup(name=name, timestamp=utc(*args))

    return _make


LISTING = (
    "archive-d1\t2018-07-01 12:00:00\n"
    "archive-d2\t2018-07-02 12:00:00\n"
    "archive-d3\t2018-07-03 12:00:00\n"
    "archive-d4\t2018-07-04 12:00:00\n"
    "archive-d5\t2018-07-05 12:00:00\n"
)


@pytest.fixture()
def listing() -> str:
    """Five daily archives in 'tarsnap --list-archives -v' format."""
    return LISTING
