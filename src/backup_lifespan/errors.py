from __future__ import annotations

from typing import Iterable, List, Optional


class LifespanError(Exception):
    """Base class for all errors raised by backup_lifespan."""


class InvalidPolicyError(LifespanError, ValueError):
    """A generation argument or spec cannot form a valid retention policy."""

    def __init__(self, message: str, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.token = token


class AmbiguousIdentityError(LifespanError):
    """An archive name appears more than once in a listing."""

    def __init__(self, duplicates: Iterable[str]) -> None:
        self.duplicates: List[str] = sorted(duplicates)
        super().__init__(
            "Archive names listed more than once: " + ", ".join(self.duplicates)
        )


class TarsnapError(LifespanError):
    """The tarsnap binary could not be run or exited with an error."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ArchiveParseError(LifespanError, ValueError):
    """A row of the archive listing could not be parsed."""

    def __init__(self, message: str, row: str = "") -> None:
        super().__init__(message)
        self.row = row
