from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from .intervals import to_utc


@dataclass(frozen=True)
class Backup:
    """One listed backup archive. Names are unique within a listing."""

    name: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "timestamp": to_utc(self.timestamp).isoformat()}


def chronological_key(backup: Backup) -> Tuple[datetime, str]:
    """Sort key: oldest first, equal timestamps ordered by name."""
    return to_utc(backup.timestamp), backup.name
