from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Collection, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from rich.markup import escape
from rich.table import Table

from .intervals import to_utc
from .models import Backup, chronological_key


@dataclass(frozen=True)
class Decision:
    """
    Partition of a backup listing into kept and expired backups.

    Both tuples are in chronological order (oldest first, equal timestamps
    by name), which is also the order deletions are issued and reported in.
    """

    kept: Tuple[Backup, ...]
    expired: Tuple[Backup, ...]

    @property
    def kept_names(self) -> FrozenSet[str]:
        return frozenset(b.name for b in self.kept)

    @property
    def expired_names(self) -> FrozenSet[str]:
        return frozenset(b.name for b in self.expired)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kept": [b.to_dict() for b in self.kept],
            "expired": [b.to_dict() for b in self.expired],
        }


def partition(backups: Iterable[Backup], keep_set: Collection[Backup]) -> Decision:
    """Split ``backups`` into those present in ``keep_set`` and the rest."""
    kept: List[Backup] = []
    expired: List[Backup] = []
    for b in sorted(backups, key=chronological_key):
        (kept if b in keep_set else expired).append(b)
    return Decision(kept=tuple(kept), expired=tuple(expired))


def summary_line(decision: Decision) -> str:
    total = len(decision.kept) + len(decision.expired)
    return f"{total} backups: keep {len(decision.kept)}, expire {len(decision.expired)}"


def render_table(
    decision: Decision,
    reasons: Optional[Mapping[Backup, List[str]]] = None,
    title: Optional[str] = None,
) -> Table:
    """Build a table of every backup with its status and the generations keeping it."""
    table = Table(title=title or summary_line(decision))
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Timestamp (UTC)", style="yellow")
    table.add_column("Status")
    table.add_column("Kept by", style="dim")

    rows = [(b, True) for b in decision.kept] + [(b, False) for b in decision.expired]
    rows.sort(key=lambda r: chronological_key(r[0]))
    for backup, kept in rows:
        why = ", ".join((reasons or {}).get(backup, [])) if kept else ""
        table.add_row(
            escape(backup.name),
            to_utc(backup.timestamp).strftime("%Y-%m-%d %H:%M:%S"),
            "[green]keep[/green]" if kept else "[red]expire[/red]",
            why or "-",
        )
    return table
