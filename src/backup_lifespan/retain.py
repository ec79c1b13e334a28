from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence, Set

from .errors import AmbiguousIdentityError
from .generations import GenerationSpec, format_generation
from .intervals import BucketKey, bucket_key
from .logger import get_logger, log_extra
from .models import Backup, chronological_key
from .report import Decision, partition

log = get_logger(__name__)


def _representatives(backups: Iterable[Backup], spec: GenerationSpec) -> Dict[BucketKey, Backup]:
    # Walk oldest->newest so the last write per bucket is its newest backup;
    # equal timestamps resolve to the greatest name.
    buckets: Dict[BucketKey, Backup] = {}
    for b in sorted(backups, key=chronological_key):
        buckets[bucket_key(b.timestamp, spec.interval)] = b
    return buckets


def select_generation(backups: Iterable[Backup], spec: GenerationSpec) -> Set[Backup]:
    """
    Keep-set for a single generation.

    Groups backups into calendar buckets of ``spec.interval``, takes the
    newest backup of each bucket and keeps those of the ``spec.retain_count``
    most recent buckets. Fewer buckets than the count keeps them all.
    """
    buckets = _representatives(backups, spec)
    newest = sorted(buckets, reverse=True)[: spec.retain_count]
    selected = {buckets[k] for k in newest}
    log.debug(
        "Generation %s: %d buckets, keeping %s",
        format_generation(spec),
        len(buckets),
        ", ".join(sorted(b.name for b in selected)) or "nothing",
    )
    return selected


def compute_keep_set(backups: Iterable[Backup], policy: Sequence[GenerationSpec]) -> Set[Backup]:
    """Union of the per-generation keep-sets; an empty policy keeps nothing."""
    snapshot = list(backups)
    keep: Set[Backup] = set()
    for spec in policy:
        keep |= select_generation(snapshot, spec)
    return keep


def explain(backups: Iterable[Backup], policy: Sequence[GenerationSpec]) -> Dict[Backup, List[str]]:
    """Map each kept backup to the generation tokens that selected it."""
    snapshot = list(backups)
    reasons: Dict[Backup, List[str]] = {}
    for spec in policy:
        for b in select_generation(snapshot, spec):
            reasons.setdefault(b, []).append(format_generation(spec))
    return reasons


def check_identity(backups: Iterable[Backup]) -> None:
    """
    Raise AmbiguousIdentityError if any archive name is listed more than once.

    Deletion works by name, so a repeated name could expire an archive that
    another entry of the same name keeps.
    """
    counts = Counter(b.name for b in backups)
    dupes = [name for name, n in counts.items() if n > 1]
    if dupes:
        raise AmbiguousIdentityError(dupes)


def decide(
    backups: Iterable[Backup],
    policy: Sequence[GenerationSpec],
    keep_latest: bool = False,
) -> Decision:
    """
    Decide which backups survive ``policy``.

    Pure function of its inputs: the listing is validated, every generation
    is applied independently and their keep-sets merged. ``keep_latest``
    additionally protects the single newest backup.

    Raises AmbiguousIdentityError when the listing holds the same name twice.
    """
    snapshot = list(backups)
    check_identity(snapshot)

    keep = compute_keep_set(snapshot, policy)
    if keep_latest and snapshot:
        keep.add(max(snapshot, key=chronological_key))

    decision = partition(snapshot, keep)
    log.info(
        "Retention decided: keep %d, expire %d of %d backups",
        len(decision.kept),
        len(decision.expired),
        len(snapshot),
        extra=log_extra(
            kept=len(decision.kept),
            expired=len(decision.expired),
            policy=[format_generation(g) for g in policy],
        ),
    )
    return decision
