"""
Thin wrappers around the tarsnap command line.

Listing uses ``tarsnap --list-archives -v`` with TZ=0 so creation times come
back in UTC, one archive per line:

    archive-2018-07-16_11-01-03\t2018-07-16 11:01:03

Deletion passes every expired archive to a single ``tarsnap -d`` call.
"""

from __future__ import annotations

import os
import subprocess
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .errors import ArchiveParseError, TarsnapError
from .logger import get_logger
from .models import Backup

log = get_logger(__name__)

TARSNAP_BINARY = "tarsnap"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _run(argv: Sequence[str], env: Optional[dict] = None) -> subprocess.CompletedProcess:
    log.debug("Running: %s", " ".join(argv))
    try:
        result = subprocess.run(list(argv), capture_output=True, text=True, env=env, check=False)
    except OSError as e:
        raise TarsnapError(f"Failed to run {argv[0]}: {e}") from e
    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise TarsnapError(
            f"{argv[0]} exited with status {result.returncode}: {stderr or 'no error output'}",
            returncode=result.returncode,
            stderr=stderr,
        )
    return result


def list_archives(binary: str = TARSNAP_BINARY, extra_args: Sequence[str] = ()) -> str:
    """Return the raw ``--list-archives -v`` output."""
    env = dict(os.environ)
    env["TZ"] = "0"
    result = _run([binary, *extra_args, "--list-archives", "-v"], env=env)
    log.debug("Archives list:\n%s", result.stdout)
    return result.stdout


def parse_timestamp(s: str) -> datetime:
    """Parse '2018-07-14 11:15:32' as a UTC timestamp."""
    try:
        dt = datetime.strptime(s.strip(), TIMESTAMP_FORMAT)
    except ValueError as e:
        raise ArchiveParseError(f"Failed to parse timestamp {s!r}: {e}", row=s) from e
    return dt.replace(tzinfo=timezone.utc)


def parse_archive_row(row: str) -> Backup:
    parts = row.split("\t", 1)
    if len(parts) != 2 or not parts[0]:
        raise ArchiveParseError(f"Failed to parse timestamp: {row}", row=row)
    try:
        ts = parse_timestamp(parts[1])
    except ArchiveParseError as e:
        raise ArchiveParseError(f"Failed to parse timestamp: {row}", row=row) from e
    return Backup(name=parts[0], timestamp=ts)


def parse_archives(text: str) -> List[Backup]:
    """Parse a whole listing; blank lines are skipped, any malformed row fails."""
    return [parse_archive_row(row) for row in text.splitlines() if row.strip()]


def delete_archives(
    names: Iterable[str],
    binary: str = TARSNAP_BINARY,
    dry_run: bool = False,
    extra_args: Sequence[str] = (),
) -> List[str]:
    """
    Delete archives by name with one ``tarsnap -d`` call.

    Names are sorted first. With ``dry_run`` nothing is executed. Returns the
    sorted names that were (or would have been) deleted.
    """
    sorted_names = sorted(set(names))
    if not sorted_names:
        log.info("Didn't find anything to expire")
        return []

    log.info("Archives selected for deletion: %s", ", ".join(sorted_names))
    if dry_run:
        return sorted_names

    argv = [binary, *extra_args, "-d"]
    for name in sorted_names:
        argv.extend(["-f", name])
    _run(argv)
    return sorted_names
