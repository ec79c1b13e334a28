from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from .errors import InvalidPolicyError
from .intervals import IntervalKind
from .logger import get_logger

log = get_logger(__name__)

GEN_RE = re.compile(r"^(?P<count>\S*?)(?P<unit>[A-Za-z]?)$")


@dataclass(frozen=True)
class GenerationSpec:
    """Keep the newest backup of each of the ``retain_count`` most recent ``interval`` buckets."""

    retain_count: int
    interval: IntervalKind

    def __post_init__(self) -> None:
        if isinstance(self.retain_count, bool) or not isinstance(self.retain_count, int):
            raise InvalidPolicyError(f"retain count must be an integer, got {self.retain_count!r}")
        if self.retain_count < 1:
            raise InvalidPolicyError(f"retain count must be at least 1, got {self.retain_count}")
        if not isinstance(self.interval, IntervalKind):
            raise InvalidPolicyError(f"unknown interval kind: {self.interval!r}")

    def __str__(self) -> str:
        return format_generation(self)


RetentionPolicy = Tuple[GenerationSpec, ...]


def format_generation(spec: GenerationSpec) -> str:
    return f"{spec.retain_count}{spec.interval.value}"


def parse_generation(token: str) -> GenerationSpec:
    """
    Parse one generation argument of the form <count><H|D|W|M|Y>, e.g. '31D'.

    Raises InvalidPolicyError for a malformed token, an unknown interval
    letter, a non-numeric count or a zero count.
    """
    raw = token.strip() if isinstance(token, str) else ""
    if not raw:
        raise InvalidPolicyError(f"Failed to parse generation {token!r}: empty argument", token=str(token))

    m = GEN_RE.match(raw)
    if not m or not m.group("unit"):
        raise InvalidPolicyError(
            f"Failed to parse generation {raw!r}: expected <count><H|D|W|M|Y>", token=raw
        )

    count_s, unit = m.group("count"), m.group("unit")
    try:
        interval = IntervalKind(unit)
    except ValueError:
        raise InvalidPolicyError(
            f"Failed to parse generation {raw!r}: unknown interval {unit!r} (use H, D, W, M or Y)",
            token=raw,
        ) from None

    if not (count_s.isascii() and count_s.isdigit()):
        raise InvalidPolicyError(f"Failed to parse generation {raw!r}: count must be a number", token=raw)
    count = int(count_s)
    if count < 1:
        raise InvalidPolicyError(f"Failed to parse generation {raw!r}: count must be at least 1", token=raw)

    return GenerationSpec(retain_count=count, interval=interval)


def parse_generations(tokens: Iterable[str]) -> RetentionPolicy:
    """Parse all generation arguments; the first invalid one aborts parsing."""
    policy = tuple(parse_generation(t) for t in tokens)
    log.debug("Parsed generations: %s", " ".join(format_generation(g) for g in policy) or "(none)")
    return policy
