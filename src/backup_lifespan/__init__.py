"""Grandfather-father-son retention decisions for backup archives."""

from .errors import (
    AmbiguousIdentityError,
    ArchiveParseError,
    InvalidPolicyError,
    LifespanError,
    TarsnapError,
)
from .generations import GenerationSpec, RetentionPolicy, parse_generation, parse_generations
from .intervals import BucketKey, IntervalKind, bucket_key, compare
from .report import Decision
from .retain import Backup, compute_keep_set, decide, select_generation

__version__ = "0.3.0"

__all__ = [
    "AmbiguousIdentityError",
    "ArchiveParseError",
    "Backup",
    "BucketKey",
    "Decision",
    "GenerationSpec",
    "IntervalKind",
    "InvalidPolicyError",
    "LifespanError",
    "RetentionPolicy",
    "TarsnapError",
    "bucket_key",
    "compare",
    "compute_keep_set",
    "decide",
    "parse_generation",
    "parse_generations",
    "select_generation",
]
