from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .generations import RetentionPolicy, parse_generation, parse_generations
from .logger import get_logger

log = get_logger(__name__)


class RetentionConfig(BaseModel):
    """Generations to keep, as command line tokens (e.g. ["31D", "10W", "12M"])."""

    generations: List[str] = Field(default_factory=list)
    keep_latest: bool = False

    @field_validator("generations")
    @classmethod
    def _check_generations(cls, v: List[str]) -> List[str]:
        # InvalidPolicyError is a ValueError, so pydantic reports it per item
        return [str(parse_generation(token)) for token in v]

    def policy(self) -> RetentionPolicy:
        return parse_generations(self.generations)


class TarsnapConfig(BaseModel):
    binary: str = "tarsnap"
    extra_args: List[str] = Field(default_factory=list)
    dry_run: bool = False


class Settings(BaseModel):
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    tarsnap: TarsnapConfig = Field(default_factory=TarsnapConfig)


def _find_settings_path(explicit: Optional[str]) -> Optional[Path]:
    if explicit:
        p = Path(explicit)
        if not p.is_file():
            raise FileNotFoundError(f"settings file not found: {explicit}")
        return p
    candidates = []
    env = os.getenv("LIFESPAN_CONFIG")
    if env:
        candidates.append(Path(env))
    candidates.extend([
        Path("lifespan.yaml"),
        Path("lifespan.yml"),
        Path("config/lifespan.yaml"),
    ])
    for p in candidates:
        if p and p.exists() and p.is_file():
            return p
    return None


def _apply_env_overrides(s: Settings) -> Settings:
    if binary := os.getenv("LIFESPAN_TARSNAP_BINARY"):
        s.tarsnap.binary = binary
    if gens := os.getenv("LIFESPAN_GENERATIONS"):
        s.retention = RetentionConfig(generations=gens.split(), keep_latest=s.retention.keep_latest)
    return s


def load_settings(path: Optional[str] = None) -> Settings:
    p = _find_settings_path(path)
    if not p:
        log.warning("No settings file found; using defaults")
        return _apply_env_overrides(Settings())

    with open(p, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            log.error("Settings file %s is not valid YAML: %s", p, e)
            raise ValueError(f"{p}: invalid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError(f"{p}: top level must be a mapping, got {type(raw).__name__}")

    try:
        s = Settings(**raw)
    except ValidationError as e:
        log.error("Settings validation failed: %s", e)
        raise

    log.debug("Loaded settings from %s", p)
    return _apply_env_overrides(s)
