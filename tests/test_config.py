from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from backup_lifespan.config import RetentionConfig, load_settings
from backup_lifespan.generations import GenerationSpec
from backup_lifespan.intervals import IntervalKind


def test_defaults_without_settings_file():
    s = load_settings(None)
    assert s.retention.generations == []
    assert s.retention.keep_latest is False
    assert s.tarsnap.binary == "tarsnap"
    assert s.tarsnap.dry_run is False


def test_load_settings_from_yaml(tmp_path):
    cfg = tmp_path / "custom.yaml"
    cfg.write_text(
        """
retention:
  generations: ["31D", " 10W", "12M"]
  keep_latest: true
tarsnap:
  binary: /usr/local/bin/tarsnap
  extra_args: ["--keyfile", "/root/tarsnap.key"]
  dry_run: true
        """,
        encoding="utf-8",
    )
    s = load_settings(str(cfg))
    assert s.retention.generations == ["31D", "10W", "12M"]
    assert s.retention.keep_latest is True
    assert s.retention.policy()[1] == GenerationSpec(10, IntervalKind.WEEKLY)
    assert s.tarsnap.binary == "/usr/local/bin/tarsnap"
    assert s.tarsnap.extra_args == ["--keyfile", "/root/tarsnap.key"]
    assert s.tarsnap.dry_run is True


def test_default_lookup_in_working_directory(tmp_path):
    (tmp_path / "lifespan.yaml").write_text("retention:\n  generations: [7D]\n", encoding="utf-8")
    assert load_settings(None).retention.generations == ["7D"]


def test_lookup_via_env(tmp_path, monkeypatch):
    cfg = tmp_path / "elsewhere.yml"
    cfg.write_text("retention:\n  generations: [2Y]\n", encoding="utf-8")
    monkeypatch.setenv("LIFESPAN_CONFIG", str(cfg))
    assert load_settings(None).retention.generations == ["2Y"]


def test_invalid_generation_in_yaml(tmp_path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("retention:\n  generations: [0D]\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(str(cfg))


def test_explicit_missing_file():
    with pytest.raises(FileNotFoundError):
        load_settings("does-not-exist.yaml")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LIFESPAN_TARSNAP_BINARY", "/opt/tarsnap")
    monkeypatch.setenv("LIFESPAN_GENERATIONS", "24H 7D")
    s = load_settings(None)
    assert s.tarsnap.binary == "/opt/tarsnap"
    assert s.retention.generations == ["24H", "7D"]


def test_retention_config_validates_tokens():
    with pytest.raises(ValidationError):
        RetentionConfig(generations=["5Q"])
    assert RetentionConfig().policy() == ()


def test_missing_settings_file_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="backup_lifespan.config"):
        load_settings(None)
    assert "No settings file found" in caplog.text


def test_yaml_syntax_error_is_value_error(tmp_path):
    cfg = tmp_path / "broken.yaml"
    cfg.write_text("retention: [31D\n  generations: {", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid YAML"):
        load_settings(str(cfg))


def test_top_level_must_be_mapping(tmp_path):
    cfg = tmp_path / "list.yaml"
    cfg.write_text("- 31D\n- 10W\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_settings(str(cfg))
