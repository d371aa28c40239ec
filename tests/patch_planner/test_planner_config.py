"""Planner config parsing and validation tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from patch_planner.config import (
    PlannerConfig,
    PlannerConfigError,
    load_planner_config,
)


def _write_config(tmp_path: Path, content: str) -> Path:
    config_dir = tmp_path / ".patch-planner"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


class TestLoadPlannerConfig:
    def test_defaults_when_absent(self, tmp_path: Path) -> None:
        config = load_planner_config(tmp_path)

        assert config == PlannerConfig()
        assert config.log_level_value == logging.WARNING

    def test_reads_planner_section(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            "planner:\n  project_file: ci/project.yml\n  log_level: debug\n  show_exclusions: true\n",
        )

        config = load_planner_config(tmp_path)

        assert config.project_file == "ci/project.yml"
        assert config.log_level == "DEBUG"
        assert config.log_level_value == logging.DEBUG
        assert config.show_exclusions is True

    def test_missing_section_uses_defaults(self, tmp_path: Path) -> None:
        _write_config(tmp_path, "other:\n  key: value\n")

        assert load_planner_config(tmp_path) == PlannerConfig()

    def test_corrupt_yaml_clear_error(self, tmp_path: Path) -> None:
        """Corrupt YAML should produce parse error, not silent fallback."""
        _write_config(tmp_path, "invalid: yaml: content: [")

        with pytest.raises(PlannerConfigError) as exc_info:
            load_planner_config(tmp_path)

        assert "Invalid YAML" in str(exc_info.value)
        assert "config.yaml" in str(exc_info.value)

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ("  log_level: loud\n", "log_level"),
            ("  project_file: ''\n", "project_file"),
            ("  show_exclusions: maybe\n", "show_exclusions"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, message: str) -> None:
        _write_config(tmp_path, "planner:\n" + body)

        with pytest.raises(PlannerConfigError, match=message):
            load_planner_config(tmp_path)

