"""Planner configuration in .patch-planner/config.yaml."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML

CONFIG_DIRNAME = ".patch-planner"
CONFIG_FILENAME = "config.yaml"
CONFIG_SECTION = "planner"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PlannerConfigError(RuntimeError):
    """Raised when planner configuration is invalid."""


@dataclass(slots=True)
class PlannerConfig:
    """Planner settings stored under the ``planner`` key."""

    project_file: str = "project.yml"
    log_level: str = "WARNING"
    show_exclusions: bool = False

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "PlannerConfig":
        if not isinstance(data, dict):
            return cls()

        defaults = cls()
        project_file = data.get("project_file", defaults.project_file)
        if not isinstance(project_file, str) or not project_file.strip():
            raise PlannerConfigError("planner.project_file must be a non-empty string")

        log_level = data.get("log_level", defaults.log_level)
        if not isinstance(log_level, str) or log_level.strip().upper() not in LOG_LEVELS:
            raise PlannerConfigError(
                f"planner.log_level must be one of: {', '.join(LOG_LEVELS)}"
            )

        show_exclusions = data.get("show_exclusions", defaults.show_exclusions)
        if not isinstance(show_exclusions, bool):
            raise PlannerConfigError("planner.show_exclusions must be true or false")

        return cls(
            project_file=project_file.strip(),
            log_level=log_level.strip().upper(),
            show_exclusions=show_exclusions,
        )


def _config_path(root: Path) -> Path:
    return root / CONFIG_DIRNAME / CONFIG_FILENAME


def load_planner_config(root: Path) -> PlannerConfig:
    """Load planner config from ``root``; defaults when the file is absent."""
    config_path = _config_path(root)
    if not config_path.exists():
        return PlannerConfig()

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except Exception as exc:
        raise PlannerConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    section = payload.get(CONFIG_SECTION) if isinstance(payload, dict) else None
    return PlannerConfig.from_dict(section if isinstance(section, dict) else None)

