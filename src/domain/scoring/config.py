"""Load scoring engine settings from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.config_base import (
    BaseSystemConfig,
    load_system_configs,
    parse_system_section,
    read_toml,
)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "configs" / "scoring"


@dataclass(frozen=True)
class ScoringConfig(BaseSystemConfig):
    """Runtime knobs for one match-finished scoring run."""

    max_workers: int = 1
    max_write_retries: int = 3
    deduplicate: bool = True
    progression_limit: int = 10

    def as_config_json(self) -> dict[str, Any]:
        return {
            "max_workers": self.max_workers,
            "max_write_retries": self.max_write_retries,
            "deduplicate": self.deduplicate,
            "progression_limit": self.progression_limit,
        }


def default_scoring_config() -> ScoringConfig:
    """Settings used when no config file is given."""
    return ScoringConfig(name="default", description=None, file_path=Path("<defaults>"))


def load_scoring_config(file_path: Path) -> ScoringConfig:
    """Load and validate one scoring TOML config file."""
    return _parse_scoring_config(read_toml(file_path), file_path)


def load_scoring_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> list[ScoringConfig]:
    """Load and validate all scoring TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_scoring_config,
        duplicate_name_label="scoring",
    )


def _parse_scoring_config(raw: dict[str, Any], file_path: Path) -> ScoringConfig:
    name, description = parse_system_section(raw, file_path)
    scoring_raw = raw.get("scoring", {})

    deduplicate_value = scoring_raw.get("deduplicate", True)
    if not isinstance(deduplicate_value, bool):
        raise ValueError(f"{file_path}: [scoring].deduplicate must be true or false")

    config = ScoringConfig(
        name=name,
        description=description,
        file_path=file_path,
        max_workers=int(scoring_raw.get("max_workers", 1)),
        max_write_retries=int(scoring_raw.get("max_write_retries", 3)),
        deduplicate=deduplicate_value,
        progression_limit=int(scoring_raw.get("progression_limit", 10)),
    )
    _validate(config)
    return config


def _validate(config: ScoringConfig) -> None:
    file_path = config.file_path
    if config.max_workers < 1:
        raise ValueError(f"{file_path}: [scoring].max_workers must be >= 1")
    if config.max_write_retries < 1:
        raise ValueError(f"{file_path}: [scoring].max_write_retries must be >= 1")
    if config.progression_limit < 0:
        raise ValueError(f"{file_path}: [scoring].progression_limit must be >= 0")


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ScoringConfig",
    "default_scoring_config",
    "load_scoring_config",
    "load_scoring_configs",
]
