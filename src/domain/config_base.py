"""Shared config-loading utilities for scoring systems."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib


@dataclass(frozen=True)
class BaseSystemConfig(ABC):
    """Metadata shared by every TOML-defined system config."""

    name: str
    description: str | None
    file_path: Path

    @abstractmethod
    def as_config_json(self) -> dict[str, Any]:
        """Settings as a JSON-ready mapping, without the system metadata."""


T = TypeVar("T", bound=BaseSystemConfig)


def read_toml(file_path: Path) -> dict[str, Any]:
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("rb") as file:
        return tomllib.load(file)


def parse_system_section(raw: dict[str, Any], file_path: Path) -> tuple[str, str | None]:
    """Return the required ``[system].name`` and optional description."""
    system_raw = raw.get("system", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)
    return name, description


def _config_files(config_dir: Path) -> list[Path]:
    if not config_dir.is_dir():
        if config_dir.exists():
            raise NotADirectoryError(f"Config path is not a directory: {config_dir}")
        raise FileNotFoundError(f"Config directory not found: {config_dir}")

    files = sorted(config_dir.glob("*.toml"))
    if not files:
        raise ValueError(f"No .toml config files found in: {config_dir}")
    return files


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "scoring",
) -> list[T]:
    """Parse every TOML file in ``config_dir``; system names must be unique."""
    configs = [parser(read_toml(file_path), file_path) for file_path in _config_files(config_dir)]

    duplicates = sorted(name for name, count in Counter(c.name for c in configs).items() if count > 1)
    if duplicates:
        raise ValueError(
            f"Duplicate {duplicate_name_label} system names found in {config_dir}: {duplicates}"
        )
    return configs


__all__ = ["BaseSystemConfig", "load_system_configs", "parse_system_section", "read_toml"]
