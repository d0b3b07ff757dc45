"""Tests for TOML-based scoring config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.config_base import BaseSystemConfig
from domain.scoring.config import (
    DEFAULT_CONFIG_DIR,
    default_scoring_config,
    load_scoring_config,
    load_scoring_configs,
)


def test_load_scoring_config_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "parallel.toml"
    config_path.write_text(
        """
[system]
name = "parallel"
description = "Four workers"

[scoring]
max_workers = 4
max_write_retries = 5
deduplicate = false
progression_limit = 0
""".strip()
    )

    config = load_scoring_config(config_path)

    assert config.name == "parallel"
    assert config.description == "Four workers"
    assert config.file_path == config_path
    assert config.max_workers == 4
    assert config.max_write_retries == 5
    assert config.deduplicate is False
    assert config.progression_limit == 0
    assert config.as_config_json() == {
        "max_workers": 4,
        "max_write_retries": 5,
        "deduplicate": False,
        "progression_limit": 0,
    }


def test_missing_scoring_section_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "minimal.toml"
    config_path.write_text('[system]\nname = "minimal"\n')

    config = load_scoring_config(config_path)

    assert config.description is None
    assert config.max_workers == 1
    assert config.max_write_retries == 3
    assert config.deduplicate is True
    assert config.progression_limit == 10


def test_default_scoring_config_matches_file_defaults() -> None:
    config = default_scoring_config()
    assert config.as_config_json() == {
        "max_workers": 1,
        "max_write_retries": 3,
        "deduplicate": True,
        "progression_limit": 10,
    }


def test_repository_default_config_loads() -> None:
    configs = load_scoring_configs(DEFAULT_CONFIG_DIR)
    assert "default" in [config.name for config in configs]


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[system]\n", "[system].name is required"),
        ('[system]\nname = "x"\n[scoring]\nmax_workers = 0\n', "max_workers must be >= 1"),
        ('[system]\nname = "x"\n[scoring]\nmax_write_retries = 0\n', "max_write_retries must be >= 1"),
        ('[system]\nname = "x"\n[scoring]\nprogression_limit = -1\n', "progression_limit must be >= 0"),
        ('[system]\nname = "x"\n[scoring]\ndeduplicate = "yes"\n', "deduplicate must be true or false"),
    ],
)
def test_invalid_config_raises(tmp_path: Path, body: str, message: str) -> None:
    config_path = tmp_path / "bad.toml"
    config_path.write_text(body)

    with pytest.raises(ValueError, match=message.replace("[", r"\[").replace("]", r"\]")):
        load_scoring_config(config_path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_scoring_config(tmp_path / "absent.toml")


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('[system]\nname = "dup"\n')
    (tmp_path / "b.toml").write_text('[system]\nname = "dup"\n')

    with pytest.raises(ValueError, match="Duplicate scoring system names"):
        load_scoring_configs(tmp_path)


def test_empty_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No .toml config files"):
        load_scoring_configs(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_scoring_configs(tmp_path / "absent")


def test_file_instead_of_directory_raises(tmp_path: Path) -> None:
    file_path = tmp_path / "scoring.toml"
    file_path.write_text('[system]\nname = "solo"\n')

    with pytest.raises(NotADirectoryError):
        load_scoring_configs(file_path)


def test_base_config_requires_settings_json() -> None:
    with pytest.raises(TypeError):
        BaseSystemConfig(name="x", description=None, file_path=Path("x.toml"))
