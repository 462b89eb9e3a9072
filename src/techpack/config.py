# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and the ``[tool.techpack]`` pyproject loader."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from .constants import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_EXCLUDED_SEGMENTS,
    DEFAULT_LISTING_NAME,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGISTRY_TIMEOUT_MINUTES,
    DEFAULT_TECHNOLOGIES_DIR,
)
from .errors import ConfigError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "techpack"


class TechpackConfig(BaseModel):
    """Filesystem layout and limits for one aggregation/packaging/promotion run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    project_root: Path = Field(default_factory=Path.cwd)
    technologies_dir: str = DEFAULT_TECHNOLOGIES_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    archive_name: str = DEFAULT_ARCHIVE_NAME
    listing_name: str = DEFAULT_LISTING_NAME
    excluded_segments: tuple[str, ...] = DEFAULT_EXCLUDED_SEGMENTS
    registry_timeout_minutes: float = Field(default=DEFAULT_REGISTRY_TIMEOUT_MINUTES, gt=0)

    @property
    def technologies_root(self) -> Path:
        """Return the directory holding every technology subtree."""

        return self.project_root / self.technologies_dir

    @property
    def staging_root(self) -> Path:
        """Return the directory receiving staged metadata, archive and listings."""

        return self.project_root / self.output_dir

    @property
    def staged_technologies_root(self) -> Path:
        """Return the staged copy of :attr:`technologies_root`."""

        return self.staging_root / self.technologies_dir

    @property
    def archive_path(self) -> Path:
        return self.staging_root / self.archive_name

    @property
    def listing_json_path(self) -> Path:
        return self.staging_root / f"{self.listing_name}.json"

    @property
    def listing_text_path(self) -> Path:
        return self.staging_root / f"{self.listing_name}.txt"

    @property
    def registry_timeout_seconds(self) -> float:
        return self.registry_timeout_minutes * 60


class RegistryCredentials(BaseModel):
    """Credentials used to authenticate against the container registry."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr
    registry: str | None = None


def load_config(project_root: Path, *, overrides: Mapping[str, Any] | None = None) -> TechpackConfig:
    """Build a :class:`TechpackConfig` for ``project_root``.

    Values come from ``[tool.techpack]`` in ``project_root/pyproject.toml``
    when present, then ``overrides``. A missing file or section yields the
    defaults.

    Args:
        project_root: Directory containing the technologies tree.
        overrides: Explicit values taking precedence over the file.

    Returns:
        TechpackConfig: Validated configuration rooted at ``project_root``.

    Raises:
        ConfigError: If the pyproject file is unreadable or the section is invalid.
    """

    root = project_root.resolve()
    payload: dict[str, Any] = dict(_read_pyproject_section(root / PYPROJECT_FILENAME))
    if overrides:
        payload.update(overrides)
    payload["project_root"] = root
    try:
        return TechpackConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{PYPROJECT_SECTION_KEY}] configuration: {exc}") from exc


def _read_pyproject_section(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return {key.replace("-", "_"): value for key, value in section.items()}


__all__ = [
    "PYPROJECT_SECTION_KEY",
    "RegistryCredentials",
    "TechpackConfig",
    "load_config",
]
