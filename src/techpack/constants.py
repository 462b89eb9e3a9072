# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File and directory names shared by the aggregation and promotion stages."""

from __future__ import annotations

from typing import Final

METADATA_BASENAME: Final[str] = "metadata"
TECHNOLOGY_BASENAME: Final[str] = "technology"
DOCKER_INFO_BASENAME: Final[str] = "dockerInfo"
CONTEXT_BASENAME: Final[str] = "context"
INNER_CONTEXT_BASENAME: Final[str] = "innerContext"
INNER_CONTEXTS_DIRECTORY: Final[str] = "innerContexts"

YAML_EXTENSIONS: Final[tuple[str, ...]] = (".yaml", ".yml")
METADATA_FILENAME: Final[str] = f"{METADATA_BASENAME}.yaml"

DEFAULT_TECHNOLOGIES_DIR: Final[str] = "technologies"
DEFAULT_OUTPUT_DIR: Final[str] = "tmp-zip"
DEFAULT_ARCHIVE_NAME: Final[str] = "technologies.zip"
DEFAULT_LISTING_NAME: Final[str] = "docker_listing"
DEFAULT_EXCLUDED_SEGMENTS: Final[tuple[str, ...]] = ("node_modules",)
DEFAULT_REGISTRY_TIMEOUT_MINUTES: Final[int] = 10

# Indentation emitted for fragments nested below ``innerContexts`` directories.
INNER_CONTEXT_INDENT: Final[str] = " " * 4
NESTED_INNER_CONTEXT_INDENT: Final[str] = " " * 8

__all__ = [
    "CONTEXT_BASENAME",
    "DEFAULT_ARCHIVE_NAME",
    "DEFAULT_EXCLUDED_SEGMENTS",
    "DEFAULT_LISTING_NAME",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_REGISTRY_TIMEOUT_MINUTES",
    "DEFAULT_TECHNOLOGIES_DIR",
    "DOCKER_INFO_BASENAME",
    "INNER_CONTEXTS_DIRECTORY",
    "INNER_CONTEXT_BASENAME",
    "INNER_CONTEXT_INDENT",
    "METADATA_BASENAME",
    "METADATA_FILENAME",
    "NESTED_INNER_CONTEXT_INDENT",
    "TECHNOLOGY_BASENAME",
    "YAML_EXTENSIONS",
]
