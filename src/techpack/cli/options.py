# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared option declarations for techpack commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

ROOT_OPTION = Annotated[
    Path,
    typer.Option(
        "--root",
        "-r",
        help="Project root containing the technologies directory.",
        file_okay=False,
    ),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Emit debug traces for every file touched."),
]
VERSION_ARGUMENT = Annotated[
    str,
    typer.Argument(help="Project version being promoted, e.g. 5.0+abc123."),
]
REGISTRY_USERNAME_OPTION = Annotated[
    str | None,
    typer.Option(
        "--registry-username",
        envvar="DOCKER_USERNAME",
        help="Registry user (defaults to $DOCKER_USERNAME).",
    ),
]
REGISTRY_PASSWORD_OPTION = Annotated[
    str | None,
    typer.Option(
        "--registry-password",
        envvar="DOCKER_PASSWORD",
        help="Registry password (defaults to $DOCKER_PASSWORD).",
        show_default=False,
    ),
]
REGISTRY_OPTION = Annotated[
    str | None,
    typer.Option("--registry", help="Registry host to log in to; Docker Hub when omitted."),
]


@dataclass(slots=True)
class CommonOptions:
    """Capture options shared by every command."""

    root: Path
    emoji: bool
    debug: bool


@dataclass(slots=True)
class RegistryOptions:
    """Capture registry authentication options."""

    username: str | None
    password: str | None
    registry: str | None


__all__ = [
    "CommonOptions",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "REGISTRY_OPTION",
    "REGISTRY_PASSWORD_OPTION",
    "REGISTRY_USERNAME_OPTION",
    "ROOT_OPTION",
    "RegistryOptions",
    "VERSION_ARGUMENT",
]
