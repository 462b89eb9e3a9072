# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the aggregation and promotion commands."""

from __future__ import annotations

from pathlib import Path

from .options import (
    DEBUG_OPTION,
    EMOJI_OPTION,
    REGISTRY_OPTION,
    REGISTRY_PASSWORD_OPTION,
    REGISTRY_USERNAME_OPTION,
    ROOT_OPTION,
    VERSION_ARGUMENT,
    CommonOptions,
    RegistryOptions,
)
from .shared import run_operation
from .typer_ext import create_typer

app = create_typer(
    help="Aggregate technology metadata, package it and promote its images.",
    no_args_is_help=True,
)


def _common(root: Path, emoji: bool, debug: bool) -> CommonOptions:
    return CommonOptions(root=root.resolve(), emoji=emoji, debug=debug)


@app.command("aggregate")
def aggregate(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Rebuild metadata.yaml for every technology."""

    run_operation(_common(root, emoji, debug), lambda pipeline: pipeline.aggregate_metadata())


@app.command("package")
def package(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Aggregate metadata then build the archive and docker listings."""

    run_operation(_common(root, emoji, debug), lambda pipeline: pipeline.package_for_promotion())


@app.command("package-all")
def package_all(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Package all versions."""

    run_operation(_common(root, emoji, debug), lambda pipeline: pipeline.package_all())


@app.command("fix-version")
def fix_version(
    version: VERSION_ARGUMENT,
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
    registry_username: REGISTRY_USERNAME_OPTION = None,
    registry_password: REGISTRY_PASSWORD_OPTION = None,
    registry: REGISTRY_OPTION = None,
) -> None:
    """Rewrite pre-release versions and push release tags to the registry."""

    run_operation(
        _common(root, emoji, debug),
        lambda pipeline: pipeline.fix_version(version),
        registry=RegistryOptions(username=registry_username, password=registry_password, registry=registry),
    )


@app.command("promote")
def promote(
    version: VERSION_ARGUMENT,
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
    registry_username: REGISTRY_USERNAME_OPTION = None,
    registry_password: REGISTRY_PASSWORD_OPTION = None,
    registry: REGISTRY_OPTION = None,
) -> None:
    """Fix versions then repackage every technology."""

    run_operation(
        _common(root, emoji, debug),
        lambda pipeline: pipeline.promote(version),
        registry=RegistryOptions(username=registry_username, password=registry_password, registry=registry),
    )


__all__ = ["app"]
