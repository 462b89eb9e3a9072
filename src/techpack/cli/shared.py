# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (errors, pipeline construction)."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import typer
from pydantic import SecretStr

from ..config import RegistryCredentials, load_config
from ..errors import TechpackError
from ..logging import ConsoleLogger, build_logger
from ..pipeline import TechnologyPipeline
from ..registry import DockerCliRegistryClient
from .options import CommonOptions, RegistryOptions

ResultT = TypeVar("ResultT")


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


def build_credentials(options: RegistryOptions) -> RegistryCredentials | None:
    """Return explicit registry credentials, or ``None`` for anonymous access.

    Raises:
        CLIError: If only one of username and password was supplied.
    """

    if options.username is None and options.password is None:
        return None
    if not options.username or options.password is None:
        raise CLIError("--registry-username and --registry-password must be supplied together")
    return RegistryCredentials(
        username=options.username,
        password=SecretStr(options.password),
        registry=options.registry,
    )


def build_pipeline(
    options: CommonOptions,
    logger: ConsoleLogger,
    *,
    registry: RegistryOptions | None = None,
) -> TechnologyPipeline:
    """Load configuration for ``options.root`` and wire a pipeline."""

    config = load_config(options.root)
    client = None
    if registry is not None:
        client = DockerCliRegistryClient(
            logger=logger,
            credentials=build_credentials(registry),
            timeout_seconds=config.registry_timeout_seconds,
        )
    return TechnologyPipeline(config, logger=logger, registry=client)


def run_operation(
    options: CommonOptions,
    operation: Callable[[TechnologyPipeline], ResultT],
    *,
    registry: RegistryOptions | None = None,
) -> ResultT:
    """Execute ``operation`` translating failures into a non-zero exit.

    Args:
        options: Options shared by every command.
        operation: Callable receiving the wired pipeline.
        registry: Registry options for commands that talk to the registry.

    Returns:
        ResultT: Value returned by ``operation``.

    Raises:
        typer.Exit: When configuration or the operation fails.
    """

    logger = build_logger(emoji=options.emoji, debug=options.debug)
    try:
        pipeline = build_pipeline(options, logger, registry=registry)
        return operation(pipeline)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except TechpackError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc


__all__ = ["CLIError", "build_credentials", "build_pipeline", "run_operation"]
