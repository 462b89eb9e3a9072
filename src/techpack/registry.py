# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Container registry clients used to promote images."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final, Protocol, runtime_checkable

from .config import RegistryCredentials
from .constants import DEFAULT_REGISTRY_TIMEOUT_MINUTES
from .errors import RegistryError, RegistryTimeoutError
from .logging import ConsoleLogger
from .process_utils import TIMEOUT_RETURNCODE, run_command

DOCKER_EXECUTABLE: Final[str] = "docker"


@runtime_checkable
class RegistryClient(Protocol):
    """Capabilities required from a container registry."""

    def pull(self, reference: str) -> None:
        """Pull ``reference``, blocking until complete or timed out."""

    def tag(self, source_reference: str, target_image: str, target_tag: str) -> None:
        """Tag ``source_reference`` as ``target_image:target_tag``."""

    def push(self, reference: str) -> None:
        """Push ``reference``, blocking until complete or timed out."""


class DockerCliRegistryClient:
    """Drive the ``docker`` command line for pull, tag and push."""

    def __init__(
        self,
        *,
        logger: ConsoleLogger,
        credentials: RegistryCredentials | None = None,
        timeout_seconds: float = DEFAULT_REGISTRY_TIMEOUT_MINUTES * 60,
        executable: str = DOCKER_EXECUTABLE,
    ) -> None:
        """Create a client that logs in lazily before the first registry call.

        Args:
            logger: Logger receiving debug traces of each command.
            credentials: Registry credentials; anonymous access when ``None``.
            timeout_seconds: Bound applied to each pull and push.
            executable: Docker CLI executable name or path.
        """

        self._logger = logger
        self._credentials = credentials
        self._timeout = timeout_seconds
        self._executable = executable
        self._logged_in = credentials is None

    def _run(self, args: Sequence[str], *, reference: str, timeout: float | None, input_text: str | None = None) -> None:
        command = [self._executable, *args]
        self._logger.debug(f"registry command={args[0]} reference={reference}")
        try:
            completed = run_command(command, input_text=input_text, timeout=timeout)
        except OSError as exc:
            raise RegistryError(
                f"docker {args[0]} {reference} could not be started: {exc}",
                reference=reference,
            ) from exc
        if completed.returncode == TIMEOUT_RETURNCODE and timeout is not None:
            raise RegistryTimeoutError(
                f"docker {args[0]} {reference} did not complete within {timeout:.0f}s",
                reference=reference,
            )
        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip() or "<none>"
            raise RegistryError(
                f"docker {args[0]} {reference} exited with status {completed.returncode}: {stderr}",
                reference=reference,
            )

    def _ensure_login(self) -> None:
        if self._logged_in or self._credentials is None:
            return
        args = ["login", "--username", self._credentials.username, "--password-stdin"]
        if self._credentials.registry:
            args.append(self._credentials.registry)
        self._run(
            args,
            reference=self._credentials.registry or "default registry",
            timeout=self._timeout,
            input_text=self._credentials.password.get_secret_value(),
        )
        self._logged_in = True

    def pull(self, reference: str) -> None:
        self._ensure_login()
        self._run(["pull", reference], reference=reference, timeout=self._timeout)

    def tag(self, source_reference: str, target_image: str, target_tag: str) -> None:
        target = f"{target_image}:{target_tag}"
        self._run(["tag", source_reference, target], reference=target, timeout=None)

    def push(self, reference: str) -> None:
        self._ensure_login()
        self._run(["push", reference], reference=reference, timeout=self._timeout)


__all__ = ["DOCKER_EXECUTABLE", "DockerCliRegistryClient", "RegistryClient"]
