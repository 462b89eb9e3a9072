# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; arguments are passed as lists and
# ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from subprocess import CompletedProcess as _CompletedProcess  # nosec B404

TIMEOUT_RETURNCODE: Final[int] = 124


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def run_command(
    args: Sequence[str],
    *,
    input_text: str | None = None,
    timeout: float | None = None,
) -> _CompletedProcess[str]:
    """Execute ``args`` capturing text output.

    A timeout does not raise; it is reported as a completed process with
    return code :data:`TIMEOUT_RETURNCODE`.

    Args:
        args: Executable followed by its arguments.
        input_text: Text written to the child's stdin.
        timeout: Seconds to wait before the child is killed.

    Returns:
        CompletedProcess[str]: Result of the invocation.
    """

    normalized = _normalize_args(args)

    def _ensure_text(value: str | bytes | None) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return value.decode(errors="ignore")

    try:
        completed: _CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            check=False,
            capture_output=True,
            text=True,
            input=input_text,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout) or ""
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out"
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=stdout,
            stderr=combined_stderr,
        )
    return completed


__all__ = ["TIMEOUT_RETURNCODE", "run_command"]
