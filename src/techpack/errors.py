# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by the aggregation, packaging and promotion stages."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

DocumentPath = tuple[str | int, ...]


class TechpackError(RuntimeError):
    """Base class for every failure surfaced to the operator."""


class ConfigError(TechpackError):
    """Raised when configuration input is invalid."""


class MalformedFragmentError(TechpackError):
    """Raised when a fragment file is missing, misnamed or unparsable."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialise the error with the offending file when known.

        Args:
            message: Human-readable description of the problem.
            path: Fragment or directory responsible for the failure.
        """

        super().__init__(f"{path}: {message}" if path is not None else message)
        self.path = path


class DocumentParseError(MalformedFragmentError):
    """Raised when a YAML or JSON document cannot be decoded into its model."""


class AmbiguousScalarError(TechpackError):
    """Raised when a string-typed field holds a token that parses as a float."""

    def __init__(self, value: object, location: Sequence[str | int], *, source: Path | None = None) -> None:
        """Record the offending value and its structural location.

        Args:
            value: Raw scalar produced by the document parser.
            location: Keys and indices leading from the document root to the field.
            source: Document the value was read from, when known.
        """

        self.value = value
        self.location: DocumentPath = tuple(location)
        self.source = source
        rendered = format_document_path(self.location)
        prefix = f"{source}: " if source is not None else ""
        super().__init__(f"{prefix}this float value is ambiguous : {rendered} ({value!r})")


class RegistryError(TechpackError):
    """Raised when a registry command exits unsuccessfully."""

    def __init__(self, message: str, *, reference: str | None = None) -> None:
        super().__init__(message)
        self.reference = reference


class RegistryTimeoutError(RegistryError):
    """Raised when a pull or push does not complete within the configured bound."""


class MissingReferencedFileError(TechpackError):
    """Raised when metadata references a script or icon absent from disk."""

    def __init__(self, reference: str, *, metadata: Path, expected: Path) -> None:
        super().__init__(f"{metadata}: referenced file '{reference}' not found at {expected}")
        self.reference = reference
        self.metadata = metadata
        self.expected = expected


def format_document_path(location: Sequence[str | int]) -> str:
    """Render ``location`` using JSON-pointer-like notation.

    Args:
        location: Container keys and sequence indices from the document root.

    Returns:
        str: Rendered path such as ``/contexts/0/dockerInfo/version``.
    """

    if not location:
        return "/"
    return "".join(f"/{part}" for part in location)


__all__ = [
    "AmbiguousScalarError",
    "ConfigError",
    "DocumentParseError",
    "DocumentPath",
    "MalformedFragmentError",
    "MissingReferencedFileError",
    "RegistryError",
    "RegistryTimeoutError",
    "TechpackError",
    "format_document_path",
]
