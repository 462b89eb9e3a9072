# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed views over technology metadata documents and docker listings."""

from __future__ import annotations

from typing import Annotated, Any, Final

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

AMBIGUOUS_FLOAT_ERROR: Final[str] = "ambiguous_float"


def _coerce_scalar_string(value: Any) -> Any:
    """Accept integer and boolean tokens as strings but reject floats.

    Args:
        value: Raw scalar produced by the YAML or JSON parser.

    Returns:
        Any: ``value`` converted to ``str`` when it is an integer or boolean,
        otherwise unchanged.

    Raises:
        PydanticCustomError: If ``value`` was lexically a floating-point number.
    """

    if isinstance(value, float):
        raise PydanticCustomError(
            AMBIGUOUS_FLOAT_ERROR,
            "this float value is ambiguous : {value}",
            {"value": value},
        )
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    return value


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


LenientStr = Annotated[str, BeforeValidator(_coerce_scalar_string)]


class _DocumentModel(BaseModel):
    """Base model tolerating unknown fields and camelCase document keys."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping with ``None`` fields omitted."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DockerInfo(_DocumentModel):
    """Container image coordinates attached to a context."""

    image: LenientStr
    base_tag: LenientStr
    version: LenientStr

    @property
    def reference(self) -> str:
        """Return the full ``image:baseTag-version`` reference."""

        return f"{self.image}:{self.base_tag}-{self.version}"

    def promoted_version(self, docker_formatted_version: str, release_version: str) -> str:
        """Return ``version`` with its pre-release suffix replaced by ``release_version``.

        Args:
            docker_formatted_version: Pre-release suffix (``+`` already replaced by ``_``).
            release_version: Bare release version substituted for the suffix.

        Returns:
            str: Promoted version; unchanged when ``version`` lacks the suffix.
        """

        if not self.version.endswith(docker_formatted_version):
            return self.version
        return self.version[: len(self.version) - len(docker_formatted_version)] + release_version

    def promoted_tag(self, docker_formatted_version: str, release_version: str) -> str:
        """Return the release tag ``baseTag-<promoted version>``."""

        return f"{self.base_tag}-{self.promoted_version(docker_formatted_version, release_version)}"

    def promoted_reference(self, docker_formatted_version: str, release_version: str) -> str:
        """Return the full release reference pushed to the registry."""

        return f"{self.image}:{self.promoted_tag(docker_formatted_version, release_version)}"


class DynamicValues(_DocumentModel):
    script: LenientStr | None = None


class Parameter(_DocumentModel):
    id: LenientStr | None = None
    dynamic_values: DynamicValues | None = None


class Action(_DocumentModel):
    id: LenientStr | None = None
    script: LenientStr | None = None


class Context(_DocumentModel):
    """Execution context declared by a technology, possibly nesting inner contexts."""

    id: LenientStr | None = None
    label: LenientStr | None = None
    parameters: Annotated[list[Parameter], BeforeValidator(_none_as_empty)] = Field(default_factory=list)
    actions: Annotated[list[Action], BeforeValidator(_none_as_empty)] = Field(default_factory=list)
    docker_info: DockerInfo | None = None
    inner_contexts: list[Context] | None = None


class TechnologyMetadata(_DocumentModel):
    """Root metadata document produced for one technology."""

    id: LenientStr | None = None
    label: LenientStr | None = None
    icon_path: LenientStr | None = None
    parameters: Annotated[list[Parameter], BeforeValidator(_none_as_empty)] = Field(default_factory=list)
    actions: Annotated[list[Action], BeforeValidator(_none_as_empty)] = Field(default_factory=list)
    docker_info: DockerInfo | None = None
    contexts: Annotated[list[Context], BeforeValidator(_none_as_empty)] = Field(default_factory=list)


class ListingContext(_DocumentModel):
    """Docker-only projection of a context."""

    id: str | None = None
    label: str | None = None
    docker: str | None = None
    inner_contexts: list[ListingContext] | None = None


class ListingEntry(_DocumentModel):
    """Docker-only projection of a technology metadata document."""

    id: str | None = None
    label: str | None = None
    docker: str | None = None
    contexts: list[ListingContext] | None = None


__all__ = [
    "AMBIGUOUS_FLOAT_ERROR",
    "Action",
    "Context",
    "DockerInfo",
    "DynamicValues",
    "LenientStr",
    "ListingContext",
    "ListingEntry",
    "Parameter",
    "TechnologyMetadata",
]
