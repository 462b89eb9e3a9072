# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""YAML and JSON codec shared by every stage that reads or writes documents."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .errors import AmbiguousScalarError, DocumentParseError
from .models import AMBIGUOUS_FLOAT_ERROR

ModelT = TypeVar("ModelT", bound=BaseModel)


class DocumentFormat(str, Enum):
    """Enumerate the supported document encodings."""

    YAML = "yaml"
    JSON = "json"

    @classmethod
    def from_path(cls, path: Path) -> DocumentFormat:
        """Return the format implied by ``path``'s extension.

        Args:
            path: Document path whose suffix selects the backend.

        Returns:
            DocumentFormat: ``JSON`` for ``.json`` files, ``YAML`` otherwise.
        """

        return cls.JSON if path.suffix.lower() == ".json" else cls.YAML


def _decode(data: bytes | str) -> str:
    return data.decode("utf-8") if isinstance(data, bytes) else data


def _scalar_source_text(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    return loader.construct_scalar(node)


class ScalarTextLoader(yaml.SafeLoader):
    """Safe loader keeping integer, boolean and timestamp tokens as their source text.

    ``baseTag: 010`` loads as ``"010"``, not 8. Float tokens still load as
    ``float`` and are rejected by the ambiguous-float guard.
    """


for _tag in ("tag:yaml.org,2002:int", "tag:yaml.org,2002:bool", "tag:yaml.org,2002:timestamp"):
    ScalarTextLoader.add_constructor(_tag, _scalar_source_text)


def load_document(
    data: bytes | str,
    *,
    fmt: DocumentFormat = DocumentFormat.YAML,
    source: Path | None = None,
    loader: type[yaml.SafeLoader] = yaml.SafeLoader,
) -> Any:
    """Parse ``data`` into plain Python containers preserving key order.

    Args:
        data: Encoded document.
        fmt: Encoding of ``data``.
        source: Originating file used to enrich error messages.
        loader: Safe YAML loader class resolving scalar tokens.

    Returns:
        Any: Parsed document; an empty YAML document yields ``None``.

    Raises:
        DocumentParseError: If ``data`` is not valid YAML or JSON.
    """

    try:
        text = _decode(data)
        if fmt is DocumentFormat.JSON:
            return json.loads(text)
        return yaml.load(text, Loader=loader)  # nosec B506 - loader is a SafeLoader subclass
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"invalid {fmt.value} document: {exc}", path=source) from exc


def _without_nulls(document: Any) -> Any:
    if isinstance(document, Mapping):
        return {key: _without_nulls(value) for key, value in document.items() if value is not None}
    if isinstance(document, (list, tuple)):
        return [_without_nulls(item) for item in document]
    return document


def dump_document(document: Any, *, fmt: DocumentFormat = DocumentFormat.YAML) -> str:
    """Serialise ``document`` omitting ``None`` fields.

    YAML output keeps mapping order, has no leading ``---`` marker and only
    quotes strings that would otherwise resolve to another type. JSON output
    is indented by two spaces.

    Args:
        document: Plain containers or a pydantic model.
        fmt: Target encoding.

    Returns:
        str: Encoded document terminated by a newline.
    """

    if isinstance(document, BaseModel):
        document = document.model_dump(mode="json", by_alias=True, exclude_none=True)
    elif isinstance(document, (list, tuple)) and document and isinstance(document[0], BaseModel):
        document = [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in document]
    payload = _without_nulls(document)
    if fmt is DocumentFormat.JSON:
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(
        payload,
        sort_keys=False,
        default_flow_style=False,
        explicit_start=False,
        allow_unicode=True,
    )


def parse_model(
    data: bytes | str,
    model: type[ModelT],
    *,
    fmt: DocumentFormat = DocumentFormat.YAML,
    source: Path | None = None,
) -> ModelT:
    """Parse ``data`` and validate it against ``model``.

    Unknown fields are ignored. Integer, boolean and timestamp tokens reach
    string fields as written in the source. A float token bound to a string
    field raises :class:`AmbiguousScalarError` carrying the structural path of
    the field.

    Args:
        data: Encoded document.
        model: Pydantic model describing the document.
        fmt: Encoding of ``data``.
        source: Originating file used to enrich error messages.

    Returns:
        ModelT: Validated model instance.

    Raises:
        AmbiguousScalarError: If a string field holds a float token.
        DocumentParseError: If the document is unparsable or does not match ``model``.
    """

    payload = load_document(data, fmt=fmt, source=source, loader=ScalarTextLoader)
    if payload is None:
        payload = {}
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        for error in exc.errors():
            if error["type"] == AMBIGUOUS_FLOAT_ERROR:
                raise AmbiguousScalarError(error["input"], error["loc"], source=source) from exc
        raise DocumentParseError(f"does not match {model.__name__}: {exc}", path=source) from exc


def read_model(path: Path, model: type[ModelT]) -> ModelT:
    """Read ``path`` and validate it against ``model``.

    Args:
        path: YAML or JSON document on disk.
        model: Pydantic model describing the document.

    Returns:
        ModelT: Validated model instance.

    Raises:
        DocumentParseError: If the file cannot be read or validated.
    """

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DocumentParseError(f"cannot read document: {exc}", path=path) from exc
    return parse_model(data, model, fmt=DocumentFormat.from_path(path), source=path)


def read_text(path: Path) -> str:
    """Return the UTF-8 text of ``path`` with line endings untouched.

    Raises:
        DocumentParseError: If the file cannot be read or is not valid UTF-8.
    """

    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"cannot read document: {exc}", path=path) from exc


def read_document(path: Path) -> Any:
    """Read ``path`` into plain containers without schema validation."""

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DocumentParseError(f"cannot read document: {exc}", path=path) from exc
    return load_document(data, fmt=DocumentFormat.from_path(path), source=path)


__all__ = [
    "DocumentFormat",
    "ScalarTextLoader",
    "dump_document",
    "load_document",
    "parse_model",
    "read_document",
    "read_model",
    "read_text",
]
