# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project metadata documents onto docker-only listings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from .codec import DocumentFormat, dump_document, read_model
from .models import Context, ListingContext, ListingEntry, TechnologyMetadata

# Inner contexts are listed down to ``context.innerContexts[].innerContexts[]``.
LISTING_INNER_DEPTH: Final[int] = 2


def _project_context(context: Context, depth: int) -> ListingContext:
    inner: list[ListingContext] | None = None
    if context.inner_contexts is not None and depth < LISTING_INNER_DEPTH:
        inner = [_project_context(child, depth + 1) for child in context.inner_contexts]
    return ListingContext(
        id=context.id,
        label=context.label,
        docker=context.docker_info.reference if context.docker_info else None,
        inner_contexts=inner,
    )


def to_listing(metadata: TechnologyMetadata) -> ListingEntry:
    """Return the docker-only projection of ``metadata``.

    Args:
        metadata: Parsed technology metadata document.

    Returns:
        ListingEntry: Identity fields, the technology's own image and the
        images of its contexts and inner contexts.
    """

    return ListingEntry(
        id=metadata.id,
        label=metadata.label,
        docker=metadata.docker_info.reference if metadata.docker_info else None,
        contexts=[_project_context(context, 0) for context in metadata.contexts] or None,
    )


def _iter_context_images(contexts: Iterable[ListingContext]) -> Iterable[str]:
    for context in contexts:
        if context.docker is not None:
            yield context.docker
        if context.inner_contexts:
            yield from _iter_context_images(context.inner_contexts)


def docker_images(entries: Iterable[ListingEntry]) -> list[str]:
    """Return every distinct image reference in ``entries``, first-seen order."""

    images: dict[str, None] = {}
    for entry in entries:
        if entry.docker is not None:
            images.setdefault(entry.docker, None)
        for image in _iter_context_images(entry.contexts or ()):
            images.setdefault(image, None)
    return list(images)


def build_listing(metadata_files: Sequence[Path]) -> list[ListingEntry]:
    """Read ``metadata_files`` and project each onto a :class:`ListingEntry`."""

    return [to_listing(read_model(path, TechnologyMetadata)) for path in metadata_files]


def write_listing(entries: Sequence[ListingEntry], *, json_path: Path, text_path: Path) -> list[str]:
    """Write the JSON listing and the newline-delimited image list.

    Args:
        entries: Listing entries in traversal order.
        json_path: Destination of the pretty-printed JSON array.
        text_path: Destination of the distinct image references.

    Returns:
        list[str]: Distinct image references written to ``text_path``.
    """

    json_path.write_text(dump_document(list(entries), fmt=DocumentFormat.JSON), encoding="utf-8")
    images = docker_images(entries)
    text_path.write_text("".join(f"{image}\n" for image in images), encoding="utf-8")
    return images


__all__ = [
    "LISTING_INNER_DEPTH",
    "build_listing",
    "docker_images",
    "to_listing",
    "write_listing",
]
