# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discover technology subtrees and the ordered context fragments inside them."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from .constants import (
    CONTEXT_BASENAME,
    DEFAULT_EXCLUDED_SEGMENTS,
    DOCKER_INFO_BASENAME,
    INNER_CONTEXT_BASENAME,
    INNER_CONTEXT_INDENT,
    INNER_CONTEXTS_DIRECTORY,
    METADATA_FILENAME,
    NESTED_INNER_CONTEXT_INDENT,
    TECHNOLOGY_BASENAME,
    YAML_EXTENSIONS,
)
from .errors import MalformedFragmentError


class DirectoryKind(str, Enum):
    """Role played by a directory within a technology subtree."""

    TECHNOLOGY_ROOT = "technology-root"
    TOP_LEVEL_CONTEXT = "top-level-context"
    INNER_CONTEXT = "inner-context"
    LEAF = "leaf"


@dataclass(frozen=True, slots=True)
class DirectoryMarkers:
    """Marker files found directly inside one directory."""

    technology: Path | None = None
    context: Path | None = None
    inner_context: Path | None = None
    docker_info: Path | None = None
    has_inner_contexts_dir: bool = False


@dataclass(frozen=True, slots=True)
class ClassifiedDirectory:
    """Directory tagged with its role inside a technology subtree."""

    path: Path
    relative_path: PurePosixPath
    kind: DirectoryKind
    markers: DirectoryMarkers


@dataclass(frozen=True, slots=True)
class ContextFragment:
    """Fragment file to splice into the merged ``contexts`` block."""

    directory: Path
    relative_path: PurePosixPath
    fragment: Path
    indent: str
    docker_info: Path | None = None


@dataclass(frozen=True, slots=True)
class InnerContextsHeader:
    """Opening ``innerContexts:`` key emitted between fragments."""

    indent: str


ScanEvent = ContextFragment | InnerContextsHeader


@dataclass(frozen=True, slots=True)
class TechnologySubtree:
    """One technology directory together with its ordered fragment events."""

    root: Path
    relative_path: PurePosixPath
    technology_file: Path
    events: tuple[ScanEvent, ...]

    @property
    def name(self) -> str:
        return self.relative_path.as_posix()

    @property
    def metadata_path(self) -> Path:
        return self.root / METADATA_FILENAME

    @property
    def contexts(self) -> tuple[ContextFragment, ...]:
        """Return only the fragment events, in emission order."""

        return tuple(event for event in self.events if isinstance(event, ContextFragment))


def walk_directories(
    root: Path,
    *,
    excluded_segments: Sequence[str] = DEFAULT_EXCLUDED_SEGMENTS,
) -> Iterator[tuple[Path, list[str], list[str]]]:
    """Walk ``root`` top-down in lexicographic order.

    Siblings are visited sorted by name and each directory precedes its
    descendants, which matches ordering paths component by component.
    Directories named in ``excluded_segments`` are never entered.

    Args:
        root: Directory to traverse.
        excluded_segments: Directory names pruned from the walk.

    Yields:
        tuple[Path, list[str], list[str]]: Directory, sorted sub-directory
        names and sorted file names.
    """

    excluded = frozenset(excluded_segments)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in excluded)
        yield Path(dirpath), list(dirnames), sorted(filenames)


def find_named_files(
    root: Path,
    names: Iterable[str],
    *,
    excluded_segments: Sequence[str] = DEFAULT_EXCLUDED_SEGMENTS,
) -> list[Path]:
    """Return files under ``root`` whose name is one of ``names``, in walk order."""

    wanted = frozenset(names)
    if not root.is_dir():
        return []
    return [
        directory / filename
        for directory, _dirnames, filenames in walk_directories(root, excluded_segments=excluded_segments)
        for filename in filenames
        if filename in wanted
    ]


def yaml_names(basename: str) -> tuple[str, ...]:
    """Return the accepted file names for marker ``basename``."""

    return tuple(f"{basename}{suffix}" for suffix in YAML_EXTENSIONS)


def _marker(directory: Path, filenames: Iterable[str], basename: str) -> Path | None:
    """Return the marker file for ``basename`` in ``directory`` if one exists.

    Raises:
        MalformedFragmentError: If the marker exists only with a non-YAML extension.
    """

    candidates = [name for name in filenames if PurePosixPath(name).stem == basename]
    if not candidates:
        return None
    for accepted in yaml_names(basename):
        if accepted in candidates:
            return directory / accepted
    raise MalformedFragmentError(
        f"marker '{basename}' must use one of {', '.join(YAML_EXTENSIONS)} (found {', '.join(sorted(candidates))})",
        path=directory,
    )


def read_markers(directory: Path, dirnames: Iterable[str], filenames: Iterable[str]) -> DirectoryMarkers:
    """Collect the marker files sitting directly inside ``directory``."""

    names = list(filenames)
    return DirectoryMarkers(
        technology=_marker(directory, names, TECHNOLOGY_BASENAME),
        context=_marker(directory, names, CONTEXT_BASENAME),
        inner_context=_marker(directory, names, INNER_CONTEXT_BASENAME),
        docker_info=_marker(directory, names, DOCKER_INFO_BASENAME),
        has_inner_contexts_dir=INNER_CONTEXTS_DIRECTORY in set(dirnames),
    )


def classify(directory: Path, technology_root: Path, markers: DirectoryMarkers) -> ClassifiedDirectory:
    """Tag ``directory`` with its role relative to ``technology_root``.

    Args:
        directory: Directory being classified.
        technology_root: Root of the enclosing technology subtree.
        markers: Marker files found in ``directory``.

    Returns:
        ClassifiedDirectory: Directory tagged with a :class:`DirectoryKind`.
    """

    relative = PurePosixPath(directory.relative_to(technology_root).as_posix())
    if directory == technology_root:
        kind = DirectoryKind.TECHNOLOGY_ROOT
    elif INNER_CONTEXTS_DIRECTORY in relative.parts and (markers.context or markers.inner_context):
        kind = DirectoryKind.INNER_CONTEXT
    elif markers.context is not None:
        kind = DirectoryKind.TOP_LEVEL_CONTEXT
    else:
        kind = DirectoryKind.LEAF
    return ClassifiedDirectory(path=directory, relative_path=relative, kind=kind, markers=markers)


def events_for(directory: ClassifiedDirectory) -> list[ScanEvent]:
    """Return the fragment and header events contributed by ``directory``.

    A context fragment sitting next to an ``innerContexts`` directory is
    emitted before the header that opens its inner contexts.
    """

    markers = directory.markers
    events: list[ScanEvent] = []
    if directory.kind is DirectoryKind.TOP_LEVEL_CONTEXT and markers.context is not None:
        events.append(_fragment(directory, markers.context, ""))
    elif directory.kind is DirectoryKind.INNER_CONTEXT:
        indent = NESTED_INNER_CONTEXT_INDENT if markers.inner_context else INNER_CONTEXT_INDENT
        if markers.context is not None:
            events.append(_fragment(directory, markers.context, indent))
    if markers.has_inner_contexts_dir and directory.kind is not DirectoryKind.TECHNOLOGY_ROOT:
        events.append(InnerContextsHeader(indent=INNER_CONTEXT_INDENT))
    if directory.kind is DirectoryKind.INNER_CONTEXT:
        if markers.context is not None:
            events.append(InnerContextsHeader(indent=NESTED_INNER_CONTEXT_INDENT))
        if markers.inner_context is not None:
            events.append(_fragment(directory, markers.inner_context, NESTED_INNER_CONTEXT_INDENT))
    return events


def _fragment(directory: ClassifiedDirectory, fragment: Path, indent: str) -> ContextFragment:
    return ContextFragment(
        directory=directory.path,
        relative_path=directory.relative_path,
        fragment=fragment,
        indent=indent,
        docker_info=directory.markers.docker_info,
    )


def scan_subtree(
    technology_root: Path,
    *,
    base: Path,
    excluded_segments: Sequence[str] = DEFAULT_EXCLUDED_SEGMENTS,
) -> TechnologySubtree:
    """Build the :class:`TechnologySubtree` rooted at ``technology_root``.

    Args:
        technology_root: Directory directly containing the technology marker.
        base: Scan root used to compute the subtree's relative path.
        excluded_segments: Directory names pruned from the walk.

    Returns:
        TechnologySubtree: Subtree with its ordered fragment events.

    Raises:
        MalformedFragmentError: If the technology marker is missing or misnamed.
    """

    events: list[ScanEvent] = []
    technology_file: Path | None = None
    for directory, dirnames, filenames in walk_directories(technology_root, excluded_segments=excluded_segments):
        markers = read_markers(directory, dirnames, filenames)
        classified = classify(directory, technology_root, markers)
        if classified.kind is DirectoryKind.TECHNOLOGY_ROOT:
            technology_file = markers.technology
        events.extend(events_for(classified))
    if technology_file is None:
        raise MalformedFragmentError(f"missing {TECHNOLOGY_BASENAME} descriptor", path=technology_root)
    return TechnologySubtree(
        root=technology_root,
        relative_path=PurePosixPath(technology_root.relative_to(base).as_posix()),
        technology_file=technology_file,
        events=tuple(events),
    )


def scan(
    root: Path,
    *,
    excluded_segments: Sequence[str] = DEFAULT_EXCLUDED_SEGMENTS,
) -> list[TechnologySubtree]:
    """Return every technology subtree under ``root`` in lexicographic order.

    Args:
        root: Directory holding technology subtrees; a missing directory yields nothing.
        excluded_segments: Directory names pruned from the walk.

    Returns:
        list[TechnologySubtree]: Discovered subtrees.
    """

    if not root.is_dir():
        return []
    subtrees: list[TechnologySubtree] = []
    for directory, _dirnames, filenames in walk_directories(root, excluded_segments=excluded_segments):
        if not any(PurePosixPath(name).stem == TECHNOLOGY_BASENAME for name in filenames):
            continue
        subtrees.append(scan_subtree(directory, base=root, excluded_segments=excluded_segments))
    return subtrees


__all__ = [
    "ClassifiedDirectory",
    "ContextFragment",
    "DirectoryKind",
    "DirectoryMarkers",
    "InnerContextsHeader",
    "ScanEvent",
    "TechnologySubtree",
    "classify",
    "events_for",
    "find_named_files",
    "read_markers",
    "scan",
    "scan_subtree",
    "walk_directories",
    "yaml_names",
]
