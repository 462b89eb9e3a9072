# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge technology descriptors and context fragments into ``metadata.yaml``."""

from __future__ import annotations

import json
import posixpath
from collections.abc import Mapping, Sequence
from pathlib import Path, PurePosixPath
from typing import Final

from .codec import load_document, read_model, read_text
from .constants import DEFAULT_EXCLUDED_SEGMENTS
from .errors import MalformedFragmentError
from .logging import ConsoleLogger
from .models import DockerInfo
from .scanner import ContextFragment, InnerContextsHeader, TechnologySubtree, scan

CONTEXTS_KEY: Final[str] = "contexts"
CURRENT_SCRIPT_PREFIX: Final[str] = "script: ./"
PARENT_SCRIPT_PREFIX: Final[str] = "script: ../"


def rewrite_script_paths(line: str, relative_path: PurePosixPath) -> str:
    """Make ``script:`` references in ``line`` relative to the technology root.

    ``script: ./X`` becomes ``script: ./<relative_path>/X`` and
    ``script: ../X`` resolves ``..`` against ``relative_path`` first.

    Args:
        line: Raw line read from a context fragment.
        relative_path: Location of the fragment's directory inside the technology.

    Returns:
        str: Line with script references rewritten; other lines are unchanged.
    """

    current = relative_path.as_posix()
    parent = posixpath.normpath(posixpath.join(current, ".."))
    parent_prefix = "script: ./" if parent == "." else f"script: ./{parent}/"
    return line.replace(CURRENT_SCRIPT_PREFIX, f"script: ./{current}/").replace(PARENT_SCRIPT_PREFIX, parent_prefix)


def render_docker_info(docker_info: DockerInfo, indent: str) -> list[str]:
    """Return the ``dockerInfo`` block appended after a context body.

    Values are emitted as double-quoted scalars with JSON escaping, which YAML
    reads back unchanged.
    """

    return [
        f"{indent}    dockerInfo:",
        f"{indent}      image: {json.dumps(docker_info.image)}",
        f"{indent}      baseTag: {json.dumps(docker_info.base_tag)}",
        f"{indent}      version: {json.dumps(docker_info.version)}",
    ]


class MetadataBuilder:
    """Produce the merged metadata document for technology subtrees."""

    def __init__(self, *, logger: ConsoleLogger) -> None:
        self._logger = logger

    def render(self, subtree: TechnologySubtree) -> str:
        """Return the merged metadata text for ``subtree`` without touching disk.

        Args:
            subtree: Technology subtree discovered by the scanner.

        Returns:
            str: Technology descriptor followed by the ``contexts`` block.

        Raises:
            MalformedFragmentError: If any fragment is unreadable, empty or
                unparsable, or if the merged document does not parse.
        """

        descriptor = read_text(subtree.technology_file)
        if not isinstance(load_document(descriptor, source=subtree.technology_file) or {}, Mapping):
            raise MalformedFragmentError("technology descriptor must be a mapping", path=subtree.technology_file)

        lines = [descriptor.rstrip("\n"), f"{CONTEXTS_KEY}:"]
        for event in subtree.events:
            if isinstance(event, InnerContextsHeader):
                lines.append(f"{event.indent}innerContexts:")
            else:
                lines.extend(self._render_fragment(event))
        merged = "\n".join(lines) + "\n"

        if not isinstance(load_document(merged, source=subtree.metadata_path), Mapping):
            raise MalformedFragmentError("merged metadata is not a mapping", path=subtree.metadata_path)
        return merged

    def _render_fragment(self, fragment: ContextFragment) -> list[str]:
        text = read_text(fragment.fragment)
        if load_document(text, source=fragment.fragment) is None:
            raise MalformedFragmentError("context fragment is empty", path=fragment.fragment)

        rendered: list[str] = []
        for index, raw_line in enumerate(text.splitlines()):
            line = rewrite_script_paths(raw_line, fragment.relative_path)
            marker = "  - " if index == 0 else "    "
            rendered.append(f"{fragment.indent}{marker}{line}")
        if fragment.docker_info is not None:
            docker_info = read_model(fragment.docker_info, DockerInfo)
            rendered.extend(render_docker_info(docker_info, fragment.indent))
        return rendered

    def build(self, subtree: TechnologySubtree) -> Path:
        """Render ``subtree`` and overwrite its ``metadata.yaml``.

        Args:
            subtree: Technology subtree discovered by the scanner.

        Returns:
            Path: Location of the written metadata file.
        """

        merged = self.render(subtree)
        target = subtree.metadata_path
        for stale in (target, target.with_suffix(".yml")):
            stale.unlink(missing_ok=True)
        target.write_text(merged, encoding="utf-8")
        self._logger.debug(f"metadata written path={target}")
        return target

    def aggregate(
        self,
        root: Path,
        *,
        excluded_segments: Sequence[str] = DEFAULT_EXCLUDED_SEGMENTS,
    ) -> list[Path]:
        """Build metadata for every technology subtree under ``root``.

        The first failing technology aborts the run.

        Args:
            root: Directory holding technology subtrees.
            excluded_segments: Directory names pruned from the walk.

        Returns:
            list[Path]: Metadata files written, in traversal order.
        """

        subtrees = scan(root, excluded_segments=excluded_segments)
        self._logger.info(f"Construct metadata for {len(subtrees)} technologies")
        written = []
        for subtree in subtrees:
            written.append(self.build(subtree))
            self._logger.info(f"{subtree.name}: {len(subtree.contexts)} contexts merged")
        return written


__all__ = [
    "MetadataBuilder",
    "render_docker_info",
    "rewrite_script_paths",
]
