# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rewrite pre-release versions in built metadata and promote their images."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .codec import parse_model, read_text
from .config import TechpackConfig
from .constants import DOCKER_INFO_BASENAME, INNER_CONTEXT_INDENT, NESTED_INNER_CONTEXT_INDENT
from .errors import TechpackError
from .logging import ConsoleLogger
from .models import DockerInfo, TechnologyMetadata
from .packager import find_metadata_documents
from .registry import RegistryClient
from .scanner import find_named_files, yaml_names

# ``version:`` lines of the dockerInfo blocks emitted for top-level contexts,
# inner contexts and nested inner contexts.
VERSION_LINE_PREFIXES: Final[tuple[str, ...]] = tuple(
    f"{indent}      version: " for indent in ("", INNER_CONTEXT_INDENT, NESTED_INNER_CONTEXT_INDENT)
)
_QUOTES: Final[str] = "\"'"


@dataclass(frozen=True, slots=True)
class VersionPromotion:
    """Pre-release and release forms derived from a target project version."""

    target_version: str

    def __post_init__(self) -> None:
        if not self.target_version.strip():
            raise TechpackError("target version must not be empty")

    @property
    def docker_formatted_version(self) -> str:
        """Return the target version with ``+`` replaced by ``_``."""

        return self.target_version.replace("+", "_")

    @property
    def release_version(self) -> str:
        """Return the part of the target version preceding the first ``+``."""

        return self.target_version.split("+", 1)[0]

    @property
    def has_build_qualifier(self) -> bool:
        return "+" in self.target_version

    def matches(self, docker_info: DockerInfo) -> bool:
        return docker_info.version.endswith(self.docker_formatted_version)


def rewrite_version_line(line: str, promotion: VersionPromotion) -> str:
    """Return ``line`` with a trailing ``-<pre-release>`` version replaced.

    Only lines starting with one of :data:`VERSION_LINE_PREFIXES` whose value
    (quotes aside) ends with ``-<docker formatted version>`` change; every
    other line, including its line ending, is returned untouched.

    Args:
        line: One line of a metadata document, line ending included.
        promotion: Versions derived from the promotion target.

    Returns:
        str: Rewritten or original line.
    """

    body = line.rstrip("\r\n")
    ending = line[len(body) :]
    prefix = next((candidate for candidate in VERSION_LINE_PREFIXES if body.startswith(candidate)), None)
    if prefix is None:
        return line
    value = body[len(prefix) :]
    quote = value[0] if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0] else ""
    inner = value[1:-1] if quote else value
    suffix = f"-{promotion.docker_formatted_version}"
    if not inner.endswith(suffix):
        return line
    promoted = inner[: len(inner) - len(suffix)] + f"-{promotion.release_version}"
    return f"{prefix}{quote}{promoted}{quote}{ending}"


def rewrite_version_lines(text: str, promotion: VersionPromotion) -> tuple[str, int]:
    """Apply :func:`rewrite_version_line` to every line of ``text``.

    Returns:
        tuple[str, int]: Rewritten text and the number of lines changed.
    """

    changed = 0
    lines: list[str] = []
    for line in text.splitlines(keepends=True):
        rewritten = rewrite_version_line(line, promotion)
        if rewritten != line:
            changed += 1
        lines.append(rewritten)
    return "".join(lines), changed


def iter_context_docker_infos(metadata: TechnologyMetadata) -> Iterator[DockerInfo]:
    """Yield docker info of contexts and of both inner-context levels."""

    for context in metadata.contexts:
        if context.docker_info is not None:
            yield context.docker_info
        for inner in context.inner_contexts or ():
            if inner.docker_info is not None:
                yield inner.docker_info
            for nested in inner.inner_contexts or ():
                if nested.docker_info is not None:
                    yield nested.docker_info


@dataclass(slots=True)
class PromotionReport:
    """Summary of one version fix run."""

    promotion: VersionPromotion
    rewritten_metadata: list[Path] = field(default_factory=list)
    rewritten_fragments: list[Path] = field(default_factory=list)
    promoted_images: list[tuple[str, str]] = field(default_factory=list)


class PromotionEngine:
    """Promote every image built for a pre-release version to its release tag."""

    def __init__(self, config: TechpackConfig, *, registry: RegistryClient, logger: ConsoleLogger) -> None:
        """Create an engine bound to ``config`` and ``registry``.

        Args:
            config: Layout of the technologies tree.
            registry: Client performing pull, tag and push.
            logger: Logger receiving progress messages.
        """

        self._config = config
        self._registry = registry
        self._logger = logger

    def promote_image(self, docker_info: DockerInfo, promotion: VersionPromotion) -> tuple[str, str]:
        """Pull the pre-release image, tag it with the release tag and push it.

        Returns:
            tuple[str, str]: Source and promoted references.
        """

        source = docker_info.reference
        release_tag = docker_info.promoted_tag(promotion.docker_formatted_version, promotion.release_version)
        target = docker_info.promoted_reference(promotion.docker_formatted_version, promotion.release_version)
        self._registry.pull(source)
        self._registry.tag(source, docker_info.image, release_tag)
        self._registry.push(target)
        self._logger.info(f"\t\t{source} => {target}")
        return source, target

    def fix_metadata(self, path: Path, promotion: VersionPromotion, report: PromotionReport) -> None:
        """Rewrite ``path`` in place then promote the images it declared.

        The images are selected from the document as parsed before the
        rewrite.
        """

        original = read_text(path)
        metadata = parse_model(original, TechnologyMetadata, source=path)
        rewritten, changed = rewrite_version_lines(original, promotion)
        if changed:
            path.write_bytes(rewritten.encode("utf-8"))
            report.rewritten_metadata.append(path)
            self._logger.debug(f"metadata updated path={path} lines={changed}")
        for docker_info in iter_context_docker_infos(metadata):
            if promotion.matches(docker_info):
                report.promoted_images.append(self.promote_image(docker_info, promotion))

    def fix_docker_info_fragment(self, path: Path, promotion: VersionPromotion, report: PromotionReport) -> None:
        """Replace ``-<pre-release>`` with ``-<release>`` throughout ``path``."""

        original = read_text(path)
        rewritten = original.replace(f"-{promotion.docker_formatted_version}", f"-{promotion.release_version}")
        if rewritten != original:
            path.write_bytes(rewritten.encode("utf-8"))
            report.rewritten_fragments.append(path)
            self._logger.debug(f"docker info updated path={path}")

    def fix_version(self, target_version: str) -> PromotionReport:
        """Promote ``target_version`` across the technologies tree.

        Args:
            target_version: Project version, e.g. ``5.0+abc123``.

        Returns:
            PromotionReport: Files rewritten and images promoted.

        Raises:
            RegistryError: If a registry command fails or times out; the run
                stops at that point.
        """

        promotion = VersionPromotion(target_version)
        if not promotion.has_build_qualifier:
            self._logger.warn(f"Version {target_version} has no '+' build qualifier; nothing will match")
        self._logger.info(
            f"PROMOTING from ({promotion.docker_formatted_version}) to ==> [{promotion.release_version}]",
        )
        report = PromotionReport(promotion=promotion)
        root = self._config.technologies_root
        excluded = self._config.excluded_segments
        for path in find_metadata_documents(root, excluded_segments=excluded):
            self.fix_metadata(path, promotion, report)
        for path in find_named_files(root, yaml_names(DOCKER_INFO_BASENAME), excluded_segments=excluded):
            self.fix_docker_info_fragment(path, promotion, report)
        self._logger.ok(f"{len(report.promoted_images)} images promoted to {promotion.release_version}")
        return report


__all__ = [
    "PromotionEngine",
    "PromotionReport",
    "VERSION_LINE_PREFIXES",
    "VersionPromotion",
    "iter_context_docker_infos",
    "rewrite_version_line",
    "rewrite_version_lines",
]
