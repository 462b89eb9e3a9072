# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Stage built metadata with the files it references and archive the result."""

from __future__ import annotations

import shutil
import zipfile
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Protocol

from .codec import read_document
from .config import TechpackConfig
from .constants import METADATA_BASENAME, METADATA_FILENAME
from .errors import MissingReferencedFileError
from .listing import build_listing, write_listing
from .logging import ConsoleLogger
from .scanner import find_named_files, yaml_names

# Earliest timestamp representable in a zip entry; keeps archives byte-stable.
ZIP_EPOCH: Final[tuple[int, int, int, int, int, int]] = (1980, 1, 1, 0, 0, 0)


class Archiver(Protocol):
    """Callable compressing a directory tree into a single archive."""

    def __call__(self, source: Path, destination: Path) -> Path: ...


def zip_directory(source: Path, destination: Path) -> Path:
    """Write ``source`` into ``destination`` with sorted, timestamp-free entries.

    Entry names are relative to ``source``.

    Args:
        source: Directory to compress.
        destination: Archive path, overwritten when present.

    Returns:
        Path: ``destination``.
    """

    files = sorted(path for path in source.rglob("*") if path.is_file())
    with zipfile.ZipFile(destination, "w", zipfile.ZIP_DEFLATED) as archive:
        for path in files:
            info = zipfile.ZipInfo(path.relative_to(source).as_posix(), date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = (path.stat().st_mode & 0o777) << 16
            archive.writestr(info, path.read_bytes())
    return destination


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _scripts(node: Mapping[str, Any]) -> Iterator[Any]:
    for parameter in _as_list(node.get("parameters")):
        yield _as_mapping(_as_mapping(parameter).get("dynamicValues")).get("script")
    for action in _as_list(node.get("actions")):
        yield _as_mapping(action).get("script")


def _context_scripts(contexts: Iterable[Any]) -> Iterator[Any]:
    for raw_context in contexts:
        context = _as_mapping(raw_context)
        yield from _scripts(context)
        yield from _context_scripts(_as_list(context.get("innerContexts")))


def collect_references(document: Any) -> list[str]:
    """Return the distinct script and icon paths referenced by ``document``.

    Covers ``iconPath``, the technology's own parameters and actions, and the
    parameters and actions of every context and nested inner context.

    Args:
        document: Metadata parsed into plain containers.

    Returns:
        list[str]: Non-blank references in first-seen order.
    """

    root = _as_mapping(document)
    candidates = [root.get("iconPath"), *_scripts(root), *_context_scripts(_as_list(root.get("contexts")))]
    references: dict[str, None] = {}
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            references.setdefault(candidate, None)
    return list(references)


def find_metadata_documents(root: Path, *, excluded_segments: Sequence[str]) -> list[Path]:
    """Return one metadata document per directory under ``root``, ``.yaml`` preferred."""

    by_directory: dict[Path, Path] = {}
    for path in find_named_files(root, yaml_names(METADATA_BASENAME), excluded_segments=excluded_segments):
        by_directory.setdefault(path.parent, path)
    return list(by_directory.values())


@dataclass(frozen=True, slots=True)
class PackageResult:
    """Artefacts produced by one packaging run."""

    archive_path: Path
    listing_json: Path
    listing_text: Path
    metadata_files: tuple[Path, ...]
    docker_images: tuple[str, ...]


class ArchivePackager:
    """Copy metadata plus referenced files into a staging tree and archive it."""

    def __init__(
        self,
        config: TechpackConfig,
        *,
        logger: ConsoleLogger,
        archiver: Archiver = zip_directory,
    ) -> None:
        """Create a packager bound to ``config``.

        Args:
            config: Layout of the project, staging tree and output names.
            logger: Logger receiving progress messages.
            archiver: Callable producing the archive from the staged tree.
        """

        self._config = config
        self._logger = logger
        self._archiver = archiver

    def stage(self, metadata_file: Path) -> list[Path]:
        """Copy ``metadata_file`` and every file it references into the staging tree.

        Args:
            metadata_file: Built metadata document inside the technologies tree.

        Returns:
            list[Path]: Staged files, metadata first.

        Raises:
            MissingReferencedFileError: If a referenced file does not exist.
        """

        technology_dir = metadata_file.parent
        relative = technology_dir.relative_to(self._config.project_root)
        staged_dir = self._config.staging_root / relative
        staged_dir.mkdir(parents=True, exist_ok=True)
        staged_metadata = staged_dir / METADATA_FILENAME
        shutil.copyfile(metadata_file, staged_metadata)
        staged = [staged_metadata]

        for reference in collect_references(read_document(metadata_file)):
            source = technology_dir / reference
            if not source.is_file():
                raise MissingReferencedFileError(reference, metadata=metadata_file, expected=source)
            destination = staged_dir / reference
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
            staged.append(destination)
        self._logger.info(f"Staged {relative.as_posix()}")
        self._logger.debug(f"staged technology={relative.as_posix()} files={len(staged)}")
        return staged

    def package_all(self, metadata_files: Sequence[Path] | None = None) -> PackageResult | None:
        """Stage, archive and list every built technology.

        Args:
            metadata_files: Built metadata documents; discovered under the
                technologies root when omitted.

        Returns:
            PackageResult | None: Produced artefacts, or ``None`` when no
            technology was found.
        """

        config = self._config
        if metadata_files is None:
            metadata_files = find_metadata_documents(
                config.technologies_root,
                excluded_segments=config.excluded_segments,
            )
        shutil.rmtree(config.staging_root, ignore_errors=True)
        config.staging_root.mkdir(parents=True)
        if not metadata_files:
            self._logger.warn(f"No technology metadata found under {config.technologies_root}")
            return None

        for metadata_file in metadata_files:
            self.stage(metadata_file)
        archive = self._archiver(config.staged_technologies_root, config.archive_path)

        staged_metadata = find_metadata_documents(config.staging_root, excluded_segments=())
        entries = build_listing(staged_metadata)
        images = write_listing(entries, json_path=config.listing_json_path, text_path=config.listing_text_path)
        self._logger.ok(f"Packaged {len(metadata_files)} technologies into {archive.name} ({len(images)} images)")
        return PackageResult(
            archive_path=archive,
            listing_json=config.listing_json_path,
            listing_text=config.listing_text_path,
            metadata_files=tuple(metadata_files),
            docker_images=tuple(images),
        )


__all__ = [
    "ArchivePackager",
    "Archiver",
    "PackageResult",
    "collect_references",
    "find_metadata_documents",
    "zip_directory",
]
