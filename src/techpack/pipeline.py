# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Independently invocable operations chaining aggregation, packaging and promotion."""

from __future__ import annotations

from pathlib import Path

from .builder import MetadataBuilder
from .config import TechpackConfig
from .errors import ConfigError
from .logging import ConsoleLogger
from .packager import ArchivePackager, PackageResult
from .promotion import PromotionEngine, PromotionReport
from .registry import RegistryClient


class TechnologyPipeline:
    """Expose the aggregate, package and promote operations over one project.

    ``package_for_promotion`` re-aggregates before packaging and ``promote``
    runs ``fix_version`` before ``package_for_promotion``, mirroring the task
    dependencies a build tool would declare.
    """

    def __init__(
        self,
        config: TechpackConfig,
        *,
        logger: ConsoleLogger,
        registry: RegistryClient | None = None,
        packager: ArchivePackager | None = None,
    ) -> None:
        """Wire the stages for ``config``.

        Args:
            config: Project layout shared by every stage.
            logger: Logger handed to every stage.
            registry: Registry client; only required by promotion operations.
            packager: Packager override, mainly for custom archivers.
        """

        self._config = config
        self._logger = logger
        self._registry = registry
        self._builder = MetadataBuilder(logger=logger)
        self._packager = packager or ArchivePackager(config, logger=logger)

    @property
    def config(self) -> TechpackConfig:
        return self._config

    def aggregate_metadata(self) -> list[Path]:
        """Rebuild ``metadata.yaml`` for every technology subtree."""

        return self._builder.aggregate(
            self._config.technologies_root,
            excluded_segments=self._config.excluded_segments,
        )

    def package_for_promotion(self) -> PackageResult | None:
        """Aggregate metadata then stage, archive and list it."""

        built = self.aggregate_metadata()
        return self._packager.package_all(built)

    def package_all(self) -> PackageResult | None:
        """Package every version; identical to :meth:`package_for_promotion`."""

        return self.package_for_promotion()

    def fix_version(self, target_version: str) -> PromotionReport:
        """Rewrite pre-release versions and promote the matching images.

        Raises:
            ConfigError: If the pipeline was created without a registry client.
        """

        if self._registry is None:
            raise ConfigError("a registry client is required to fix versions")
        engine = PromotionEngine(self._config, registry=self._registry, logger=self._logger)
        return engine.fix_version(target_version)

    def promote(self, target_version: str) -> tuple[PromotionReport, PackageResult | None]:
        """Run :meth:`fix_version` then :meth:`package_for_promotion`."""

        report = self.fix_version(target_version)
        result = self.package_for_promotion()
        self._logger.ok(f"> PROMOTE {target_version} DONE")
        return report, result


__all__ = ["TechnologyPipeline"]
