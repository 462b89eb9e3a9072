# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from rich.console import Console

from techpack.config import TechpackConfig
from techpack.logging import ConsoleLogger

WriteFile = Callable[[Path, str], Path]


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@dataclass
class FakeRegistryClient:
    """Record registry calls instead of talking to a daemon."""

    calls: list[tuple[str, ...]] = field(default_factory=list)
    fail_on: str | None = None
    error: Exception | None = None

    def _record(self, *call: str) -> None:
        self.calls.append(call)
        if self.error is not None and call[0] == self.fail_on:
            raise self.error

    def pull(self, reference: str) -> None:
        self._record("pull", reference)

    def tag(self, source_reference: str, target_image: str, target_tag: str) -> None:
        self._record("tag", source_reference, target_image, target_tag)

    def push(self, reference: str) -> None:
        self._record("push", reference)


@pytest.fixture
def write_file() -> WriteFile:
    """Return a helper writing UTF-8 text and creating parent directories."""

    return _write


@pytest.fixture
def logger() -> ConsoleLogger:
    """Return a quiet logger with emoji disabled."""

    return ConsoleLogger(console=Console(no_color=True, highlight=False, soft_wrap=True), use_emoji=False, use_color=False)


@pytest.fixture
def registry() -> FakeRegistryClient:
    return FakeRegistryClient()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Return a project containing two technologies with nested contexts.

    ``job/spark`` has a plain context (``spark-2.4``), a context with one inner
    context (``spark-3.1/innerContexts/python-3.8``) and a nested inner context
    (``python-3.8/gpu``) reusing the python image. ``job/hive`` carries an
    image built for an older version.
    """

    root = tmp_path / "project"
    spark = root / "technologies" / "job" / "spark"
    _write(spark / "technology.yaml", "id: spark\nlabel: Spark\niconPath: ./spark.png\n")
    _write(spark / "spark.png", "png")
    _write(spark / "shared" / "start.sh", "#!/bin/sh\n")

    _write(
        spark / "spark-2.4" / "context.yaml",
        "id: spark-2.4\n"
        "label: Spark 2.4\n"
        "parameters:\n"
        "  - id: version\n"
        "    dynamicValues:\n"
        "      script: ./params.js\n"
        "actions:\n"
        "  - id: start\n"
        "    script: ../shared/start.sh\n",
    )
    _write(spark / "spark-2.4" / "params.js", "export default [];\n")
    _write(
        spark / "spark-2.4" / "dockerInfo.yaml",
        'image: techno/spark\nbaseTag: "2.4"\nversion: 0.2-5.0_abc123\n',
    )

    _write(spark / "spark-3.1" / "context.yaml", "id: spark-3.1\nlabel: Spark 3.1\n")
    python = spark / "spark-3.1" / "innerContexts" / "python-3.8"
    _write(
        python / "context.yaml",
        "id: python-3.8\nlabel: Python 3.8\nactions:\n  - id: run\n    script: ./run.sh\n",
    )
    _write(python / "run.sh", "#!/bin/sh\n")
    _write(python / "dockerInfo.yaml", 'image: techno/spark-py\nbaseTag: "3.1"\nversion: 0.3-5.0_abc123\n')
    _write(python / "gpu" / "innerContext.yaml", "id: gpu\nlabel: GPU\n")
    _write(python / "gpu" / "dockerInfo.yaml", 'image: techno/spark-py\nbaseTag: "3.1"\nversion: 0.3-5.0_abc123\n')

    hive = root / "technologies" / "job" / "hive"
    _write(hive / "technology.yml", "id: hive\nlabel: Hive\n")
    _write(hive / "hive-1.0" / "context.yaml", "id: hive-1.0\nlabel: Hive 1.0\n")
    _write(hive / "hive-1.0" / "dockerInfo.yaml", 'image: techno/hive\nbaseTag: "1.0"\nversion: 0.1-4.0_zzz\n')

    _write(root / "technologies" / "node_modules" / "pkg" / "technology.yaml", "id: ignored\n")
    return root


@pytest.fixture
def config(project_root: Path) -> TechpackConfig:
    return TechpackConfig(project_root=project_root)
