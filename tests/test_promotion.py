# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for rewriting pre-release versions and promoting images."""

from __future__ import annotations

from pathlib import Path

import pytest

from techpack.builder import MetadataBuilder
from techpack.config import TechpackConfig
from techpack.errors import MalformedFragmentError, RegistryTimeoutError, TechpackError
from techpack.promotion import PromotionEngine, VersionPromotion, rewrite_version_line, rewrite_version_lines

PROMOTION = VersionPromotion("5.0+abc123")


def _engine(config: TechpackConfig, registry, logger) -> PromotionEngine:
    MetadataBuilder(logger=logger).aggregate(config.technologies_root)
    return PromotionEngine(config, registry=registry, logger=logger)


def test_version_forms() -> None:
    assert PROMOTION.docker_formatted_version == "5.0_abc123"
    assert PROMOTION.release_version == "5.0"
    assert PROMOTION.has_build_qualifier


def test_version_without_build_qualifier() -> None:
    promotion = VersionPromotion("5.0")

    assert promotion.docker_formatted_version == "5.0"
    assert promotion.release_version == "5.0"
    assert not promotion.has_build_qualifier


def test_empty_version_is_rejected() -> None:
    with pytest.raises(TechpackError):
        VersionPromotion("  ")


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ('      version: "0.2-5.0_abc123"\n', '      version: "0.2-5.0"\n'),
        ("          version: 0.2-5.0_abc123\n", "          version: 0.2-5.0\n"),
        ('              version: "0.2-5.0_abc123"', '              version: "0.2-5.0"'),
        ('      version: "0.2-5.0_abc123"\r\n', '      version: "0.2-5.0"\r\n'),
    ],
)
def test_rewrite_version_line_at_every_depth(line: str, expected: str) -> None:
    assert rewrite_version_line(line, PROMOTION) == expected


@pytest.mark.parametrize(
    "line",
    [
        '      version: "0.2-4.0_zzz"\n',
        '      version: "5.0_abc123"\n',
        "version: 0.2-5.0_abc123\n",
        '     version: "0.2-5.0_abc123"\n',
        '      image: "techno/x-5.0_abc123"\n',
    ],
)
def test_rewrite_version_line_leaves_other_lines(line: str) -> None:
    assert rewrite_version_line(line, PROMOTION) == line


def test_rewrite_version_lines_counts_changes() -> None:
    text = 'id: t\r\ncontexts:\r\n  - id: c\r\n    dockerInfo:\r\n      version: "1-5.0_abc123"\r\n'

    rewritten, changed = rewrite_version_lines(text, PROMOTION)

    assert changed == 1
    assert rewritten == text.replace("1-5.0_abc123", "1-5.0")


def test_fix_version_rewrites_metadata_and_promotes(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    spark = config.technologies_root / "job" / "spark" / "metadata.yaml"
    hive = config.technologies_root / "job" / "hive" / "metadata.yaml"
    hive_before = hive.read_bytes()

    report = engine.fix_version("5.0+abc123")

    text = spark.read_text(encoding="utf-8")
    assert "5.0_abc123" not in text
    assert '      version: "0.2-5.0"\n' in text
    assert '          version: "0.3-5.0"\n' in text
    assert '              version: "0.3-5.0"\n' in text
    assert hive.read_bytes() == hive_before
    assert report.rewritten_metadata == [spark]

    assert registry.calls[:3] == [
        ("pull", "techno/spark:2.4-0.2-5.0_abc123"),
        ("tag", "techno/spark:2.4-0.2-5.0_abc123", "techno/spark", "2.4-0.2-5.0"),
        ("push", "techno/spark:2.4-0.2-5.0"),
    ]
    assert ("push", "techno/spark-py:3.1-0.3-5.0") in registry.calls
    assert not any("techno/hive" in call[1] for call in registry.calls)
    assert report.promoted_images[0] == ("techno/spark:2.4-0.2-5.0_abc123", "techno/spark:2.4-0.2-5.0")


def test_fix_version_rewrites_docker_info_fragments(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    fragment = config.technologies_root / "job" / "spark" / "spark-2.4" / "dockerInfo.yaml"

    report = engine.fix_version("5.0+abc123")

    assert fragment.read_text(encoding="utf-8") == 'image: techno/spark\nbaseTag: "2.4"\nversion: 0.2-5.0\n'
    assert fragment in report.rewritten_fragments
    untouched = config.technologies_root / "job" / "hive" / "hive-1.0" / "dockerInfo.yaml"
    assert untouched not in report.rewritten_fragments


def test_fix_version_preserves_crlf_line_endings(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    spark = config.technologies_root / "job" / "spark" / "metadata.yaml"
    spark.write_bytes(spark.read_bytes().replace(b"\n", b"\r\n"))

    engine.fix_version("5.0+abc123")

    data = spark.read_bytes()
    assert b'      version: "0.2-5.0"\r\n' in data
    assert data.count(b"\n") == data.count(b"\r\n")


def test_second_run_is_a_no_op(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    engine.fix_version("5.0+abc123")
    registry.calls.clear()
    spark = config.technologies_root / "job" / "spark" / "metadata.yaml"
    before = spark.read_bytes()

    report = engine.fix_version("5.0+abc123")

    assert registry.calls == []
    assert report.rewritten_metadata == []
    assert report.rewritten_fragments == []
    assert spark.read_bytes() == before


def test_version_without_qualifier_warns(config: TechpackConfig, registry, logger, capsys) -> None:
    engine = _engine(config, registry, logger)

    report = engine.fix_version("5.0")

    assert "no '+' build qualifier" in capsys.readouterr().out
    assert report.promoted_images == []


def test_registry_timeout_aborts_the_run(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    registry.fail_on = "pull"
    registry.error = RegistryTimeoutError("pull timed out", reference="techno/spark:2.4-0.2-5.0_abc123")
    fragment = config.technologies_root / "job" / "spark" / "spark-2.4" / "dockerInfo.yaml"

    with pytest.raises(RegistryTimeoutError):
        engine.fix_version("5.0+abc123")

    assert registry.calls == [("pull", "techno/spark:2.4-0.2-5.0_abc123")]
    assert "0.2-5.0_abc123" in fragment.read_text(encoding="utf-8")


def test_invalid_utf8_metadata_is_malformed(config: TechpackConfig, registry, logger) -> None:
    engine = _engine(config, registry, logger)
    metadata = config.technologies_root / "job" / "hive" / "metadata.yaml"
    metadata.write_bytes(b"id: \xff\n")

    with pytest.raises(MalformedFragmentError):
        engine.fix_version("5.0+abc123")

    assert registry.calls == []
