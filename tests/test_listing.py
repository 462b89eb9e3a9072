# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the docker listing projection."""

from __future__ import annotations

import json
from pathlib import Path

from techpack.builder import MetadataBuilder
from techpack.codec import parse_model
from techpack.listing import build_listing, docker_images, to_listing, write_listing
from techpack.models import TechnologyMetadata


def _metadata(text: str) -> TechnologyMetadata:
    return parse_model(text, TechnologyMetadata)


def test_projection_keeps_identity_and_image_references() -> None:
    metadata = _metadata(
        "id: t\n"
        "label: T\n"
        "iconPath: ./t.png\n"
        "contexts:\n"
        "  - id: c\n"
        "    label: C\n"
        "    actions:\n"
        "      - id: run\n"
        "        script: ./c/run.sh\n"
        "    dockerInfo:\n"
        '      image: "techno/t"\n'
        '      baseTag: "1.0"\n'
        '      version: "0.1-5.0_abc"\n',
    )

    entry = to_listing(metadata)

    assert entry.to_document() == {
        "id": "t",
        "label": "T",
        "contexts": [{"id": "c", "label": "C", "docker": "techno/t:1.0-0.1-5.0_abc"}],
    }


def test_projection_of_technology_without_contexts_omits_the_key() -> None:
    entry = to_listing(_metadata("id: t\nlabel: T\n"))

    assert entry.to_document() == {"id": "t", "label": "T"}


def test_projection_includes_technology_level_image() -> None:
    metadata = _metadata('id: t\ndockerInfo:\n  image: techno/t\n  baseTag: "2"\n  version: v1\n')

    assert to_listing(metadata).docker == "techno/t:2-v1"


def test_projection_stops_below_second_inner_level() -> None:
    metadata = _metadata(
        "contexts:\n"
        "  - id: a\n"
        "    innerContexts:\n"
        "      - id: b\n"
        "        innerContexts:\n"
        "          - id: c\n"
        "            innerContexts:\n"
        "              - id: d\n",
    )

    entry = to_listing(metadata)

    assert entry.contexts is not None
    level_one = entry.contexts[0].inner_contexts
    assert level_one is not None
    level_two = level_one[0].inner_contexts
    assert level_two is not None and level_two[0].id == "c"
    assert level_two[0].inner_contexts is None


def test_docker_images_are_distinct_in_first_seen_order(project_root: Path, logger) -> None:
    written = MetadataBuilder(logger=logger).aggregate(project_root / "technologies")

    entries = build_listing(written)

    assert [entry.id for entry in entries] == ["hive", "spark"]
    assert docker_images(entries) == [
        "techno/hive:1.0-0.1-4.0_zzz",
        "techno/spark:2.4-0.2-5.0_abc123",
        "techno/spark-py:3.1-0.3-5.0_abc123",
    ]


def test_write_listing_produces_json_and_text(tmp_path: Path, project_root: Path, logger) -> None:
    written = MetadataBuilder(logger=logger).aggregate(project_root / "technologies")
    json_path = tmp_path / "docker_listing.json"
    text_path = tmp_path / "docker_listing.txt"

    images = write_listing(build_listing(written), json_path=json_path, text_path=text_path)

    listing = json.loads(json_path.read_text(encoding="utf-8"))
    assert listing[0] == {
        "id": "hive",
        "label": "Hive",
        "contexts": [{"id": "hive-1.0", "label": "Hive 1.0", "docker": "techno/hive:1.0-0.1-4.0_zzz"}],
    }
    spark_31 = listing[1]["contexts"][1]
    assert "docker" not in spark_31
    assert spark_31["innerContexts"][0]["innerContexts"][0] == {
        "id": "gpu",
        "label": "GPU",
        "docker": "techno/spark-py:3.1-0.3-5.0_abc123",
    }
    assert text_path.read_text(encoding="utf-8") == "".join(f"{image}\n" for image in images)
    assert len(images) == 3


def test_write_listing_with_no_entries(tmp_path: Path) -> None:
    json_path = tmp_path / "listing.json"
    text_path = tmp_path / "listing.txt"

    assert write_listing([], json_path=json_path, text_path=text_path) == []
    assert json_path.read_text(encoding="utf-8") == "[]\n"
    assert text_path.read_text(encoding="utf-8") == ""
