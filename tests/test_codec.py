# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the YAML/JSON codec and its ambiguous-float guard."""

from __future__ import annotations

from pathlib import Path

import pytest

from techpack.codec import DocumentFormat, dump_document, load_document, parse_model, read_model, read_text
from techpack.errors import AmbiguousScalarError, DocumentParseError
from techpack.models import DockerInfo, TechnologyMetadata


def test_unquoted_float_in_string_field_is_rejected() -> None:
    with pytest.raises(AmbiguousScalarError) as excinfo:
        parse_model("image: techno/x\nbaseTag: 3.1\nversion: \"1.0\"\n", DockerInfo)

    assert excinfo.value.location == ("baseTag",)
    assert excinfo.value.value == 3.1
    assert "/baseTag" in str(excinfo.value)


def test_quoted_float_token_parses_as_string() -> None:
    info = parse_model('image: techno/x\nbaseTag: "3.1"\nversion: "1.0"\n', DockerInfo)

    assert info.version == "1.0"
    assert info.base_tag == "3.1"


def test_ambiguous_scalar_reports_nested_path() -> None:
    document = (
        "id: spark\n"
        "contexts:\n"
        "  - id: first\n"
        "  - id: second\n"
        "    innerContexts:\n"
        "      - id: inner\n"
        "        dockerInfo:\n"
        "          image: techno/x\n"
        '          baseTag: "3.1"\n'
        "          version: 1.0\n"
    )

    with pytest.raises(AmbiguousScalarError) as excinfo:
        parse_model(document, TechnologyMetadata)

    assert excinfo.value.location == ("contexts", 1, "innerContexts", 0, "dockerInfo", "version")


def test_json_float_is_rejected_too() -> None:
    with pytest.raises(AmbiguousScalarError):
        parse_model('{"image": "techno/x", "baseTag": "3.1", "version": 2.0}', DockerInfo, fmt=DocumentFormat.JSON)


def test_integers_and_booleans_are_read_as_strings() -> None:
    info = parse_model("image: techno/x\nbaseTag: 3\nversion: true\n", DockerInfo)

    assert info.base_tag == "3"
    assert info.version == "true"


def test_unknown_fields_are_ignored() -> None:
    metadata = parse_model(
        "id: spark\nlabel: Spark\nisDeprecated: false\ncontexts:\n  - id: a\n    recommended: true\n",
        TechnologyMetadata,
    )

    assert metadata.id == "spark"
    assert [context.id for context in metadata.contexts] == ["a"]


def test_empty_contexts_key_yields_empty_list() -> None:
    metadata = parse_model("id: spark\ncontexts:\n", TechnologyMetadata)

    assert metadata.contexts == []


def test_invalid_yaml_raises_document_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("id: [unterminated\n", encoding="utf-8")

    with pytest.raises(DocumentParseError) as excinfo:
        read_model(path, TechnologyMetadata)

    assert excinfo.value.path == path


def test_missing_required_field_is_a_parse_error() -> None:
    with pytest.raises(DocumentParseError):
        parse_model("image: techno/x\n", DockerInfo)


def test_round_trip_preserves_keys_values_and_order() -> None:
    source = (
        "label: Spark\n"
        "id: spark\n"
        "contexts:\n"
        "- id: a\n"
        "  dockerInfo:\n"
        "    version: '1.0'\n"
        "    image: techno/x\n"
    )

    document = load_document(source)
    dumped = dump_document(document)

    assert not dumped.startswith("---")
    assert load_document(dumped) == document
    assert list(load_document(dumped)) == ["label", "id", "contexts"]
    assert "'1.0'" in dumped
    assert "techno/x" in dumped and "'techno/x'" not in dumped


def test_dump_omits_null_fields() -> None:
    dumped = dump_document({"id": "spark", "label": None, "contexts": [{"id": "a", "docker": None}]})

    assert "label" not in dumped
    assert "docker" not in dumped


def test_json_dump_is_indented() -> None:
    dumped = dump_document([{"id": "spark", "docker": None}], fmt=DocumentFormat.JSON)

    assert dumped == '[\n  {\n    "id": "spark"\n  }\n]\n'


@pytest.mark.parametrize(
    ("token", "expected"),
    [("010", "010"), ("07", "07"), ("1_000", "1_000"), ("0x1F", "0x1F"), ("yes", "yes")],
)
def test_integer_like_tokens_keep_their_source_text(token: str, expected: str) -> None:
    info = parse_model(f"image: techno/x\nbaseTag: {token}\nversion: {token}\n", DockerInfo)

    assert info.base_tag == expected
    assert info.version == expected


def test_timestamp_token_keeps_its_source_text() -> None:
    info = parse_model("image: techno/x\nbaseTag: 2024-01-31\nversion: v1\n", DockerInfo)

    assert info.base_tag == "2024-01-31"


def test_plain_load_still_resolves_integers() -> None:
    assert load_document("count: 010\n") == {"count": 8}


def test_invalid_utf8_is_a_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "context.yaml"
    path.write_bytes(b"id: \xff\xfe\n")

    with pytest.raises(DocumentParseError) as excinfo:
        read_model(path, TechnologyMetadata)
    assert excinfo.value.path == path

    with pytest.raises(DocumentParseError):
        read_text(path)
