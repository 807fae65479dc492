from __future__ import annotations

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from rds_discovery.domain.models import DiscoveryDocument, DiscoveryEntry
from rds_discovery.errors import OutputError
from rds_discovery.output import render_document, write_document


def _document() -> DiscoveryDocument:
    return DiscoveryDocument(
        data=[
            DiscoveryEntry(db_instance_identifier="db1", address="db1.example.com", port=5432),
        ]
    )


def test_render_uses_literal_macro_names() -> None:
    text = render_document(_document())

    assert text == (
        "{\n"
        '  "data": [\n'
        "    {\n"
        '      "{#DB}": "db1",\n'
        '      "{#DB_ENDPOINT}": "db1.example.com",\n'
        '      "{#DB_PORT}": 5432\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def test_port_is_serialized_as_integer() -> None:
    payload = json.loads(render_document(_document()))

    assert payload == {
        "data": [{"{#DB}": "db1", "{#DB_ENDPOINT}": "db1.example.com", "{#DB_PORT}": 5432}]
    }
    assert isinstance(payload["data"][0]["{#DB_PORT}"], int)


def test_empty_document() -> None:
    assert render_document(DiscoveryDocument()) == '{\n  "data": []\n}'


def test_write_appends_trailing_newline() -> None:
    stream = io.StringIO()

    write_document(_document(), stream)

    assert stream.getvalue().endswith("}\n")
    assert json.loads(stream.getvalue())["data"][0]["{#DB}"] == "db1"


def test_serialization_failure_raises_output_error() -> None:
    with patch("rds_discovery.output.json.dumps", side_effect=TypeError("boom")):
        with pytest.raises(OutputError, match="Could not serialize output"):
            render_document(_document())


def test_write_failure_raises_output_error() -> None:
    stream = MagicMock()
    stream.write.side_effect = OSError("broken pipe")

    with pytest.raises(OutputError, match="Could not write output"):
        write_document(_document(), stream)
