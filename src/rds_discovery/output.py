"""Serialization of the discovery document."""

from __future__ import annotations

import json
import sys
from typing import TextIO

from rds_discovery.domain.models import DiscoveryDocument
from rds_discovery.errors import OutputError


def render_document(document: DiscoveryDocument) -> str:
    try:
        return json.dumps(document.to_payload(), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise OutputError(f"Could not serialize output: {exc}") from exc


def write_document(document: DiscoveryDocument, stream: TextIO | None = None) -> None:
    """Render the whole document first, then write it with a trailing newline."""
    text = render_document(document)
    out = stream if stream is not None else sys.stdout
    try:
        out.write(text + "\n")
        out.flush()
    except OSError as exc:
        raise OutputError(f"Could not write output: {exc}") from exc
