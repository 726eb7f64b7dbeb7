"""
Parser for collector qual batches.

This module handles:
- Loading batches from files, JSON strings or already-decoded lists
- Accepting a bare list, a single batch, or a {"batches": [...]} envelope
- Converting to typed Pydantic models
- Enforcing resource limits

Error handling philosophy: fail fast with clear messages.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from qualwizard.exceptions import ParseError
from qualwizard.parser.config import DEFAULT_CONFIG, ParserConfig
from qualwizard.parser.models import QualBatch


def parse_batches(
    source: str | Path | dict[str, Any] | list[Any],
    config: ParserConfig | None = None,
) -> list[QualBatch]:
    """
    Parse collector output into a list of QualBatch models.

    Accepts:
    - File path (str or Path)
    - JSON string
    - List of batch objects
    - A single batch object
    - Dict envelope with a "batches" key holding the list

    Raises:
        ParseError: If input cannot be parsed, validated, or exceeds limits

    Example:
        >>> batches = parse_batches("top_quals.json")
        >>> batches = parse_batches('[{"qualid": 1, "quals": []}]')
    """
    config = config or DEFAULT_CONFIG

    data = _unwrap_envelope(_load_source(source, config))

    if len(data) > config.max_batches:
        raise ParseError(
            f"Too many qual batches: {len(data)} (limit {config.max_batches})",
            source="limits",
        )

    batches = []
    for index, item in enumerate(data):
        try:
            batch = QualBatch.model_validate(item)
        except ValidationError as e:
            raise ParseError(
                f"Invalid qual batch at index {index}",
                detail=str(e),
                source="validation",
            ) from e
        if len(batch.quals) > config.max_quals_per_batch:
            raise ParseError(
                f"Batch {batch.qualid} has {len(batch.quals)} quals "
                f"(limit {config.max_quals_per_batch})",
                source="limits",
            )
        batches.append(batch)

    return batches


def _as_path(source: str | Path | dict[str, Any] | list[Any]) -> Path | None:
    """The file behind `source`, or None if it carries the data inline."""
    if isinstance(source, Path):
        return source
    if isinstance(source, str) and not source.lstrip().startswith(("{", "[")):
        return Path(source)
    return None


def _load_source(
    source: str | Path | dict[str, Any] | list[Any], config: ParserConfig
) -> dict[str, Any] | list[Any]:
    """Decode `source` into plain JSON data, reading it from disk if needed."""
    if isinstance(source, (dict, list)):
        return source

    path = _as_path(source)
    if path is not None:
        return _decode(_read_file(path, config))

    if isinstance(source, str):
        return _decode(source)

    raise ParseError(
        f"Unsupported source type: {type(source).__name__}",
        detail="Expected file path, JSON string, dict, or list",
        source="type_check",
    )


def _read_file(path: Path, config: ParserConfig) -> str:
    if not path.is_file():
        raise ParseError(f"File not found: {path}", source="file_read")

    size_mb = path.stat().st_size / (1024 * 1024)
    if size_mb > config.max_file_size_mb:
        raise ParseError(
            f"File too large: {size_mb:.1f}MB (limit {config.max_file_size_mb}MB)",
            source="limits",
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(f"Cannot read file: {path}", detail=str(e), source="file_read") from e

    if not text.strip():
        raise ParseError(f"File is empty: {path}", source="file_read")
    return text


def _decode(text: str) -> dict[str, Any] | list[Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(
            "Invalid JSON format",
            detail=f"Line {e.lineno}, column {e.colno}: {e.msg}",
            source="json_decode",
        ) from e

    if not isinstance(data, (dict, list)):
        raise ParseError(
            f"Expected a JSON object or array, got {type(data).__name__}",
            source="json_decode",
        )
    return data


def _unwrap_envelope(data: dict[str, Any] | list[Any]) -> list[Any]:
    """Accept a bare batch list, a single batch, or {"batches": [...]}."""
    if isinstance(data, list):
        return data

    if "qualid" in data:
        return [data]

    inner = data.get("batches")
    if not isinstance(inner, list):
        raise ParseError(
            "Expected a list of qual batches or an object with a 'batches' list",
            source="structure",
        )
    return inner
