"""Snapshot export and import.

Snapshots are written as JSON (default) or YAML, chosen by file suffix.
Import is tolerant: unknown fields are ignored, facts of unknown
categories are skipped with a warning and missing optional fields fall
back to their defaults. Anything that cannot be read as a snapshot at all
raises ``SerializationError``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cuda_doctor.models.facts import Category
from cuda_doctor.models.snapshot import SCHEMA_VERSION, EnvironmentSnapshot
from cuda_doctor.utils.errors import SerializationError
from cuda_doctor.utils.logging import get_logger

logger = get_logger("persistence")

YAML_SUFFIXES = (".yaml", ".yml")
_CATEGORIES = {category.value for category in Category}


def format_for(path: Path | str) -> str:
    """Serialization format for a path: "yaml" for .yaml/.yml, else "json"."""
    return "yaml" if Path(path).suffix.lower() in YAML_SUFFIXES else "json"


def dumps_snapshot(snapshot: EnvironmentSnapshot, fmt: str = "json") -> str:
    """Serialize a snapshot to text.

    Args:
        snapshot: Snapshot to serialize
        fmt: "json" or "yaml"

    Returns:
        Serialized document
    """
    data = snapshot.model_dump(mode="json")
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2)


def loads_snapshot(text: str, fmt: str = "json", source: str | None = None) -> EnvironmentSnapshot:
    """Parse a snapshot from text.

    Args:
        text: Serialized document
        fmt: "json" or "yaml"
        source: Where the text came from, for error messages

    Returns:
        The parsed snapshot

    Raises:
        SerializationError: If the text is not a readable snapshot
    """
    where = source or "<string>"
    try:
        data = yaml.safe_load(text) if fmt == "yaml" else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SerializationError(f"Malformed {fmt.upper()} in {where}: {e}", path=source) from e

    if not isinstance(data, dict):
        raise SerializationError(f"Expected a snapshot object in {where}", path=source)

    schema_version = data.get("schema_version")
    if isinstance(schema_version, int) and schema_version > SCHEMA_VERSION:
        logger.warning(
            f"{where} uses schema version {schema_version}, newer than {SCHEMA_VERSION}; "
            "unknown fields will be ignored"
        )

    data = dict(data)
    data["facts"] = _known_facts(data.get("facts"), where)

    try:
        return EnvironmentSnapshot.model_validate(data)
    except ValidationError as e:
        raise SerializationError(f"Invalid snapshot in {where}: {e}", path=source) from e


def _known_facts(raw_facts: Any, where: str) -> list[dict[str, Any]]:
    if raw_facts is None:
        return []
    if not isinstance(raw_facts, list):
        raise SerializationError(f"'facts' must be a list in {where}", path=where)

    facts = []
    for position, raw in enumerate(raw_facts):
        if not isinstance(raw, dict):
            logger.warning(f"{where}: skipping fact #{position}, not an object")
            continue
        category = raw.get("category")
        if category not in _CATEGORIES:
            logger.warning(f"{where}: skipping fact #{position} with unknown category {category!r}")
            continue
        facts.append(raw)
    return facts


def save_snapshot(snapshot: EnvironmentSnapshot, path: Path | str) -> Path:
    """Write a snapshot to a file.

    Args:
        snapshot: Snapshot to save
        path: Destination; the suffix selects JSON or YAML

    Returns:
        Path the snapshot was written to
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_snapshot(snapshot, format_for(path)), encoding="utf-8")
    logger.info(f"Exported snapshot to {path}")
    return path


def load_snapshot(path: Path | str) -> EnvironmentSnapshot:
    """Read a snapshot from a file.

    Args:
        path: Source file; the suffix selects JSON or YAML

    Returns:
        The imported snapshot

    Raises:
        SerializationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SerializationError(f"Cannot read {path}: {e.strerror or e}", path=str(path)) from e
    except UnicodeDecodeError as e:
        raise SerializationError(f"{path} is not UTF-8 text: {e.reason}", path=str(path)) from e
    return loads_snapshot(text, format_for(path), source=str(path))
