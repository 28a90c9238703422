"""Snapshot serialization and writing.

Writes the resolved status map as status.json for downstream renderers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any

from suspension.status_types import LocationRecord, StatusSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "status.json"


def snapshot_to_dict(snapshot: StatusSnapshot) -> dict[str, Any]:
    """Convert a snapshot to a JSON-serializable dict."""
    return {
        "today": snapshot.today,
        "feed_updated": snapshot.feed_updated,
        "locations": {
            key: record.to_dict() for key, record in sorted(snapshot.records.items())
        },
    }


def snapshot_from_dict(data: dict[str, Any]) -> StatusSnapshot:
    """Rebuild a snapshot from its serialized form."""
    records = {
        key: LocationRecord.from_dict(record)
        for key, record in data.get("locations", {}).items()
    }
    return StatusSnapshot(
        records=MappingProxyType(records),
        today=data["today"],
        feed_updated=data.get("feed_updated"),
    )


def write_snapshot(snapshot: StatusSnapshot, output_dir: str) -> Path:
    """Write status.json to the output directory.

    Creates {output_dir}/{today}/status.json and refreshes
    {output_dir}/latest/status.json.

    Args:
        snapshot: Snapshot to write.
        output_dir: Base output directory.

    Returns:
        Path to the dated file.
    """
    data = snapshot_to_dict(snapshot)

    out_path = Path(output_dir) / snapshot.today
    out_path.mkdir(parents=True, exist_ok=True)
    file_path = out_path / SNAPSHOT_FILENAME
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    logger.info("Wrote status snapshot to %s", file_path)

    latest_path = Path(output_dir) / "latest"
    latest_path.mkdir(parents=True, exist_ok=True)
    with open(latest_path / SNAPSHOT_FILENAME, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return file_path


def load_snapshot(path: Path) -> StatusSnapshot:
    """Load a snapshot previously written by ``write_snapshot``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a decodable snapshot.
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return snapshot_from_dict(json.load(f))
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Snapshot {path} is corrupt: {exc}") from exc
