"""Writes extracted endpoint records to CSV, JSON, or YAML."""

import csv
import json
from pathlib import Path

import yaml

from helix_endpoints.parser.base import EndpointRecord

FORMATS = ("csv", "json", "yaml")


def records_to_rows(records: list[EndpointRecord]) -> list[dict[str, str]]:
    """Flatten records into CSV rows; nested values become JSON text."""
    rows = []
    for record in records:
        data = record.model_dump(mode="json", by_alias=True)
        rows.append({
            key: value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
            for key, value in data.items()
        })
    return rows


def write_records(records: list[EndpointRecord], path: Path, fmt: str = "csv") -> None:
    """Serialize `records` to `path` in the given format."""
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    path.parent.mkdir(parents=True, exist_ok=True)
    data = [r.model_dump(mode="json", by_alias=True) for r in records]

    if fmt == "json":
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    elif fmt == "yaml":
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        columns = list(EndpointRecord.model_fields)
        header = [EndpointRecord.model_fields[name].alias or name for name in columns]
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=header)
            writer.writeheader()
            writer.writerows(records_to_rows(records))
