"""
Bulk import stages that need no database.

1. shape check       -> `extract_batch`
2. structural check  -> `validate_records`
3. normalization     -> `normalize`
4. batch duplicates  -> `check_batch_duplicates`

Each stage raises a 400 `ApiError` describing every offending row or key.
"""

from __future__ import annotations

import math
import sys
from typing import Any

from core.errors import bad_request

from .resources import (
    BIGINT_MAX,
    INT4_MAX,
    INT4_MIN,
    INTEGER,
    NUMBER,
    REFERENCE,
    STRING,
    Field,
    Resource,
    UniqueField,
)


def extract_batch(payload: Any, resource: Resource) -> list[Any]:
    items = payload.get(resource.plural_key) if isinstance(payload, dict) else None
    if not isinstance(items, list) or not items:
        raise bad_request(resource.labels.empty_batch())
    return items


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        # float8 columns cannot hold integers beyond the float range.
        return -sys.float_info.max <= value <= sys.float_info.max
    return math.isfinite(value)


def is_valid_value(field: Field, value: Any) -> bool:
    if value is None:
        return not field.required

    if field.kind == STRING:
        if not isinstance(value, str):
            return False
        return bool(value.strip()) or not field.required
    if field.kind == NUMBER:
        return _is_number(value)
    if field.kind == INTEGER:
        return _is_int(value) and INT4_MIN <= value <= INT4_MAX
    if field.kind == REFERENCE:
        return _is_int(value) and 0 < value <= BIGINT_MAX
    raise ValueError(f"Unknown field kind: {field.kind}")


def invalid_rows(items: list[Any], resource: Resource) -> list[int]:
    """1-based positions of every structurally invalid candidate."""
    rows: list[int] = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            rows.append(position)
            continue
        if not all(is_valid_value(f, item.get(f.name)) for f in resource.fields):
            rows.append(position)
    return rows


def validate_records(items: list[Any], resource: Resource) -> None:
    rows = invalid_rows(items, resource)
    if rows:
        raise bad_request(resource.labels.invalid_rows(rows))


def normalize(item: dict[str, Any], resource: Resource) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for f in resource.fields:
        value = item.get(f.name)
        if f.kind == STRING and isinstance(value, str):
            value = value.strip() or None
        record[f.name] = value
    return record


def _key_part(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def natural_key(record: dict[str, Any], resource: Resource) -> tuple:
    return tuple(_key_part(record[name]) for name in resource.natural_key)


def repeated(values: list[Any]) -> list[Any]:
    """Values that occur more than once, in order of their first repeat."""
    seen: set = set()
    out: list[Any] = []
    for value in values:
        if value in seen and value not in out:
            out.append(value)
        seen.add(value)
    return out


def _unique_duplicates(unique: UniqueField, values: list[Any]) -> str:
    return f"{unique.duplicate_label} duplicados encontrados: {', '.join(str(v) for v in values)}"


def check_batch_duplicates(records: list[dict[str, Any]], resource: Resource) -> None:
    keys = [natural_key(r, resource) for r in records]
    dup_keys = repeated(keys)
    if dup_keys:
        if resource.key_unique is not None:
            raise bad_request(_unique_duplicates(resource.key_unique, [k[0] for k in dup_keys]))
        if resource.parent_key_field is not None:
            raise bad_request(resource.labels.duplicates())
        raise bad_request(resource.labels.duplicates([str(k[0]) for k in dup_keys]))

    for unique in resource.unique_fields:
        dup_values = repeated([_key_part(r[unique.name]) for r in records])
        if dup_values:
            raise bad_request(_unique_duplicates(unique, dup_values))
