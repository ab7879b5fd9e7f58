"""
Catalog persistence (raw SQL built from resource descriptors).

Table and column names are interpolated from `resources.py` constants only;
every value travels as a positional parameter.

Hydrated rows carry each included parent as a nested object. Parent columns
are selected under aliases like "country.id" and folded back in Python, which
keeps asyncpg's default codecs (no json casting).
"""

from __future__ import annotations

from typing import Any

from core import db

from . import resources
from .resources import INTEGER, NUMBER, STRING, Field, Resource

_ARRAY_TYPES = {
    STRING: "text[]",
    NUMBER: "float8[]",
    INTEGER: "bigint[]",
    resources.REFERENCE: "bigint[]",
}


def _own_columns(resource: Resource, alias: str = "t") -> list[str]:
    cols = [f"{alias}.id"]
    cols += [f'{alias}.{f.column} AS "{f.name}"' for f in resource.fields]
    cols += [f'{alias}.created_at AS "createdAt"', f'{alias}.updated_at AS "updatedAt"']
    return cols


def _select_sql(resource: Resource) -> str:
    columns = _own_columns(resource)
    joins: list[str] = []
    for i, f in enumerate(resource.includes):
        parent = resources.get(f.reference.resource)
        alias = f"p{i}"
        include = f.reference.include
        columns.append(f'{alias}.id AS "{include}.id"')
        columns += [f'{alias}.{pf.column} AS "{include}.{pf.name}"' for pf in parent.fields]
        joins.append(f"LEFT JOIN {parent.table} {alias} ON {alias}.id = t.{f.column}")
    return f"SELECT {', '.join(columns)} FROM {resource.table} t " + " ".join(joins)


def _order_sql(resource: Resource) -> str:
    return f"ORDER BY t.{resource.field(resource.order_by).column} ASC, t.id ASC"


def _returning_sql(resource: Resource) -> str:
    return "RETURNING " + ", ".join(c.removeprefix("t.") for c in _own_columns(resource))


def hydrate(row: dict[str, Any], resource: Resource) -> dict[str, Any]:
    record: dict[str, Any] = {}
    nested: dict[str, dict[str, Any]] = {}
    for key, value in row.items():
        if "." in key:
            include, name = key.split(".", 1)
            nested.setdefault(include, {})[name] = value
        else:
            record[key] = value
    for f in resource.includes:
        parent = nested.get(f.reference.include, {})
        record[f.reference.include] = parent if parent.get("id") is not None else None
    return record


def _hydrate_all(rows: list[dict[str, Any]], resource: Resource) -> list[dict[str, Any]]:
    return [hydrate(r, resource) for r in rows]


def _natural_key_filter(resource: Resource, records: list[dict[str, Any]]) -> tuple[str, list[Any]]:
    name = resource.name_field
    names = [str(r[name.name]).lower() for r in records]
    parent = resource.parent_key_field
    if parent is None:
        return f"lower(t.{name.column}) = ANY($1::text[])", [names]
    parent_ids = [r[parent.name] for r in records]
    return (
        f"(lower(t.{name.column}), t.{parent.column}) IN "
        "(SELECT * FROM unnest($1::text[], $2::bigint[]))",
        [names, parent_ids],
    )


async def list_records(resource: Resource) -> list[dict[str, Any]]:
    rows = await db.fetch_all(f"{_select_sql(resource)} {_order_sql(resource)}")
    return _hydrate_all(rows, resource)


async def get_record(resource: Resource, record_id: int) -> dict[str, Any] | None:
    row = await db.fetch_one(f"{_select_sql(resource)} WHERE t.id = $1", record_id)
    return hydrate(row, resource) if row is not None else None


async def insert_record(resource: Resource, values: dict[str, Any]) -> dict[str, Any]:
    fields = [f for f in resource.fields if f.name in values]
    columns = ", ".join(f.column for f in fields)
    placeholders = ", ".join(f"${i}" for i in range(1, len(fields) + 1))
    row = await db.fetch_one(
        f"INSERT INTO {resource.table} ({columns}) VALUES ({placeholders}) {_returning_sql(resource)}",
        *[values[f.name] for f in fields],
    )
    if row is None:
        raise RuntimeError(f"Failed to insert into {resource.table}.")
    return row


async def update_record(resource: Resource, record_id: int, values: dict[str, Any]) -> dict[str, Any] | None:
    fields = [f for f in resource.fields if f.name in values]
    assignments = [f"{f.column} = ${i}" for i, f in enumerate(fields, start=2)]
    assignments.append("updated_at = now()")
    return await db.fetch_one(
        f"UPDATE {resource.table} SET {', '.join(assignments)} WHERE id = $1 {_returning_sql(resource)}",
        record_id,
        *[values[f.name] for f in fields],
    )


async def delete_record(resource: Resource, record_id: int) -> bool:
    status = await db.execute(f"DELETE FROM {resource.table} WHERE id = $1", record_id)
    return status.endswith(" 1")


async def existing_ids(resource: Resource, ids: list[int]) -> set[int]:
    rows = await db.fetch_all(
        f"SELECT id FROM {resource.table} WHERE id = ANY($1::bigint[])",
        ids,
    )
    return {int(r["id"]) for r in rows}


async def find_by_natural_keys(resource: Resource, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    where, args = _natural_key_filter(resource, records)
    rows = await db.fetch_all(f"{_select_sql(resource)} WHERE {where} {_order_sql(resource)}", *args)
    return _hydrate_all(rows, resource)


async def find_by_values(resource: Resource, field: Field, values: list[Any]) -> list[dict[str, Any]]:
    if field.kind == STRING:
        where = f"lower(t.{field.column}) = ANY($1::text[])"
        values = [str(v).lower() for v in values]
    else:
        where = f"t.{field.column} = ANY($1::{_ARRAY_TYPES[field.kind]})"
    rows = await db.fetch_all(f"{_select_sql(resource)} WHERE {where} {_order_sql(resource)}", values)
    return _hydrate_all(rows, resource)


async def insert_batch(resource: Resource, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Insert every record in one transaction and return them hydrated.

    A constraint violation on any row rolls back the whole batch.
    """
    fields = list(resource.fields)
    columns = ", ".join(f.column for f in fields)
    placeholders = ", ".join(f"${i}" for i in range(1, len(fields) + 1))
    args = [tuple(r[f.name] for f in fields) for r in records]
    where, key_args = _natural_key_filter(resource, records)

    async with db.transaction() as conn:
        await conn.executemany(
            f"INSERT INTO {resource.table} ({columns}) VALUES ({placeholders})",
            args,
        )
        rows = await conn.fetch(
            f"{_select_sql(resource)} WHERE {where} {_order_sql(resource)}",
            *key_args,
        )
    return _hydrate_all(db.rows_to_dicts(rows), resource)
