"""
Catalog business logic.

Bulk import runs a fixed sequence of stages and stops at the first failing
one; nothing is written unless every stage passes, and the final insert is a
single transaction:

1-4. shape, structure, normalization, in-batch duplicates (`validation`)
5.   every referenced parent id exists
6.   no record with the same natural key (or unique field) already exists
7.   insert all rows and re-read them hydrated, sorted by the resource order
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core.errors import ApiError, bad_request, not_found, server_error

from . import repository, resources, validation
from .resources import Resource

logger = logging.getLogger(__name__)


async def _check_references(resource: Resource, records: list[dict[str, Any]]) -> None:
    # Fields pointing at the same parent with the same label share one lookup.
    groups: dict[tuple[str, str], list[int]] = {}
    for f in resource.references:
        ids = groups.setdefault((f.reference.resource, f.missing_label), [])
        for record in records:
            value = record.get(f.name)
            if value is not None and value not in ids:
                ids.append(value)

    for (parent_path, label), ids in groups.items():
        if not ids:
            continue
        found = await repository.existing_ids(resources.get(parent_path), ids)
        missing = [i for i in ids if i not in found]
        if missing:
            raise bad_request(resource.labels.missing(label, missing))


def _describe(row: dict[str, Any], resource: Resource) -> str:
    name = str(row[resource.name_field.name])
    parent = resource.parent_key_field
    if parent is None:
        return name
    return f"{name} ({resource.key_label}: {row[parent.name]})"


async def _check_collisions(resource: Resource, records: list[dict[str, Any]]) -> None:
    existing = await repository.find_by_natural_keys(resource, records)
    if existing:
        suffix = resource.key_unique.existing_suffix if resource.key_unique else ""
        names = [_describe(row, resource) for row in existing]
        raise bad_request(resource.labels.existing(names, suffix))

    for unique in resource.unique_fields:
        f = resource.field(unique.name)
        existing = await repository.find_by_values(resource, f, [r[f.name] for r in records])
        if existing:
            values = [str(row[f.name]) for row in existing]
            raise bad_request(resource.labels.existing(values, unique.existing_suffix))


async def bulk_create(resource: Resource, payload: Any) -> dict[str, Any]:
    items = validation.extract_batch(payload, resource)
    validation.validate_records(items, resource)
    records = [validation.normalize(item, resource) for item in items]
    validation.check_batch_duplicates(records, resource)

    try:
        await _check_references(resource, records)
        await _check_collisions(resource, records)
        created = await repository.insert_batch(resource, records)
    except ApiError:
        raise
    except Exception as exc:
        logger.exception("bulk_insert_failed resource=%s size=%s", resource.path, len(records))
        raise server_error(resource.labels.bulk_failed()) from exc

    logger.info("bulk_insert_complete resource=%s count=%s", resource.path, len(records))
    return {
        "message": resource.labels.created(len(records)),
        "count": len(records),
        resource.plural_key: created,
    }


async def _guard(resource: Resource, op: str, message: str, coro):
    try:
        return await coro
    except asyncpg.PostgresError as exc:
        logger.exception("resource_query_failed resource=%s op=%s", resource.path, op)
        raise server_error(message) from exc


async def list_records(resource: Resource) -> list[dict[str, Any]]:
    return await _guard(
        resource,
        "list",
        resource.labels.failed("obtener", many=True),
        repository.list_records(resource),
    )


async def get_record(resource: Resource, record_id: int) -> dict[str, Any]:
    row = await _guard(
        resource,
        "get",
        resource.labels.failed("obtener"),
        repository.get_record(resource, record_id),
    )
    if row is None:
        raise not_found(resource.labels.not_found())
    return row


async def create_record(resource: Resource, values: dict[str, Any]) -> dict[str, Any]:
    return await _guard(
        resource,
        "create",
        resource.labels.failed("crear"),
        repository.insert_record(resource, values),
    )


async def update_record(resource: Resource, record_id: int, values: dict[str, Any]) -> dict[str, Any]:
    row = await _guard(
        resource,
        "update",
        resource.labels.failed("actualizar"),
        repository.update_record(resource, record_id, values),
    )
    if row is None:
        raise not_found(resource.labels.not_found())
    return row


async def delete_record(resource: Resource, record_id: int) -> None:
    deleted = await _guard(
        resource,
        "delete",
        resource.labels.failed("eliminar"),
        repository.delete_record(resource, record_id),
    )
    if not deleted:
        raise not_found(resource.labels.not_found())
