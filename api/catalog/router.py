"""
REST endpoints for one catalog resource.

`build_router` is called once per descriptor in `resources.RESOURCES`.
"""

# Annotations here reference models created inside build_router, so they must
# be evaluated eagerly (no `from __future__ import annotations`).

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from auth import dependencies as auth_dependencies

from . import schemas, service
from .resources import Resource


def build_router(resource: Resource) -> APIRouter:
    router = APIRouter(dependencies=[Depends(auth_dependencies.get_current_identity)])
    create_body = schemas.create_model_for(resource)
    update_body = schemas.update_model_for(resource)
    base = f"/{resource.path}"
    name = resource.path

    @router.get(base, name=f"{name}_list")
    async def list_records() -> list[dict]:
        return await service.list_records(resource)

    @router.post(base, name=f"{name}_create", status_code=status.HTTP_201_CREATED)
    async def create_record(body: create_body) -> dict:  # type: ignore[valid-type]
        return await service.create_record(resource, schemas.body_values(body, resource))

    @router.post(f"{base}/bulk", name=f"{name}_bulk_create", status_code=status.HTTP_201_CREATED)
    async def bulk_create(payload: Any = Body(...)) -> dict:
        """
        Create every record in `{<pluralKey>: [...]}` or none of them.
        """
        return await service.bulk_create(resource, payload)

    @router.get(f"{base}/{{record_id}}", name=f"{name}_get")
    async def get_record(record_id: int) -> dict:
        return await service.get_record(resource, record_id)

    @router.put(f"{base}/{{record_id}}", name=f"{name}_update")
    async def update_record(record_id: int, body: update_body) -> dict:  # type: ignore[valid-type]
        return await service.update_record(resource, record_id, schemas.body_values(body, resource))

    @router.delete(
        f"{base}/{{record_id}}",
        name=f"{name}_delete",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    async def delete_record(record_id: int) -> None:
        await service.delete_record(resource, record_id)

    return router
