"""
Pydantic request models generated from resource descriptors.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field as PydanticField, FiniteFloat, StrictInt, StringConstraints, create_model

from .resources import BIGINT_MAX, INT4_MAX, INT4_MIN, INTEGER, NUMBER, REFERENCE, STRING, Field, Resource

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True)]
PositiveId = Annotated[StrictInt, PydanticField(gt=0, le=BIGINT_MAX)]
Int4 = Annotated[StrictInt, PydanticField(ge=INT4_MIN, le=INT4_MAX)]


class _RecordBody(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _annotation(field: Field, *, required: bool) -> Any:
    if field.kind == STRING:
        return RequiredText if required else OptionalText
    if field.kind == NUMBER:
        return FiniteFloat
    if field.kind == INTEGER:
        return Int4
    if field.kind == REFERENCE:
        return PositiveId
    raise ValueError(f"Unknown field kind: {field.kind}")


def create_model_for(resource: Resource) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    for f in resource.fields:
        if f.required:
            definitions[f.name] = (_annotation(f, required=True), ...)
        else:
            definitions[f.name] = (_annotation(f, required=False) | None, None)
    return create_model(f"{resource.path}_create", __base__=_RecordBody, **definitions)


def update_model_for(resource: Resource) -> type[BaseModel]:
    definitions: dict[str, Any] = {
        f.name: (_annotation(f, required=f.required) | None, None) for f in resource.fields
    }
    return create_model(f"{resource.path}_update", __base__=_RecordBody, **definitions)


def body_values(body: BaseModel, resource: Resource) -> dict[str, Any]:
    """Only the fields the client actually sent; required columns are never nulled."""
    values = body.model_dump(exclude_unset=True)
    return {k: v for k, v in values.items() if v is not None or not resource.field(k).required}
