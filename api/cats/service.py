"""
Cat handlers.

Each handler runs the same fixed sequence: validate the input, authorize the
principal, call the repository, then shape the response. Reads return the
bare cat(s); writes return a `{message, data}` envelope.
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.datastructures import UploadFile

from auth.policy import Operation, Principal, authorize
from core import uploads
from core.errors import NotFound
from core.geo import rectangle_bounds
from core.responses import envelope
from core.validation import parse_id, require_valid

from . import repository, schemas

logger = logging.getLogger(__name__)


async def get_cat(raw_id: str) -> dict[str, Any]:
    cat_id = parse_id(raw_id)
    cat = await repository.find_by_id(cat_id, populate=True)
    if cat is None:
        raise NotFound("Cat not found")
    return cat


async def list_cats() -> list[dict[str, Any]]:
    return await repository.find_all(populate=True)


async def list_own_cats(principal: Principal | None) -> list[dict[str, Any]]:
    actor = authorize(principal, Operation.READ_OWN)
    # An owner without cats gets an empty list, not a 404.
    return await repository.find_by_owner(actor.id, populate=True)


async def list_cats_in_area(query: dict[str, Any]) -> list[dict[str, Any]]:
    area = require_valid(schemas.AreaQuery, query)
    polygon = rectangle_bounds(area.top_right, area.bottom_left)
    logger.debug("area_query polygon=%s", polygon["coordinates"])
    cats = await repository.find_within_region(polygon)
    if not cats:
        raise NotFound("Cats not found")
    return cats


async def create_cat(
    principal: Principal | None,
    body: dict[str, Any],
    upload: UploadFile | None = None,
) -> dict[str, Any]:
    data = dict(body)
    pending = await uploads.read_upload(upload) if upload is not None else None
    if not data.get("filename") and pending is not None:
        data["filename"] = pending.stored_name

    payload = require_valid(schemas.CatCreateRequest, data)
    actor = authorize(principal, Operation.WRITE_OWN)

    location = payload.location.model_dump() if payload.location is not None else None
    if location is None:
        location = (pending.location if pending is not None else None) or uploads.default_location()

    if pending is not None and payload.filename == pending.stored_name:
        await uploads.save_upload(pending)

    cat = await repository.create(
        cat_name=payload.cat_name,
        weight=payload.weight,
        filename=payload.filename,
        birthdate=payload.birthdate,
        owner=payload.owner or actor.id,
        location=location,
    )
    logger.info("cat_created cat_id=%s owner=%s", cat["id"], cat["owner"])
    return envelope("Cat created", cat)


def _patch(payload: schemas.CatUpdateRequest) -> dict[str, Any]:
    patch = payload.model_dump(exclude_unset=True)
    # Only `location` may be cleared; other columns are NOT NULL.
    return {k: v for k, v in patch.items() if v is not None or k == "location"}


async def update_cat(principal: Principal | None, raw_id: str, body: dict[str, Any]) -> dict[str, Any]:
    cat_id = parse_id(raw_id)
    payload = require_valid(schemas.CatUpdateRequest, body)
    actor = authorize(principal, Operation.WRITE_OWN)

    cat = await repository.update_by_id(cat_id, _patch(payload), owner_id=actor.id, populate=True)
    if cat is None:
        raise NotFound("Cat not found")
    return envelope("Cat updated", cat)


async def update_cat_admin(principal: Principal | None, raw_id: str, body: dict[str, Any]) -> dict[str, Any]:
    cat_id = parse_id(raw_id)
    payload = require_valid(schemas.CatAdminUpdateRequest, body)
    actor = authorize(principal, Operation.ADMIN_WRITE)

    cat = await repository.update_by_id(cat_id, _patch(payload))
    if cat is None:
        raise NotFound("Cat not found")
    logger.info("cat_updated_by_admin cat_id=%s admin_id=%s", cat_id, actor.id)
    return envelope("Cat updated", cat)


async def delete_cat(principal: Principal | None, raw_id: str) -> dict[str, Any]:
    cat_id = parse_id(raw_id)
    actor = authorize(principal, Operation.WRITE_OWN)

    cat = await repository.delete_by_id(cat_id, owner_id=actor.id, populate=True)
    if cat is None:
        raise NotFound("Cat not found")
    return envelope("Cat deleted", cat)


async def delete_cat_admin(principal: Principal | None, raw_id: str) -> dict[str, Any]:
    cat_id = parse_id(raw_id)
    actor = authorize(principal, Operation.ADMIN_WRITE)

    cat = await repository.delete_by_id(cat_id)
    if cat is None:
        raise NotFound("Cat not found")
    logger.info("cat_deleted_by_admin cat_id=%s admin_id=%s", cat_id, actor.id)
    return envelope("Cat deleted", cat)
