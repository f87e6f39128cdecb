"""
Cat persistence (raw SQL, PostGIS).

Locations are stored as `geometry(Point, 4326)` and travel in and out of SQL
as GeoJSON text. "Populated" reads join the owner and attach
`{id, user_name, email}` in place of the bare owner id.

Self-scoped writes pass `owner_id`; the row must then belong to that user or
the call behaves exactly as if the id did not exist.
"""

from __future__ import annotations

import json
from typing import Any

try:
    from core import db
except ModuleNotFoundError:
    from api.core import db

UPDATABLE_COLUMNS = ("cat_name", "weight", "filename", "birthdate", "location", "owner")

_CAT_COLUMNS = """
    c.id, c.cat_name, c.weight, c.filename, c.birthdate,
    ST_AsGeoJSON(c.location) AS location,
    c.owner
"""

_OWNER_JSON = """
    json_build_object('id', u.id, 'user_name', u.user_name, 'email', u.email)::text AS owner_json
"""


def _geometry_arg(location: dict[str, Any] | None) -> str | None:
    """
    asyncpg has no codec for PostGIS geometry here; send GeoJSON text and
    convert it with ST_GeomFromGeoJSON in SQL.
    """
    if location is None:
        return None
    return json.dumps(location, ensure_ascii=True)


def _geometry_sql(placeholder: str) -> str:
    return (
        f"CASE WHEN {placeholder}::text IS NULL THEN NULL "
        f"ELSE ST_SetSRID(ST_GeomFromGeoJSON({placeholder}::text), 4326) END"
    )


def _row_to_cat(row: dict[str, Any]) -> dict[str, Any]:
    location = row.get("location")
    owner: Any = int(row["owner"])
    owner_json = row.get("owner_json")
    if owner_json:
        owner = json.loads(owner_json)
    return {
        "id": int(row["id"]),
        "cat_name": row["cat_name"],
        "weight": float(row["weight"]),
        "filename": row["filename"],
        "birthdate": row["birthdate"],
        "location": json.loads(location) if location else None,
        "owner": owner,
    }


def _select(*, populate: bool, source: str = "cats") -> str:
    if populate:
        return f"SELECT {_CAT_COLUMNS}, {_OWNER_JSON} FROM {source} c JOIN users u ON u.id = c.owner"
    return f"SELECT {_CAT_COLUMNS} FROM {source} c"


async def find_by_id(cat_id: int, *, populate: bool = False) -> dict[str, Any] | None:
    row = await db.fetch_one(f"{_select(populate=populate)} WHERE c.id = $1", cat_id)
    return _row_to_cat(row) if row is not None else None


async def find_all(*, populate: bool = False) -> list[dict[str, Any]]:
    rows = await db.fetch_all(f"{_select(populate=populate)} ORDER BY c.id ASC")
    return [_row_to_cat(r) for r in rows]


async def find_by_owner(owner_id: int, *, populate: bool = False) -> list[dict[str, Any]]:
    rows = await db.fetch_all(
        f"{_select(populate=populate)} WHERE c.owner = $1 ORDER BY c.id ASC",
        owner_id,
    )
    return [_row_to_cat(r) for r in rows]


async def find_within_region(polygon: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Cats whose stored point lies inside `polygon` (a GeoJSON Polygon).
    """
    rows = await db.fetch_all(
        f"""
        {_select(populate=False)}
        WHERE c.location IS NOT NULL
          AND ST_Within(c.location, ST_SetSRID(ST_GeomFromGeoJSON($1::text), 4326))
        ORDER BY c.id ASC
        """,
        _geometry_arg(polygon),
    )
    return [_row_to_cat(r) for r in rows]


async def create(
    *,
    cat_name: str,
    weight: float,
    filename: str,
    birthdate: Any,
    owner: int,
    location: dict[str, Any] | None = None,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        WITH inserted AS (
            INSERT INTO cats (cat_name, weight, filename, birthdate, location, owner)
            VALUES ($1, $2, $3, $4, {_geometry_sql("$5")}, $6)
            RETURNING *
        )
        {_select(populate=False, source="inserted")}
        """,
        cat_name,
        weight,
        filename,
        birthdate,
        _geometry_arg(location),
        owner,
    )
    if row is None:
        raise RuntimeError("Failed to create cat.")
    return _row_to_cat(row)


async def update_by_id(
    cat_id: int,
    patch: dict[str, Any],
    *,
    owner_id: int | None = None,
    populate: bool = False,
) -> dict[str, Any] | None:
    """
    Apply `patch` in one UPDATE and return the updated cat (or None).
    """
    columns = [c for c in UPDATABLE_COLUMNS if c in patch]
    args: list[Any] = [cat_id]
    scope = ""
    if owner_id is not None:
        args.append(owner_id)
        scope = "AND c.owner = $2"

    if not columns:
        row = await db.fetch_one(
            f"{_select(populate=populate)} WHERE c.id = $1 {scope}",
            *args,
        )
        return _row_to_cat(row) if row is not None else None

    assignments = []
    for column in columns:
        if column == "location":
            args.append(_geometry_arg(patch[column]))
            assignments.append(f"location = {_geometry_sql(f'${len(args)}')}")
        else:
            args.append(patch[column])
            assignments.append(f"{column} = ${len(args)}")

    row = await db.fetch_one(
        f"""
        WITH updated AS (
            UPDATE cats c
            SET {", ".join(assignments)}
            WHERE c.id = $1 {scope}
            RETURNING *
        )
        {_select(populate=populate, source="updated")}
        """,
        *args,
    )
    return _row_to_cat(row) if row is not None else None


async def delete_by_id(
    cat_id: int,
    *,
    owner_id: int | None = None,
    populate: bool = False,
) -> dict[str, Any] | None:
    args: list[Any] = [cat_id]
    scope = ""
    if owner_id is not None:
        args.append(owner_id)
        scope = "AND c.owner = $2"

    row = await db.fetch_one(
        f"""
        WITH deleted AS (
            DELETE FROM cats c
            WHERE c.id = $1 {scope}
            RETURNING *
        )
        {_select(populate=populate, source="deleted")}
        """,
        *args,
    )
    return _row_to_cat(row) if row is not None else None
