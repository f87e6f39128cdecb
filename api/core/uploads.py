"""
Image upload handling for cat pictures.

Flow:
- `read_upload()` validates the extension, buffers the bytes with a size
  limit and pulls GPS coordinates out of the EXIF block (if any)
- `save_upload()` writes the buffered bytes under UPLOAD_DIR

Saving is a separate step so handlers can validate the rest of the request
before anything touches the disk.
"""

from __future__ import annotations

import io
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from .errors import BadInput, StoreFailure
from .geo import parse_lat_lng

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

_GPS_IFD = 0x8825


@dataclass(frozen=True)
class PendingUpload:
    stored_name: str
    data: bytes
    location: dict[str, Any] | None


def upload_dir() -> Path:
    return Path(os.environ.get("UPLOAD_DIR", "uploads").strip() or "uploads")


def max_upload_bytes() -> int:
    raw = os.environ.get("MAX_UPLOAD_BYTES", "").strip()
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_UPLOAD_BYTES
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def default_location() -> dict[str, Any]:
    """
    Fallback point used when neither the body nor the image carries one.
    """
    raw = os.environ.get("DEFAULT_COORDINATES", "").strip() or "61,24"
    point = parse_lat_lng(raw)
    return {"type": "Point", "coordinates": [point.lng, point.lat]}


def _file_ext(filename: str) -> str:
    return Path(filename).suffix.lower()


def _to_degrees(value: Any) -> float:
    degrees, minutes, seconds = (float(v) for v in value)
    return degrees + (minutes / 60.0) + (seconds / 3600.0)


def exif_location(data: bytes) -> dict[str, Any] | None:
    """
    Return a GeoJSON point from the image's EXIF GPS tags, or None.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            gps = img.getexif().get_ifd(_GPS_IFD)
    except (UnidentifiedImageError, OSError, ValueError):
        return None

    # 1/2: latitude ref/value, 3/4: longitude ref/value
    if not all(key in gps for key in (1, 2, 3, 4)):
        return None
    try:
        lat = _to_degrees(gps[2])
        lng = _to_degrees(gps[4])
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if str(gps[1]).upper().startswith("S"):
        lat = -lat
    if str(gps[3]).upper().startswith("W"):
        lng = -lng
    return {"type": "Point", "coordinates": [lng, lat]}


async def read_upload(file: UploadFile) -> PendingUpload:
    if not file.filename:
        raise BadInput("Missing filename: cat")

    ext = _file_ext(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise BadInput(f"Unsupported file type '{ext}': cat")

    limit = max_upload_bytes()
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            raise BadInput(f"File too large, max is {limit} bytes: cat")

    data = bytes(buf)
    return PendingUpload(
        stored_name=f"{uuid.uuid4().hex}{ext}",
        data=data,
        location=exif_location(data),
    )


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def save_upload(upload: PendingUpload) -> Path:
    path = upload_dir() / upload.stored_name
    try:
        await run_in_threadpool(_write, path, upload.data)
    except OSError as exc:
        raise StoreFailure(f"Could not store upload: {exc}") from exc
    logger.info("upload_saved filename=%s size_bytes=%s", upload.stored_name, len(upload.data))
    return path
