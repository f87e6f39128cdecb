"""Image uploads on cat creation."""
import io

import pytest
from PIL import Image

from core import uploads


def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color="orange").save(buf, format="PNG")
    return buf.getvalue()


def test_exif_location_absent() -> None:
    assert uploads.exif_location(_png()) is None
    assert uploads.exif_location(b"not an image") is None


def test_to_degrees() -> None:
    assert uploads._to_degrees((60, 30, 36)) == pytest.approx(60.51)


def test_default_location_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_COORDINATES", "60.5,25.25")
    assert uploads.default_location() == {"type": "Point", "coordinates": [25.25, 60.5]}


def test_multipart_create_stores_upload(client, store, act_as, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    alice = store.add_user("alice", "alice@example.com")
    act_as(alice)

    resp = client.post(
        "/cats",
        data={"cat_name": "Miso", "weight": "4.5", "birthdate": "2020-01-01"},
        files={"cat": ("miso.png", _png(), "image/png")},
    )

    assert resp.status_code == 200
    cat = resp.json()["data"]
    assert cat["filename"].endswith(".png")
    assert (tmp_path / cat["filename"]).read_bytes() == _png()
    assert cat["owner"] == alice.id


def test_multipart_rejects_unsupported_file(client, store, act_as, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    act_as(store.add_user("alice", "alice@example.com"))

    resp = client.post(
        "/cats",
        data={"cat_name": "Miso", "weight": "4.5", "birthdate": "2020-01-01"},
        files={"cat": ("notes.txt", b"hello", "text/plain")},
    )

    assert resp.status_code == 400
    assert list(tmp_path.iterdir()) == []


def test_multipart_invalid_body_does_not_store_upload(client, store, act_as, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    act_as(store.add_user("alice", "alice@example.com"))

    resp = client.post(
        "/cats",
        data={"cat_name": "Miso", "weight": "-1", "birthdate": "2020-01-01"},
        files={"cat": ("miso.png", _png(), "image/png")},
    )

    assert resp.status_code == 400
    assert list(tmp_path.iterdir()) == []
