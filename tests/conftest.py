from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from roadworthy import create_app


def make_jpeg(size: tuple[int, int] = (64, 48), color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture()
def app(tmp_path: Path):
    app = create_app({
        "TESTING": True,
        "DATABASE_PATH": str(tmp_path / "data" / "test_roadworthy.db"),
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "BACKUP_DIR": str(tmp_path / "backups"),
        "LOG_LEVEL": "DEBUG",
    })
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture()
def upload(client, jpeg_bytes):
    """Upload one JPEG for an item; returns the response."""

    def _upload(inspection_id: str, item_name: str, filename: str = "photo.jpg"):
        return client.post(
            f"/api/inspections/{inspection_id}/photos",
            data={"itemName": item_name, "photo": (io.BytesIO(jpeg_bytes), filename)},
            content_type="multipart/form-data",
        )

    return _upload


@pytest.fixture()
def inspection(client) -> dict:
    response = client.post(
        "/api/inspections",
        json={"roadworthyNumber": "RWC-1", "clientName": "Bob", "vehicleDescription": "2015 Corolla"},
    )
    assert response.status_code == 201
    return response.get_json()
