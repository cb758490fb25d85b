from __future__ import annotations

import os
from pathlib import Path

from roadworthy.services import backup
from roadworthy.services.inspection_service import apply_item_photos
from roadworthy.utils import next_timestamp


def _ready_to_complete(client, upload) -> dict:
    created = client.post("/api/inspections", json={"roadworthyNumber": "RWC/77", "clientName": "Dee"}).get_json()
    for item in ("VIN", "Under Vehicle", "Engine Bay"):
        upload(created["id"], item)
    return created


def _configure_network(client, folder: Path) -> None:
    client.patch(
        "/api/settings",
        json={"networkFolderPath": str(folder), "networkUsername": "rwc", "networkPassword": "pw"},
    )


def test_apply_item_photos_sets_flag_with_photos() -> None:
    inspection = {"checklistItems": {"VIN": False}, "photos": {}}
    photos, items = apply_item_photos(inspection, "VIN", ["/api/photos/a.jpg"])
    assert photos == {"VIN": ["/api/photos/a.jpg"]}
    assert items["VIN"] is True
    # Input is not mutated
    assert inspection == {"checklistItems": {"VIN": False}, "photos": {}}


def test_apply_item_photos_empty_list_prunes_key() -> None:
    inspection = {"checklistItems": {"VIN": True}, "photos": {"VIN": ["/api/photos/a.jpg"], "Fault": ["x"]}}
    photos, items = apply_item_photos(inspection, "VIN", [])
    assert photos == {"Fault": ["x"]}
    assert items["VIN"] is False


def test_next_timestamp_is_strictly_later() -> None:
    future = "2999-01-01T00:00:00.000000+00:00"
    assert next_timestamp(future) == "2999-01-01T00:00:00.000001+00:00"
    assert next_timestamp(None) < future


def test_backup_folder_stays_inside_backup_dir(tmp_path) -> None:
    folder = backup.backup_folder(str(tmp_path), "../RWC/1")
    assert os.path.dirname(folder) == str(tmp_path)


def test_network_upload_skipped_when_not_configured() -> None:
    assert backup.upload_to_network({"networkFolderPath": "/mnt/x"}, "/tmp/nowhere", "RWC-1") is None
    assert backup.upload_to_network(None, "/tmp/nowhere", "RWC-1") is None


def test_complete_copies_to_network_folder(client, upload, tmp_path) -> None:
    share = tmp_path / "share"
    share.mkdir()
    _configure_network(client, share)
    created = _ready_to_complete(client, upload)

    body = client.post(f"/api/inspections/{created['id']}/complete").get_json()
    assert body["networkUpload"]["success"] is True
    target = Path(body["networkUpload"]["path"])
    assert target.parent == share
    assert target.name == "RWC_77"
    assert (target / "inspection_report.json").exists()
    assert len(list(target.iterdir())) == 4


def test_network_failure_does_not_block_completion(client, upload, tmp_path, app) -> None:
    _configure_network(client, tmp_path / "unmounted")
    created = _ready_to_complete(client, upload)

    response = client.post(f"/api/inspections/{created['id']}/complete")
    assert response.status_code == 200
    body = response.get_json()
    assert body["networkUpload"] == {"success": False, "error": "Network upload failed, photos saved locally"}
    assert body["inspection"]["completedAt"] is not None
    assert os.path.isdir(os.path.join(app.config["BACKUP_DIR"], "RWC_77"))


def test_recompleting_refreshes_completed_at(client, upload) -> None:
    created = _ready_to_complete(client, upload)
    first = client.post(f"/api/inspections/{created['id']}/complete").get_json()["inspection"]
    second = client.post(f"/api/inspections/{created['id']}/complete").get_json()["inspection"]
    assert second["completedAt"] >= first["completedAt"]
    assert second["updatedAt"] > first["updatedAt"]


def test_complete_skips_missing_working_file(client, upload, app) -> None:
    created = _ready_to_complete(client, upload)
    photo_url = client.get(f"/api/inspections/{created['id']}").get_json()["photos"]["VIN"][0]
    os.remove(backup.photo_path(app.config["UPLOAD_DIR"], photo_url))

    response = client.post(f"/api/inspections/{created['id']}/complete")
    assert response.status_code == 200
    folder = Path(response.get_json()["localPath"])
    assert len(list(folder.iterdir())) == 3


def test_reset_script_clears_inspections_but_keeps_backups(client, upload, app) -> None:
    from scripts.reset_inspections import reset_inspections

    created = _ready_to_complete(client, upload)
    client.post(f"/api/inspections/{created['id']}/complete")

    rows, files = reset_inspections(app)
    assert (rows, files) == (1, 3)
    assert client.get("/api/inspections").get_json() == []
    assert os.path.isdir(os.path.join(app.config["BACKUP_DIR"], "RWC_77"))
    assert client.get("/api/settings").status_code == 200
