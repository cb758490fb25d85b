"""
Inspection service - lifecycle of a roadworthy inspection.

in-progress -> pass | fail, with retests created as new sibling rows.
Every change to a checklist item's photos goes through apply_item_photos so
an item is complete exactly when it has photos.
"""
import itertools
import logging
import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from roadworthy.errors import NotFoundError, ValidationError
from roadworthy.schema import COMPLETED_STATUSES, INSPECTION_STATUSES, STATUS_IN_PROGRESS, is_checklist_item
from roadworthy.services import backup, checklist, storage
from roadworthy.utils import now_iso

logger = logging.getLogger(__name__)

# Fields a client may change through PATCH
EDITABLE_FIELDS = ('clientName', 'vehicleDescription', 'status', 'uploadedToVicroadsAt')

_upload_sequence = itertools.count(1)


def _optional_text(data, field):
    value = data.get(field)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError("Validation error", errors=[{'field': field, 'message': 'Must be a string'}])
    return value.strip()


def get_inspection_or_404(inspection_id):
    inspection = storage.get_inspection(inspection_id)
    if not inspection:
        raise NotFoundError("Inspection not found")
    return inspection


def apply_item_photos(inspection, item_name, photo_urls):
    """Set the photo list for one item and its completion flag together.

    Returns new (photos, checklist_items) dicts; an empty list removes the
    item from photos and marks it incomplete.
    """
    photos = dict(inspection.get('photos') or {})
    checklist_items = dict(inspection.get('checklistItems') or {})
    if photo_urls:
        photos[item_name] = list(photo_urls)
        checklist_items[item_name] = True
    else:
        photos.pop(item_name, None)
        checklist_items[item_name] = False
    return photos, checklist_items


def create_inspection(data):
    """Create an inspection from request data. Raises ValidationError."""
    data = data or {}
    roadworthy_number = data.get('roadworthyNumber')
    if not isinstance(roadworthy_number, str) or not roadworthy_number.strip():
        raise ValidationError(
            "Validation error",
            errors=[{'field': 'roadworthyNumber', 'message': 'Roadworthy number is required'}],
        )
    roadworthy_number = roadworthy_number.strip()
    client_name = _optional_text(data, 'clientName')
    vehicle_description = _optional_text(data, 'vehicleDescription')

    # Lookup then insert: two concurrent creators can both pass this check
    if storage.get_inspection_by_roadworthy_number(roadworthy_number):
        raise ValidationError("Roadworthy number already exists")

    inspection = storage.insert_inspection(
        roadworthy_number,
        client_name=client_name,
        vehicle_description=vehicle_description,
        status=STATUS_IN_PROGRESS,
    )
    logger.info("Created inspection %s for %s", inspection['id'], roadworthy_number)
    return inspection


def update_inspection(inspection_id, data):
    """Partial update. An empty body only refreshes updatedAt (save)."""
    get_inspection_or_404(inspection_id)
    updates = {}
    for field in EDITABLE_FIELDS:
        if field not in (data or {}):
            continue
        value = data[field]
        if field == 'status':
            if value not in INSPECTION_STATUSES:
                raise ValidationError(f"Invalid status: {value}")
        elif field == 'uploadedToVicroadsAt':
            if value is not None and not isinstance(value, str):
                raise ValidationError("uploadedToVicroadsAt must be a timestamp string or null")
        else:
            value = _optional_text(data, field)
        updates[field] = value
    return storage.update_inspection(inspection_id, updates)


def save_inspection(inspection_id):
    return update_inspection(inspection_id, {})


def _photo_filename(inspection_id, item_name, original_filename):
    ext = os.path.splitext(original_filename or '')[1].lower() or '.jpg'
    timestamp = int(time.time() * 1000)
    return secure_filename(f"{inspection_id}_{item_name}_{timestamp}_{next(_upload_sequence)}{ext}")


def add_photo(inspection_id, item_name, photo):
    """Store an uploaded photo for a checklist item and mark the item complete.

    `photo` is a werkzeug FileStorage. Returns (filename, inspection).
    """
    if photo is None or not photo.filename:
        raise ValidationError("No photo uploaded")
    if not is_checklist_item(item_name):
        raise ValidationError("Invalid checklist item")

    inspection = get_inspection_or_404(inspection_id)

    upload_dir = current_app.config['UPLOAD_DIR']
    filename = _photo_filename(inspection_id, item_name, photo.filename)
    photo.save(os.path.join(upload_dir, filename))

    photo_urls = list((inspection.get('photos') or {}).get(item_name) or [])
    photo_urls.append(backup.PHOTO_URL_PREFIX + filename)
    photos, checklist_items = apply_item_photos(inspection, item_name, photo_urls)

    updated = storage.update_inspection(inspection_id, {
        'photos': photos,
        'checklistItems': checklist_items,
    })
    logger.info("Stored photo %s for %s on inspection %s", filename, item_name, inspection_id)
    return filename, updated


def _parse_photo_index(raw_index):
    try:
        index = int(raw_index)
    except (TypeError, ValueError):
        raise ValidationError("Valid photo index is required")
    if index < 0:
        raise ValidationError("Valid photo index is required")
    return index


def _remove_working_file(photo_url):
    path = backup.photo_path(current_app.config['UPLOAD_DIR'], photo_url)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not delete photo file %s: %s", path, exc)


def remove_photo(inspection_id, item_name, raw_index):
    """Remove one photo by position. Emptying the list un-completes the item."""
    index = _parse_photo_index(raw_index)
    inspection = get_inspection_or_404(inspection_id)

    photo_urls = list((inspection.get('photos') or {}).get(item_name) or [])
    if index >= len(photo_urls):
        raise NotFoundError("Photo not found")

    removed = photo_urls.pop(index)
    photos, checklist_items = apply_item_photos(inspection, item_name, photo_urls)
    updated = storage.update_inspection(inspection_id, {
        'photos': photos,
        'checklistItems': checklist_items,
    })
    _remove_working_file(removed)
    logger.info("Removed photo %s from %s on inspection %s", removed, item_name, inspection_id)
    return updated


def complete_inspection(inspection_id, status=None):
    """Finalize an inspection: gate on required items, back up, report.

    Raises ValidationError with missingItems when required items are not
    complete; in that case nothing is written.
    """
    inspection = get_inspection_or_404(inspection_id)
    if status is not None and status not in COMPLETED_STATUSES:
        raise ValidationError(f"Invalid status: {status}")

    settings = storage.get_settings()
    missing = checklist.missing_required_items(inspection, settings)
    if missing:
        raise ValidationError("Missing required items", missingItems=missing)

    if status is not None:
        inspection = dict(inspection, status=status)

    completed_at = now_iso()
    local_path = backup.backup_folder(current_app.config['BACKUP_DIR'], inspection['roadworthyNumber'])
    copied = backup.copy_photos(inspection, current_app.config['UPLOAD_DIR'], local_path)
    backup.write_report(inspection, local_path, completed_at)
    logger.info("Backed up %d photos for %s to %s", len(copied), inspection['roadworthyNumber'], local_path)

    network_result = backup.upload_to_network(settings, local_path, inspection['roadworthyNumber'])

    updates = {'completedAt': completed_at}
    if status is not None:
        updates['status'] = status
    updated = storage.update_inspection(inspection_id, updates)

    return {
        'message': 'Inspection completed successfully',
        'localPath': local_path,
        'networkUpload': network_result,
        'inspection': updated,
    }


def create_retest(inspection_id):
    """New in-progress sibling of an inspection with the next test number."""
    original = get_inspection_or_404(inspection_id)
    roadworthy_number = original['roadworthyNumber']
    next_test_number = max(storage.max_test_number(roadworthy_number), original.get('testNumber') or 1) + 1

    retest = storage.insert_inspection(
        roadworthy_number,
        client_name=original.get('clientName') or '',
        vehicle_description=original.get('vehicleDescription') or '',
        status=STATUS_IN_PROGRESS,
        test_number=next_test_number,
    )
    logger.info("Created retest %s (test %d) for %s", retest['id'], next_test_number, roadworthy_number)
    return retest


def delete_inspection(inspection_id):
    """Delete the row and its working photo files. Backups are kept."""
    inspection = get_inspection_or_404(inspection_id)
    if not storage.delete_inspection(inspection_id):
        raise NotFoundError("Inspection not found")
    for photo_urls in (inspection.get('photos') or {}).values():
        for photo_url in photo_urls:
            _remove_working_file(photo_url)
    logger.info("Deleted inspection %s", inspection_id)
    return inspection


def dashboard_summary(settings=None, today=None):
    """Counts and per-inspection progress for the dashboard view."""
    in_progress = storage.list_in_progress_inspections()
    completed = storage.list_completed_inspections()
    today = today or now_iso()[:10]

    completed_today = sum(
        1 for inspection in completed
        if (inspection.get('completedAt') or inspection['updatedAt'])[:10] == today
    )
    return {
        'inProgressCount': len(in_progress),
        'completedTodayCount': completed_today,
        'inProgress': [
            dict(inspection, progress=checklist.progress(inspection, settings))
            for inspection in in_progress
        ],
        'completed': completed,
    }
