"""
Persistence adapter - CRUD over inspections and the settings singleton.
Rows come back as plain dicts with camelCase keys, ready for jsonify.
"""
import json
import logging

from roadworthy.schema import (
    COMPLETED_STATUSES,
    STATUS_IN_PROGRESS,
    default_checklist_items,
    default_item_order,
    default_item_settings,
)
from roadworthy.services.db import get_db, query_db
from roadworthy.utils import generate_id, next_timestamp, now_iso

logger = logging.getLogger(__name__)

# camelCase field -> column
INSPECTION_COLUMNS = {
    'roadworthyNumber': 'roadworthy_number',
    'clientName': 'client_name',
    'vehicleDescription': 'vehicle_description',
    'status': 'status',
    'checklistItems': 'checklist_items',
    'photos': 'photos',
    'testNumber': 'test_number',
    'completedAt': 'completed_at',
    'uploadedToVicroadsAt': 'uploaded_to_vicroads_at',
}

SETTINGS_COLUMNS = {
    'checklistItemSettings': 'checklist_item_settings',
    'checklistItemOrder': 'checklist_item_order',
    'networkFolderPath': 'network_folder_path',
    'networkUsername': 'network_username',
    'networkPasswordHash': 'network_password_hash',
    'logoUrl': 'logo_url',
}

JSON_COLUMNS = {'checklist_items', 'photos', 'checklist_item_settings', 'checklist_item_order'}


def _load_json(value, default):
    if value is None or value == '':
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning("Discarding unreadable JSON column value: %r", value)
        return default


def _encode(column, value):
    if column in JSON_COLUMNS and value is not None:
        return json.dumps(value)
    return value


def row_to_inspection(row):
    keys = row.keys()
    return {
        'id': row['id'],
        'roadworthyNumber': row['roadworthy_number'],
        'clientName': row['client_name'] or '',
        'vehicleDescription': row['vehicle_description'] or '',
        'status': row['status'],
        'checklistItems': _load_json(row['checklist_items'], {}),
        'photos': _load_json(row['photos'], {}),
        'testNumber': row['test_number'] or 1,
        'completedAt': row['completed_at'],
        'uploadedToVicroadsAt': row['uploaded_to_vicroads_at'] if 'uploaded_to_vicroads_at' in keys else None,
        'createdAt': row['created_at'],
        'updatedAt': row['updated_at'],
    }


def row_to_settings(row):
    return {
        'id': row['id'],
        'checklistItemSettings': _load_json(row['checklist_item_settings'], {}),
        'checklistItemOrder': _load_json(row['checklist_item_order'], None),
        'networkFolderPath': row['network_folder_path'] or '',
        'networkUsername': row['network_username'] or '',
        'networkPasswordHash': row['network_password_hash'] or '',
        'logoUrl': row['logo_url'],
        'updatedAt': row['updated_at'],
    }


# --- Inspections ---

def get_inspection(inspection_id):
    row = query_db("SELECT * FROM inspections WHERE id = ?", [inspection_id], one=True)
    return row_to_inspection(row) if row else None


def get_inspection_by_roadworthy_number(roadworthy_number):
    row = query_db(
        "SELECT * FROM inspections WHERE roadworthy_number = ? LIMIT 1",
        [roadworthy_number], one=True
    )
    return row_to_inspection(row) if row else None


def list_inspections(statuses=None):
    """All inspections, most recently updated first, optionally filtered by status."""
    query = "SELECT * FROM inspections"
    params = []
    if statuses:
        placeholders = ",".join("?" for _ in statuses)
        query += f" WHERE status IN ({placeholders})"
        params.extend(statuses)
    query += " ORDER BY updated_at DESC"
    return [row_to_inspection(row) for row in query_db(query, params)]


def list_in_progress_inspections():
    return list_inspections([STATUS_IN_PROGRESS])


def list_completed_inspections():
    return list_inspections(list(COMPLETED_STATUSES))


def max_test_number(roadworthy_number):
    row = query_db(
        "SELECT MAX(test_number) AS max_test FROM inspections WHERE roadworthy_number = ?",
        [roadworthy_number], one=True
    )
    return row['max_test'] if row and row['max_test'] is not None else 0


def insert_inspection(roadworthy_number, client_name='', vehicle_description='',
                      status=STATUS_IN_PROGRESS, test_number=1):
    """Insert a fresh inspection with an empty checklist and no photos."""
    inspection_id = generate_id()
    now = now_iso()
    db = get_db()
    db.execute("""
        INSERT INTO inspections
        (id, roadworthy_number, client_name, vehicle_description, status,
         checklist_items, photos, test_number, completed_at, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL, ?, ?)
    """, [inspection_id, roadworthy_number, client_name or '', vehicle_description or '',
          status, json.dumps(default_checklist_items()), json.dumps({}),
          test_number, now, now])
    db.commit()
    return get_inspection(inspection_id)


def update_inspection(inspection_id, updates):
    """Apply a partial update and refresh updated_at.

    Unknown keys are ignored. Returns the updated inspection, or None if the
    row does not exist.
    """
    current = query_db(
        "SELECT updated_at FROM inspections WHERE id = ?", [inspection_id], one=True
    )
    if not current:
        return None

    assignments = []
    params = []
    for field, value in updates.items():
        column = INSPECTION_COLUMNS.get(field)
        if column is None:
            continue
        assignments.append(f"{column} = ?")
        params.append(_encode(column, value))

    assignments.append("updated_at = ?")
    params.append(next_timestamp(current['updated_at']))
    params.append(inspection_id)

    db = get_db()
    db.execute(f"UPDATE inspections SET {', '.join(assignments)} WHERE id = ?", params)
    db.commit()
    return get_inspection(inspection_id)


def delete_inspection(inspection_id):
    db = get_db()
    cur = db.execute("DELETE FROM inspections WHERE id = ?", [inspection_id])
    db.commit()
    return cur.rowcount > 0


# --- Settings ---

def ensure_settings():
    """Create the settings row with defaults if it does not exist yet."""
    row = query_db("SELECT id FROM settings LIMIT 1", one=True)
    if row:
        return False
    db = get_db()
    db.execute("""
        INSERT INTO settings
        (id, checklist_item_settings, checklist_item_order, network_folder_path,
         network_username, network_password_hash, logo_url, updated_at)
        VALUES (?, ?, ?, '', '', '', NULL, ?)
    """, [generate_id('set'), json.dumps(default_item_settings()),
          json.dumps(default_item_order()), now_iso()])
    db.commit()
    logger.info("Seeded default settings")
    return True


def get_settings():
    """The settings singleton, seeded on first access."""
    ensure_settings()
    row = query_db("SELECT * FROM settings LIMIT 1", one=True)
    return row_to_settings(row)


def update_settings(updates):
    settings = get_settings()

    assignments = []
    params = []
    for field, value in updates.items():
        column = SETTINGS_COLUMNS.get(field)
        if column is None:
            continue
        assignments.append(f"{column} = ?")
        params.append(_encode(column, value))

    assignments.append("updated_at = ?")
    params.append(next_timestamp(settings['updatedAt']))
    params.append(settings['id'])

    db = get_db()
    db.execute(f"UPDATE settings SET {', '.join(assignments)} WHERE id = ?", params)
    db.commit()
    return get_settings()
