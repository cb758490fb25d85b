"""
Settings service - the global configuration row.
Validates updates, hashes the network password and stores branding logos.
"""
import logging
import os
import time

from flask import current_app
from werkzeug.security import generate_password_hash
from werkzeug.utils import secure_filename

from roadworthy.errors import ValidationError
from roadworthy.schema import ITEM_SETTINGS, is_checklist_item
from roadworthy.services import storage

logger = logging.getLogger(__name__)

LOGO_URL_PREFIX = '/uploads/logos/'
TEXT_FIELDS = ('networkFolderPath', 'networkUsername')


def public_settings(settings):
    """Settings as returned to clients: never the password or its hash."""
    public = {key: value for key, value in settings.items() if key != 'networkPasswordHash'}
    public['networkPasswordSet'] = bool(settings.get('networkPasswordHash'))
    return public


def _validate_item_settings(value):
    if not isinstance(value, dict):
        raise ValidationError("checklistItemSettings must be an object")
    for item, setting in value.items():
        if not is_checklist_item(item):
            raise ValidationError(f"Invalid checklist item: {item}")
        if setting not in ITEM_SETTINGS:
            raise ValidationError(f"Invalid setting for {item}: {setting}")
    return value


def _validate_item_order(value):
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError("checklistItemOrder must be a list of item names")
    unknown = [item for item in value if not is_checklist_item(item)]
    if unknown:
        raise ValidationError(f"Invalid checklist item: {', '.join(unknown)}")
    return value


def update_settings(data):
    """Apply a settings PATCH. Unknown fields are ignored."""
    data = data or {}
    updates = {}

    if 'checklistItemSettings' in data:
        current = storage.get_settings()['checklistItemSettings']
        merged = dict(current)
        merged.update(_validate_item_settings(data['checklistItemSettings']))
        updates['checklistItemSettings'] = merged

    if 'checklistItemOrder' in data:
        updates['checklistItemOrder'] = _validate_item_order(data['checklistItemOrder'])

    for field in TEXT_FIELDS:
        if field in data:
            value = data[field] if data[field] is not None else ''
            if not isinstance(value, str):
                raise ValidationError(f"{field} must be a string")
            updates[field] = value.strip()

    password = data.get('networkPassword')
    if isinstance(password, str) and password.strip():
        updates['networkPasswordHash'] = generate_password_hash(password)
        logger.info("Network password updated")

    return storage.update_settings(updates)


def save_logo(logo):
    """Store an uploaded logo image and point settings.logoUrl at it."""
    if logo is None or not logo.filename:
        raise ValidationError("No file uploaded")
    if not (logo.mimetype or '').startswith('image/'):
        raise ValidationError("Only image files are allowed")

    data = logo.read()
    if len(data) > current_app.config['LOGO_MAX_BYTES']:
        raise ValidationError("Logo must be 5MB or smaller")

    ext = os.path.splitext(logo.filename)[1].lower()
    filename = secure_filename(f"logo-{int(time.time() * 1000)}{ext}")
    logo_dir = current_app.config['LOGO_DIR']
    with open(os.path.join(logo_dir, filename), 'wb') as f:
        f.write(data)

    logo_url = LOGO_URL_PREFIX + filename
    storage.update_settings({'logoUrl': logo_url})
    logger.info("Stored logo %s", filename)
    return logo_url
