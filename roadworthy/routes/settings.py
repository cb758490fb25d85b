"""
Settings routes - global configuration, checklist vocabulary, logo upload.
"""
from flask import Blueprint, jsonify, request

from roadworthy.schema import CHECKLIST_ITEMS, ITEM_DESCRIPTIONS
from roadworthy.services import settings_service, storage
from roadworthy.utils import json_body

settings_bp = Blueprint('settings', __name__, url_prefix='/api')


@settings_bp.route('/settings', methods=['GET'])
def get_settings():
    return jsonify(settings_service.public_settings(storage.get_settings()))


@settings_bp.route('/settings', methods=['PATCH'])
def update_settings():
    settings = settings_service.update_settings(json_body())
    return jsonify(settings_service.public_settings(settings))


@settings_bp.route('/checklist-items', methods=['GET'])
def checklist_items():
    """Fixed checklist vocabulary; ?detail=1 adds item descriptions."""
    if request.args.get('detail'):
        return jsonify([
            {'name': item, 'description': ITEM_DESCRIPTIONS.get(item, 'Inspection documentation')}
            for item in CHECKLIST_ITEMS
        ])
    return jsonify(list(CHECKLIST_ITEMS))


@settings_bp.route('/upload-logo', methods=['POST'])
def upload_logo():
    logo_url = settings_service.save_logo(request.files.get('logo'))
    return jsonify({'message': 'Logo uploaded successfully', 'logoUrl': logo_url})
