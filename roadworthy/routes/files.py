"""
File routes - uploaded photos and logos, plus health and dashboard endpoints.
"""
from flask import Blueprint, current_app, jsonify, send_from_directory

from roadworthy.services import inspection_service, storage
from roadworthy.services.db import query_db

files_bp = Blueprint('files', __name__)


@files_bp.route('/api/photos/<path:filename>')
def serve_photo(filename):
    return send_from_directory(current_app.config['UPLOAD_DIR'], filename)


@files_bp.route('/uploads/logos/<path:filename>')
def serve_logo(filename):
    return send_from_directory(current_app.config['LOGO_DIR'], filename)


@files_bp.route('/api/health')
def health():
    query_db("SELECT 1", one=True)
    return jsonify({'status': 'ok', 'database': 'ok'})


@files_bp.route('/api/dashboard')
def dashboard():
    """In-progress/completed counts with per-inspection progress."""
    return jsonify(inspection_service.dashboard_summary(storage.get_settings()))
