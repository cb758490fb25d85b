"""
Inspection routes - REST API for the inspection workflow.
"""
from flask import Blueprint, jsonify, request

from roadworthy.services import inspection_service, storage
from roadworthy.utils import json_body

inspections_bp = Blueprint('inspections', __name__, url_prefix='/api/inspections')


@inspections_bp.route('', methods=['GET'])
def list_inspections():
    return jsonify(storage.list_inspections())


@inspections_bp.route('/in-progress', methods=['GET'])
def list_in_progress():
    return jsonify(storage.list_in_progress_inspections())


@inspections_bp.route('/completed', methods=['GET'])
def list_completed():
    return jsonify(storage.list_completed_inspections())


@inspections_bp.route('/<inspection_id>', methods=['GET'])
def get_inspection(inspection_id):
    return jsonify(inspection_service.get_inspection_or_404(inspection_id))


@inspections_bp.route('', methods=['POST'])
def create_inspection():
    inspection = inspection_service.create_inspection(json_body())
    return jsonify(inspection), 201


@inspections_bp.route('/<inspection_id>', methods=['PATCH'])
def update_inspection(inspection_id):
    """Partial update; an empty body just saves progress."""
    return jsonify(inspection_service.update_inspection(inspection_id, json_body()))


@inspections_bp.route('/<inspection_id>/photos', methods=['POST'])
def upload_photo(inspection_id):
    filename, inspection = inspection_service.add_photo(
        inspection_id,
        request.form.get('itemName'),
        request.files.get('photo'),
    )
    return jsonify({
        'message': 'Photo uploaded successfully',
        'filename': filename,
        'inspection': inspection,
    })


@inspections_bp.route('/<inspection_id>/photos/<item_name>/<photo_index>', methods=['DELETE'])
def delete_photo(inspection_id, item_name, photo_index):
    return jsonify(inspection_service.remove_photo(inspection_id, item_name, photo_index))


@inspections_bp.route('/<inspection_id>/complete', methods=['POST'])
def complete_inspection(inspection_id):
    result = inspection_service.complete_inspection(
        inspection_id, status=json_body().get('status')
    )
    return jsonify(result)


@inspections_bp.route('/<inspection_id>/retest', methods=['POST'])
def create_retest(inspection_id):
    return jsonify(inspection_service.create_retest(inspection_id)), 201


@inspections_bp.route('/<inspection_id>', methods=['DELETE'])
def delete_inspection(inspection_id):
    inspection_service.delete_inspection(inspection_id)
    return jsonify({'message': 'Inspection deleted successfully'})
