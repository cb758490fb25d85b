"""
REST client for the roadworthy inspections API.
Used by the view shell and the camera workflow.
"""
from urllib.parse import quote

import requests


class ApiError(Exception):
    """Non-2xx response from the API, or the API could not be reached."""

    def __init__(self, status, message, payload=None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.payload = payload or {}

    @property
    def missing_items(self):
        return self.payload.get('missingItems') or []


class InspectionsClient:
    def __init__(self, base_url, session=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, **kwargs):
        try:
            response = self.session.request(
                method, self.base_url + path, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise ApiError(None, f"Network error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            body = payload if isinstance(payload, dict) else {}
            message = body.get('message') or body.get('error') or response.reason or 'Request failed'
            raise ApiError(response.status_code, message, body)
        return payload

    # Inspections
    def list_inspections(self):
        return self._request('GET', '/api/inspections')

    def in_progress_inspections(self):
        return self._request('GET', '/api/inspections/in-progress')

    def completed_inspections(self):
        return self._request('GET', '/api/inspections/completed')

    def get_inspection(self, inspection_id):
        return self._request('GET', f'/api/inspections/{inspection_id}')

    def create_inspection(self, roadworthy_number, client_name='', vehicle_description=''):
        return self._request('POST', '/api/inspections', json={
            'roadworthyNumber': roadworthy_number,
            'clientName': client_name,
            'vehicleDescription': vehicle_description,
        })

    def update_inspection(self, inspection_id, **fields):
        return self._request('PATCH', f'/api/inspections/{inspection_id}', json=fields)

    def save_inspection(self, inspection_id):
        return self.update_inspection(inspection_id)

    def upload_photo(self, inspection_id, item_name, image_bytes, filename=None):
        filename = filename or f"{item_name}.jpg"
        return self._request(
            'POST',
            f'/api/inspections/{inspection_id}/photos',
            data={'itemName': item_name},
            files={'photo': (filename, image_bytes, 'image/jpeg')},
        )

    def delete_photo(self, inspection_id, item_name, photo_index):
        item = quote(item_name, safe='')
        return self._request('DELETE', f'/api/inspections/{inspection_id}/photos/{item}/{photo_index}')

    def complete_inspection(self, inspection_id, status=None):
        body = {'status': status} if status else {}
        return self._request('POST', f'/api/inspections/{inspection_id}/complete', json=body)

    def create_retest(self, inspection_id):
        return self._request('POST', f'/api/inspections/{inspection_id}/retest')

    def delete_inspection(self, inspection_id):
        return self._request('DELETE', f'/api/inspections/{inspection_id}')

    # Settings
    def get_settings(self):
        return self._request('GET', '/api/settings')

    def update_settings(self, **fields):
        return self._request('PATCH', '/api/settings', json=fields)

    def checklist_items(self):
        return self._request('GET', '/api/checklist-items')

    def upload_logo(self, image_bytes, filename, mimetype='image/png'):
        return self._request('POST', '/api/upload-logo', files={'logo': (filename, image_bytes, mimetype)})
