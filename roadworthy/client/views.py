"""
View-switching shell for the inspection client.

Holds UI state only: which view is showing, which inspection is open and
which checklist item the camera is targeting. Business rules come from the
API and the checklist engine.
"""
import logging

from roadworthy.client.api import ApiError
from roadworthy.client.camera import CameraError
from roadworthy.services import checklist

logger = logging.getLogger(__name__)

DASHBOARD = 'dashboard'
NEW_INSPECTION = 'new-inspection'
CHECKLIST = 'checklist'
SETTINGS = 'settings'
CAMERA = 'camera'

VIEWS = (DASHBOARD, NEW_INSPECTION, CHECKLIST, SETTINGS, CAMERA)


class ViewShell:
    def __init__(self, client):
        self.client = client
        self.current_view = DASHBOARD
        self.current_inspection_id = None
        self.camera_target = None
        self.notifications = []
        self._inspections = {}
        self._settings = None

    # Navigation
    def show_dashboard(self):
        self.current_view = DASHBOARD
        self.current_inspection_id = None
        self.camera_target = None

    def show_new_inspection(self):
        self.current_view = NEW_INSPECTION

    def show_settings(self):
        self.current_view = SETTINGS

    def open_inspection(self, inspection_id):
        self.current_inspection_id = inspection_id
        self.camera_target = None
        self.current_view = CHECKLIST

    def close_inspection(self):
        self.invalidate_inspection(self.current_inspection_id)
        self.show_dashboard()

    def new_inspection_created(self, inspection):
        self._inspections[inspection['id']] = inspection
        self.open_inspection(inspection['id'])

    def show_camera(self, item_name):
        if self.current_inspection_id is None:
            raise ValueError("No inspection is open")
        self.camera_target = item_name
        self.current_view = CAMERA

    def hide_camera(self):
        self.camera_target = None
        self.current_view = CHECKLIST if self.current_inspection_id else DASHBOARD

    # Cached data
    def inspection(self, inspection_id=None, refresh=False):
        inspection_id = inspection_id or self.current_inspection_id
        if refresh or inspection_id not in self._inspections:
            self._inspections[inspection_id] = self.client.get_inspection(inspection_id)
        return self._inspections[inspection_id]

    def invalidate_inspection(self, inspection_id=None):
        self._inspections.pop(inspection_id or self.current_inspection_id, None)

    def settings(self, refresh=False):
        if refresh or self._settings is None:
            self._settings = self.client.get_settings()
        return self._settings

    def invalidate_settings(self):
        self._settings = None

    def notify(self, message, level='error', retryable=False):
        self.notifications.append({'message': message, 'level': level, 'retryable': retryable})

    def dismiss_notifications(self):
        self.notifications = []

    # Derived state
    def checklist_state(self):
        """Rows, progress and completion gate for the open inspection."""
        inspection = self.inspection()
        settings = self.settings()
        return {
            'inspection': inspection,
            'rows': checklist.checklist_rows(inspection, settings),
            'progress': checklist.progress(inspection, settings),
            'canComplete': checklist.can_complete(inspection, settings),
        }

    # Actions
    def take_photo(self, camera):
        """Capture a frame and upload it for the camera's target item.

        On success the cached inspection is dropped and the shell returns to
        the checklist. On failure the camera stays open and a retryable
        notification is recorded. Returns True on success.
        """
        try:
            image_bytes = camera.capture()
        except CameraError as exc:
            self.notify(exc.message, retryable=True)
            return False

        try:
            self.client.upload_photo(self.current_inspection_id, self.camera_target, image_bytes)
        except ApiError as exc:
            logger.warning("Photo upload failed: %s", exc.message)
            self.notify(f"Upload failed: {exc.message}", retryable=True)
            return False

        self.invalidate_inspection()
        self.hide_camera()
        return True

    def save_current(self):
        self._inspections[self.current_inspection_id] = self.client.save_inspection(self.current_inspection_id)
        self.show_dashboard()

    def complete_current(self, status=None):
        """Complete the open inspection; missing required items become a notification."""
        try:
            result = self.client.complete_inspection(self.current_inspection_id, status=status)
        except ApiError as exc:
            if exc.missing_items:
                self.notify("Missing required items: " + ', '.join(exc.missing_items))
            else:
                self.notify(exc.message, retryable=exc.status is None)
            return None

        self.invalidate_inspection()
        network = result.get('networkUpload')
        if network and not network.get('success'):
            self.notify(network.get('error') or 'Network upload failed', level='warning')
        self.show_dashboard()
        return result
