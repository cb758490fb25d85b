"""
Completion side effects - local photo backup, JSON report, network copy.

The local backup folder is the authoritative record of a completed
inspection. The network copy is best-effort: its failure is reported to the
caller and logged, never raised.
"""
import json
import logging
import os
import shutil

from roadworthy.schema import REPORT_FILENAME

logger = logging.getLogger(__name__)

PHOTO_URL_PREFIX = '/api/photos/'


def photo_filename(photo_url):
    """Filename on disk for a stored photo reference."""
    return os.path.basename(photo_url)


def photo_path(upload_dir, photo_url):
    return os.path.join(upload_dir, photo_filename(photo_url))


def backup_folder(backup_dir, roadworthy_number):
    # Roadworthy numbers are user input; keep the folder inside backup_dir
    safe_name = roadworthy_number.replace('/', '_').replace('\\', '_').strip('.') or '_'
    return os.path.join(backup_dir, safe_name)


def copy_photos(inspection, upload_dir, destination):
    """Copy every referenced photo into destination. Returns copied filenames."""
    os.makedirs(destination, exist_ok=True)
    copied = []
    for item_name, photo_urls in (inspection.get('photos') or {}).items():
        for photo_url in photo_urls:
            source = photo_path(upload_dir, photo_url)
            if not os.path.exists(source):
                logger.warning("Photo %s for %s missing from uploads, skipped", photo_url, item_name)
                continue
            filename = photo_filename(photo_url)
            shutil.copy2(source, os.path.join(destination, filename))
            copied.append(filename)
    return copied


def build_report(inspection, completed_at):
    return {
        'inspectionId': inspection['id'],
        'roadworthyNumber': inspection['roadworthyNumber'],
        'clientName': inspection.get('clientName', ''),
        'vehicleDescription': inspection.get('vehicleDescription', ''),
        'status': inspection['status'],
        'testNumber': inspection.get('testNumber', 1),
        'createdAt': inspection.get('createdAt'),
        'completedAt': completed_at,
        'checklistItems': inspection.get('checklistItems') or {},
        'photos': inspection.get('photos') or {},
    }


def write_report(inspection, destination, completed_at):
    report_path = os.path.join(destination, REPORT_FILENAME)
    with open(report_path, 'w', encoding='utf-8') as f:
        json.dump(build_report(inspection, completed_at), f, indent=2)
    return report_path


def network_upload_configured(settings):
    return bool(
        settings
        and settings.get('networkFolderPath')
        and settings.get('networkUsername')
        and settings.get('networkPasswordHash')
    )


def upload_to_network(settings, local_path, roadworthy_number):
    """Copy the backup folder to the configured network folder.

    Returns None when no network target is configured, otherwise a result
    dict with a `success` flag.
    """
    if not network_upload_configured(settings):
        return None

    target = backup_folder(settings['networkFolderPath'], roadworthy_number)
    try:
        if not os.path.isdir(settings['networkFolderPath']):
            raise FileNotFoundError(f"Network folder not reachable: {settings['networkFolderPath']}")
        shutil.copytree(local_path, target, dirs_exist_ok=True)
    except OSError as exc:
        logger.warning("Network upload failed for %s: %s", roadworthy_number, exc)
        return {
            'success': False,
            'error': 'Network upload failed, photos saved locally',
        }

    logger.info("Uploaded %s to network folder %s", roadworthy_number, target)
    return {
        'success': True,
        'path': target,
        'message': 'Photos uploaded to network location',
    }
