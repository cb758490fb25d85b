"""
Camera capture workflow.

Acquires a video stream by walking a ladder of constraint sets, captures a
single frame as JPEG and hands it to the uploader. The state machine is

    idle -> acquiring(constraint_index) -> ready | failed

and does not depend on any UI framework. Media access goes through a
MediaDevices object (the browser's navigator.mediaDevices, or a fake in
tests). Every track opened here is stopped by close(), by switch_camera()
and on context-manager exit.
"""
import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

IDLE = 'idle'
ACQUIRING = 'acquiring'
READY = 'ready'
FAILED = 'failed'

FACING_ENVIRONMENT = 'environment'
FACING_USER = 'user'

METADATA_TIMEOUT_SECONDS = 5.0
JPEG_QUALITY = 0.9

# Failure reasons
PERMISSION_DENIED = 'permission-denied'
NO_CAMERA = 'no-camera'
TIMEOUT = 'timeout'
UNKNOWN = 'unknown'

FAILURE_MESSAGES = {
    PERMISSION_DENIED: 'Camera permission was denied. Allow camera access and try again.',
    NO_CAMERA: 'No camera was found on this device.',
    TIMEOUT: 'The camera did not start in time. Please try again.',
    UNKNOWN: 'Unable to access camera. Please check permissions.',
}


class PermissionDenied(Exception):
    """The user refused camera access."""


class NoCameraFound(Exception):
    """No video input device matches."""


class ConstraintNotSatisfied(Exception):
    """The device exists but cannot honour the requested constraints."""


class CameraError(Exception):
    def __init__(self, reason, detail=None):
        super().__init__(FAILURE_MESSAGES.get(reason, FAILURE_MESSAGES[UNKNOWN]))
        self.reason = reason
        self.detail = detail

    @property
    def message(self):
        return str(self)


class MediaDevices:
    """Interface the workflow needs from the platform's media layer."""

    def enumerate_devices(self):
        """List of dicts with at least a 'kind' key ('videoinput', ...)."""
        raise NotImplementedError

    def get_user_media(self, constraints):
        """Open a stream for the constraints or raise PermissionDenied,
        NoCameraFound or ConstraintNotSatisfied.

        The returned stream exposes get_tracks() (each track has stop()),
        wait_until_ready(timeout) -> bool, video_size -> (w, h) and
        read_frame() -> PIL.Image.
        """
        raise NotImplementedError


def constraint_ladder(facing_mode):
    """Constraint sets to try, most specific first."""
    resolution = {
        'width': {'ideal': 1920, 'min': 640},
        'height': {'ideal': 1080, 'min': 480},
    }
    return [
        {'video': dict(resolution, facingMode={'ideal': facing_mode}), 'audio': False},
        {'video': dict(resolution), 'audio': False},
        {'video': True, 'audio': False},
    ]


def stop_stream(stream):
    for track in stream.get_tracks():
        track.stop()


def camera_capabilities(devices):
    """What the device offers: any camera, several cameras, facing modes."""
    try:
        video_inputs = [d for d in devices.enumerate_devices() if d.get('kind') == 'videoinput']
    except Exception as exc:
        logger.warning("Error checking camera capabilities: %s", exc)
        return {'hasCamera': False, 'hasMultipleCameras': False, 'supportedFacingModes': []}
    return {
        'hasCamera': len(video_inputs) > 0,
        'hasMultipleCameras': len(video_inputs) > 1,
        'supportedFacingModes': [FACING_USER, FACING_ENVIRONMENT] if len(video_inputs) > 1 else [FACING_USER],
    }


def encode_jpeg(frame, size, quality=JPEG_QUALITY):
    """Draw a frame onto a canvas of `size` and serialize it as JPEG bytes."""
    size = tuple(size)
    if frame.size != size:
        frame = frame.resize(size)
    canvas = Image.new('RGB', size)
    canvas.paste(frame.convert('RGB'))
    buffer = io.BytesIO()
    canvas.save(buffer, format='JPEG', quality=int(round(quality * 100)))
    return buffer.getvalue()


class CameraSession:
    def __init__(self, devices, facing_mode=FACING_ENVIRONMENT,
                 metadata_timeout=METADATA_TIMEOUT_SECONDS):
        self.devices = devices
        self.facing_mode = facing_mode
        self.metadata_timeout = metadata_timeout
        self.state = IDLE
        self.constraint_index = None
        self.stream = None
        self.failure = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_ready(self):
        return self.state == READY and self.stream is not None

    def _fail(self, reason, detail=None):
        self.state = FAILED
        self.failure = CameraError(reason, detail)
        logger.info("Camera failed: %s (%s)", reason, detail)
        raise self.failure

    def start(self):
        """Acquire a stream, trying each constraint set until one works."""
        self._release()
        self.failure = None
        last_reason = NO_CAMERA
        last_detail = None

        for index, constraints in enumerate(constraint_ladder(self.facing_mode)):
            self.state = ACQUIRING
            self.constraint_index = index
            try:
                stream = self.devices.get_user_media(constraints)
            except PermissionDenied as exc:
                self._fail(PERMISSION_DENIED, str(exc))
            except NoCameraFound as exc:
                last_reason, last_detail = NO_CAMERA, str(exc)
                continue
            except ConstraintNotSatisfied as exc:
                logger.debug("Camera constraint %d failed, trying next: %s", index, exc)
                last_reason, last_detail = NO_CAMERA, str(exc)
                continue
            except Exception as exc:
                # Device busy, hardware error and the like
                logger.warning("Camera constraint %d failed, trying next: %s", index, exc)
                last_reason, last_detail = UNKNOWN, str(exc)
                continue

            try:
                ready = stream.wait_until_ready(self.metadata_timeout)
            except Exception as exc:
                stop_stream(stream)
                self._fail(UNKNOWN, str(exc))
            if not ready:
                stop_stream(stream)
                self._fail(TIMEOUT, 'Video failed to load')

            self.stream = stream
            self.state = READY
            return stream

        self._fail(last_reason, last_detail)

    def capture(self, quality=JPEG_QUALITY):
        """Current frame as JPEG bytes at the video's native resolution."""
        if not self.is_ready:
            raise CameraError(UNKNOWN, 'Camera is not ready')
        frame = self.stream.read_frame()
        return encode_jpeg(frame, self.stream.video_size, quality)

    def switch_camera(self):
        """Re-acquire with the opposite facing mode."""
        self._release()
        self.facing_mode = FACING_USER if self.facing_mode == FACING_ENVIRONMENT else FACING_ENVIRONMENT
        return self.start()

    def _release(self):
        if self.stream is not None:
            stop_stream(self.stream)
            self.stream = None

    def close(self):
        self._release()
        self.state = IDLE
        self.constraint_index = None
