from __future__ import annotations

import io

import pytest
from PIL import Image

from roadworthy.client import camera
from roadworthy.client.camera import (
    CameraError,
    CameraSession,
    ConstraintNotSatisfied,
    MediaDevices,
    NoCameraFound,
    PermissionDenied,
    camera_capabilities,
)


class FakeTrack:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeStream:
    def __init__(self, size=(640, 480), ready=True) -> None:
        self.tracks = [FakeTrack()]
        self.video_size = size
        self.ready = ready

    def get_tracks(self):
        return self.tracks

    def wait_until_ready(self, timeout):
        return self.ready

    def read_frame(self):
        return Image.new("RGB", (32, 24), "blue")

    @property
    def stopped(self) -> bool:
        return all(track.stopped for track in self.tracks)


class FakeDevices(MediaDevices):
    """Plays back one outcome per get_user_media call."""

    def __init__(self, outcomes, devices=None) -> None:
        self.outcomes = list(outcomes)
        self.devices = devices or []
        self.requests = []
        self.streams = []

    def enumerate_devices(self):
        return self.devices

    def get_user_media(self, constraints):
        self.requests.append(constraints)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        self.streams.append(outcome)
        return outcome


def test_first_constraint_set_wins() -> None:
    stream = FakeStream()
    devices = FakeDevices([stream])
    session = CameraSession(devices)
    assert session.start() is stream
    assert session.state == camera.READY
    assert session.constraint_index == 0
    video = devices.requests[0]["video"]
    assert video["facingMode"] == {"ideal": "environment"}
    assert video["width"] == {"ideal": 1920, "min": 640}
    assert video["height"] == {"ideal": 1080, "min": 480}


def test_ladder_falls_back_to_any_camera() -> None:
    stream = FakeStream()
    devices = FakeDevices([ConstraintNotSatisfied("width"), ConstraintNotSatisfied("facingMode"), stream])
    session = CameraSession(devices)
    session.start()
    assert session.constraint_index == 2
    assert "facingMode" not in devices.requests[1]["video"]
    assert devices.requests[2]["video"] is True


def test_permission_denied_stops_the_ladder() -> None:
    devices = FakeDevices([PermissionDenied("NotAllowedError"), FakeStream()])
    session = CameraSession(devices)
    with pytest.raises(CameraError) as excinfo:
        session.start()
    assert excinfo.value.reason == camera.PERMISSION_DENIED
    assert "permission" in excinfo.value.message.lower()
    assert session.state == camera.FAILED
    assert len(devices.requests) == 1


def test_no_camera_after_exhausting_ladder() -> None:
    devices = FakeDevices([NoCameraFound("none")] * 3)
    session = CameraSession(devices)
    with pytest.raises(CameraError) as excinfo:
        session.start()
    assert excinfo.value.reason == camera.NO_CAMERA
    assert len(devices.requests) == 3


def test_metadata_timeout_releases_stream() -> None:
    stream = FakeStream(ready=False)
    session = CameraSession(FakeDevices([stream]))
    with pytest.raises(CameraError) as excinfo:
        session.start()
    assert excinfo.value.reason == camera.TIMEOUT
    assert stream.stopped
    assert session.stream is None


def test_capture_encodes_jpeg_at_native_resolution() -> None:
    session = CameraSession(FakeDevices([FakeStream(size=(640, 480))]))
    session.start()
    data = session.capture()
    image = Image.open(io.BytesIO(data))
    assert image.format == "JPEG"
    assert image.size == (640, 480)


def test_capture_requires_ready_camera() -> None:
    session = CameraSession(FakeDevices([]))
    with pytest.raises(CameraError):
        session.capture()


def test_switch_camera_flips_facing_mode_and_stops_tracks() -> None:
    first, second = FakeStream(), FakeStream()
    devices = FakeDevices([first, second])
    session = CameraSession(devices)
    session.start()
    session.switch_camera()
    assert first.stopped
    assert not second.stopped
    assert session.facing_mode == "user"
    assert devices.requests[1]["video"]["facingMode"] == {"ideal": "user"}


def test_context_manager_always_stops_tracks() -> None:
    stream = FakeStream()
    with pytest.raises(RuntimeError):
        with CameraSession(FakeDevices([stream])) as session:
            session.start()
            raise RuntimeError("view torn down")
    assert stream.stopped
    assert session.state == camera.IDLE


def test_camera_capabilities() -> None:
    two = FakeDevices([], devices=[{"kind": "videoinput"}, {"kind": "videoinput"}, {"kind": "audioinput"}])
    assert camera_capabilities(two) == {
        "hasCamera": True,
        "hasMultipleCameras": True,
        "supportedFacingModes": ["user", "environment"],
    }
    assert camera_capabilities(FakeDevices([]))["hasCamera"] is False


def test_unexpected_device_error_tries_next_constraint() -> None:
    stream = FakeStream()
    devices = FakeDevices([OSError("NotReadableError: device in use"), stream])
    session = CameraSession(devices)
    assert session.start() is stream
    assert session.constraint_index == 1
    assert session.state == camera.READY


def test_unexpected_device_errors_fail_as_unknown() -> None:
    devices = FakeDevices([OSError("NotReadableError: device in use")] * 3)
    session = CameraSession(devices)
    with pytest.raises(CameraError) as excinfo:
        session.start()
    assert excinfo.value.reason == camera.UNKNOWN
    assert excinfo.value.message == camera.FAILURE_MESSAGES[camera.UNKNOWN]
    assert session.state == camera.FAILED
    assert session.failure is excinfo.value


def test_error_while_waiting_for_video_releases_stream() -> None:
    class BrokenStream(FakeStream):
        def wait_until_ready(self, timeout):
            raise RuntimeError("video element detached")

    stream = BrokenStream()
    session = CameraSession(FakeDevices([stream]))
    with pytest.raises(CameraError) as excinfo:
        session.start()
    assert excinfo.value.reason == camera.UNKNOWN
    assert stream.stopped
    assert session.state == camera.FAILED


def test_single_or_missing_camera_reports_user_facing_mode() -> None:
    one = FakeDevices([], devices=[{"kind": "videoinput"}])
    assert camera_capabilities(one)["supportedFacingModes"] == ["user"]
    none = camera_capabilities(FakeDevices([]))
    assert none["hasCamera"] is False
    assert none["supportedFacingModes"] == ["user"]
