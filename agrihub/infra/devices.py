"""
Camera and speech capability handles.

Whoever needs a device receives a handle explicitly and owns it for the
lifetime of its view; nothing reaches for a process-wide device on its own.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol

from ..domain.errors import DeviceError
from ..domain.speech import Voice
from ..observability.logging_utils import log_event, log_failure
from ..schemas import ImageUpload


CAMERA_ACCESS_MESSAGE = (
    "Failed to access camera. Please ensure camera permissions are granted."
)
CAPTURE_FILENAME = "plant-photo.jpg"
CAPTURE_MIME_TYPE = "image/jpeg"
CAPTURE_JPEG_QUALITY = 80
CAPTURE_WIDTH = 1280
CAPTURE_HEIGHT = 720
DEFAULT_WORDS_PER_MINUTE = 200


class CameraDevice(Protocol):
    def open(self) -> None: ...

    def read_jpeg(self, quality: int) -> bytes: ...

    def release(self) -> None: ...


@contextmanager
def camera_session(device: CameraDevice) -> Iterator[CameraDevice]:
    """Open the camera and always release its stream on the way out."""
    try:
        device.open()
    except DeviceError:
        device.release()
        raise
    except Exception as exc:
        device.release()
        log_failure("camera_open_failed", error=str(exc))
        raise DeviceError(CAMERA_ACCESS_MESSAGE) from exc
    log_event("camera_opened")
    try:
        yield device
    finally:
        device.release()
        log_event("camera_released")


def capture_photo(device: CameraDevice) -> ImageUpload:
    with camera_session(device) as camera:
        try:
            data = camera.read_jpeg(CAPTURE_JPEG_QUALITY)
        except DeviceError:
            raise
        except Exception as exc:
            log_failure("camera_capture_failed", error=str(exc))
            raise DeviceError("Failed to capture photo") from exc
    return ImageUpload(filename=CAPTURE_FILENAME, mime_type=CAPTURE_MIME_TYPE, data=data)


class OpenCVCamera:
    """Local webcam through OpenCV, preferring 1280x720."""

    def __init__(self, index: int = 0) -> None:
        self._index = index
        self._capture = None

    def open(self) -> None:
        import cv2

        capture = cv2.VideoCapture(self._index)
        if not capture.isOpened():
            capture.release()
            raise DeviceError(CAMERA_ACCESS_MESSAGE)
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, CAPTURE_WIDTH)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, CAPTURE_HEIGHT)
        self._capture = capture

    def read_jpeg(self, quality: int) -> bytes:
        import cv2

        if self._capture is None:
            raise DeviceError("Failed to start video stream")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise DeviceError("Failed to start video stream")
        ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise DeviceError("Failed to encode captured frame")
        return buffer.tobytes()

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None


@dataclass(frozen=True)
class EngineVoice:
    id: str
    name: str
    lang: str


def _normalize_locale(raw: object) -> str:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    text = str(raw or "").strip().lstrip("\x05").replace("_", "-")
    if "-" in text:
        language, region = text.split("-", 1)
        return f"{language.lower()}-{region.upper()}"
    return text.lower()


class Pyttsx3SpeechEngine:
    """Offline text-to-speech through pyttsx3; `speak` blocks until done."""

    def __init__(self) -> None:
        import pyttsx3

        self._engine = pyttsx3.init()

    def voices(self) -> List[EngineVoice]:
        voices = []
        for voice in self._engine.getProperty("voices") or []:
            languages = getattr(voice, "languages", None) or [""]
            voices.append(
                EngineVoice(
                    id=voice.id,
                    name=getattr(voice, "name", "") or "",
                    lang=_normalize_locale(languages[0]),
                )
            )
        return voices

    def speak(
        self,
        text: str,
        *,
        voice: Optional[Voice],
        rate: float,
        pitch: float,
        volume: float,
        on_start: Callable[[], None],
        on_end: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        # pyttsx3 has no pitch control
        if voice is not None:
            self._engine.setProperty("voice", voice.id)
        self._engine.setProperty("rate", int(DEFAULT_WORDS_PER_MINUTE * rate))
        self._engine.setProperty("volume", volume)
        on_start()
        try:
            self._engine.say(text)
            self._engine.runAndWait()
        except RuntimeError as exc:
            on_error(str(exc))
            return
        on_end()

    def cancel(self) -> None:
        self._engine.stop()
