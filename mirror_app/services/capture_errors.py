"""Capture failure taxonomy and classification of capability errors."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mirror_app.services.ffmpeg_tools import FfmpegNotFoundError


class CaptureErrorKind(str, Enum):
    UNSUPPORTED = "Unsupported"
    PERMISSION_DENIED = "PermissionDenied"
    REQUEST_FAILED = "RequestFailed"

    @property
    def retryable(self) -> bool:
        return self is not CaptureErrorKind.UNSUPPORTED


ERROR_MESSAGES = {
    CaptureErrorKind.UNSUPPORTED: (
        "Screen sharing is not supported on this system. Install FFmpeg and run the app "
        "in a desktop session with screen capture available."
    ),
    CaptureErrorKind.PERMISSION_DENIED: (
        "Screen sharing permission was denied. Please allow screen sharing and try again."
    ),
    CaptureErrorKind.REQUEST_FAILED: (
        "Could not start screen sharing. Please ensure screen capture is available and "
        "permissions are granted."
    ),
}


@dataclass(frozen=True)
class CaptureError:
    kind: CaptureErrorKind
    message: str
    detail: str | None = None

    @classmethod
    def of(cls, kind: CaptureErrorKind, detail: str | None = None) -> "CaptureError":
        return cls(kind=kind, message=ERROR_MESSAGES[kind], detail=detail)


class DisplayMediaError(RuntimeError):
    """Base for failures raised by a display-media provider.

    ``partial_stream`` holds any stream the provider had already started when
    it failed; whoever catches the error is responsible for releasing it.
    """

    def __init__(self, message: str = "", *, partial_stream=None):
        super().__init__(message)
        self.partial_stream = partial_stream


class CaptureUnsupportedError(DisplayMediaError):
    pass


class CapturePermissionError(DisplayMediaError):
    name = "NotAllowedError"


class CaptureRequestError(DisplayMediaError):
    pass


def classify_capture_failure(exc: BaseException) -> CaptureError:
    detail = str(exc) or type(exc).__name__
    if isinstance(exc, (CaptureUnsupportedError, FfmpegNotFoundError)):
        return CaptureError.of(CaptureErrorKind.UNSUPPORTED, detail)
    if isinstance(exc, (CapturePermissionError, PermissionError)) or getattr(exc, "name", None) == "NotAllowedError":
        return CaptureError.of(CaptureErrorKind.PERMISSION_DENIED, detail)
    return CaptureError.of(CaptureErrorKind.REQUEST_FAILED, detail)
