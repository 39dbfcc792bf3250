from enum import Enum


class MemoryHelperError(Exception):
    """Base exception for the memory helper client."""


class DeviceFailure(str, Enum):
    PERMISSION_DENIED = "permission-denied"
    NOT_FOUND = "not-found"
    OTHER = "other"


_DEVICE_MESSAGES = {
    DeviceFailure.PERMISSION_DENIED: "Camera access was denied. Please allow camera access to use this app.",
    DeviceFailure.NOT_FOUND: "No camera found on this device.",
    DeviceFailure.OTHER: "Could not access the camera. Please try again.",
}


class DeviceUnavailable(MemoryHelperError):
    """Raised when the capture device cannot be acquired."""

    def __init__(self, reason: DeviceFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        self.user_message = _DEVICE_MESSAGES[reason]
        super().__init__(detail or self.user_message)


class RecognitionUnavailable(MemoryHelperError):
    """Raised when the face-matching service cannot produce a result."""


class SummaryUnavailable(MemoryHelperError):
    """Raised when a person profile cannot be fetched."""
