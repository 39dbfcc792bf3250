from __future__ import annotations

import os
import sys
import time
from pathlib import Path
from typing import List, Tuple

import cv2

from .exceptions import DeviceFailure, DeviceUnavailable

_BACKEND_ALIASES = {
    "auto": "Auto",
    "any": "Auto",
    "v4l2": "V4L2",
    "dshow": "DirectShow",
    "directshow": "DirectShow",
    "msmf": "Media Foundation",
    "mediafoundation": "Media Foundation",
    "media foundation": "Media Foundation",
    "avfoundation": "AVFoundation",
}


def _default_backend_order() -> list[str]:
    if os.name == "nt":
        # Windows laptop webcams are generally more stable on DirectShow.
        return ["DirectShow", "Media Foundation", "Auto"]
    if sys.platform == "darwin":
        return ["AVFoundation", "Auto"]
    return ["V4L2", "Auto"]


def _preferred_backend_order() -> list[str]:
    raw = os.getenv("MEMORY_HELPER_CAMERA_BACKENDS", "").strip()
    if not raw:
        return _default_backend_order()
    result: list[str] = []
    for item in raw.split(","):
        name = _BACKEND_ALIASES.get(item.strip().lower())
        if name and name not in result:
            result.append(name)
    return result or _default_backend_order()


def capture_backends() -> List[Tuple[str, int | None]]:
    backend_map: dict[str, int | None] = {
        "Auto": getattr(cv2, "CAP_ANY", None),
        "V4L2": getattr(cv2, "CAP_V4L2", None),
        "DirectShow": getattr(cv2, "CAP_DSHOW", None),
        "Media Foundation": getattr(cv2, "CAP_MSMF", None),
        "AVFoundation": getattr(cv2, "CAP_AVFOUNDATION", None),
    }
    candidates: List[Tuple[str, int | None]] = []
    seen: set[int | None] = set()
    for name in _preferred_backend_order() + ["Auto"]:
        backend = backend_map.get(name)
        if backend in seen:
            continue
        seen.add(backend)
        candidates.append((name, backend))
    return candidates


def diagnose_device_failure(camera_index: int, any_opened: bool) -> DeviceFailure:
    if sys.platform.startswith("linux"):
        node = Path(f"/dev/video{camera_index}")
        if not node.exists():
            return DeviceFailure.NOT_FOUND
        if not os.access(node, os.R_OK | os.W_OK):
            return DeviceFailure.PERMISSION_DENIED
        return DeviceFailure.OTHER
    return DeviceFailure.OTHER if any_opened else DeviceFailure.NOT_FOUND


def open_camera_capture(camera_index: int) -> tuple[cv2.VideoCapture, str]:
    attempted: List[str] = []
    any_opened = False

    for backend_name, backend in capture_backends():
        attempted.append(backend_name)
        if backend is None:
            cap = cv2.VideoCapture(camera_index)
        else:
            cap = cv2.VideoCapture(camera_index, backend)

        if cap.isOpened():
            any_opened = True
            # Some backends report opened=True but never deliver frames.
            for _ in range(6):
                ok, frame = cap.read()
                if ok and frame is not None:
                    return cap, backend_name
                time.sleep(0.03)
        cap.release()

    reason = diagnose_device_failure(camera_index, any_opened)
    tried = ", ".join(attempted) if attempted else "default backend"
    raise DeviceUnavailable(
        reason,
        f"Unable to open camera index {camera_index} ({reason.value}). Tried backends: {tried}.",
    )
