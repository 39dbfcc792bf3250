from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

import cv2
import numpy as np

from .camera_capture import open_camera_capture
from .config import FRAME_HEIGHT, FRAME_WIDTH, JPEG_QUALITY, SAMPLE_INTERVAL_SECONDS
from .logger import setup_logger
from .types import Frame

CaptureFactory = Callable[[int], "tuple[Any, str]"]


class FrameSampler:
    """Owns the capture device and hands an encoded still to ``on_frame`` at a fixed cadence.

    The reader thread decodes frames continuously so the preview stays live;
    sampling only decides which of those frames are submitted for recognition.
    A tick that lands before the device delivers usable frames is skipped,
    never queued.
    """

    def __init__(
        self,
        on_frame: Callable[[Frame], Any],
        camera_index: int = 0,
        interval_seconds: float = SAMPLE_INTERVAL_SECONDS,
        frame_width: int = FRAME_WIDTH,
        frame_height: int = FRAME_HEIGHT,
        jpeg_quality: int = JPEG_QUALITY,
        capture_factory: CaptureFactory = open_camera_capture,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.on_frame = on_frame
        self.camera_index = camera_index
        self.interval_seconds = float(interval_seconds)
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.jpeg_quality = int(np.clip(jpeg_quality, 30, 95))
        self.capture_factory = capture_factory
        self.clock = clock
        self.logger = setup_logger(self.__class__.__name__)

        self.cap = None
        self.backend_name: Optional[str] = None
        self.worker: Optional[threading.Thread] = None
        self.stop_event = threading.Event()
        self.capture_lock = threading.Lock()
        self.frame_lock = threading.Lock()

        self.read_fail_streak = 0
        self.last_error: Optional[str] = None
        self._latest: Optional[np.ndarray] = None
        self._ready = False
        self._next_sample_at = 0.0

    @property
    def active(self) -> bool:
        return self.cap is not None

    @property
    def ready(self) -> bool:
        with self.frame_lock:
            return self._ready

    def open(self) -> None:
        if self.cap is not None:
            return

        cap, backend_name = self.capture_factory(self.camera_index)
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)

        with self.capture_lock:
            self.cap = cap
        with self.frame_lock:
            self._latest = None
            self._ready = False
        self.backend_name = backend_name
        self.read_fail_streak = 0
        self.last_error = None
        self._next_sample_at = self.clock() + self.interval_seconds
        self.logger.info(
            "Camera index %s opened via %s backend, sampling every %.1fs",
            self.camera_index,
            backend_name,
            self.interval_seconds,
        )

    def start(self) -> None:
        if self.worker and self.worker.is_alive():
            return

        self.open()
        self.stop_event.clear()
        self.worker = threading.Thread(target=self._loop, name="frame-sampler", daemon=True)
        self.worker.start()

    def stop(self) -> None:
        self.stop_event.set()
        worker = self.worker
        if worker and worker.is_alive() and worker is not threading.current_thread():
            worker.join(timeout=3.0)
        self.worker = None

        with self.capture_lock:
            cap = self.cap
            self.cap = None
        with self.frame_lock:
            self._latest = None
            self._ready = False

        if cap is not None:
            cap.release()
            self.logger.info("Camera index %s released", self.camera_index)

    def latest_frame(self) -> Optional[np.ndarray]:
        with self.frame_lock:
            if self._latest is None:
                return None
            return self._latest.copy()

    def poll(self, now: Optional[float] = None) -> Optional[Frame]:
        """Read one frame and emit a sample if the cadence deadline has passed."""
        now = self.clock() if now is None else now
        with self.capture_lock:
            if self.cap is None:
                return None
            ok, image = self.cap.read()

        if not ok or image is None or image.size == 0:
            self.read_fail_streak += 1
            if self.read_fail_streak >= 4:
                self.last_error = f"Camera frame read failed on source {self.camera_index}."
            if now >= self._next_sample_at:
                self._next_sample_at = now + self.interval_seconds
                self.logger.debug("Sampling tick skipped, camera not ready")
            return None

        self.read_fail_streak = 0
        self.last_error = None
        with self.frame_lock:
            self._latest = image
            self._ready = True

        if now < self._next_sample_at:
            return None
        self._next_sample_at = now + self.interval_seconds

        frame = self._encode(image)
        if frame is None:
            return None
        try:
            self.on_frame(frame)
        except Exception:
            self.logger.exception("Frame consumer failed")
        return frame

    def _loop(self) -> None:
        while not self.stop_event.is_set():
            try:
                self.poll()
            except Exception:
                self.logger.exception("Frame sampler iteration failed")
                self.stop_event.wait(0.5)
                continue
            if not self.ready:
                self.stop_event.wait(0.03)

    def _encode(self, image: np.ndarray) -> Optional[Frame]:
        ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality])
        if not ok:
            self.logger.warning("JPEG encoding failed for sampled frame")
            return None
        return Frame(data=buffer.tobytes(), mime_type="image/jpeg", captured_at=time.time())
