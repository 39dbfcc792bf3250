from __future__ import annotations

from typing import Optional

import cv2

from .api_client import RecognitionClient, SummaryClient
from .camera_capture import open_camera_capture
from .config import ClientConfig
from .coordinator import Dispatch, RecognitionCoordinator
from .exceptions import DeviceUnavailable
from .frame_sampler import CaptureFactory, FrameSampler
from .logger import setup_logger
from .presentation import OverlayRenderer, ViewModel, blank_canvas, project

WINDOW_NAME = "Memory Helper"
KEY_LEGEND = "SPACE dismiss | C camera on/off | R retry camera | Q quit"


class MemoryHelperApp:
    def __init__(
        self,
        config: ClientConfig,
        recognition_client: Optional[RecognitionClient] = None,
        summary_client: Optional[SummaryClient] = None,
        capture_factory: CaptureFactory = open_camera_capture,
        dispatch: Optional[Dispatch] = None,
    ):
        self.config = config
        self.logger = setup_logger(self.__class__.__name__)
        self.recognition_client = recognition_client or RecognitionClient(
            config.base_url,
            api_key=config.api_key,
            timeout_seconds=config.request_timeout_seconds,
        )
        self.summary_client = summary_client or SummaryClient(
            config.base_url,
            api_key=config.api_key,
            timeout_seconds=config.request_timeout_seconds,
        )
        self.coordinator = RecognitionCoordinator(
            self.recognition_client,
            self.summary_client,
            cooldown_seconds=config.cooldown_seconds,
            dispatch=dispatch,
        )
        self.sampler = FrameSampler(
            on_frame=self.coordinator.submit_frame,
            camera_index=config.camera_index,
            interval_seconds=config.sample_interval_seconds,
            frame_width=config.frame_width,
            frame_height=config.frame_height,
            jpeg_quality=config.jpeg_quality,
            capture_factory=capture_factory,
        )
        self.renderer = OverlayRenderer()
        self.camera_active = False
        self.device_error: Optional[DeviceUnavailable] = None

    def start_camera(self) -> None:
        self.camera_active = True
        self.device_error = None
        self.coordinator.start_session()
        try:
            self.sampler.start()
        except DeviceUnavailable as exc:
            self.device_error = exc
            self.coordinator.stop_session()
            self.logger.error("Camera unavailable (%s): %s", exc.reason.value, exc)

    def stop_camera(self) -> None:
        self.camera_active = False
        self.device_error = None
        self.sampler.stop()
        self.coordinator.stop_session()

    def toggle_camera(self) -> None:
        if self.camera_active:
            self.stop_camera()
        else:
            self.start_camera()

    def retry_camera(self) -> None:
        if self.device_error is None:
            return
        self.sampler.stop()
        self.start_camera()

    def dismiss(self) -> None:
        self.coordinator.dismiss()

    def current_view(self) -> ViewModel:
        self.coordinator.tick()
        return project(
            self.coordinator.snapshot(),
            camera_active=self.camera_active,
            device_error=self.device_error,
            read_error=self.sampler.last_error,
        )

    def render(self):
        frame = self.sampler.latest_frame() if self.camera_active and self.device_error is None else None
        if frame is None:
            frame = blank_canvas(self.config.frame_width, self.config.frame_height)
        return self.renderer.draw(frame, self.current_view(), key_legend=KEY_LEGEND)

    def handle_key(self, key: int) -> bool:
        """Apply a key press. Returns False when the app should quit."""
        if key in (ord("q"), 27):
            return False
        if key in (ord(" "), ord("d")):
            self.dismiss()
        elif key == ord("c"):
            self.toggle_camera()
        elif key == ord("r"):
            self.retry_camera()
        return True

    def run(self) -> None:
        self.logger.info("Memory helper started against %s", self.config.base_url)
        self.start_camera()
        try:
            while True:
                cv2.imshow(WINDOW_NAME, self.render())
                key = cv2.waitKey(30) & 0xFF
                if key != 0xFF and not self.handle_key(key):
                    break
        finally:
            self.stop_camera()
            self.recognition_client.close()
            self.summary_client.close()
            cv2.destroyAllWindows()
