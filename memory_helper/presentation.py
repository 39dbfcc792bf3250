from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .exceptions import DeviceUnavailable
from .types import CoordinatorState, Phase, PersonProfile

APP_TITLE = "Memory Helper"
APP_TAGLINE = "Point the camera at someone to help remember who they are."
STARTING_TEXT = "Starting camera..."
SCANNING_TEXT = "Looking for faces..."
LOADING_TEXT = "Remembering..."
COOLDOWN_HINT = "Taking a short pause before looking again"
PERSON_HINT = "Tap anywhere or wait to continue looking"
DEFAULT_ERROR_TEXT = "Something went wrong"
CAMERA_ERROR_TITLE = "Camera Access Needed"
CAMERA_STALLED_HINT = "The camera is not sending pictures. Check that it is connected."

Color = Tuple[int, int, int]

# BGR
PRIMARY: Color = (200, 140, 60)
SUCCESS: Color = (90, 170, 60)
WARNING: Color = (40, 170, 240)
DESTRUCTIVE: Color = (60, 60, 210)
FOREGROUND: Color = (40, 32, 28)
LIGHT: Color = (245, 245, 245)
MUTED: Color = (170, 170, 170)


class ViewKind(str, Enum):
    CAMERA_OFF = "camera-off"
    CAMERA_ERROR = "camera-error"
    SCANNING = "scanning"
    LOADING = "loading"
    PERSON = "person"
    ERROR = "error"


@dataclass(frozen=True)
class ViewModel:
    kind: ViewKind
    headline: str = ""
    detail: str = ""
    hint: str = ""
    profile: Optional[PersonProfile] = None
    can_dismiss: bool = False
    can_retry: bool = False


def project(
    state: CoordinatorState,
    camera_active: bool = True,
    device_error: Optional[DeviceUnavailable] = None,
    read_error: Optional[str] = None,
) -> ViewModel:
    """Map coordinator state to the single thing the screen should show."""
    if not camera_active:
        return ViewModel(kind=ViewKind.CAMERA_OFF, headline=APP_TITLE, detail=APP_TAGLINE)

    if device_error is not None:
        return ViewModel(
            kind=ViewKind.CAMERA_ERROR,
            headline=CAMERA_ERROR_TITLE,
            detail=device_error.user_message,
            can_retry=True,
        )

    if state.phase is Phase.SHOWING and state.profile is not None:
        profile = state.profile
        return ViewModel(
            kind=ViewKind.PERSON,
            headline=profile.name,
            detail=f"Your {profile.relationship}",
            hint=PERSON_HINT,
            profile=profile,
            can_dismiss=True,
        )

    if state.phase is Phase.LOADING:
        return ViewModel(kind=ViewKind.LOADING, headline=LOADING_TEXT)

    if state.error_message is not None or state.phase is Phase.ERROR:
        return ViewModel(
            kind=ViewKind.ERROR,
            headline=state.error_message or DEFAULT_ERROR_TEXT,
            can_dismiss=True,
        )

    if state.phase is Phase.IDLE:
        return ViewModel(kind=ViewKind.SCANNING, headline=STARTING_TEXT)

    return ViewModel(
        kind=ViewKind.SCANNING,
        headline=SCANNING_TEXT,
        hint=_scanning_hint(state, read_error),
    )


def _scanning_hint(state: CoordinatorState, read_error: Optional[str]) -> str:
    if read_error:
        return CAMERA_STALLED_HINT
    return COOLDOWN_HINT if state.cooldown_active else ""


def blank_canvas(width: int, height: int) -> np.ndarray:
    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    canvas[:] = FOREGROUND
    return canvas


class OverlayRenderer:
    font = cv2.FONT_HERSHEY_SIMPLEX

    def draw(self, canvas: np.ndarray, view: ViewModel, key_legend: str = "") -> np.ndarray:
        if view.kind is ViewKind.CAMERA_OFF:
            self._draw_panel(canvas, view.headline, view.detail, "Press C to start the camera", PRIMARY)
        elif view.kind is ViewKind.CAMERA_ERROR:
            self._draw_panel(canvas, view.headline, view.detail, "Press R to try again", DESTRUCTIVE)
        elif view.kind is ViewKind.SCANNING:
            self._draw_corner_brackets(canvas)
            self._draw_status_pill(canvas, view.headline, PRIMARY, subtitle=view.hint)
        elif view.kind is ViewKind.LOADING:
            self._draw_loading_card(canvas)
        elif view.kind is ViewKind.PERSON and view.profile is not None:
            self._draw_person_card(canvas, view, view.profile)
        elif view.kind is ViewKind.ERROR:
            self._draw_status_pill(canvas, view.headline, WARNING, text_color=FOREGROUND)

        if key_legend:
            self._draw_legend(canvas, key_legend)
        return canvas

    def _draw_status_pill(
        self,
        canvas: np.ndarray,
        text: str,
        color: Color,
        text_color: Color = LIGHT,
        subtitle: str = "",
    ) -> None:
        scale, thickness, padding = 0.8, 2, 14
        (tw, th), baseline = cv2.getTextSize(text, self.font, scale, thickness)
        x = max(10, (canvas.shape[1] - tw) // 2)
        y = 30 + th
        cv2.rectangle(
            canvas,
            (x - padding, y - th - padding),
            (x + tw + padding, y + baseline + padding),
            color,
            thickness=-1,
        )
        cv2.putText(canvas, text, (x, y), self.font, scale, text_color, thickness, cv2.LINE_AA)
        if subtitle:
            (sw, _), _ = cv2.getTextSize(subtitle, self.font, 0.55, 1)
            sx = max(10, (canvas.shape[1] - sw) // 2)
            cv2.putText(canvas, subtitle, (sx, y + baseline + padding + 24), self.font, 0.55, LIGHT, 1, cv2.LINE_AA)

    def _draw_corner_brackets(self, canvas: np.ndarray) -> None:
        height, width = canvas.shape[:2]
        inset, arm = 32, 64
        corners = [
            ((inset, inset), (1, 1)),
            ((width - inset, inset), (-1, 1)),
            ((inset, height - inset), (1, -1)),
            ((width - inset, height - inset), (-1, -1)),
        ]
        for (cx, cy), (dx, dy) in corners:
            cv2.line(canvas, (cx, cy), (cx + dx * arm, cy), PRIMARY, 4, cv2.LINE_AA)
            cv2.line(canvas, (cx, cy), (cx, cy + dy * arm), PRIMARY, 4, cv2.LINE_AA)

    def _card_region(self, canvas: np.ndarray, card_height: int) -> Tuple[int, int]:
        height, width = canvas.shape[:2]
        top = max(0, height - card_height)
        overlay = canvas.copy()
        cv2.rectangle(overlay, (0, top), (width, height), FOREGROUND, thickness=-1)
        cv2.addWeighted(overlay, 0.85, canvas, 0.15, 0, dst=canvas)
        cv2.line(canvas, (width // 2 - 24, top + 14), (width // 2 + 24, top + 14), MUTED, 4, cv2.LINE_AA)
        return top, width

    def _draw_loading_card(self, canvas: np.ndarray) -> None:
        top, width = self._card_region(canvas, 200)
        skeleton = (90, 80, 75)
        cv2.rectangle(canvas, (30, top + 40), (130, top + 140), skeleton, thickness=-1)
        cv2.rectangle(canvas, (160, top + 45), (320, top + 70), skeleton, thickness=-1)
        cv2.rectangle(canvas, (160, top + 85), (280, top + 103), skeleton, thickness=-1)
        cv2.rectangle(canvas, (160, top + 118), (max(180, width - 40), top + 136), skeleton, thickness=-1)

    def _draw_person_card(self, canvas: np.ndarray, view: ViewModel, profile: PersonProfile) -> None:
        width = canvas.shape[1]
        summary_lines = self._wrap(profile.summary, max(200, width - 80), 0.65, 1)
        card_height = 190 + 28 * len(summary_lines)
        top, width = self._card_region(canvas, card_height)

        # Avatar with the person's initial.
        cv2.rectangle(canvas, (30, top + 36), (126, top + 132), PRIMARY, thickness=-1)
        initial = profile.name[:1].upper() or "?"
        (iw, ih), _ = cv2.getTextSize(initial, self.font, 2.0, 3)
        cv2.putText(canvas, initial, (78 - iw // 2, top + 84 + ih // 2), self.font, 2.0, LIGHT, 3, cv2.LINE_AA)
        cv2.circle(canvas, (122, top + 128), 12, SUCCESS, thickness=-1)

        cv2.putText(canvas, view.headline, (150, top + 76), self.font, 1.2, LIGHT, 2, cv2.LINE_AA)
        cv2.putText(canvas, view.detail, (150, top + 116), self.font, 0.8, PRIMARY, 2, cv2.LINE_AA)

        y = top + 170
        for line in summary_lines:
            cv2.putText(canvas, line, (40, y), self.font, 0.65, LIGHT, 1, cv2.LINE_AA)
            y += 28

        (hw, _), _ = cv2.getTextSize(view.hint, self.font, 0.5, 1)
        cv2.putText(canvas, view.hint, ((width - hw) // 2, y + 10), self.font, 0.5, MUTED, 1, cv2.LINE_AA)

    def _draw_panel(self, canvas: np.ndarray, title: str, detail: str, action: str, accent: Color) -> None:
        height, width = canvas.shape[:2]
        canvas[:] = FOREGROUND
        cv2.circle(canvas, (width // 2, height // 2 - 110), 46, accent, thickness=-1)

        (tw, _), _ = cv2.getTextSize(title, self.font, 1.2, 2)
        cv2.putText(canvas, title, ((width - tw) // 2, height // 2 - 20), self.font, 1.2, LIGHT, 2, cv2.LINE_AA)

        y = height // 2 + 25
        for line in self._wrap(detail, int(width * 0.7), 0.7, 1):
            (lw, _), _ = cv2.getTextSize(line, self.font, 0.7, 1)
            cv2.putText(canvas, line, ((width - lw) // 2, y), self.font, 0.7, MUTED, 1, cv2.LINE_AA)
            y += 32

        (aw, _), _ = cv2.getTextSize(action, self.font, 0.8, 2)
        cv2.rectangle(canvas, ((width - aw) // 2 - 20, y + 10), ((width + aw) // 2 + 20, y + 60), accent, -1)
        cv2.putText(canvas, action, ((width - aw) // 2, y + 45), self.font, 0.8, LIGHT, 2, cv2.LINE_AA)

    def _draw_legend(self, canvas: np.ndarray, legend: str) -> None:
        height = canvas.shape[0]
        cv2.putText(canvas, legend, (12, height - 12), self.font, 0.45, MUTED, 1, cv2.LINE_AA)

    def _wrap(self, text: str, max_width: int, scale: float, thickness: int) -> List[str]:
        lines: List[str] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}".strip()
            (width, _), _ = cv2.getTextSize(candidate, self.font, scale, thickness)
            if width <= max_width or not current:
                current = candidate
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)
        return lines
