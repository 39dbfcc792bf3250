from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Frame:
    data: bytes
    mime_type: str = "image/jpeg"
    captured_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RecognitionResult:
    person_id: Optional[str] = None
    confidence: Optional[float] = None
    message: Optional[str] = None

    @property
    def matched(self) -> bool:
        return bool(self.person_id)


@dataclass(frozen=True)
class PersonProfile:
    person_id: str
    name: str
    relationship: str
    summary: str
    photo_url: Optional[str] = None


class Phase(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    RECOGNIZING = "recognizing"
    LOADING = "loading"
    SHOWING = "showing"
    ERROR = "error"


@dataclass(frozen=True)
class CoordinatorState:
    phase: Phase = Phase.IDLE
    last_shown_person_id: Optional[str] = None
    cooldown_active: bool = False
    error_message: Optional[str] = None
    profile: Optional[PersonProfile] = None
    frames_dropped: int = 0
    generation: int = 0
