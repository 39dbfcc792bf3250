from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol, Sequence

import requests

from memory_backend.core.config import Settings, get_settings
from memory_backend.db.seed import DEMO_PERSON_IDS

logger = logging.getLogger("memory_backend.matcher")


class FaceMatchError(RuntimeError):
    """Raised when the face-matching service cannot be reached or answers garbage."""


@dataclass
class MatchResult:
    person_id: str | None
    confidence: float | None = None
    message: str | None = None


class FaceMatcher(Protocol):
    def match(self, image: bytes, content_type: str) -> MatchResult:
        ...


class DemoFaceMatcher:
    """Stand-in matcher that picks a demo person at random."""

    def __init__(
        self,
        person_ids: Sequence[str] = DEMO_PERSON_IDS,
        match_probability: float = 0.7,
        rng: random.Random | None = None,
    ) -> None:
        self.person_ids = list(person_ids)
        self.match_probability = min(1.0, max(0.0, match_probability))
        self.rng = rng or random.Random()

    def match(self, image: bytes, content_type: str) -> MatchResult:
        if self.person_ids and self.rng.random() < self.match_probability:
            person_id = self.rng.choice(self.person_ids)
            confidence = 0.85 + self.rng.random() * 0.14
            logger.info("Demo recognition result: personId=%s", person_id)
            return MatchResult(person_id=person_id, confidence=round(confidence, 4))
        logger.info("Demo recognition result: no face detected")
        return MatchResult(person_id=None, message="No face detected")


class RemoteFaceMatcher:
    """Forwards the frame to an external face-matching endpoint."""

    def __init__(self, url: str, api_key: str = "", timeout_seconds: float = 6.0) -> None:
        if not url:
            raise ValueError("face_match_url is required for remote face matching")
        self.url = url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()

    def match(self, image: bytes, content_type: str) -> MatchResult:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            resp = self.session.post(
                self.url,
                files={"image": ("frame.jpg", image, content_type or "image/jpeg")},
                headers=headers,
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise FaceMatchError(f"Face matching service failed: {exc}") from exc

        if not isinstance(body, dict):
            raise FaceMatchError("Face matching service returned a non-object body")
        person_id = body.get("personId")
        confidence = body.get("confidence")
        message = body.get("message")
        return MatchResult(
            person_id=str(person_id) if person_id else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
            message=message if isinstance(message, str) else None,
        )


def build_matcher(settings: Settings) -> FaceMatcher:
    mode = settings.face_match_mode.strip().lower()
    if mode == "remote":
        return RemoteFaceMatcher(
            url=settings.face_match_url,
            api_key=settings.face_match_api_key,
            timeout_seconds=settings.face_match_timeout_seconds,
        )
    if mode != "demo":
        logger.warning("Unknown face_match_mode '%s', falling back to demo matcher.", settings.face_match_mode)
    return DemoFaceMatcher(match_probability=settings.demo_match_probability)


_matcher: FaceMatcher | None = None


def get_matcher() -> FaceMatcher:
    global _matcher
    if _matcher is None:
        _matcher = build_matcher(get_settings())
    return _matcher
