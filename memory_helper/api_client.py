from __future__ import annotations

import threading
from typing import Any
from urllib.parse import quote

import requests

from .config import REQUEST_TIMEOUT_SECONDS
from .exceptions import RecognitionUnavailable, SummaryUnavailable
from .types import Frame, PersonProfile, RecognitionResult


class _ServiceClient:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self._session_lock = threading.Lock()

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _json_object(resp: requests.Response) -> dict[str, Any]:
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"expected a JSON object, got {type(body).__name__}")
        return body

    def close(self) -> None:
        self.session.close()


class RecognitionClient(_ServiceClient):
    """Submits frames to the face-matching endpoint. Never retries."""

    def recognize(self, frame: Frame) -> RecognitionResult:
        files = {"image": ("frame.jpg", frame.data, frame.mime_type)}
        try:
            with self._session_lock:
                resp = self.session.post(
                    self._url("recognize"),
                    files=files,
                    headers=self._headers(),
                    timeout=self.timeout_seconds,
                )
            resp.raise_for_status()
            body = self._json_object(resp)
        except (requests.RequestException, ValueError) as exc:
            raise RecognitionUnavailable(f"Recognition request failed: {exc}") from exc

        person_id = body.get("personId")
        if person_id is not None and not isinstance(person_id, str):
            raise RecognitionUnavailable(f"Malformed personId in recognition response: {person_id!r}")

        confidence = body.get("confidence")
        if confidence is not None:
            try:
                confidence = float(confidence)
            except (TypeError, ValueError) as exc:
                raise RecognitionUnavailable(f"Malformed confidence: {confidence!r}") from exc

        message = body.get("message")
        return RecognitionResult(
            person_id=person_id or None,
            confidence=confidence,
            message=message if isinstance(message, str) else None,
        )


class SummaryClient(_ServiceClient):
    """Fetches the human-readable profile for a recognised person. Never retries."""

    def fetch_summary(self, person_id: str) -> PersonProfile:
        if not person_id:
            raise SummaryUnavailable("Person ID is required")

        try:
            with self._session_lock:
                resp = self.session.get(
                    self._url(f"summary/{quote(person_id, safe='')}"),
                    headers=self._headers(),
                    timeout=self.timeout_seconds,
                )
            if resp.status_code == 404:
                raise SummaryUnavailable(f"Person not found: {person_id}")
            resp.raise_for_status()
            body = self._json_object(resp)
        except (requests.RequestException, ValueError) as exc:
            raise SummaryUnavailable(f"Summary request failed: {exc}") from exc

        missing = [key for key in ("name", "relationship", "summary") if not isinstance(body.get(key), str)]
        if missing:
            raise SummaryUnavailable(f"Summary response missing fields: {', '.join(missing)}")

        photo_url = body.get("photoUrl")
        return PersonProfile(
            person_id=person_id,
            name=body["name"],
            relationship=body["relationship"],
            summary=body["summary"].strip(),
            photo_url=photo_url if isinstance(photo_url, str) and photo_url else None,
        )
