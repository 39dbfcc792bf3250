import json
import os
import tempfile
from pathlib import Path

import pytest
import requests

_TMP_DIR = Path(tempfile.mkdtemp(prefix="memory-helper-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'memory_helper_test.db'}"
os.environ["MEMORY_HELPER_LOG_DIR"] = str(_TMP_DIR / "logs")
os.environ["LLM_API_KEY"] = ""
os.environ["FACE_MATCH_MODE"] = "demo"
os.environ["SEED_DEMO_DATA"] = "true"

from memory_helper.types import PersonProfile  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualDispatch:
    """Collects dispatched jobs so tests decide when in-flight requests complete."""

    def __init__(self):
        self.jobs = []

    def __call__(self, job) -> None:
        self.jobs.append(job)

    @property
    def pending(self) -> int:
        return len(self.jobs)

    def run_next(self) -> None:
        self.jobs.pop(0)()

    def run_all(self) -> None:
        while self.jobs:
            self.run_next()


class ScriptedRecognitionClient:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def queue(self, *outcomes) -> None:
        self.outcomes.extend(outcomes)

    def recognize(self, frame):
        self.calls.append(frame)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


class ScriptedSummaryClient:
    def __init__(self, failures=None):
        self.failures = dict(failures or {})
        self.calls = []

    def fetch_summary(self, person_id):
        self.calls.append(person_id)
        failure = self.failures.pop(person_id, None)
        if failure is not None:
            raise failure
        return PersonProfile(
            person_id=person_id,
            name=f"Name {person_id}",
            relationship="Friend",
            summary=f"Summary for {person_id}.",
        )

    def close(self) -> None:
        pass


class FakeSession:
    """Stands in for requests.Session, replaying prepared responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def close(self) -> None:
        pass


def make_response(status_code: int, body=None, text: str = "", url: str = "http://service.test/") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.encoding = "utf-8"
    if body is not None:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = text.encode("utf-8")
    return resp


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatch():
    return ManualDispatch()
