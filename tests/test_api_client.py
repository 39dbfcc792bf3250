import pytest
import requests

from conftest import FakeSession, make_response
from memory_helper.api_client import RecognitionClient, SummaryClient
from memory_helper.exceptions import RecognitionUnavailable, SummaryUnavailable
from memory_helper.types import Frame

BASE_URL = "http://service.test/functions/v1/"
FRAME = Frame(data=b"\xff\xd8jpeg-bytes", captured_at=0.0)


def recognition_client(*responses, api_key=""):
    session = FakeSession(*responses)
    return RecognitionClient(BASE_URL, api_key=api_key, timeout_seconds=4.0, session=session), session


def summary_client(*responses):
    session = FakeSession(*responses)
    return SummaryClient(BASE_URL, timeout_seconds=4.0, session=session), session


def test_recognize_uploads_frame_as_multipart_image():
    client, session = recognition_client(make_response(200, {"personId": "p1", "confidence": 0.93}))

    result = client.recognize(FRAME)

    assert result.person_id == "p1"
    assert result.confidence == pytest.approx(0.93)
    assert result.matched
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://service.test/functions/v1/recognize"
    assert call["files"]["image"] == ("frame.jpg", FRAME.data, "image/jpeg")
    assert call["timeout"] == 4.0
    assert call["headers"] == {}


def test_recognize_sends_api_key_headers():
    client, session = recognition_client(make_response(200, {"personId": None}), api_key="anon-key")

    client.recognize(FRAME)

    headers = session.calls[0]["headers"]
    assert headers["apikey"] == "anon-key"
    assert headers["Authorization"] == "Bearer anon-key"


@pytest.mark.parametrize(
    "body",
    [
        {"personId": None, "message": "No face detected"},
        {"message": "No face detected"},
        {"personId": ""},
    ],
)
def test_recognize_without_person_is_no_match(body):
    client, _ = recognition_client(make_response(200, body))

    result = client.recognize(FRAME)

    assert result.person_id is None
    assert not result.matched


def test_recognize_keeps_service_message():
    client, _ = recognition_client(make_response(200, {"personId": None, "message": "No face detected"}))
    assert client.recognize(FRAME).message == "No face detected"


@pytest.mark.parametrize(
    "outcome",
    [
        make_response(500, {"error": "Recognition failed"}),
        make_response(200, text="<html>gateway</html>"),
        make_response(200, ["p1"]),
        make_response(200, {"personId": 42}),
        make_response(200, {"personId": "p1", "confidence": "high"}),
        requests.Timeout("read timed out"),
        requests.ConnectionError("refused"),
    ],
)
def test_recognize_failures_raise_recognition_unavailable(outcome):
    client, _ = recognition_client(outcome)

    with pytest.raises(RecognitionUnavailable):
        client.recognize(FRAME)


def test_fetch_summary_builds_profile():
    client, session = summary_client(
        make_response(
            200,
            {
                "name": "Sarah",
                "relationship": "Daughter",
                "photoUrl": None,
                "summary": "  Sarah is your daughter. She visits every Sunday.  ",
            },
        )
    )

    profile = client.fetch_summary("a1b2c3d4")

    assert profile.person_id == "a1b2c3d4"
    assert profile.name == "Sarah"
    assert profile.relationship == "Daughter"
    assert profile.summary == "Sarah is your daughter. She visits every Sunday."
    assert profile.photo_url is None
    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "http://service.test/functions/v1/summary/a1b2c3d4"


def test_fetch_summary_quotes_person_id():
    client, session = summary_client(
        make_response(200, {"name": "A", "relationship": "Friend", "summary": "s", "photoUrl": "http://x/p.jpg"})
    )

    profile = client.fetch_summary("odd/id")

    assert session.calls[0]["url"].endswith("/summary/odd%2Fid")
    assert profile.photo_url == "http://x/p.jpg"


def test_fetch_summary_unknown_person():
    client, _ = summary_client(make_response(404, {"error": "Person not found"}))

    with pytest.raises(SummaryUnavailable, match="Person not found"):
        client.fetch_summary("missing")


def test_fetch_summary_requires_person_id():
    client, session = summary_client()

    with pytest.raises(SummaryUnavailable):
        client.fetch_summary("")
    assert session.calls == []


@pytest.mark.parametrize(
    "outcome",
    [
        make_response(500, {"error": "Failed to generate summary"}),
        make_response(200, {"name": "Sarah", "relationship": "Daughter"}),
        make_response(200, text="not json"),
        requests.Timeout("slow"),
    ],
)
def test_fetch_summary_failures_raise_summary_unavailable(outcome):
    client, _ = summary_client(outcome)

    with pytest.raises(SummaryUnavailable):
        client.fetch_summary("p1")
