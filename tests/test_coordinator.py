import pytest

from conftest import ScriptedRecognitionClient, ScriptedSummaryClient
from memory_helper.coordinator import (
    SUMMARY_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    RecognitionCoordinator,
)
from memory_helper.exceptions import RecognitionUnavailable, SummaryUnavailable
from memory_helper.types import Frame, Phase, RecognitionResult

FRAME = Frame(data=b"\xff\xd8fake-jpeg", captured_at=0.0)
NO_FACE = RecognitionResult(person_id=None, message="No face detected")


def match(person_id):
    return RecognitionResult(person_id=person_id, confidence=0.9)


@pytest.fixture
def recognition():
    return ScriptedRecognitionClient()


@pytest.fixture
def summary():
    return ScriptedSummaryClient()


@pytest.fixture
def coordinator(recognition, summary, dispatch, clock):
    coord = RecognitionCoordinator(
        recognition,
        summary,
        cooldown_seconds=5.0,
        dispatch=dispatch,
        clock=clock,
    )
    coord.start_session()
    return coord


def show_person(coordinator, recognition, dispatch, person_id="p1"):
    recognition.queue(match(person_id))
    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.SHOWING


def test_start_session_enters_scanning(coordinator):
    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.last_shown_person_id is None
    assert state.profile is None
    assert state.error_message is None
    assert not state.cooldown_active


def test_frames_are_ignored_before_the_session_starts(recognition, summary, dispatch, clock):
    coord = RecognitionCoordinator(recognition, summary, dispatch=dispatch, clock=clock)
    assert coord.submit_frame(FRAME) is False
    assert dispatch.pending == 0
    assert coord.snapshot().frames_dropped == 0


def test_no_match_returns_to_scanning_without_summary(coordinator, recognition, summary, dispatch):
    recognition.queue(NO_FACE)

    assert coordinator.submit_frame(FRAME)
    assert coordinator.phase is Phase.RECOGNIZING
    dispatch.run_all()

    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.profile is None
    assert state.error_message is None
    assert summary.calls == []


def test_new_person_is_loaded_and_shown(coordinator, recognition, summary, dispatch):
    recognition.queue(match("p1"))

    assert coordinator.submit_frame(FRAME)
    assert coordinator.submit_frame(FRAME) is False

    dispatch.run_next()
    assert coordinator.phase is Phase.LOADING
    assert coordinator.submit_frame(FRAME) is False

    dispatch.run_all()
    state = coordinator.snapshot()
    assert state.phase is Phase.SHOWING
    assert state.profile.person_id == "p1"
    assert state.profile.name == "Name p1"
    assert state.last_shown_person_id == "p1"
    assert state.frames_dropped == 2
    assert len(recognition.calls) == 1
    assert summary.calls == ["p1"]


def test_frames_are_dropped_while_showing(coordinator, recognition, dispatch):
    show_person(coordinator, recognition, dispatch)

    for _ in range(3):
        assert coordinator.submit_frame(FRAME) is False

    assert dispatch.pending == 0
    assert len(recognition.calls) == 1
    assert coordinator.snapshot().frames_dropped == 3


def test_dismiss_clears_display_and_starts_cooldown(coordinator, recognition, dispatch):
    show_person(coordinator, recognition, dispatch)

    coordinator.dismiss()

    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.profile is None
    assert state.cooldown_active
    assert state.last_shown_person_id == "p1"


def test_dismiss_is_ignored_while_scanning(coordinator):
    coordinator.dismiss()
    assert not coordinator.snapshot().cooldown_active


def test_same_person_is_not_shown_again_until_cooldown_elapses(
    coordinator, recognition, summary, dispatch, clock
):
    show_person(coordinator, recognition, dispatch)
    coordinator.dismiss()

    clock.advance(1.0)
    assert coordinator.submit_frame(FRAME) is False
    assert len(recognition.calls) == 1

    clock.advance(4.5)
    state = coordinator.snapshot()
    assert not state.cooldown_active
    assert state.last_shown_person_id is None

    recognition.queue(match("p1"))
    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.SHOWING
    assert summary.calls == ["p1", "p1"]


def test_tick_notifies_when_cooldown_expires(coordinator, recognition, dispatch, clock):
    show_person(coordinator, recognition, dispatch)
    coordinator.dismiss()
    seen = []
    coordinator.add_listener(seen.append)

    coordinator.tick()
    assert seen == []

    clock.advance(5.0)
    coordinator.tick()
    assert len(seen) == 1
    assert not seen[0].cooldown_active


def test_recognition_failure_returns_to_scanning_silently(coordinator, recognition, summary, dispatch):
    recognition.queue(RecognitionUnavailable("connection refused"))

    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()

    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.error_message is None
    assert summary.calls == []


def test_unexpected_recognition_error_does_not_wedge_the_session(coordinator, recognition, dispatch):
    recognition.queue(RuntimeError("boom"), NO_FACE)

    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.SCANNING

    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.SCANNING


def test_summary_failure_shows_error_and_suppresses_same_person(coordinator, recognition, summary, dispatch):
    summary.failures["p2"] = SummaryUnavailable("Person not found: p2")
    recognition.queue(match("p2"))

    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()

    state = coordinator.snapshot()
    assert state.phase is Phase.ERROR
    assert state.error_message == SUMMARY_ERROR_MESSAGE
    assert state.profile is None
    assert state.last_shown_person_id == "p2"

    # the same face keeps being seen but does not refetch
    recognition.queue(match("p2"))
    assert coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.ERROR
    assert summary.calls == ["p2"]


def test_new_person_replaces_the_error(coordinator, recognition, summary, dispatch):
    summary.failures["p2"] = SummaryUnavailable("down")
    recognition.queue(match("p2"))
    coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.ERROR

    recognition.queue(match("p3"))
    assert coordinator.submit_frame(FRAME)
    dispatch.run_next()
    state = coordinator.snapshot()
    assert state.phase is Phase.LOADING
    assert state.error_message is None

    dispatch.run_all()
    assert coordinator.snapshot().profile.person_id == "p3"


def test_unexpected_summary_error_uses_generic_message(coordinator, recognition, summary, dispatch):
    summary.failures["p4"] = KeyError("name")
    recognition.queue(match("p4"))

    coordinator.submit_frame(FRAME)
    dispatch.run_all()

    assert coordinator.snapshot().error_message == UNEXPECTED_ERROR_MESSAGE


def test_dismissing_an_error_returns_to_scanning(coordinator, recognition, summary, dispatch, clock):
    summary.failures["p2"] = SummaryUnavailable("down")
    recognition.queue(match("p2"))
    coordinator.submit_frame(FRAME)
    dispatch.run_all()

    coordinator.dismiss()
    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.error_message is None
    assert state.cooldown_active

    clock.advance(5.0)
    assert coordinator.snapshot().last_shown_person_id is None


def test_dismiss_during_loading_is_ignored(coordinator, recognition, dispatch):
    recognition.queue(match("p1"))
    coordinator.submit_frame(FRAME)
    dispatch.run_next()
    assert coordinator.phase is Phase.LOADING

    coordinator.dismiss()
    assert coordinator.phase is Phase.LOADING
    assert not coordinator.snapshot().cooldown_active


def test_stop_session_resets_state_and_is_idempotent(coordinator, recognition, dispatch):
    show_person(coordinator, recognition, dispatch)
    seen = []
    coordinator.add_listener(seen.append)

    coordinator.stop_session()
    coordinator.stop_session()

    state = coordinator.snapshot()
    assert state.phase is Phase.IDLE
    assert state.profile is None
    assert state.last_shown_person_id is None
    assert not state.cooldown_active
    assert len(seen) == 1


def test_results_from_a_stopped_session_are_discarded(coordinator, recognition, summary, dispatch):
    recognition.queue(match("p1"))
    assert coordinator.submit_frame(FRAME)

    coordinator.stop_session()
    coordinator.start_session()
    dispatch.run_all()

    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.last_shown_person_id is None
    assert summary.calls == []


def test_summary_from_a_stopped_session_is_discarded(coordinator, recognition, summary, dispatch):
    recognition.queue(match("p1"))
    coordinator.submit_frame(FRAME)
    dispatch.run_next()
    assert coordinator.phase is Phase.LOADING

    coordinator.stop_session()
    dispatch.run_all()

    assert coordinator.phase is Phase.IDLE
    assert coordinator.snapshot().profile is None
    assert summary.calls == ["p1"]


def test_listeners_see_each_transition(coordinator, recognition, dispatch):
    phases = []
    coordinator.add_listener(lambda state: phases.append(state.phase))

    recognition.queue(match("p1"))
    coordinator.submit_frame(FRAME)
    dispatch.run_all()

    assert phases == [Phase.RECOGNIZING, Phase.LOADING, Phase.SHOWING]


def test_failing_listener_does_not_break_the_coordinator(coordinator, recognition, dispatch):
    def broken(_state):
        raise RuntimeError("listener bug")

    coordinator.add_listener(broken)
    show_person(coordinator, recognition, dispatch)


def test_dismissing_an_error_while_recognizing_clears_it_and_settles_to_scanning(
    coordinator, recognition, summary, dispatch
):
    summary.failures["p2"] = SummaryUnavailable("down")
    recognition.queue(match("p2"))
    coordinator.submit_frame(FRAME)
    dispatch.run_all()
    assert coordinator.phase is Phase.ERROR

    recognition.queue(match("p3"))
    assert coordinator.submit_frame(FRAME)
    assert coordinator.phase is Phase.RECOGNIZING

    coordinator.dismiss()
    state = coordinator.snapshot()
    assert state.phase is Phase.RECOGNIZING
    assert state.error_message is None
    assert state.cooldown_active

    dispatch.run_all()
    state = coordinator.snapshot()
    assert state.phase is Phase.SCANNING
    assert state.profile is None
    assert summary.calls == ["p2"]
