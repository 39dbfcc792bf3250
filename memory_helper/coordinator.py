from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

from .api_client import RecognitionClient, SummaryClient
from .config import COOLDOWN_SECONDS
from .exceptions import RecognitionUnavailable, SummaryUnavailable
from .logger import setup_logger
from .types import CoordinatorState, Frame, Phase, PersonProfile, RecognitionResult

Job = Callable[[], None]
Dispatch = Callable[[Job], None]
StateListener = Callable[[CoordinatorState], None]

SUMMARY_ERROR_MESSAGE = "Could not load information. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


def thread_dispatch(job: Job) -> None:
    threading.Thread(target=job, name="recognition-request", daemon=True).start()


class RecognitionCoordinator:
    """Sequences sampling, recognition, summary lookup, dismissal and cooldown.

    At most one recognition-or-summary request is in flight; frames that
    arrive meanwhile, while a profile is showing, or during the cooldown
    after a dismissal are dropped, never buffered. Request results carry
    the session generation they were issued under and are ignored once the
    session has been stopped or restarted.

    All state changes happen under ``self.lock``. Network calls run through
    ``dispatch`` and listener callbacks run outside the lock.
    """

    def __init__(
        self,
        recognition_client: RecognitionClient,
        summary_client: SummaryClient,
        cooldown_seconds: float = COOLDOWN_SECONDS,
        dispatch: Optional[Dispatch] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.recognition_client = recognition_client
        self.summary_client = summary_client
        self.cooldown_seconds = max(0.0, float(cooldown_seconds))
        self.dispatch = dispatch or thread_dispatch
        self.clock = clock
        self.logger = setup_logger(self.__class__.__name__)
        self.lock = threading.RLock()

        self._listeners: List[StateListener] = []
        self._phase = Phase.IDLE
        self._generation = 0
        self._last_shown_person_id: Optional[str] = None
        self._cooldown_active = False
        self._cooldown_until = 0.0
        self._error_message: Optional[str] = None
        self._profile: Optional[PersonProfile] = None
        self._frames_dropped = 0

    @property
    def phase(self) -> Phase:
        with self.lock:
            return self._phase

    def add_listener(self, listener: StateListener) -> None:
        with self.lock:
            self._listeners.append(listener)

    def snapshot(self) -> CoordinatorState:
        with self.lock:
            self._expire_cooldown()
            return self._snapshot()

    def tick(self) -> None:
        """Apply cooldown expiry and tell listeners if it changed anything."""
        with self.lock:
            expired = self._expire_cooldown()
            state = self._snapshot()
        if expired:
            self._notify(state)

    def start_session(self) -> None:
        with self.lock:
            if self._phase is not Phase.IDLE:
                return
            self._generation += 1
            self._clear_transient()
            self._phase = Phase.SCANNING
            state = self._snapshot()
        self.logger.info("Recognition session %s started", state.generation)
        self._notify(state)

    def stop_session(self) -> None:
        with self.lock:
            if self._phase is Phase.IDLE:
                return
            self._generation += 1
            self._clear_transient()
            self._phase = Phase.IDLE
            state = self._snapshot()
        self.logger.info("Recognition session stopped")
        self._notify(state)

    def submit_frame(self, frame: Frame) -> bool:
        """Offer a sampled frame. Returns False when the frame was dropped."""
        with self.lock:
            self._expire_cooldown()
            if self._phase is Phase.IDLE:
                return False
            if self._phase not in (Phase.SCANNING, Phase.ERROR) or self._cooldown_active:
                self._frames_dropped += 1
                self.logger.debug(
                    "Frame dropped (phase=%s, cooldown=%s)", self._phase.value, self._cooldown_active
                )
                return False
            self._phase = Phase.RECOGNIZING
            generation = self._generation
            state = self._snapshot()

        self._notify(state)
        self.dispatch(lambda: self._run_recognition(generation, frame))
        return True

    def dismiss(self) -> None:
        with self.lock:
            self._expire_cooldown()
            showing_error = self._error_message is not None
            if self._phase in (Phase.SHOWING, Phase.ERROR):
                self._phase = Phase.SCANNING
            elif not (self._phase is Phase.RECOGNIZING and showing_error):
                self.logger.debug("Dismiss ignored in phase %s", self._phase.value)
                return
            self._profile = None
            self._error_message = None
            self._cooldown_active = True
            self._cooldown_until = self.clock() + self.cooldown_seconds
            state = self._snapshot()
        self.logger.info("Dismissed, cooldown for %.1fs", self.cooldown_seconds)
        self._notify(state)

    def _run_recognition(self, generation: int, frame: Frame) -> None:
        try:
            result = self.recognition_client.recognize(frame)
        except RecognitionUnavailable as exc:
            self.logger.warning("Recognition unavailable: %s", exc)
            self._settle_recognition(generation, None)
            return
        except Exception:
            self.logger.exception("Recognition client failed unexpectedly")
            self._settle_recognition(generation, None)
            return
        self._settle_recognition(generation, result)

    def _settle_recognition(self, generation: int, result: Optional[RecognitionResult]) -> None:
        with self.lock:
            if generation != self._generation or self._phase is not Phase.RECOGNIZING:
                self.logger.debug("Stale recognition result ignored")
                return
            self._expire_cooldown()
            person_id = result.person_id if result is not None and result.matched else None
            if person_id is None or person_id == self._last_shown_person_id or self._cooldown_active:
                self._phase = Phase.ERROR if self._error_message else Phase.SCANNING
                person_id = None
                state = self._snapshot()
            else:
                self._last_shown_person_id = person_id
                self._error_message = None
                self._phase = Phase.LOADING
                state = self._snapshot()

        self._notify(state)
        if person_id is None:
            return
        self.logger.info("Recognised person %s, loading summary", person_id)
        self.dispatch(lambda: self._run_summary(generation, person_id))

    def _run_summary(self, generation: int, person_id: str) -> None:
        try:
            profile = self.summary_client.fetch_summary(person_id)
        except SummaryUnavailable as exc:
            self.logger.warning("Summary unavailable for %s: %s", person_id, exc)
            self._settle_summary(generation, None, SUMMARY_ERROR_MESSAGE)
            return
        except Exception:
            self.logger.exception("Summary client failed unexpectedly")
            self._settle_summary(generation, None, UNEXPECTED_ERROR_MESSAGE)
            return
        self._settle_summary(generation, profile, None)

    def _settle_summary(
        self,
        generation: int,
        profile: Optional[PersonProfile],
        error_message: Optional[str],
    ) -> None:
        with self.lock:
            if generation != self._generation or self._phase is not Phase.LOADING:
                self.logger.debug("Stale summary result ignored")
                return
            if profile is not None:
                self._profile = profile
                self._error_message = None
                self._phase = Phase.SHOWING
            else:
                # last_shown_person_id stays set so the same face does not retrigger.
                self._profile = None
                self._error_message = error_message
                self._phase = Phase.ERROR
            state = self._snapshot()
        self._notify(state)

    def _expire_cooldown(self) -> bool:
        if not self._cooldown_active or self.clock() < self._cooldown_until:
            return False
        self._cooldown_active = False
        self._last_shown_person_id = None
        self.logger.debug("Cooldown expired")
        return True

    def _clear_transient(self) -> None:
        self._last_shown_person_id = None
        self._cooldown_active = False
        self._cooldown_until = 0.0
        self._error_message = None
        self._profile = None
        self._frames_dropped = 0

    def _snapshot(self) -> CoordinatorState:
        return CoordinatorState(
            phase=self._phase,
            last_shown_person_id=self._last_shown_person_id,
            cooldown_active=self._cooldown_active,
            error_message=self._error_message,
            profile=self._profile,
            frames_dropped=self._frames_dropped,
            generation=self._generation,
        )

    def _notify(self, state: CoordinatorState) -> None:
        with self.lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                self.logger.exception("State listener failed")
