"""
Analysis session state machine.

Tracks the lifecycle of the current analysis: idle -> processing -> ready or
failed, with reset back to idle. Starting a new run supersedes any run still
in flight; late results from a superseded run are discarded.
"""
import logging
import threading
from enum import Enum
from typing import Callable, Dict, Optional
from insightboard.core.errors import AnalysisError, ErrorCodes, get_error_response
from insightboard.core.schemas import AnalysisResult, SessionSnapshot

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class InvalidTransitionError(RuntimeError):
    pass


class AnalysisSession:
    """Holds the one current analysis and the state it is in."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._run_id = 0
        self._filename: Optional[str] = None
        self._result: Optional[AnalysisResult] = None
        self._error: Optional[Dict[str, str]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    @property
    def error(self) -> Optional[Dict[str, str]]:
        return self._error

    def begin(self, filename: str) -> int:
        """Start a run and return its token. Allowed from any state."""
        with self._lock:
            if self._state is SessionState.PROCESSING:
                logger.info(f"Superseding in-flight analysis of {self._filename}")
            self._run_id += 1
            self._state = SessionState.PROCESSING
            self._filename = filename
            self._result = None
            self._error = None
            return self._run_id

    def _is_current(self, token: int) -> bool:
        if token != self._run_id:
            logger.debug(f"Discarding result of superseded run {token}")
            return False
        if self._state is not SessionState.PROCESSING:
            raise InvalidTransitionError(f"Cannot finish a run while {self._state.value}")
        return True

    def complete(self, token: int, result: AnalysisResult) -> bool:
        """Move to ready. Returns False when the run was superseded."""
        with self._lock:
            if not self._is_current(token):
                return False
            self._state = SessionState.READY
            self._result = result
            return True

    def fail(self, token: int, error: Exception) -> bool:
        """Move to failed. Returns False when the run was superseded."""
        with self._lock:
            if not self._is_current(token):
                return False
            self._state = SessionState.FAILED
            if isinstance(error, AnalysisError):
                self._error = get_error_response(error.code, error.detail)
            else:
                self._error = get_error_response(ErrorCodes.UNKNOWN_ERROR)
            return True

    def reset(self) -> None:
        with self._lock:
            self._run_id += 1
            self._state = SessionState.IDLE
            self._filename = None
            self._result = None
            self._error = None

    def run(self, filename: str, analyze: Callable[[], AnalysisResult]) -> AnalysisResult:
        """
        Drive a full run: begin, call `analyze`, then complete or fail.
        Errors are recorded on the session and re-raised to the caller.
        """
        token = self.begin(filename)
        try:
            result = analyze()
        except BaseException as e:
            # Includes cancellation, so the run never stays processing
            self.fail(token, e)
            raise
        self.complete(token, result)
        return result

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                state=self._state.value,
                filename=self._filename,
                result=self._result,
                error=self._error,
            )
