"""
Unit tests for the analysis session state machine.
"""
import asyncio
import pytest
from insightboard.core.errors import EmptyFileError, ErrorCodes
from insightboard.services.pipeline import analyze_sample
from insightboard.services.session import AnalysisSession, InvalidTransitionError, SessionState


@pytest.fixture
def session():
    return AnalysisSession()


@pytest.fixture
def result():
    return analyze_sample("survey_results")


@pytest.mark.unit
def test_starts_idle(session):
    snapshot = session.snapshot()
    assert snapshot.state == "idle"
    assert snapshot.result is None
    assert snapshot.error is None


@pytest.mark.unit
def test_successful_run(session, result):
    token = session.begin("survey.csv")
    assert session.state is SessionState.PROCESSING
    assert session.complete(token, result) is True
    assert session.state is SessionState.READY
    assert session.result is result
    assert session.snapshot().filename == "survey.csv"


@pytest.mark.unit
def test_failed_run_keeps_structured_error(session):
    token = session.begin("empty.csv")
    assert session.fail(token, EmptyFileError()) is True
    assert session.state is SessionState.FAILED
    assert session.result is None
    assert session.error["code"] == ErrorCodes.FILE_EMPTY
    assert session.error["suggestion"]


@pytest.mark.unit
def test_unexpected_failure_is_generic(session):
    token = session.begin("data.csv")
    session.fail(token, KeyError("boom"))
    assert session.error["code"] == ErrorCodes.UNKNOWN_ERROR


@pytest.mark.unit
def test_new_run_supersedes_in_flight_run(session, result):
    first = session.begin("first.csv")
    second = session.begin("second.csv")
    # Late result of the first run is discarded
    assert session.complete(first, result) is False
    assert session.state is SessionState.PROCESSING
    assert session.fail(first, EmptyFileError()) is False
    assert session.complete(second, result) is True
    assert session.snapshot().filename == "second.csv"


@pytest.mark.unit
def test_reset_discards_result_and_in_flight_run(session, result):
    token = session.begin("a.csv")
    session.complete(token, result)
    session.reset()
    assert session.state is SessionState.IDLE
    assert session.result is None

    token = session.begin("b.csv")
    session.reset()
    assert session.complete(token, result) is False
    assert session.state is SessionState.IDLE


@pytest.mark.unit
def test_finishing_twice_is_invalid(session, result):
    token = session.begin("a.csv")
    session.complete(token, result)
    with pytest.raises(InvalidTransitionError):
        session.complete(token, result)


@pytest.mark.unit
def test_begin_from_ready_clears_previous_result(session, result):
    token = session.begin("a.csv")
    session.complete(token, result)
    session.begin("b.csv")
    assert session.result is None
    assert session.state is SessionState.PROCESSING


@pytest.mark.unit
def test_run_records_success(session):
    outcome = session.run("sales", lambda: analyze_sample("sales_analytics"))
    assert session.state is SessionState.READY
    assert session.result is outcome


@pytest.mark.unit
def test_run_records_failure_and_reraises(session):
    def analyze():
        raise EmptyFileError()

    with pytest.raises(EmptyFileError):
        session.run("empty.csv", analyze)
    assert session.state is SessionState.FAILED
    assert session.error["code"] == ErrorCodes.FILE_EMPTY


@pytest.mark.unit
def test_cancelled_run_does_not_stay_processing(session):
    def analyze():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        session.run("slow.csv", analyze)
    assert session.state is SessionState.FAILED
    assert session.error["code"] == ErrorCodes.UNKNOWN_ERROR
