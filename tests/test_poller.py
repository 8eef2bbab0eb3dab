import pydantic
import pytest

from wiza_enricher.errors import (
    ApiRequestError,
    EnrichmentError,
    EnrichmentFailedError,
    EnrichmentTimeoutError,
    PollError,
    SubmissionError,
)
from wiza_enricher.poller import backoff_delays, poll_reveal, resolve_polling
from wiza_enricher.settings import DEFAULT_POLL_SCHEDULE, PollingConfig

PAYLOAD = {"individual_reveal": {"email": "test@example.com"}, "enrichment_level": "partial"}
STARTED = {"data": {"id": "reveal123", "status": "queued"}}
PROCESSING = {"data": {"id": "reveal123", "status": "processing", "is_complete": False}}


def test_backoff_sequence_within_schedule():
    for n in range(1, 7):
        assert backoff_delays(DEFAULT_POLL_SCHEDULE, n) == [0.5, 1, 1, 1.5, 2, 3][:n]


def test_backoff_sequence_reuses_last_interval():
    delays = backoff_delays(DEFAULT_POLL_SCHEDULE, 10)
    assert delays[:6] == [0.5, 1, 1, 1.5, 2, 3]
    assert delays[6:] == [3, 3, 3, 3]


def test_returns_completed_record_and_stops_polling(clock, scripted_client):
    done = {"data": {"id": "reveal123", "is_complete": True, "email": "found@example.com"}}
    client = scripted_client(start=[STARTED], polls=[PROCESSING, PROCESSING, done, PROCESSING])

    job = poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)

    assert job.is_complete
    assert job.result == done["data"]
    assert client.polled == ["reveal123"] * 3
    assert clock.sleeps == [0.5, 1, 1]
    assert client.submitted == [PAYLOAD]


def test_failed_status_raises_without_further_polls(clock, scripted_client):
    failed = {"data": {"id": "reveal123", "status": "failed", "error": "No match"}}
    client = scripted_client(start=[STARTED], polls=[PROCESSING, failed, PROCESSING])

    with pytest.raises(EnrichmentFailedError) as exc:
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock, item_index=3)

    assert str(exc.value) == "Enrichment failed: No match"
    assert exc.value.item_index == 3
    assert len(client.polled) == 2


def test_failed_status_without_message(clock, scripted_client):
    client = scripted_client(start=[STARTED], polls=[{"data": {"id": "reveal123", "status": "failed"}}])
    with pytest.raises(EnrichmentFailedError, match="Enrichment failed: Unknown error"):
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)


def test_times_out_when_never_terminal(clock, scripted_client):
    client = scripted_client(start=[STARTED])
    polling = PollingConfig(timeout_seconds=10)

    with pytest.raises(EnrichmentTimeoutError) as exc:
        poll_reveal(client, PAYLOAD, polling, sleep=clock.sleep, clock=clock)

    assert exc.value.timeout_seconds == 10
    assert str(exc.value) == "Enrichment timed out after 10 seconds"
    # 0.5+1+1+1.5+2+3 = 9, one more 3s wait crosses the window
    assert clock.sleeps == [0.5, 1, 1, 1.5, 2, 3, 3]
    assert clock.now >= 10


def test_not_found_is_treated_as_processing(clock, scripted_client):
    done = {"data": {"id": "reveal123", "is_complete": True}}
    client = scripted_client(
        start=[STARTED],
        polls=[ApiRequestError("not found", status_code=404), ApiRequestError("not found", status_code=404), done],
    )

    job = poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)

    assert job.is_complete
    # step index advances on 404s too
    assert clock.sleeps == [0.5, 1, 1]


def test_other_transport_errors_abort_as_poll_error(clock, scripted_client):
    boom = ApiRequestError("server error", status_code=500)
    client = scripted_client(start=[STARTED], polls=[boom, PROCESSING])

    with pytest.raises(PollError) as exc:
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock, item_index=1)

    assert exc.value.item_index == 1
    assert exc.value.__cause__ is boom
    assert len(client.polled) == 1


def test_unexpected_exception_is_wrapped(clock, scripted_client):
    client = scripted_client(start=[STARTED], polls=[KeyError("data")])
    with pytest.raises(PollError):
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)


def test_response_without_data_is_invalid(clock, scripted_client):
    client = scripted_client(start=[STARTED], polls=[{"status": {"code": 200}}])
    with pytest.raises(PollError, match="Invalid response format"):
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)


def test_submission_without_id(clock, scripted_client):
    client = scripted_client(start=[{"data": {}, "status": {"code": 400}}])

    with pytest.raises(SubmissionError) as exc:
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock)

    assert str(exc.value).startswith("Failed to start enrichment: ")
    assert exc.value.raw == {"data": {}, "status": {"code": 400}}
    assert client.polled == []
    assert clock.sleeps == []


def test_custom_schedule(clock, scripted_client):
    done = {"data": {"id": "reveal123", "is_complete": True}}
    client = scripted_client(start=[STARTED], polls=[PROCESSING, PROCESSING, done])
    polling = PollingConfig(schedule=(0.1, 0.2))

    poll_reveal(client, PAYLOAD, polling, sleep=clock.sleep, clock=clock)

    assert clock.sleeps == [0.1, 0.2, 0.2]


def test_resolve_polling_timeout_override():
    base = PollingConfig()
    assert resolve_polling(base, None) is base
    assert resolve_polling(base, 0) is base
    assert resolve_polling(base, 60).timeout_seconds == 60
    assert resolve_polling(base, 60).schedule == base.schedule


def test_polling_config_rejects_empty_schedule():
    with pytest.raises(pydantic.ValidationError):
        PollingConfig(schedule=())


def test_domain_error_from_status_check_is_reraised_unchanged(clock, scripted_client):
    err = EnrichmentFailedError("Enrichment failed: x", remote_error="x")
    client = scripted_client(start=[STARTED], polls=[err, PROCESSING])

    with pytest.raises(EnrichmentError) as exc:
        poll_reveal(client, PAYLOAD, sleep=clock.sleep, clock=clock, item_index=4)

    assert exc.value is err
    assert not isinstance(exc.value, PollError)
    assert len(client.polled) == 1
