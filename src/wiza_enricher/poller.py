import json
import logging
import time
from typing import Any, Callable, Optional, Sequence

from wiza_enricher.client import RevealClient
from wiza_enricher.errors import (
    ApiRequestError,
    EnrichmentError,
    EnrichmentFailedError,
    EnrichmentTimeoutError,
    PollError,
    SubmissionError,
)
from wiza_enricher.schema import Job
from wiza_enricher.settings import PollingConfig

logger = logging.getLogger(__name__)


def backoff_delay(schedule: Sequence[float], step: int) -> float:
    # past the end of the schedule, keep using the last interval
    return schedule[min(step, len(schedule) - 1)]


def backoff_delays(schedule: Sequence[float], iterations: int) -> list[float]:
    return [backoff_delay(schedule, step) for step in range(iterations)]


def _dump(body: Any) -> str:
    try:
        return json.dumps(body)
    except (TypeError, ValueError):
        return repr(body)


def submit_reveal(client: RevealClient, payload: dict[str, Any]) -> Job:
    response = client.start_reveal(payload)
    data = response.get("data") if isinstance(response, dict) else None
    reveal_id = data.get("id") if isinstance(data, dict) else None
    if not reveal_id:
        raise SubmissionError(f"Failed to start enrichment: {_dump(response)}", raw=response)
    return Job(id=str(reveal_id), status=str(data.get("status") or "queued"))


def poll_reveal(
    client: RevealClient,
    payload: dict[str, Any],
    polling: Optional[PollingConfig] = None,
    *,
    item_index: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Job:
    """
    Submits one individual reveal and waits for it to reach a terminal state.
    - 404 while polling means the reveal is not visible yet: keep waiting
    - any other poll error aborts (no retry)
    - status=failed aborts with the remote error message
    """
    polling = polling or PollingConfig()
    job = submit_reveal(client, payload)
    logger.info(f"Submitted reveal id={job.id} timeout={polling.timeout_seconds:g}s")

    started = clock()
    step = 0

    while clock() - started < polling.timeout_seconds:
        sleep(backoff_delay(polling.schedule, step))
        step += 1

        try:
            response = client.get_reveal(job.id)
        except ApiRequestError as e:
            if e.status_code == 404:
                logger.warning(f"Reveal id={job.id} not visible yet (404); still processing")
                continue
            raise PollError(str(e), item_index=item_index) from e
        except EnrichmentError:
            raise
        except Exception as e:
            raise PollError(str(e) or type(e).__name__, item_index=item_index) from e

        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, dict):
            raise PollError(f"Invalid response format: {_dump(response)}", item_index=item_index)

        job.status = str(data.get("status") or job.status)

        if data.get("is_complete") is True:
            job.is_complete = True
            job.result = data
            logger.info(f"Reveal id={job.id} complete after {step} checks")
            return job

        if data.get("status") == "failed":
            job.error_message = data.get("error") or "Unknown error"
            raise EnrichmentFailedError(
                f"Enrichment failed: {job.error_message}",
                remote_error=job.error_message,
                item_index=item_index,
            )

    raise EnrichmentTimeoutError(polling.timeout_seconds, item_index=item_index)


def resolve_polling(base: PollingConfig, timeout_override: Optional[float]) -> PollingConfig:
    # a zero/missing override falls back to the configured default
    if not timeout_override:
        return base
    return base.model_copy(update={"timeout_seconds": float(timeout_override)})
