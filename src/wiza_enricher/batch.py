import logging
import time
from typing import Any, Callable, Optional, Sequence

from wiza_enricher.client import RevealClient
from wiza_enricher.errors import EnrichmentError, attach_item_index
from wiza_enricher.poller import poll_reveal, resolve_polling
from wiza_enricher.request_builder import build_reveal_request
from wiza_enricher.results import ItemOutcome, PairedItem
from wiza_enricher.schema import ItemParameters, Job
from wiza_enricher.settings import PollingConfig
from wiza_enricher.validate import validate_item_parameters

logger = logging.getLogger(__name__)

ProcessFn = Callable[..., Job]


def process_item(
    index: int,
    params: ItemParameters,
    client: RevealClient,
    polling: Optional[PollingConfig] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Job:
    params = validate_item_parameters(params)
    request = build_reveal_request(params)
    item_polling = resolve_polling(polling or PollingConfig(), params.additional_fields.timeout)
    return poll_reveal(
        client,
        request.to_payload(),
        item_polling,
        item_index=index,
        sleep=sleep,
        clock=clock,
    )


def run_batch(
    items: Sequence[dict[str, Any]],
    parameters_for: Callable[[int], ItemParameters],
    *,
    client: RevealClient,
    continue_on_fail: bool = False,
    polling: Optional[PollingConfig] = None,
    process: ProcessFn = process_item,
) -> list[ItemOutcome]:
    """
    Runs validate -> build -> poll for every item, strictly in order.
    - continue_on_fail: a failing item becomes a failed outcome and the batch goes on
    - otherwise the first failure is raised with its item index attached
    """
    outcomes: list[ItemOutcome] = []

    for i, item in enumerate(items):
        try:
            params = parameters_for(i)
            job = process(i, params, client, polling)
        except Exception as e:
            if continue_on_fail:
                if isinstance(e, EnrichmentError):
                    e.item_index = i
                logger.error(f"Item {i} failed; continuing: {type(e).__name__}: {e}")
                outcomes.append(
                    ItemOutcome(status="failed", data=dict(item), error=e, paired_item=i)
                )
                continue
            error = attach_item_index(e, i)
            if error is e:
                raise
            raise error from e

        outcomes.append(ItemOutcome(status="ok", data=job.result, paired_item=PairedItem(item=i)))

    ok = sum(1 for o in outcomes if o.status == "ok")
    logger.debug(f"Batch complete. ok={ok} failed={len(outcomes) - ok}")
    return outcomes
