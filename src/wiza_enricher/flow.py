from typing import Any, Optional

from prefect import flow, task, get_run_logger
from prefect.cache_policies import NONE as NO_CACHE

from wiza_enricher.batch import process_item, run_batch
from wiza_enricher.client import RevealClient, get_reveal_client
from wiza_enricher.results import ItemOutcome
from wiza_enricher.schema import ItemParameters, Job, NodeParameters
from wiza_enricher.settings import PollingConfig, get_settings


# IMPORTANT: Prefect retries stay off; the poll loop is the only retry mechanism
@task(retries=0, cache_policy=NO_CACHE)
def t_process_item(
    index: int,
    params: ItemParameters,
    client: RevealClient,
    polling: Optional[PollingConfig] = None,
) -> Job:
    logger = get_run_logger()
    logger.info(f"Enriching item {index}. operation={params.operation} input_type={params.input_type}")
    job = process_item(index, params, client, polling)
    logger.info(f"Item {index} complete. reveal_id={job.id}")
    return job


@flow(name="wiza-enrichment-batch", retries=0)
def enrichment_batch_flow(
    items: list[dict[str, Any]],
    node_parameters: NodeParameters,
    continue_on_fail: bool = False,
) -> list[ItemOutcome]:
    logger = get_run_logger()
    logger.info(f"Starting enrichment batch. count={len(items)} continue_on_fail={continue_on_fail}")

    s = get_settings()
    client = get_reveal_client(s)

    results = run_batch(
        items,
        lambda i: node_parameters.for_item(items[i]),
        client=client,
        continue_on_fail=continue_on_fail,
        polling=s.polling(),
        process=t_process_item,
    )

    ok = sum(1 for r in results if r.status == "ok")
    logger.info(f"Batch complete. ok={ok} failed={len(results) - ok}")
    return results
