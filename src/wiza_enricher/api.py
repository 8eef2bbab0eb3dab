from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from wiza_enricher.batch import run_batch
from wiza_enricher.client import get_reveal_client, verify_credentials
from wiza_enricher.errors import (
    EnrichmentError,
    EnrichmentTimeoutError,
    ValidationError,
)
from wiza_enricher.schema import NodeParameters
from wiza_enricher.settings import get_settings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Wiza Contact Enrichment",
    version="0.1.0",
    description="Email, phone and LinkedIn lookups through Wiza individual reveals.",
)


class EnrichRequest(BaseModel):
    parameters: NodeParameters = Field(default_factory=NodeParameters)
    items: list[dict[str, Any]] = Field(..., min_length=1, max_length=500)
    continue_on_fail: bool = Field(
        default=False,
        description="If true, failed items are returned with their error instead of aborting the batch.",
    )


class EnrichResponse(BaseModel):
    status: str = "ok"
    items: list[dict[str, Any]]


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/enrich", response_model=EnrichResponse)
def api_enrich(req: EnrichRequest) -> EnrichResponse:
    s = get_settings()
    try:
        client = get_reveal_client(s)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    try:
        outcomes = run_batch(
            req.items,
            lambda i: req.parameters.for_item(req.items[i]),
            client=client,
            continue_on_fail=req.continue_on_fail,
            polling=s.polling(),
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"error": str(e), "item_index": e.item_index}) from e
    except EnrichmentTimeoutError as e:
        raise HTTPException(status_code=504, detail={"error": str(e), "item_index": e.item_index}) from e
    except EnrichmentError as e:
        logger.error(f"Enrichment failed for item {e.item_index}: {e}")
        raise HTTPException(status_code=502, detail={"error": str(e), "item_index": e.item_index}) from e

    return EnrichResponse(items=[o.to_dict() for o in outcomes])


@app.get("/api/credentials/test")
def api_test_credentials() -> dict:
    try:
        client = get_reveal_client()
    except ValueError as e:
        return {"status": "error", "message": str(e)}
    ok, message = verify_credentials(client)
    return {"status": "ok" if ok else "error", "message": message}
