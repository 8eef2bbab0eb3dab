"""Wiza API transport.

WizaClient talks to the real service with a bearer token; MockRevealClient
is a deterministic stand-in used when ENRICHMENT_PROVIDER=mock and in tests.
"""

import hashlib
import json
import logging
from typing import Any, Optional, Protocol

import requests

from wiza_enricher.errors import ApiRequestError
from wiza_enricher.settings import Settings, get_settings

logger = logging.getLogger(__name__)

REVEALS_PATH = "/api/individual_reveals"
CREDITS_PATH = "/api/meta/credits"


class RevealClient(Protocol):
    def start_reveal(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def get_reveal(self, reveal_id: str) -> dict[str, Any]: ...

    def get_credits(self) -> dict[str, Any]: ...


class WizaClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://wiza.co",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("Wiza API key is required (set WIZA_API_KEY).")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def _request(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ApiRequestError(f"Request to {url} timed out") from e
        except requests.exceptions.RequestException as e:
            raise ApiRequestError(f"Connection error calling {url}: {e!s}") from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.status_code >= 400:
            raise ApiRequestError(
                f"{method} {path} failed with status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        if not isinstance(body, dict):
            raise ApiRequestError(
                f"{method} {path} returned a non-object body",
                status_code=response.status_code,
                body=body,
            )
        return body

    def start_reveal(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", REVEALS_PATH, payload)

    def get_reveal(self, reveal_id: str) -> dict[str, Any]:
        return self._request("GET", f"{REVEALS_PATH}/{reveal_id}")

    def get_credits(self) -> dict[str, Any]:
        return self._request("GET", CREDITS_PATH)


class MockRevealClient:
    """
    Offline provider:
    - reveal id derived from the payload (same payload -> same id)
    - a reveal completes after `complete_after` status checks
    - `fail_with` makes the reveal report status=failed instead
    - `not_found_polls` answers 404 for the first N checks
    """

    def __init__(
        self,
        *,
        complete_after: int = 1,
        fail_with: Optional[str] = None,
        not_found_polls: int = 0,
    ):
        self.complete_after = complete_after
        self.fail_with = fail_with
        self.not_found_polls = not_found_polls
        self.submitted: dict[str, dict[str, Any]] = {}
        self.polls: dict[str, int] = {}

    def start_reveal(self, payload: dict[str, Any]) -> dict[str, Any]:
        key = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()[:12]
        reveal_id = f"mock-{key}"
        self.submitted[reveal_id] = payload
        self.polls[reveal_id] = 0
        return {"status": {"code": 200, "message": "queued"}, "data": {"id": reveal_id, "status": "queued"}}

    def get_reveal(self, reveal_id: str) -> dict[str, Any]:
        if reveal_id not in self.submitted:
            raise ApiRequestError(f"Reveal {reveal_id} not found", status_code=404)

        self.polls[reveal_id] += 1
        count = self.polls[reveal_id]
        if count <= self.not_found_polls:
            raise ApiRequestError(f"Reveal {reveal_id} not found", status_code=404)

        if count - self.not_found_polls < self.complete_after:
            return {"data": {"id": reveal_id, "status": "processing", "is_complete": False}}

        if self.fail_with is not None:
            return {"data": {"id": reveal_id, "status": "failed", "is_complete": False, "error": self.fail_with}}

        person = self.submitted[reveal_id].get("individual_reveal", {})
        return {
            "data": {
                "id": reveal_id,
                "status": "finished",
                "is_complete": True,
                "name": person.get("full_name", "Jane Doe"),
                "company": person.get("company", "example.com"),
                "email": person.get("email") or "jane.doe@example.com",
                "email_status": "valid",
                "linkedin_profile_url": person.get("profile_url") or "https://linkedin.com/in/janedoe",
            }
        }

    def get_credits(self) -> dict[str, Any]:
        return {"credits": {"email_credits": 100, "phone_credits": 10, "api_credits": 100}}


def get_reveal_client(settings: Optional[Settings] = None) -> RevealClient:
    s = settings or get_settings()
    if s.enrichment_provider == "mock":
        return MockRevealClient()
    if s.enrichment_provider == "wiza":
        return WizaClient(s.wiza_api_key or "", base_url=s.wiza_base_url, timeout=s.http_timeout_seconds)
    raise ValueError(f"Unsupported ENRICHMENT_PROVIDER: {s.enrichment_provider}")


def verify_credentials(client: RevealClient) -> tuple[bool, str]:
    """Credential test probe against the credits endpoint."""
    try:
        body = client.get_credits()
    except ApiRequestError as e:
        if e.status_code == 401:
            return False, "Invalid API key"
        logger.error(f"Error verifying Wiza credentials: {e!s}")
        return False, f"Connection error: {e!s}"

    credits = body.get("credits", {}) if isinstance(body, dict) else {}
    remaining = credits.get("api_credits", "N/A")
    return True, f"Connected ({remaining} API credits remaining)"
