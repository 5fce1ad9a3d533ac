# cricket_collector/forwarder/forwarder.py

import json
import logging
from dataclasses import dataclass

import requests

from cricket_collector.config import Settings
from cricket_collector.metrics.models import MetricsSnapshot

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    status_code: int | None = None
    body: str | None = None
    error: str | None = None

    @property
    def reason(self) -> str:
        if self.ok:
            return "created"
        if self.status_code is not None:
            return (
                f"metrics submission failed with status {self.status_code}: "
                f"{self.body or ''}"
            )
        return self.error or "unknown error"


class Forwarder:
    """
    Sends metrics snapshots to the ingest endpoint.

    Each call to submit() makes exactly one request; a failed snapshot is
    dropped and the next scheduled cycle sends a fresh one.
    """

    def __init__(self, settings: Settings, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.ingest_url = settings.ingest_url
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.api_key}",
        }

    def submit(self, snapshot: MetricsSnapshot) -> SubmissionResult:
        """
        POSTs one snapshot. Only HTTP 201 Created counts as success.
        """
        try:
            body = json.dumps(snapshot.to_payload())
        except (TypeError, ValueError) as e:
            return SubmissionResult(ok=False, error=f"failed to marshal metrics: {e}")

        try:
            response = requests.post(
                self.ingest_url,
                data=body,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            # Network error (server down, DNS, timeout...)
            return SubmissionResult(ok=False, error=f"failed to send metrics: {e}")

        if response.status_code == 201:
            return SubmissionResult(ok=True, status_code=response.status_code)

        return SubmissionResult(
            ok=False,
            status_code=response.status_code,
            body=response.text,
        )
