"""
HTTP Ledger Client
==================

Talks to a remote ledger / verification service over HTTP.

Endpoints:
    POST {url}/proofs/verify   submit a proof, returns the verdict
    GET  {url}/proofs/{hash}   look up an earlier verdict
    GET  {url}/health

Version: 0.1.0
"""

from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ghosthire.config import LedgerMode, settings
from ghosthire.ledger.client import LedgerClient, LedgerReceipt, LedgerResponseError
from ghosthire.logging import get_logger
from ghosthire.zk.exceptions import VerificationBackendUnavailable
from ghosthire.zk.models import Groth16Proof


logger = get_logger(__name__)


class HttpLedgerClient(LedgerClient):
    """Ledger client backed by a JSON HTTP API."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP ledger client.

        Args:
            url: Ledger service base URL (default from settings)
            api_key: Bearer token (default from settings)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self._url = (url or settings.ledger.url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.ledger.timeout_seconds
        key = api_key if api_key is not None else settings.ledger.api_key.get_secret_value()

        headers = {"Authorization": f"Bearer {key}"} if key else {}
        self._client = httpx.AsyncClient(
            base_url=self._url,
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
            transport=transport,
        )

        logger.debug("http_ledger_initialized", url=self._url)

    @property
    def mode(self) -> LedgerMode:
        return LedgerMode.HTTP

    async def connect(self) -> None:
        """Connections are opened lazily by httpx."""
        logger.info("http_ledger_connected", url=self._url)

    async def disconnect(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
        logger.info("http_ledger_disconnected")

    async def health_check(self) -> dict[str, Any]:
        """Check ledger service health."""
        try:
            response = await self._client.get("/health")
            healthy = response.status_code == 200
        except httpx.HTTPError as e:
            return {"status": "unhealthy", "mode": self.mode.value, "error": str(e)}

        return {
            "status": "healthy" if healthy else "unhealthy",
            "mode": self.mode.value,
            "url": self._url,
        }

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(settings.ledger.max_retries),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "ledger_retry",
            attempt=retry_state.attempt_number,
        ),
    )
    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        return await self._client.post(path, json=payload)

    def _parse_receipt(self, data: Any, proof_hash: str) -> LedgerReceipt:
        if not isinstance(data, dict) or not isinstance(data.get("valid"), bool):
            raise LedgerResponseError("Ledger response is missing a boolean 'valid'")
        try:
            return LedgerReceipt(
                valid=data["valid"],
                proof_hash=data.get("proofHash", proof_hash),
                transaction_hash=data.get("transactionHash"),
                block_number=data.get("blockNumber"),
                reason=data.get("reason"),
            )
        except ValueError as e:
            raise LedgerResponseError(f"Malformed ledger response: {e}") from e

    async def submit_proof(
        self,
        proof: Groth16Proof,
        public_signals: list[str],
        proof_hash: str,
    ) -> LedgerReceipt:
        """Submit a proof to the ledger service."""
        payload = {
            "networkId": settings.ledger.network_id,
            "proof": proof.model_dump(),
            "calldata": [str(x) for x in proof.to_calldata()],
            "publicSignals": public_signals,
            "proofHash": proof_hash,
        }

        try:
            response = await self._post("/proofs/verify", payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise VerificationBackendUnavailable(f"Ledger request failed: {e}") from e
        except ValueError as e:
            raise LedgerResponseError(f"Ledger returned non-JSON body: {e}") from e

        receipt = self._parse_receipt(data, proof_hash)

        logger.info(
            "ledger_proof_submitted",
            proof_hash=proof_hash,
            valid=receipt.valid,
            tx_hash=receipt.transaction_hash,
        )

        return receipt

    async def get_receipt(self, proof_hash: str) -> LedgerReceipt | None:
        """Look up an earlier verdict."""
        try:
            response = await self._client.get(f"/proofs/{proof_hash}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise VerificationBackendUnavailable(f"Ledger request failed: {e}") from e
        except ValueError as e:
            raise LedgerResponseError(f"Ledger returned non-JSON body: {e}") from e

        return self._parse_receipt(data, proof_hash)
