"""
Ledger Client Interface
=======================

Abstract base class and models for the external ledger / verification
service that checks eligibility proofs.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from ghosthire.config import LedgerMode, settings
from ghosthire.logging import get_logger
from ghosthire.zk.exceptions import VerificationBackendUnavailable
from ghosthire.zk.models import Groth16Proof

logger = get_logger(__name__)


class LedgerResponseError(VerificationBackendUnavailable):
    """The ledger answered, but not with something we can interpret."""


class LedgerReceipt(BaseModel):
    """Ledger verdict for a submitted proof."""

    valid: bool
    proof_hash: str = Field(..., description="Hash of the submitted proof")
    transaction_hash: str | None = Field(default=None, description="Ledger transaction hash")
    block_number: int | None = Field(default=None, description="Block number")
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    reason: str | None = None


class LedgerClient(ABC):
    """
    Abstract base class for ledger clients.

    Implements the Strategy pattern for different ledger modes.
    """

    @property
    @abstractmethod
    def mode(self) -> LedgerMode:
        """Get the ledger mode."""
        ...

    @property
    def is_cryptographic(self) -> bool:
        """Whether an accepted receipt means the proof passed a pairing check."""
        return True

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the ledger."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the ledger."""
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check ledger health."""
        ...

    @abstractmethod
    async def submit_proof(
        self,
        proof: Groth16Proof,
        public_signals: list[str],
        proof_hash: str,
    ) -> LedgerReceipt:
        """
        Submit a proof for on-ledger verification.

        Args:
            proof: Typed proof payload
            public_signals: The four public signals
            proof_hash: Hash binding proof and signals

        Returns:
            LedgerReceipt with the verdict and transaction details

        Raises:
            VerificationBackendUnavailable: If no verdict could be obtained
        """
        ...

    @abstractmethod
    async def get_receipt(self, proof_hash: str) -> LedgerReceipt | None:
        """
        Look up an earlier verdict.

        Args:
            proof_hash: Hash of the submitted proof

        Returns:
            LedgerReceipt or None if the proof was never submitted
        """
        ...


# Global client instance
_client: LedgerClient | None = None


def get_ledger_client() -> LedgerClient | None:
    """
    Get the configured ledger client instance.

    Returns:
        LedgerClient based on settings, or None when LEDGER_MODE=disabled
    """
    global _client

    if _client is None:
        mode = settings.ledger.mode

        if mode == LedgerMode.DISABLED:
            return None
        if mode == LedgerMode.MOCK:
            from ghosthire.ledger.mock import MockLedgerClient

            _client = MockLedgerClient()
        elif mode == LedgerMode.HTTP:
            from ghosthire.ledger.http import HttpLedgerClient

            _client = HttpLedgerClient()
        else:
            raise ValueError(f"Unknown ledger mode: {mode}")

        logger.info(
            "ledger_client_initialized",
            mode=mode.value,
        )

    return _client


def set_ledger_client(client: LedgerClient) -> None:
    """
    Set a custom ledger client.

    Args:
        client: LedgerClient instance
    """
    global _client
    _client = client
    logger.info(
        "ledger_client_set",
        mode=client.mode.value,
    )


def reset_ledger_client() -> None:
    """Reset the client to be re-initialized."""
    global _client
    _client = None
