"""
Mock Ledger Client
==================

In-memory mock implementation for development and testing.

Version: 0.1.0
"""

import hashlib
import uuid
from datetime import UTC, datetime
from typing import Any

from ghosthire.config import LedgerMode
from ghosthire.ledger.client import LedgerClient, LedgerReceipt
from ghosthire.logging import get_logger
from ghosthire.zk.exceptions import VerificationBackendUnavailable
from ghosthire.zk.models import Groth16Proof, check_public_signals, compute_proof_hash

logger = get_logger(__name__)


class MockLedgerClient(LedgerClient):
    """
    In-memory mock ledger client.

    Accepts any structurally valid proof whose hash matches its contents.
    It performs no pairing check. Data is stored in memory and lost on
    restart.
    """

    def __init__(self) -> None:
        """Initialize mock client with in-memory storage."""
        self._connected = False
        self._block_number = 1000
        self._unavailable = False

        # Receipts by proof hash
        self._receipts: dict[str, LedgerReceipt] = {}

        logger.debug("mock_ledger_initialized")

    @property
    def mode(self) -> LedgerMode:
        return LedgerMode.MOCK

    @property
    def is_cryptographic(self) -> bool:
        return False

    async def connect(self) -> None:
        """Simulate connection."""
        self._connected = True
        logger.info("mock_ledger_connected")

    async def disconnect(self) -> None:
        """Simulate disconnection."""
        self._connected = False
        logger.info("mock_ledger_disconnected")

    async def health_check(self) -> dict[str, Any]:
        """Check mock ledger health."""
        return {
            "status": "unhealthy" if self._unavailable else "healthy",
            "mode": self.mode.value,
            "connected": self._connected,
            "block_number": self._block_number,
            "receipts": len(self._receipts),
        }

    def _generate_tx_hash(self) -> str:
        """Generate a mock transaction hash."""
        return "0x" + hashlib.sha256(uuid.uuid4().bytes).hexdigest()

    def _next_block(self) -> int:
        """Get next block number."""
        self._block_number += 1
        return self._block_number

    async def submit_proof(
        self,
        proof: Groth16Proof,
        public_signals: list[str],
        proof_hash: str,
    ) -> LedgerReceipt:
        """Record a proof and return a receipt."""
        if self._unavailable:
            raise VerificationBackendUnavailable("Mock ledger is simulating an outage")

        # Same proof submitted twice gets the original receipt
        if proof_hash in self._receipts:
            logger.debug("mock_proof_resubmitted", proof_hash=proof_hash)
            return self._receipts[proof_hash]

        try:
            check_public_signals(public_signals)
        except ValueError as e:
            return LedgerReceipt(valid=False, proof_hash=proof_hash, reason=str(e))

        if compute_proof_hash(proof, public_signals) != proof_hash:
            return LedgerReceipt(valid=False, proof_hash=proof_hash, reason="Proof hash mismatch")

        receipt = LedgerReceipt(
            valid=True,
            proof_hash=proof_hash,
            transaction_hash=self._generate_tx_hash(),
            block_number=self._next_block(),
            submitted_at=datetime.now(UTC),
        )
        self._receipts[proof_hash] = receipt

        logger.debug(
            "mock_proof_recorded",
            proof_hash=proof_hash,
            tx_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
        )

        return receipt

    async def get_receipt(self, proof_hash: str) -> LedgerReceipt | None:
        """Look up a recorded receipt."""
        return self._receipts.get(proof_hash)

    # =========================================================================
    # Test Utilities
    # =========================================================================

    def simulate_outage(self, unavailable: bool = True) -> None:
        """Make subsequent submissions fail as if the ledger were down."""
        self._unavailable = unavailable

    def clear_all(self) -> None:
        """Clear all mock data (for testing)."""
        self._receipts.clear()
        self._block_number = 1000
        self._unavailable = False
        logger.debug("mock_ledger_cleared")

    def get_stats(self) -> dict[str, int]:
        """Get storage statistics."""
        return {
            "receipts": len(self._receipts),
            "block_number": self._block_number,
        }
