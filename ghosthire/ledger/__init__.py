"""
Ledger Module
=============

Abstraction layer for the ledger / verification service that checks
eligibility proofs.

Supports:
- Mock (development/testing)
- HTTP (remote verification service)

Usage:
    from ghosthire.ledger import get_ledger_client

    client = get_ledger_client()
    receipt = await client.submit_proof(
        proof=artifact.proof,
        public_signals=artifact.public_signals,
        proof_hash=artifact.proof_hash,
    )
"""

from ghosthire.ledger.client import (
    LedgerClient,
    LedgerReceipt,
    LedgerResponseError,
    get_ledger_client,
    reset_ledger_client,
    set_ledger_client,
)
from ghosthire.ledger.http import HttpLedgerClient
from ghosthire.ledger.mock import MockLedgerClient

__all__ = [
    # Client
    "LedgerClient",
    "get_ledger_client",
    "set_ledger_client",
    "reset_ledger_client",
    # Models
    "LedgerReceipt",
    "LedgerResponseError",
    # Implementations
    "MockLedgerClient",
    "HttpLedgerClient",
]
