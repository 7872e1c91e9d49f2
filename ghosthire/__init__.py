"""
GHOSTHIRE Shared Library
========================

Eligibility-proof engine and the shared plumbing around it.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - zk: Eligibility checks, nullifiers, region Merkle proofs, proof
      generation/verification and privacy scoring
    - ledger: Ledger / verification service clients (mock, http)

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "GhostHire Team"

from ghosthire.config import settings
from ghosthire.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
