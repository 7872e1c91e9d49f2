"""
FastAPI Dependencies
====================

Component providers for the eligibility routes. Tests swap them out through
`app.dependency_overrides`.

Version: 0.1.0
"""

from functools import lru_cache

from ghosthire.ledger import LedgerClient, get_ledger_client
from ghosthire.zk import (
    EligibilityChecker,
    NullifierDeriver,
    PrivacyScorer,
    ProofOrchestrator,
    RegionMembershipTree,
    VerificationOrchestrator,
)


def get_region_tree() -> RegionMembershipTree:
    return RegionMembershipTree()


def get_eligibility_checker() -> EligibilityChecker:
    return EligibilityChecker()


def get_privacy_scorer() -> PrivacyScorer:
    return PrivacyScorer()


@lru_cache
def get_nullifier_deriver() -> NullifierDeriver:
    """Deriver keyed by NULLIFIER_SECRET."""
    return NullifierDeriver.from_settings()


@lru_cache
def get_proof_orchestrator() -> ProofOrchestrator:
    """Orchestrator using the backend selected by ZK_BACKEND."""
    return ProofOrchestrator.from_settings()


@lru_cache
def get_verification_orchestrator() -> VerificationOrchestrator:
    """Verifier using the ledger selected by LEDGER_MODE."""
    return VerificationOrchestrator.from_settings()


def get_ledger() -> LedgerClient | None:
    return get_ledger_client()
