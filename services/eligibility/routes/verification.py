"""
Proof Verification Routes
=========================

API endpoints for verifying eligibility proofs and reading ledger receipts.
"""

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ghosthire.ledger import LedgerClient, LedgerReceipt
from ghosthire.logging import bind_context, get_logger
from ghosthire.zk import (
    JobPublicParameters,
    VerificationBackendUnavailable,
    VerificationOrchestrator,
    VerificationOutcome,
)
from services.eligibility.dependencies import get_ledger, get_verification_orchestrator


logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class VerifyProofRequest(BaseModel):
    """Request to verify an eligibility proof."""

    proof: dict[str, Any] = Field(..., description="The proof object")
    public_signals: list[Any] = Field(..., description="Public signals from proof")
    job: JobPublicParameters
    circuit_id: str | None = Field(
        default=None,
        description="Artifact circuit tag, e.g. real-eligibility-v1",
    )


class BatchVerifyRequest(BaseModel):
    """Request to verify multiple proofs."""

    proofs: list[VerifyProofRequest] = Field(..., min_length=1, max_length=100)


class BatchVerifyResponse(BaseModel):
    """Response from batch verification."""

    total: int
    valid: int
    invalid: int
    results: list[VerificationOutcome]


# ============================================================================
# Verification Endpoints
# ============================================================================


@router.post("/proof", response_model=VerificationOutcome)
async def verify_proof(
    request: VerifyProofRequest,
    verifier: Annotated[VerificationOrchestrator, Depends(get_verification_orchestrator)],
) -> VerificationOutcome:
    """
    Verify an eligibility proof against a job's public parameters.

    Invalid proofs come back as `valid: false` with an error, not as an
    HTTP error.
    """
    bind_context(job_id=request.job.job_id)

    return await verifier.verify(
        request.proof,
        request.public_signals,
        request.job,
        circuit_id=request.circuit_id,
    )


@router.post("/batch", response_model=BatchVerifyResponse)
async def verify_batch(
    request: BatchVerifyRequest,
    verifier: Annotated[VerificationOrchestrator, Depends(get_verification_orchestrator)],
) -> BatchVerifyResponse:
    """Verify up to 100 proofs concurrently."""
    results = await asyncio.gather(
        *(
            verifier.verify(item.proof, item.public_signals, item.job, circuit_id=item.circuit_id)
            for item in request.proofs
        )
    )

    valid_count = sum(1 for r in results if r.valid)

    logger.info(
        "batch_verification_completed",
        total=len(results),
        valid=valid_count,
    )

    return BatchVerifyResponse(
        total=len(results),
        valid=valid_count,
        invalid=len(results) - valid_count,
        results=list(results),
    )


@router.get("/receipts/{proof_hash}", response_model=LedgerReceipt)
async def get_receipt(
    proof_hash: str,
    ledger: Annotated[LedgerClient | None, Depends(get_ledger)],
) -> LedgerReceipt:
    """Look up the ledger receipt for an earlier verification."""
    if ledger is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ledger is disabled",
        )

    try:
        receipt = await ledger.get_receipt(proof_hash)
    except VerificationBackendUnavailable as e:
        logger.warning("ledger_receipt_lookup_failed", proof_hash=proof_hash, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ledger unavailable",
        ) from e

    if receipt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No receipt for proof {proof_hash}",
        )

    return receipt
