"""
Eligibility Proof Generation
============================

Drives proof generation through a small state machine:

    INIT -> ATTEMPT_REAL -> SUCCESS_REAL
    INIT -> [ATTEMPT_REAL ->] ATTEMPT_FALLBACK -> SUCCESS_FALLBACK
    INIT -> FAILED                      (malformed input only)

Any proving-backend problem (missing artifacts, subprocess or HTTP error,
timeout, garbage output) lands on the fallback path, which builds a
structurally identical but non-binding FallbackProof.

Version: 0.1.0
"""

import asyncio
import time
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ghosthire.config import settings
from ghosthire.logging import get_logger
from ghosthire.zk.backends import ProvingBackend, get_proving_backend
from ghosthire.zk.eligibility import EligibilityChecker
from ghosthire.zk.exceptions import ProofValidationError, ProvingBackendUnavailable
from ghosthire.zk.merkle import RegionMembershipTree
from ghosthire.zk.models import (
    FALLBACK_CIRCUIT_ID,
    REAL_CIRCUIT_ID,
    EligibilityResult,
    FallbackProof,
    Groth16Proof,
    ProofRequest,
    RealProof,
    build_public_signals,
    check_public_signals,
    compute_proof_hash,
    hash_to_field,
    parse_proof_payload,
)
from ghosthire.zk.nullifier import FIELD_ORDER, nullifier_to_field


logger = get_logger(__name__)


class ProofState(str, Enum):
    """States of a single proof-generation call."""

    INIT = "init"
    ATTEMPT_REAL = "attempt_real"
    SUCCESS_REAL = "success_real"
    ATTEMPT_FALLBACK = "attempt_fallback"
    SUCCESS_FALLBACK = "success_fallback"
    FAILED = "failed"


def _hex_to_field(value: str) -> str:
    return str(int(value, 16) % FIELD_ORDER)


class ProofOrchestrator:
    """
    Eligibility proof generator with a fallback path.

    Usage:
        orchestrator = ProofOrchestrator.from_settings()

        artifact = await orchestrator.generate(
            ProofRequest(
                job_id="job-7",
                skills={"rust": 85},
                skill_thresholds={"rust": 80},
                ...
            )
        )
        if not artifact.is_cryptographic:
            ...
    """

    def __init__(
        self,
        backend: ProvingBackend | None = None,
        checker: EligibilityChecker | None = None,
        tree: RegionMembershipTree | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            backend: Proving backend; None always takes the fallback path
            checker: Eligibility checker used to compute the eligible flag
            tree: Region tree used for root checks and Merkle paths
            timeout: Upper bound on a real proving attempt, in seconds
        """
        self.backend = backend
        self.tree = tree or RegionMembershipTree()
        self.checker = checker or EligibilityChecker(self.tree)
        self.timeout = timeout if timeout is not None else settings.proving.timeout_seconds

    @classmethod
    def from_settings(cls) -> "ProofOrchestrator":
        """Orchestrator wired to the backend selected by ZK_BACKEND."""
        return cls(backend=get_proving_backend())

    def _transition(self, state: ProofState, job_id: str | None, **kw: Any) -> ProofState:
        logger.debug("proof_state_transition", state=state.value, job_id=job_id, **kw)
        return state

    def _validate(self, request: ProofRequest | dict[str, Any]) -> ProofRequest:
        if not isinstance(request, ProofRequest):
            try:
                request = ProofRequest.model_validate(request)
            except ValidationError as e:
                raise ProofValidationError(f"Invalid proof request: {e}") from e

        if request.allowed_regions is not None:
            root = self.tree.build(request.allowed_regions)
            if root != request.region_merkle_root:
                raise ProofValidationError("region_merkle_root does not match allowed_regions")

        return request

    def prepare_circuit_inputs(self, request: ProofRequest, timestamp: int) -> dict[str, Any]:
        """
        Convert a request into the circuit's input format.

        Skills are ordered by skill name so thresholds and levels line up.
        """
        skill_names = sorted(request.skill_thresholds)

        if request.region_proof is not None:
            region_proof = request.region_proof
        else:
            region_proof = self.tree.get_proof(request.region, request.allowed_regions or [])

        return {
            # Private inputs
            "skills": [request.skills.get(name, 0) for name in skill_names],
            "region": _hex_to_field(self.tree.leaf_hash(request.region)),
            "regionPathElements": [_hex_to_field(s) for s in region_proof.siblings],
            "regionPathIndex": max(region_proof.leaf_index, 0),
            "expectedSalary": request.expected_salary,
            # Public inputs
            "jobId": hash_to_field(request.job_id),
            "skillThresholds": [request.skill_thresholds[name] for name in skill_names],
            "salaryMin": request.salary_min,
            "salaryMax": request.salary_max,
            "regionMerkleRoot": _hex_to_field(request.region_merkle_root),
            "nullifier": nullifier_to_field(request.nullifier),
            "timestamp": timestamp,
        }

    async def generate(self, request: ProofRequest | dict[str, Any]) -> RealProof | FallbackProof:
        """
        Generate an eligibility proof artifact.

        Args:
            request: Generation input, as a model or a raw mapping

        Returns:
            RealProof when the backend succeeded, otherwise FallbackProof.
            Both carry exactly four public signals.

        Raises:
            ProofValidationError: If required fields are missing or malformed
        """
        if isinstance(request, dict):
            raw_job_id = request.get("job_id")
        else:
            raw_job_id = getattr(request, "job_id", None)
        self._transition(ProofState.INIT, raw_job_id)

        try:
            request = self._validate(request)
        except ProofValidationError as e:
            self._transition(ProofState.FAILED, raw_job_id, error=str(e))
            raise

        eligibility = self.checker.check(request)
        timestamp = request.timestamp if request.timestamp is not None else int(time.time())

        logger.info(
            "eligibility_checked",
            job_id=request.job_id,
            eligible=eligibility.eligible,
            failed_constraints=[c.value for c in eligibility.failed_constraints],
        )

        if self.backend is None:
            fallback_reason = "proving backend not configured"
        elif not self.backend.artifacts_available():
            fallback_reason = "proving artifacts not available"
        else:
            self._transition(ProofState.ATTEMPT_REAL, request.job_id, backend=self.backend.name)
            try:
                artifact = await self._attempt_real(request, timestamp)
            except Exception as e:
                fallback_reason = f"{type(e).__name__}: {e}"
                logger.warning(
                    "proving_backend_unavailable",
                    job_id=request.job_id,
                    backend=self.backend.name,
                    error=fallback_reason,
                )
            else:
                self._transition(ProofState.SUCCESS_REAL, request.job_id)
                logger.info(
                    "zk_proof_generated",
                    job_id=request.job_id,
                    circuit_id=artifact.circuit_id,
                    proving_time_ms=artifact.proving_time_ms,
                )
                return artifact

        self._transition(ProofState.ATTEMPT_FALLBACK, request.job_id, reason=fallback_reason)
        artifact = self._fallback(request, eligibility, timestamp, fallback_reason)
        self._transition(ProofState.SUCCESS_FALLBACK, request.job_id)

        logger.info(
            "zk_fallback_proof_generated",
            job_id=request.job_id,
            circuit_id=artifact.circuit_id,
            reason=fallback_reason,
        )
        return artifact

    async def _attempt_real(self, request: ProofRequest, timestamp: int) -> RealProof:
        circuit_inputs = self.prepare_circuit_inputs(request, timestamp)

        start_time = time.time()
        proof_json, public_signals = await asyncio.wait_for(
            self.backend.prove(circuit_inputs),
            timeout=self.timeout,
        )
        proving_time_ms = int((time.time() - start_time) * 1000)

        proof = parse_proof_payload(proof_json)
        try:
            public_signals = check_public_signals(public_signals)
        except ValueError as e:
            raise ProvingBackendUnavailable(f"Backend returned bad public signals: {e}") from e

        if public_signals[0] != circuit_inputs["jobId"] or public_signals[1] != circuit_inputs["nullifier"]:
            raise ProvingBackendUnavailable("Backend public signals do not match the request")

        return RealProof(
            proof=proof,
            public_signals=public_signals,
            proof_hash=compute_proof_hash(proof, public_signals),
            circuit_id=REAL_CIRCUIT_ID,
            proving_time_ms=proving_time_ms,
            backend=self.backend.name,
        )

    def _fallback(
        self,
        request: ProofRequest,
        eligibility: EligibilityResult,
        timestamp: int,
        reason: str,
    ) -> FallbackProof:
        proof = Groth16Proof.placeholder()
        public_signals = build_public_signals(
            request.job_id,
            request.nullifier,
            eligibility.eligible,
            timestamp,
        )
        return FallbackProof(
            proof=proof,
            public_signals=public_signals,
            proof_hash=compute_proof_hash(proof, public_signals),
            circuit_id=FALLBACK_CIRCUIT_ID,
            fallback_reason=reason,
        )
