"""
Eligibility Proof Verification
==============================

Verifies proof artifacts against a job's public parameters.

    structural check -> public-input binding -> ATTEMPT_LOCAL -> ATTEMPT_NETWORK
        snarkjs rejects the proof              -> rejected
        ledger verdict                         -> done
        ledger unreachable / timeout / junk    -> SUCCESS_LOCAL or ATTEMPT_STRUCTURAL

A malformed proof is rejected before any network call and never retried.
ATTEMPT_LOCAL runs only when the circuit verification key is present.
What ATTEMPT_STRUCTURAL does depends on the verification mode: STRICT fails
closed, INSECURE accepts the structural result and says so in the logs.

In STRICT mode fallback artifacts (any `fallback-*` tag) are rejected, and a
ledger that performs no pairing check counts as unavailable.

Version: 0.1.0
"""

import asyncio
import time
from enum import Enum
from typing import TYPE_CHECKING, Any

from ghosthire.config import VerificationMode, settings
from ghosthire.logging import get_logger
from ghosthire.zk.backends import VerificationBackend, get_verification_backend
from ghosthire.zk.exceptions import ProofMalformed, ProofValidationError
from ghosthire.zk.models import (
    FALLBACK_CIRCUIT_ID,
    FallbackProof,
    JobPublicParameters,
    ProofPayload,
    RealProof,
    VerificationOutcome,
    VerificationPath,
    check_public_signals,
    compute_proof_hash,
    hash_to_field,
    is_fallback_circuit,
    parse_proof_payload,
)
from ghosthire.zk.nullifier import nullifier_to_field

if TYPE_CHECKING:
    from ghosthire.ledger.client import LedgerClient

logger = get_logger(__name__)


class VerificationState(str, Enum):
    """States of a single verification call."""

    ATTEMPT_LOCAL = "attempt_local"
    SUCCESS_LOCAL = "success_local"
    ATTEMPT_NETWORK = "attempt_network"
    SUCCESS_NETWORK = "success_network"
    ATTEMPT_STRUCTURAL = "attempt_structural"
    SUCCESS_STRUCTURAL = "success_structural"
    REJECTED = "rejected"


class VerificationOrchestrator:
    """
    Proof verifier: local pairing check, then ledger, then structural fallback.

    Usage:
        verifier = VerificationOrchestrator.from_settings()

        outcome = await verifier.verify_artifact(
            artifact,
            JobPublicParameters(job_id="job-7"),
        )
    """

    def __init__(
        self,
        ledger: "LedgerClient | None" = None,
        mode: VerificationMode | None = None,
        timeout: float | None = None,
        max_proof_age_seconds: int | None = None,
        clock_skew_seconds: int | None = None,
        local_verifier: VerificationBackend | None = None,
    ):
        """
        Initialize the verifier.

        Args:
            ledger: Ledger client; None means the network path is unavailable
            mode: STRICT (default) or INSECURE
            timeout: Upper bound on the ledger call, in seconds
            max_proof_age_seconds: Oldest acceptable proof timestamp
            clock_skew_seconds: How far in the future a timestamp may be
            local_verifier: Local cryptographic check run before the ledger
        """
        self.ledger = ledger
        self.mode = mode or settings.verification.mode
        self.timeout = timeout if timeout is not None else settings.ledger.timeout_seconds
        self.max_proof_age_seconds = (
            max_proof_age_seconds
            if max_proof_age_seconds is not None
            else settings.verification.max_proof_age_seconds
        )
        self.clock_skew_seconds = (
            clock_skew_seconds
            if clock_skew_seconds is not None
            else settings.verification.clock_skew_seconds
        )
        self.local_verifier = local_verifier

        if self.mode == VerificationMode.INSECURE:
            logger.warning(
                "insecure_verification_mode_enabled",
                detail="structural checks will be accepted when the ledger is unreachable",
            )

    @classmethod
    def from_settings(cls) -> "VerificationOrchestrator":
        """Verifier wired to the ledger selected by LEDGER_MODE and the local snarkjs check."""
        from ghosthire.ledger import get_ledger_client

        return cls(ledger=get_ledger_client(), local_verifier=get_verification_backend())

    def _reject(self, error: str, start_time: float, **kw: Any) -> VerificationOutcome:
        logger.info("zk_proof_rejected", state=VerificationState.REJECTED.value, error=error, **kw)
        return VerificationOutcome(
            valid=False,
            eligible=False,
            error=error,
            verification_time_ms=int((time.time() - start_time) * 1000),
        )

    def check_structure(self, proof: Any, public_signals: Any) -> tuple[ProofPayload, list[str]]:
        """
        Validate the shape of a proof and its public signals.

        Raises:
            ProofMalformed: If any structural field is absent or mis-shaped
        """
        payload = parse_proof_payload(proof)
        try:
            signals = check_public_signals(public_signals)
        except ValueError as e:
            raise ProofMalformed(str(e)) from e
        return payload, signals

    def check_public_inputs(
        self,
        public_signals: list[str],
        job: JobPublicParameters,
        now: int | None = None,
    ) -> None:
        """
        Bind the public signals to the job.

        Raises:
            ProofMalformed: If the signals do not belong to this job or are stale
        """
        job_id_hash, nullifier, eligible_flag, timestamp = public_signals

        if job_id_hash != hash_to_field(job.job_id):
            raise ProofMalformed("Job ID hash mismatch")

        if eligible_flag not in ("0", "1"):
            raise ProofMalformed("Invalid eligible flag")

        if job.expected_nullifier is not None:
            try:
                expected = nullifier_to_field(job.expected_nullifier)
            except ProofValidationError as e:
                raise ProofMalformed(str(e)) from e
            if nullifier != expected:
                raise ProofMalformed("Nullifier mismatch")

        now = now if now is not None else int(time.time())
        age = now - int(timestamp)
        if age > self.max_proof_age_seconds:
            raise ProofMalformed("Proof timestamp too old")
        if age < -self.clock_skew_seconds:
            raise ProofMalformed("Proof timestamp is in the future")

    async def verify(
        self,
        proof: Any,
        public_signals: Any,
        job: JobPublicParameters,
        circuit_id: str | None = None,
    ) -> VerificationOutcome:
        """
        Verify a proof against a job.

        Args:
            proof: Proof payload, raw mapping or typed model
            public_signals: The four public signals
            job: Public job parameters
            circuit_id: Artifact tag, if known

        Returns:
            VerificationOutcome; never raises for bad proofs or outages
        """
        start_time = time.time()

        try:
            payload, signals = self.check_structure(proof, public_signals)
            self.check_public_inputs(signals, job)
        except ProofMalformed as e:
            return self._reject(str(e), start_time, job_id=job.job_id)

        if self.mode == VerificationMode.STRICT and is_fallback_circuit(circuit_id):
            return self._reject(
                "Fallback proofs are not accepted in strict verification mode",
                start_time,
                job_id=job.job_id,
            )

        eligible = signals[2] == "1"
        proof_hash = compute_proof_hash(payload, signals)

        locally_verified = await self._verify_locally(payload, signals, job)
        if locally_verified is False:
            return self._reject(
                "Proof failed cryptographic verification",
                start_time,
                job_id=job.job_id,
                proof_hash=proof_hash,
            )

        if (
            self.mode == VerificationMode.STRICT
            and self.ledger is not None
            and not self.ledger.is_cryptographic
        ):
            if locally_verified:
                return self._local(eligible, start_time, job)
            return self._structural(
                eligible,
                start_time,
                job,
                f"{self.ledger.mode.value} ledger performs no cryptographic check",
            )

        logger.debug(
            "verification_state_transition",
            state=VerificationState.ATTEMPT_NETWORK.value,
            job_id=job.job_id,
        )
        try:
            if self.ledger is None:
                raise ConnectionError("No ledger client configured")
            receipt = await asyncio.wait_for(
                self.ledger.submit_proof(payload, signals, proof_hash),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(
                "verification_backend_unavailable",
                job_id=job.job_id,
                error=f"{type(e).__name__}: {e}",
            )
            if locally_verified:
                return self._local(eligible, start_time, job)
            return self._structural(eligible, start_time, job, str(e))

        if not receipt.valid:
            return self._reject(
                receipt.reason or "Proof rejected by ledger",
                start_time,
                job_id=job.job_id,
                proof_hash=proof_hash,
            )

        verification_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "zk_proof_verified",
            state=VerificationState.SUCCESS_NETWORK.value,
            job_id=job.job_id,
            eligible=eligible,
            tx_hash=receipt.transaction_hash,
            verification_time_ms=verification_time_ms,
        )

        return VerificationOutcome(
            valid=True,
            eligible=eligible,
            transaction_hash=receipt.transaction_hash,
            block_number=receipt.block_number,
            verified_by=VerificationPath.NETWORK,
            verification_time_ms=verification_time_ms,
        )

    async def _verify_locally(
        self,
        payload: ProofPayload,
        signals: list[str],
        job: JobPublicParameters,
    ) -> bool | None:
        """
        Run the local pairing check.

        Returns:
            The verdict, or None when no local verdict could be obtained
        """
        if self.local_verifier is None or not self.local_verifier.artifacts_available():
            return None

        logger.debug(
            "verification_state_transition",
            state=VerificationState.ATTEMPT_LOCAL.value,
            job_id=job.job_id,
            backend=self.local_verifier.name,
        )
        try:
            return await asyncio.wait_for(
                self.local_verifier.verify(payload, signals),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(
                "local_verification_unavailable",
                job_id=job.job_id,
                backend=self.local_verifier.name,
                error=f"{type(e).__name__}: {e}",
            )
            return None

    def _local(
        self,
        eligible: bool,
        start_time: float,
        job: JobPublicParameters,
    ) -> VerificationOutcome:
        verification_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "zk_proof_verified",
            state=VerificationState.SUCCESS_LOCAL.value,
            job_id=job.job_id,
            eligible=eligible,
            verification_time_ms=verification_time_ms,
        )
        return VerificationOutcome(
            valid=True,
            eligible=eligible,
            verified_by=VerificationPath.LOCAL,
            verification_time_ms=verification_time_ms,
        )

    def _structural(
        self,
        eligible: bool,
        start_time: float,
        job: JobPublicParameters,
        backend_error: str,
    ) -> VerificationOutcome:
        logger.debug(
            "verification_state_transition",
            state=VerificationState.ATTEMPT_STRUCTURAL.value,
            job_id=job.job_id,
        )

        if self.mode == VerificationMode.STRICT:
            return self._reject(
                f"Verification backend unavailable: {backend_error}",
                start_time,
                job_id=job.job_id,
            )

        logger.warning(
            "insecure_structural_verification",
            state=VerificationState.SUCCESS_STRUCTURAL.value,
            job_id=job.job_id,
            eligible=eligible,
        )
        return VerificationOutcome(
            valid=True,
            eligible=eligible,
            verified_by=VerificationPath.STRUCTURAL,
            verification_time_ms=int((time.time() - start_time) * 1000),
        )

    async def verify_artifact(
        self,
        artifact: RealProof | FallbackProof,
        job: JobPublicParameters,
    ) -> VerificationOutcome:
        """Verify an artifact produced by the proof orchestrator."""
        return await self.verify(
            artifact.proof,
            artifact.public_signals,
            job,
            circuit_id=artifact.circuit_id if artifact.is_cryptographic else FALLBACK_CIRCUIT_ID,
        )
