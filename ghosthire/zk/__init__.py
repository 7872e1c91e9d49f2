"""
Eligibility Proof Module
========================

Privacy-preserving eligibility proofs for job applications.

Usage:
    from ghosthire.zk import NullifierDeriver, ProofOrchestrator, ProofRequest

    nullifier = NullifierDeriver.from_settings().derive(applicant_id, job_id)

    orchestrator = ProofOrchestrator.from_settings()
    artifact = await orchestrator.generate(
        ProofRequest(job_id=job_id, nullifier=nullifier, ...)
    )

    verifier = VerificationOrchestrator.from_settings()
    outcome = await verifier.verify_artifact(artifact, JobPublicParameters(job_id=job_id))

Version: 0.1.0
"""

from ghosthire.zk.backends import (
    ProvingBackend,
    RemoteProvingBackend,
    SnarkjsProvingBackend,
    SnarkjsVerificationBackend,
    VerificationBackend,
    get_proving_backend,
    get_verification_backend,
)
from ghosthire.zk.eligibility import EligibilityChecker
from ghosthire.zk.exceptions import (
    ProofMalformed,
    ProofValidationError,
    ProvingBackendUnavailable,
    VerificationBackendUnavailable,
    ZKError,
)
from ghosthire.zk.merkle import RegionMembershipTree
from ghosthire.zk.models import (
    ConstraintKind,
    EligibilityInput,
    EligibilityResult,
    FallbackProof,
    Groth16Proof,
    JobPublicParameters,
    MerkleProof,
    PrivacyMetrics,
    ProofArtifact,
    ProofRequest,
    RealProof,
    VerificationOutcome,
    VerificationPath,
    parse_artifact,
)
from ghosthire.zk.nullifier import NullifierDeriver
from ghosthire.zk.privacy import PrivacyScorer
from ghosthire.zk.prover import ProofOrchestrator, ProofState
from ghosthire.zk.verifier import VerificationOrchestrator, VerificationState


__all__ = [
    # Components
    "NullifierDeriver",
    "RegionMembershipTree",
    "EligibilityChecker",
    "PrivacyScorer",
    # Proving
    "ProofOrchestrator",
    "ProofState",
    "ProvingBackend",
    "SnarkjsProvingBackend",
    "RemoteProvingBackend",
    "get_proving_backend",
    # Verification
    "VerificationOrchestrator",
    "VerificationState",
    "VerificationBackend",
    "SnarkjsVerificationBackend",
    "get_verification_backend",
    # Models
    "ConstraintKind",
    "EligibilityInput",
    "EligibilityResult",
    "FallbackProof",
    "Groth16Proof",
    "JobPublicParameters",
    "MerkleProof",
    "PrivacyMetrics",
    "ProofArtifact",
    "ProofRequest",
    "RealProof",
    "VerificationOutcome",
    "VerificationPath",
    "parse_artifact",
    # Exceptions
    "ZKError",
    "ProofValidationError",
    "ProofMalformed",
    "ProvingBackendUnavailable",
    "VerificationBackendUnavailable",
]
