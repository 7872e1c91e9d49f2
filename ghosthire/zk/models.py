"""
ZK Data Models
==============

Pydantic models for eligibility inputs, region membership proofs,
proof artifacts and verification outcomes.

Version: 0.1.0
"""

import hashlib
import json
import secrets
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from ghosthire.zk.exceptions import ProofMalformed
from ghosthire.zk.nullifier import FIELD_ORDER, is_well_formed, nullifier_to_field


# BN254 base field order; G1/G2 point coordinates live here
BASE_FIELD_ORDER = 21888242871839275222246405745257275088696311157297823662689037894645226208583

PUBLIC_SIGNAL_COUNT = 4

REAL_CIRCUIT_ID = "real-eligibility-v1"
FALLBACK_CIRCUIT_PREFIX = "fallback-"
FALLBACK_CIRCUIT_ID = f"{FALLBACK_CIRCUIT_PREFIX}eligibility-v1"


def is_fallback_circuit(circuit_id: str | None) -> bool:
    """Whether an artifact tag marks a non-binding fallback proof."""
    return circuit_id is not None and circuit_id.lower().startswith(FALLBACK_CIRCUIT_PREFIX)


def _is_decimal_below(value: Any, bound: int) -> bool:
    return (
        isinstance(value, str)
        and value.isascii()
        and value.isdigit()
        and int(value) < bound
    )


def is_field_element(value: Any) -> bool:
    """Check that a value is a decimal string in the BN254 scalar field."""
    return _is_decimal_below(value, FIELD_ORDER)


def hash_to_field(value: str) -> str:
    """
    Hash a string to a field element.

    Uses SHA-256 and reduces mod the scalar field order.
    """
    digest = hashlib.sha256(value.encode()).digest()
    return str(int.from_bytes(digest, "big") % FIELD_ORDER)


def random_field_element() -> str:
    """Random non-zero element below the base field order."""
    return str(secrets.randbelow(BASE_FIELD_ORDER - 1) + 1)


def check_public_signals(signals: Any) -> list[str]:
    """
    Enforce the four-signal contract.

    Layout: [job_id_hash, nullifier, eligible ("0"|"1"), timestamp].

    Raises:
        ValueError: If the count or the element encoding is wrong
    """
    if not isinstance(signals, list) or len(signals) != PUBLIC_SIGNAL_COUNT:
        count = len(signals) if isinstance(signals, list) else "non-list"
        raise ValueError(
            f"Expected exactly {PUBLIC_SIGNAL_COUNT} public signals, got {count}"
        )
    for signal in signals:
        if not is_field_element(signal):
            raise ValueError(f"Invalid public signal: {signal!r}")
    return signals


def build_public_signals(
    job_id: str,
    nullifier: str,
    eligible: bool,
    timestamp: int,
) -> list[str]:
    """Assemble public signals from already-known public values."""
    return [
        hash_to_field(job_id),
        nullifier_to_field(nullifier),
        "1" if eligible else "0",
        str(timestamp),
    ]


# =============================================================================
# Proof payloads
# =============================================================================


class Groth16Proof(BaseModel):
    """
    A Groth16 proof over BN254.

    Compatible with the snarkjs proof JSON format.
    """

    # Proof points (G1 and G2 elements, projective coordinates)
    pi_a: list[str] = Field(..., description="Proof point A (G1)")
    pi_b: list[list[str]] = Field(..., description="Proof point B (G2)")
    pi_c: list[str] = Field(..., description="Proof point C (G1)")

    protocol: Literal["groth16"] = "groth16"
    curve: Literal["bn128"] = "bn128"

    @field_validator("pi_a", "pi_c")
    @classmethod
    def g1_point_shape(cls, v: list[str]) -> list[str]:
        if len(v) != 3:
            raise ValueError(f"G1 point must have 3 coordinates, got {len(v)}")
        if not all(_is_decimal_below(c, BASE_FIELD_ORDER) for c in v):
            raise ValueError("G1 coordinates must be decimal field elements")
        return v

    @field_validator("pi_b")
    @classmethod
    def g2_point_shape(cls, v: list[list[str]]) -> list[list[str]]:
        if len(v) != 3 or any(len(pair) != 2 for pair in v):
            raise ValueError("G2 point must be 3 pairs of coordinates")
        if not all(_is_decimal_below(c, BASE_FIELD_ORDER) for pair in v for c in pair):
            raise ValueError("G2 coordinates must be decimal field elements")
        return v

    def to_calldata(self) -> list[int]:
        """Convert to Solidity calldata format (8 uint256)."""
        return [
            int(self.pi_a[0]),
            int(self.pi_a[1]),
            int(self.pi_b[0][0]),
            int(self.pi_b[0][1]),
            int(self.pi_b[1][0]),
            int(self.pi_b[1][1]),
            int(self.pi_c[0]),
            int(self.pi_c[1]),
        ]

    @classmethod
    def placeholder(cls) -> "Groth16Proof":
        """Curve-point-shaped random values with no cryptographic meaning."""
        return cls(
            pi_a=[random_field_element(), random_field_element(), "1"],
            pi_b=[
                [random_field_element(), random_field_element()],
                [random_field_element(), random_field_element()],
                ["1", "0"],
            ],
            pi_c=[random_field_element(), random_field_element(), "1"],
        )


# Proving schemes keyed by their `protocol` tag. Register new payload models
# here and widen ProofPayload accordingly.
PROOF_SCHEMES: dict[str, type[BaseModel]] = {
    "groth16": Groth16Proof,
}

ProofPayload = Groth16Proof


def parse_proof_payload(data: Any) -> ProofPayload:
    """
    Parse a raw proof payload into its scheme model.

    Raises:
        ProofMalformed: If the scheme is unknown or the shape is wrong
    """
    if isinstance(data, tuple(PROOF_SCHEMES.values())):
        return data
    if not isinstance(data, dict):
        raise ProofMalformed("Proof payload must be an object")

    protocol = data.get("protocol")
    model = PROOF_SCHEMES.get(protocol)
    if model is None:
        raise ProofMalformed(f"Unsupported proving scheme: {protocol!r}")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ProofMalformed(f"Invalid {protocol} proof structure: {e.error_count()} error(s)") from e


def compute_proof_hash(proof: BaseModel | dict[str, Any], public_signals: list[str]) -> str:
    """SHA-256 over canonical JSON of the proof and its public signals."""
    proof_data = proof.model_dump() if isinstance(proof, BaseModel) else proof
    canonical = json.dumps(
        {"proof": proof_data, "publicSignals": public_signals},
        sort_keys=True,
        separators=(",", ":"),
    )
    return "0x" + hashlib.sha256(canonical.encode()).hexdigest()


# =============================================================================
# Region membership
# =============================================================================


class MerkleProof(BaseModel):
    """Membership proof for one region under a region-set root."""

    siblings: list[str] = Field(default_factory=list)
    leaf_index: int = -1
    root: str = ""
    valid: bool = False


# =============================================================================
# Eligibility
# =============================================================================


SkillLevel = Annotated[int, Field(ge=0, le=100)]


class ConstraintKind(str, Enum):
    """Categories of eligibility constraints."""

    SKILL = "skill"
    SALARY = "salary"
    REGION = "region"


class EligibilityInput(BaseModel):
    """Private applicant values plus the job's public requirements."""

    # Private
    skills: dict[str, SkillLevel] = Field(default_factory=dict)
    region: str = Field(..., min_length=1)
    expected_salary: int = Field(..., ge=0)

    # Public
    skill_thresholds: dict[str, SkillLevel] = Field(default_factory=dict)
    salary_min: int = Field(..., ge=0)
    salary_max: int = Field(..., ge=0)
    region_merkle_root: str = ""
    job_id: str = ""
    allowed_regions: list[str] | None = None
    region_proof: MerkleProof | None = None


class EligibilityResult(BaseModel):
    """Outcome of the local eligibility pre-check."""

    eligible: bool
    reasons: list[str] = Field(default_factory=list)
    failed_constraints: list[ConstraintKind] = Field(default_factory=list)


class ProofRequest(EligibilityInput):
    """Input for proof generation."""

    job_id: str = Field(..., min_length=1)
    region_merkle_root: str = Field(..., min_length=1)
    nullifier: str
    timestamp: int | None = Field(default=None, ge=0)

    @field_validator("nullifier")
    @classmethod
    def nullifier_format(cls, v: str) -> str:
        if not is_well_formed(v):
            raise ValueError("nullifier must be 0x followed by 64 lowercase hex chars")
        return v

    @model_validator(mode="after")
    def public_parameters_consistent(self) -> "ProofRequest":
        if self.salary_min > self.salary_max:
            raise ValueError(
                f"salary_min {self.salary_min} must be <= salary_max {self.salary_max}"
            )
        if self.allowed_regions is None and self.region_proof is None:
            raise ValueError("Either allowed_regions or region_proof is required")
        return self


# =============================================================================
# Proof artifacts
# =============================================================================


class _ProofArtifactBase(BaseModel):
    """Fields shared by every artifact, whichever path produced it."""

    proof: Groth16Proof
    public_signals: list[str]
    proof_hash: str
    circuit_id: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    proving_time_ms: int = Field(default=0, ge=0)

    @field_validator("public_signals")
    @classmethod
    def four_signals(cls, v: list[str]) -> list[str]:
        return check_public_signals(v)

    @property
    def job_id_hash(self) -> str:
        return self.public_signals[0]

    @property
    def nullifier_field(self) -> str:
        return self.public_signals[1]

    @property
    def eligible(self) -> bool:
        return self.public_signals[2] == "1"

    @property
    def timestamp(self) -> int:
        return int(self.public_signals[3])


class RealProof(_ProofArtifactBase):
    """Artifact produced by a proving backend."""

    kind: Literal["real"] = "real"
    backend: str

    @property
    def is_cryptographic(self) -> bool:
        return True


class FallbackProof(_ProofArtifactBase):
    """Structurally valid artifact that proves nothing cryptographically."""

    kind: Literal["fallback"] = "fallback"
    fallback_reason: str

    @property
    def is_cryptographic(self) -> bool:
        return False


ProofArtifact = Annotated[RealProof | FallbackProof, Field(discriminator="kind")]

_artifact_adapter: TypeAdapter[RealProof | FallbackProof] = TypeAdapter(ProofArtifact)


def parse_artifact(data: dict[str, Any]) -> RealProof | FallbackProof:
    """Rebuild a stored artifact into its tagged variant."""
    return _artifact_adapter.validate_python(data)


# =============================================================================
# Verification
# =============================================================================


class JobPublicParameters(BaseModel):
    """Public job data a verifier checks a proof against."""

    job_id: str = Field(..., min_length=1)
    skill_thresholds: dict[str, int] = Field(default_factory=dict)
    salary_min: int | None = None
    salary_max: int | None = None
    region_merkle_root: str | None = None
    expected_nullifier: str | None = None


class VerificationPath(str, Enum):
    """Which verification path produced the verdict."""

    NETWORK = "network"
    LOCAL = "local"
    STRUCTURAL = "structural"


class VerificationOutcome(BaseModel):
    """Result of proof verification."""

    valid: bool
    eligible: bool = False
    transaction_hash: str | None = None
    block_number: int | None = None
    error: str | None = None
    verified_by: VerificationPath | None = None
    verified_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verification_time_ms: int = Field(default=0, ge=0)


# =============================================================================
# Privacy
# =============================================================================


class PrivacyMetrics(BaseModel):
    """How much of each private attribute was disclosed, in percent."""

    skills_revealed_pct: float = Field(default=0, ge=0, le=100)
    location_revealed_pct: float = Field(default=0, ge=0, le=100)
    salary_revealed_pct: float = Field(default=0, ge=0, le=100)
    has_nullifier: bool = False
