"""
Eligibility Proof Routes
========================

API endpoints for eligibility pre-checks and proof generation.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from ghosthire.logging import bind_context, get_logger
from ghosthire.zk import (
    EligibilityChecker,
    EligibilityInput,
    EligibilityResult,
    NullifierDeriver,
    PrivacyScorer,
    ProofArtifact,
    ProofOrchestrator,
    ProofRequest,
    ProofValidationError,
    RegionMembershipTree,
)
from ghosthire.zk.models import SkillLevel
from services.eligibility.dependencies import (
    get_eligibility_checker,
    get_nullifier_deriver,
    get_privacy_scorer,
    get_proof_orchestrator,
    get_region_tree,
)


logger = get_logger(__name__)
router = APIRouter()

NOT_ELIGIBLE_DETAIL = "Not eligible for this position"


# ============================================================================
# Request/Response Models
# ============================================================================


class GenerateProofRequest(BaseModel):
    """Application data for proof generation."""

    applicant_id: str = Field(..., min_length=1, description="Applicant identity")
    job_id: str = Field(..., min_length=1, description="Job identifier")

    # Private
    skills: dict[str, SkillLevel] = Field(default_factory=dict)
    region: str = Field(..., min_length=1)
    expected_salary: int = Field(..., ge=0)

    # Public
    skill_thresholds: dict[str, SkillLevel] = Field(default_factory=dict)
    salary_min: int = Field(..., ge=0)
    salary_max: int = Field(..., ge=0)
    allowed_regions: list[str] = Field(..., min_length=1)
    timestamp: int | None = Field(default=None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "applicant_id": "applicant-42",
                    "job_id": "job-7",
                    "skills": {"rust": 85, "go": 70},
                    "region": "US-CA",
                    "expected_salary": 150000,
                    "skill_thresholds": {"rust": 80},
                    "salary_min": 120000,
                    "salary_max": 180000,
                    "allowed_regions": ["US-CA", "US-NY", "CA-ON"],
                }
            ]
        }
    }


class GenerateProofResponse(BaseModel):
    """Generated proof artifact plus application metadata."""

    success: bool = True
    artifact: ProofArtifact
    nullifier: str
    privacy_score: int
    cryptographic: bool


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/eligibility", response_model=EligibilityResult)
async def check_eligibility(
    request: EligibilityInput,
    checker: Annotated[EligibilityChecker, Depends(get_eligibility_checker)],
) -> EligibilityResult:
    """
    Local eligibility pre-check.

    The reasons quote the applicant's own values and are returned only to
    the caller. Nothing private is logged.
    """
    result = checker.check(request)

    logger.info(
        "eligibility_precheck",
        job_id=request.job_id or None,
        eligible=result.eligible,
        failed_constraints=[c.value for c in result.failed_constraints],
    )

    return result


@router.post("/generate", response_model=GenerateProofResponse)
async def generate_proof(
    request: GenerateProofRequest,
    deriver: Annotated[NullifierDeriver, Depends(get_nullifier_deriver)],
    tree: Annotated[RegionMembershipTree, Depends(get_region_tree)],
    checker: Annotated[EligibilityChecker, Depends(get_eligibility_checker)],
    orchestrator: Annotated[ProofOrchestrator, Depends(get_proof_orchestrator)],
    scorer: Annotated[PrivacyScorer, Depends(get_privacy_scorer)],
) -> GenerateProofResponse:
    """
    Generate an eligibility proof for a job application.

    Ineligible applicants get a generic 400; which constraints failed is kept
    in the audit log only.

    Returns:
        GenerateProofResponse with the artifact (real or fallback)
    """
    bind_context(job_id=request.job_id)

    try:
        nullifier = deriver.derive(request.applicant_id, request.job_id)
        proof_request = ProofRequest(
            job_id=request.job_id,
            skills=request.skills,
            region=request.region,
            expected_salary=request.expected_salary,
            skill_thresholds=request.skill_thresholds,
            salary_min=request.salary_min,
            salary_max=request.salary_max,
            region_merkle_root=tree.build(request.allowed_regions),
            allowed_regions=request.allowed_regions,
            nullifier=nullifier,
            timestamp=request.timestamp,
        )
    except (ProofValidationError, ValidationError) as e:
        logger.warning(
            "proof_request_validation_error",
            job_id=request.job_id,
            error_type=type(e).__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    eligibility = checker.check(proof_request)
    if not eligibility.eligible:
        logger.info(
            "proof_generation_refused",
            job_id=request.job_id,
            failed_constraints=[c.value for c in eligibility.failed_constraints],
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=NOT_ELIGIBLE_DETAIL,
        )

    try:
        artifact = await orchestrator.generate(proof_request)
    except ProofValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return GenerateProofResponse(
        artifact=artifact,
        nullifier=nullifier,
        privacy_score=scorer.score_proof_disclosure(),
        cryptographic=artifact.is_cryptographic,
    )
