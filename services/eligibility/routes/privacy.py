"""
Privacy Score Routes
====================

API endpoints for the disclosure-based privacy score.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ghosthire.zk import PrivacyMetrics, PrivacyScorer
from services.eligibility.dependencies import get_privacy_scorer


router = APIRouter()


class PrivacyScoreResponse(BaseModel):
    score: int


@router.post("/score", response_model=PrivacyScoreResponse)
async def score_disclosure(
    metrics: PrivacyMetrics,
    scorer: Annotated[PrivacyScorer, Depends(get_privacy_scorer)],
) -> PrivacyScoreResponse:
    """Score an application by how much of each attribute it revealed."""
    return PrivacyScoreResponse(score=scorer.score(metrics))


@router.get("/proof", response_model=PrivacyScoreResponse)
async def proof_disclosure_score(
    scorer: Annotated[PrivacyScorer, Depends(get_privacy_scorer)],
) -> PrivacyScoreResponse:
    """Score of an application made with an eligibility proof."""
    return PrivacyScoreResponse(score=scorer.score_proof_disclosure())
