"""
Region Commitment Routes
========================

API endpoints for allowed-region Merkle roots and membership proofs.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ghosthire.logging import get_logger
from ghosthire.zk import MerkleProof, ProofValidationError, RegionMembershipTree
from services.eligibility.dependencies import get_region_tree


logger = get_logger(__name__)
router = APIRouter()


class RegionSetRequest(BaseModel):
    """A job's allowed-region set."""

    regions: list[str] = Field(..., description="Allowed region codes")


class RegionRootResponse(BaseModel):
    root: str
    size: int


class RegionProofRequest(BaseModel):
    region: str = Field(..., min_length=1)
    regions: list[str]


class RegionVerifyRequest(BaseModel):
    region: str = Field(..., min_length=1)
    proof: MerkleProof
    root: str


class RegionVerifyResponse(BaseModel):
    valid: bool


@router.post("/root", response_model=RegionRootResponse)
async def build_root(
    request: RegionSetRequest,
    tree: Annotated[RegionMembershipTree, Depends(get_region_tree)],
) -> RegionRootResponse:
    """Commit to a region set."""
    try:
        root = tree.build(request.regions)
    except ProofValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return RegionRootResponse(root=root, size=len(tree.canonicalize(request.regions)))


@router.post("/proof", response_model=MerkleProof)
async def region_proof(
    request: RegionProofRequest,
    tree: Annotated[RegionMembershipTree, Depends(get_region_tree)],
) -> MerkleProof:
    """Membership proof for one region; `valid: false` if it is not in the set."""
    return tree.get_proof(request.region, request.regions)


@router.post("/verify", response_model=RegionVerifyResponse)
async def verify_region_proof(
    request: RegionVerifyRequest,
    tree: Annotated[RegionMembershipTree, Depends(get_region_tree)],
) -> RegionVerifyResponse:
    valid = tree.verify(request.proof, tree.leaf_hash(request.region), request.root)
    return RegionVerifyResponse(valid=valid)
