"""
Test Configuration
==================

Pytest fixtures for GhostHire tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LEDGER_MODE"] = "mock"
os.environ["LEDGER_MAX_RETRIES"] = "2"
os.environ["ZK_BACKEND"] = "none"
os.environ["NULLIFIER_SECRET"] = "test-nullifier-secret"
os.environ["VERIFICATION_MODE"] = "strict"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def eligibility_client() -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Eligibility Service."""
    from ghosthire.ledger import get_ledger_client
    from services.eligibility.main import app

    ledger = get_ledger_client()
    ledger.clear_all()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    ledger.clear_all()


@pytest.fixture
def allowed_regions() -> list[str]:
    """Allowed-region set for the sample job."""
    return ["US-CA", "US-NY", "CA-ON"]


@pytest.fixture
def eligible_application(allowed_regions: list[str]) -> dict[str, Any]:
    """Application that satisfies every constraint of the sample job."""
    return {
        "applicant_id": "applicant-42",
        "job_id": "job-7",
        "skills": {"rust": 85, "go": 70},
        "region": "US-CA",
        "expected_salary": 100000,
        "skill_thresholds": {"rust": 80},
        "salary_min": 90000,
        "salary_max": 150000,
        "allowed_regions": allowed_regions,
    }


@pytest.fixture
def proof_request_data(eligible_application: dict[str, Any]) -> dict[str, Any]:
    """ProofRequest payload built from the eligible application."""
    from ghosthire.zk import NullifierDeriver, RegionMembershipTree

    data = {k: v for k, v in eligible_application.items() if k != "applicant_id"}
    data["nullifier"] = NullifierDeriver("test-key").derive(
        eligible_application["applicant_id"],
        eligible_application["job_id"],
    )
    data["region_merkle_root"] = RegionMembershipTree().build(data["allowed_regions"])
    return data
