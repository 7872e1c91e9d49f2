"""
Eligibility Routes Tests
========================

Tests for the eligibility service API endpoints.

Version: 0.1.0
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import status
from httpx import AsyncClient

from ghosthire.config import VerificationMode
from ghosthire.ledger import get_ledger_client
from ghosthire.zk import (
    NullifierDeriver,
    ProofOrchestrator,
    ProvingBackend,
    RegionMembershipTree,
    VerificationBackend,
    VerificationOrchestrator,
)


PROOF_JSON = {
    "pi_a": ["1", "2", "1"],
    "pi_b": [["3", "4"], ["5", "6"], ["1", "0"]],
    "pi_c": ["7", "8", "1"],
    "protocol": "groth16",
    "curve": "bn128",
}


def real_orchestrator() -> ProofOrchestrator:
    """Orchestrator whose backend always produces a proof."""
    backend = MagicMock(spec=ProvingBackend)
    backend.name = "fake"
    backend.artifacts_available.return_value = True
    backend.prove = AsyncMock(
        side_effect=lambda inputs: (
            PROOF_JSON,
            [inputs["jobId"], inputs["nullifier"], "1", str(inputs["timestamp"])],
        )
    )
    return ProofOrchestrator(backend=backend)


def insecure_verifier() -> VerificationOrchestrator:
    return VerificationOrchestrator(ledger=get_ledger_client(), mode=VerificationMode.INSECURE)


def strict_local_verifier() -> VerificationOrchestrator:
    """Strict verifier whose local pairing check always passes."""
    local = MagicMock(spec=VerificationBackend)
    local.name = "snarkjs"
    local.artifacts_available.return_value = True
    local.verify = AsyncMock(return_value=True)
    return VerificationOrchestrator(
        ledger=get_ledger_client(),
        mode=VerificationMode.STRICT,
        local_verifier=local,
    )


def verify_payload(artifact: dict[str, Any], job_id: str = "job-7") -> dict[str, Any]:
    return {
        "proof": artifact["proof"],
        "public_signals": artifact["public_signals"],
        "job": {"job_id": job_id},
        "circuit_id": artifact["circuit_id"],
    }


# =============================================================================
# Health
# =============================================================================


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "eligibility"
        assert data["components"]["ledger"]["status"] == "healthy"
        assert data["components"]["proving"]["status"] == "disabled"

    @pytest.mark.asyncio
    async def test_health_degraded_on_ledger_outage(self, eligibility_client: AsyncClient) -> None:
        get_ledger_client().simulate_outage()

        response = await eligibility_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["ledger"]["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_root(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["service"] == "GhostHire Eligibility Service"


# =============================================================================
# Proofs
# =============================================================================


class TestProofRoutes:
    """Tests for /api/v1/proofs."""

    @pytest.mark.asyncio
    async def test_generate_fallback(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        response = await eligibility_client.post(
            "/api/v1/proofs/generate", json=eligible_application
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["cryptographic"] is False
        assert data["privacy_score"] == 100
        assert data["nullifier"] == NullifierDeriver("test-nullifier-secret").derive(
            "applicant-42", "job-7"
        )
        assert data["artifact"]["kind"] == "fallback"
        assert data["artifact"]["circuit_id"].startswith("fallback")
        assert len(data["artifact"]["public_signals"]) == 4
        assert data["artifact"]["public_signals"][2] == "1"

    @pytest.mark.asyncio
    async def test_generate_real(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import get_proof_orchestrator
        from services.eligibility.main import app

        app.dependency_overrides[get_proof_orchestrator] = real_orchestrator

        response = await eligibility_client.post(
            "/api/v1/proofs/generate", json=eligible_application
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["cryptographic"] is True
        assert data["artifact"]["kind"] == "real"
        assert data["artifact"]["backend"] == "fake"

    @pytest.mark.asyncio
    async def test_generate_ineligible_is_generic(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        eligible_application["skills"] = {"rust": 75}

        response = await eligibility_client.post(
            "/api/v1/proofs/generate", json=eligible_application
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "success": False,
            "error": "Not eligible for this position",
            "status_code": 400,
        }
        assert "rust" not in response.text

    @pytest.mark.asyncio
    async def test_generate_bad_salary_range(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        eligible_application["salary_min"] = 200000

        response = await eligibility_client.post(
            "/api/v1/proofs/generate", json=eligible_application
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_generate_missing_field(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        del eligible_application["region"]

        response = await eligibility_client.post(
            "/api/v1/proofs/generate", json=eligible_application
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_precheck_returns_reasons(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.post(
            "/api/v1/proofs/eligibility",
            json={
                "skills": {"rust": 75},
                "region": "US-CA",
                "expected_salary": 100000,
                "skill_thresholds": {"rust": 80},
                "salary_min": 90000,
                "salary_max": 150000,
                "allowed_regions": ["US-CA"],
            },
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["eligible"] is False
        assert data["reasons"] == ["rust proficiency too low: 75 < 80"]
        assert data["failed_constraints"] == ["skill"]


# =============================================================================
# Verification
# =============================================================================


class TestVerificationRoutes:
    """Tests for /api/v1/verify."""

    async def _generate(
        self, client: AsyncClient, application: dict[str, Any]
    ) -> dict[str, Any]:
        response = await client.post("/api/v1/proofs/generate", json=application)
        assert response.status_code == status.HTTP_200_OK
        return response.json()["artifact"]

    @pytest.mark.asyncio
    async def test_strict_rejects_fallback(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/proof", json=verify_payload(artifact)
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["valid"] is False
        assert "strict" in data["error"]

    @pytest.mark.asyncio
    async def test_strict_rejects_untagged_fallback(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        artifact = await self._generate(eligibility_client, eligible_application)
        payload = verify_payload(artifact)
        del payload["circuit_id"]

        response = await eligibility_client.post("/api/v1/verify/proof", json=payload)

        data = response.json()
        assert data["valid"] is False
        assert data["transaction_hash"] is None
        assert "no cryptographic check" in data["error"]

    @pytest.mark.asyncio
    async def test_strict_rejects_real_on_mock_ledger(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import get_proof_orchestrator
        from services.eligibility.main import app

        app.dependency_overrides[get_proof_orchestrator] = real_orchestrator
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/proof", json=verify_payload(artifact)
        )

        data = response.json()
        assert data["valid"] is False
        assert data["error"].startswith("Verification backend unavailable")

    @pytest.mark.asyncio
    async def test_strict_accepts_locally_verified_real(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import (
            get_proof_orchestrator,
            get_verification_orchestrator,
        )
        from services.eligibility.main import app

        app.dependency_overrides[get_proof_orchestrator] = real_orchestrator
        app.dependency_overrides[get_verification_orchestrator] = strict_local_verifier
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/proof", json=verify_payload(artifact)
        )

        data = response.json()
        assert data["valid"] is True
        assert data["eligible"] is True
        assert data["verified_by"] == "local"

    @pytest.mark.asyncio
    async def test_insecure_accepts_fallback_and_records_receipt(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import get_verification_orchestrator
        from services.eligibility.main import app

        app.dependency_overrides[get_verification_orchestrator] = insecure_verifier
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/proof", json=verify_payload(artifact)
        )
        assert response.json()["valid"] is True

        receipt = await eligibility_client.get(
            f"/api/v1/verify/receipts/{artifact['proof_hash']}"
        )
        assert receipt.status_code == status.HTTP_200_OK
        assert receipt.json()["valid"] is True

    @pytest.mark.asyncio
    async def test_wrong_job(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import get_verification_orchestrator
        from services.eligibility.main import app

        app.dependency_overrides[get_verification_orchestrator] = insecure_verifier
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/proof", json=verify_payload(artifact, job_id="job-8")
        )

        assert response.json()["valid"] is False
        assert response.json()["error"] == "Job ID hash mismatch"

    @pytest.mark.asyncio
    async def test_malformed_proof(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.post(
            "/api/v1/verify/proof",
            json={
                "proof": {"protocol": "groth16", "pi_a": ["1"]},
                "public_signals": ["1", "2", "1", "3"],
                "job": {"job_id": "job-7"},
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["valid"] is False

    @pytest.mark.asyncio
    async def test_batch(
        self, eligibility_client: AsyncClient, eligible_application: dict[str, Any]
    ) -> None:
        from services.eligibility.dependencies import get_verification_orchestrator
        from services.eligibility.main import app

        app.dependency_overrides[get_verification_orchestrator] = insecure_verifier
        artifact = await self._generate(eligibility_client, eligible_application)

        response = await eligibility_client.post(
            "/api/v1/verify/batch",
            json={
                "proofs": [
                    verify_payload(artifact),
                    verify_payload(artifact, job_id="job-8"),
                ]
            },
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert data["valid"] == 1
        assert data["invalid"] == 1

    @pytest.mark.asyncio
    async def test_unknown_receipt(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.get("/api/v1/verify/receipts/0xmissing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["success"] is False


# =============================================================================
# Regions and privacy
# =============================================================================


class TestRegionRoutes:
    """Tests for /api/v1/regions."""

    @pytest.mark.asyncio
    async def test_root(
        self, eligibility_client: AsyncClient, allowed_regions: list[str]
    ) -> None:
        response = await eligibility_client.post(
            "/api/v1/regions/root", json={"regions": allowed_regions}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "root": RegionMembershipTree().build(allowed_regions),
            "size": 3,
        }

    @pytest.mark.asyncio
    async def test_empty_set(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.post("/api/v1/regions/root", json={"regions": []})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_proof_and_verify(
        self, eligibility_client: AsyncClient, allowed_regions: list[str]
    ) -> None:
        proof = (
            await eligibility_client.post(
                "/api/v1/regions/proof",
                json={"region": "US-NY", "regions": allowed_regions},
            )
        ).json()

        assert proof["valid"] is True
        assert proof["leaf_index"] == 2

        response = await eligibility_client.post(
            "/api/v1/regions/verify",
            json={"region": "US-NY", "proof": proof, "root": proof["root"]},
        )
        assert response.json() == {"valid": True}

        response = await eligibility_client.post(
            "/api/v1/regions/verify",
            json={"region": "US-CA", "proof": proof, "root": proof["root"]},
        )
        assert response.json() == {"valid": False}


class TestPrivacyRoutes:
    """Tests for /api/v1/privacy."""

    @pytest.mark.asyncio
    async def test_score(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.post(
            "/api/v1/privacy/score", json={"salary_revealed_pct": 50}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"score": 75}

    @pytest.mark.asyncio
    async def test_proof_disclosure(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.get("/api/v1/privacy/proof")

        assert response.json() == {"score": 100}

    @pytest.mark.asyncio
    async def test_out_of_range(self, eligibility_client: AsyncClient) -> None:
        response = await eligibility_client.post(
            "/api/v1/privacy/score", json={"skills_revealed_pct": 150}
        )

        assert response.status_code == 422
