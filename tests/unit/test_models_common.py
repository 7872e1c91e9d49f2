"""
Unit tests for the shared response models.
"""

from ghosthire.models import ErrorResponse, HealthResponse


class TestHealthResponse:
    """Tests for HealthResponse.is_healthy."""

    def test_no_components(self) -> None:
        assert HealthResponse(service="eligibility", version="0.1.0").is_healthy is True

    def test_disabled_counts_as_healthy(self) -> None:
        health = HealthResponse(
            service="eligibility",
            version="0.1.0",
            components={"ledger": {"status": "healthy"}, "proving": {"status": "disabled"}},
        )

        assert health.is_healthy is True

    def test_degraded_component(self) -> None:
        health = HealthResponse(
            service="eligibility",
            version="0.1.0",
            components={"ledger": {"status": "unhealthy"}, "proving": {"status": "healthy"}},
        )

        assert health.is_healthy is False


class TestErrorResponse:
    """Tests for ErrorResponse."""

    def test_shape(self) -> None:
        body = ErrorResponse(error="Not eligible for this position", status_code=400).model_dump()

        assert body == {
            "success": False,
            "error": "Not eligible for this position",
            "status_code": 400,
        }
