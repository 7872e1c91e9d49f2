"""
GHOSTHIRE Test Suite
====================

Test organization:
- tests/unit/          - Unit tests (no external dependencies)
- tests/services/      - HTTP service tests (in-process ASGI client)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=ghosthire          # With coverage
"""
