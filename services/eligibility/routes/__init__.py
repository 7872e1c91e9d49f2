"""
Eligibility Service Routes
==========================

API route handlers for the eligibility service.
"""

from services.eligibility.routes import privacy, proofs, regions, verification


__all__ = ["privacy", "proofs", "regions", "verification"]
