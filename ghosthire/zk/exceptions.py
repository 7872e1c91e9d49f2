"""
ZK Engine Exceptions
====================

Error taxonomy for proof generation and verification.

Only ProofValidationError ever reaches the caller of the orchestrators.
Backend outages are absorbed by the fallback paths and ProofMalformed is
reported as an invalid VerificationOutcome.
"""


class ZKError(Exception):
    """Base class for eligibility-proof engine errors."""


class ProofValidationError(ZKError, ValueError):
    """Required input fields are missing or malformed."""


class ProvingBackendUnavailable(ZKError):
    """The proving backend is missing, failed, timed out or returned garbage."""


class VerificationBackendUnavailable(ZKError):
    """The ledger or the local verifier could not produce a verdict."""


class ProofMalformed(ZKError):
    """A submitted proof does not have the expected structure."""
