"""
Nullifier Derivation
====================

Keyed, deterministic replay tokens for (applicant, job) pairs.

A nullifier is HMAC-SHA256 under a server-held key, so the same pair always
maps to the same token while nobody without the key can forge one or link
two nullifiers to the same applicant. Uniqueness is enforced by the caller's
application store, not here.

Version: 0.1.0
"""

import hashlib
import hmac
import re

from pydantic import SecretStr

from ghosthire.zk.exceptions import ProofValidationError


NULLIFIER_PREFIX = "0x"
NULLIFIER_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")

# BN254 scalar field order
FIELD_ORDER = 21888242871839275222246405745257275088548364400416034343698204186575808495617


def is_well_formed(nullifier: str) -> bool:
    """Check the `0x` + 64 lowercase hex layout."""
    return isinstance(nullifier, str) and NULLIFIER_PATTERN.match(nullifier) is not None


def nullifier_to_field(nullifier: str) -> str:
    """Encode a nullifier as a decimal BN254 field element for public signals."""
    if not is_well_formed(nullifier):
        raise ProofValidationError(f"Malformed nullifier: {nullifier!r}")
    return str(int(nullifier[len(NULLIFIER_PREFIX):], 16) % FIELD_ORDER)


def _length_prefixed(*parts: str) -> bytes:
    out = bytearray()
    for part in parts:
        raw = part.encode("utf-8")
        out += len(raw).to_bytes(4, "big")
        out += raw
    return bytes(out)


class NullifierDeriver:
    """
    Derives nullifiers under an injected secret key.

    Usage:
        deriver = NullifierDeriver(secret_key="...")
        nullifier = deriver.derive("applicant-42", "job-7")
    """

    def __init__(self, secret_key: str | bytes | SecretStr):
        if isinstance(secret_key, SecretStr):
            secret_key = secret_key.get_secret_value()
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        if not secret_key:
            raise ProofValidationError("Nullifier secret key must not be empty")
        self._key = secret_key

    @classmethod
    def from_settings(cls) -> "NullifierDeriver":
        """Build a deriver from NULLIFIER_SECRET."""
        from ghosthire.config import settings

        return cls(settings.nullifier.secret)

    def derive(self, applicant_id: str, job_id: str) -> str:
        """
        Derive the nullifier for an applicant/job pair.

        Args:
            applicant_id: Applicant identity as known to the issuing side
            job_id: Job identifier

        Returns:
            `0x`-prefixed 64-char hex digest

        Raises:
            ProofValidationError: If either identifier is empty
        """
        if not applicant_id or not job_id:
            raise ProofValidationError("applicant_id and job_id are required")

        # Length prefixes keep ("ab", "c") and ("a", "bc") apart.
        digest = hmac.new(self._key, _length_prefixed(applicant_id, job_id), hashlib.sha256)
        return NULLIFIER_PREFIX + digest.hexdigest()

    def __repr__(self) -> str:
        return "NullifierDeriver(secret_key=***)"
