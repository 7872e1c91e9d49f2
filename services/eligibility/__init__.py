"""
Eligibility Service
===================

HTTP surface for eligibility proofs: generation, pre-checks, verification,
region commitments and privacy scoring.
"""
