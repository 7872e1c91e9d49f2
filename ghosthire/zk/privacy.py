"""
Privacy Scoring
===============

Heuristic 0-100 score of how much private information an application
disclosed. Higher is more private.

Version: 0.1.0
"""

import math

from ghosthire.zk.models import PrivacyMetrics


SKILLS_WEIGHT = 0.3
LOCATION_WEIGHT = 0.4
SALARY_WEIGHT = 0.5
NULLIFIER_BONUS = 5


class PrivacyScorer:
    """Deterministic disclosure score."""

    def score(self, metrics: PrivacyMetrics) -> int:
        raw = (
            100
            - SKILLS_WEIGHT * metrics.skills_revealed_pct
            - LOCATION_WEIGHT * metrics.location_revealed_pct
            - SALARY_WEIGHT * metrics.salary_revealed_pct
        )
        if metrics.has_nullifier:
            raw += NULLIFIER_BONUS

        # Round half up, then clamp
        return max(0, min(100, math.floor(raw + 0.5)))

    def score_proof_disclosure(self) -> int:
        """
        Score for a proof-based application.

        Skills, location and salary are only proven against the job's
        requirements, never revealed, and a nullifier is always attached.
        """
        return self.score(PrivacyMetrics(has_nullifier=True))
