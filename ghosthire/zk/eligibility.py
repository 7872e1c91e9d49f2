"""
Eligibility Checker
===================

Local comparison of private applicant values against a job's public
thresholds, salary range and allowed regions. Pure: no I/O, never raises
for an ineligible applicant.

Version: 0.1.0
"""

from ghosthire.zk.merkle import RegionMembershipTree
from ghosthire.zk.models import ConstraintKind, EligibilityInput, EligibilityResult


class EligibilityChecker:
    """
    Checks every constraint and reports all violations.

    The reasons quote private values. They are meant for the applicant's own
    client; server-side code should log `failed_constraints` instead.
    """

    def __init__(self, tree: RegionMembershipTree | None = None):
        self.tree = tree or RegionMembershipTree()

    def check(self, data: EligibilityInput) -> EligibilityResult:
        reasons: list[str] = []
        failed: list[ConstraintKind] = []

        for skill, threshold in data.skill_thresholds.items():
            level = data.skills.get(skill, 0)
            if level < threshold:
                reasons.append(f"{skill} proficiency too low: {level} < {threshold}")
                if ConstraintKind.SKILL not in failed:
                    failed.append(ConstraintKind.SKILL)

        if not data.salary_min <= data.expected_salary <= data.salary_max:
            reasons.append(
                f"Salary expectation outside range: {data.expected_salary} "
                f"not in [{data.salary_min}, {data.salary_max}]"
            )
            failed.append(ConstraintKind.SALARY)

        if not self._region_allowed(data):
            reasons.append(f"Region not allowed: {data.region}")
            failed.append(ConstraintKind.REGION)

        return EligibilityResult(
            eligible=not reasons,
            reasons=reasons,
            failed_constraints=failed,
        )

    def _region_allowed(self, data: EligibilityInput) -> bool:
        if data.allowed_regions is not None:
            return data.region in data.allowed_regions
        if data.region_proof is not None:
            return self.tree.verify(
                data.region_proof,
                self.tree.leaf_hash(data.region),
                data.region_merkle_root,
            )
        return False
