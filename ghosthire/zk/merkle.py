"""
Region Membership Tree
======================

Merkle commitment over a job's allowed-region set.

Leaves and internal nodes are hashed under different one-byte prefixes so a
leaf can never be passed off as an internal node. The region set is sorted
and de-duplicated first, which makes the root a function of the set alone.

Version: 0.1.0
"""

import hashlib

from ghosthire.logging import get_logger
from ghosthire.zk.exceptions import ProofValidationError
from ghosthire.zk.models import MerkleProof


logger = get_logger(__name__)

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"


def _hex(digest: bytes) -> str:
    return "0x" + digest.hex()


def _unhex(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


class RegionMembershipTree:
    """
    Builds region-set roots and membership proofs.

    Usage:
        tree = RegionMembershipTree()
        root = tree.build(["US-CA", "US-NY", "CA-ON"])
        proof = tree.get_proof("US-NY", ["US-CA", "US-NY", "CA-ON"])
        assert tree.verify(proof, tree.leaf_hash("US-NY"), root)
    """

    @staticmethod
    def canonicalize(regions: list[str]) -> list[str]:
        """Sorted, de-duplicated region list."""
        return sorted(set(regions))

    @staticmethod
    def leaf_hash(region: str) -> str:
        """Domain-separated hash of a single region."""
        return _hex(hashlib.sha256(LEAF_PREFIX + region.encode("utf-8")).digest())

    @staticmethod
    def node_hash(left: str, right: str) -> str:
        """Domain-separated hash of two child hashes."""
        return _hex(hashlib.sha256(NODE_PREFIX + _unhex(left) + _unhex(right)).digest())

    def _levels(self, leaves: list[str]) -> list[list[str]]:
        """All tree levels, leaves first, root level last."""
        levels = [leaves]
        current = leaves
        while len(current) > 1:
            next_level = []
            for i in range(0, len(current), 2):
                left = current[i]
                # Odd count: the last node is paired with itself
                right = current[i + 1] if i + 1 < len(current) else left
                next_level.append(self.node_hash(left, right))
            levels.append(next_level)
            current = next_level
        return levels

    def build(self, regions: list[str]) -> str:
        """
        Compute the Merkle root of a region set.

        Raises:
            ProofValidationError: If the set is empty
        """
        canonical = self.canonicalize(regions)
        if not canonical:
            raise ProofValidationError("Cannot build a region tree from an empty set")
        return self._levels([self.leaf_hash(r) for r in canonical])[-1][0]

    def get_proof(self, region: str, regions: list[str]) -> MerkleProof:
        """
        Produce a membership proof for `region`.

        Returns a proof with `valid=False` when the region is not in the set.
        """
        canonical = self.canonicalize(regions)
        if not canonical:
            return MerkleProof(siblings=[], leaf_index=-1, root="", valid=False)

        levels = self._levels([self.leaf_hash(r) for r in canonical])
        root = levels[-1][0]

        if region not in canonical:
            return MerkleProof(siblings=[], leaf_index=-1, root=root, valid=False)

        leaf_index = canonical.index(region)
        siblings = []
        index = leaf_index
        for level in levels[:-1]:
            sibling_index = index ^ 1
            # A duplicated last node is its own sibling
            siblings.append(level[sibling_index] if sibling_index < len(level) else level[index])
            index //= 2

        return MerkleProof(siblings=siblings, leaf_index=leaf_index, root=root, valid=True)

    def verify(self, proof: MerkleProof, leaf_hash: str, root: str) -> bool:
        """Fold the sibling path over `leaf_hash` and compare with `root`."""
        if not proof.valid or proof.leaf_index < 0 or not root:
            return False
        if proof.leaf_index >= 2 ** len(proof.siblings):
            return False

        try:
            current = leaf_hash
            index = proof.leaf_index
            for sibling in proof.siblings:
                if index % 2 == 0:
                    current = self.node_hash(current, sibling)
                else:
                    current = self.node_hash(sibling, current)
                index //= 2
        except ValueError:
            logger.debug("merkle_proof_not_hex", leaf_index=proof.leaf_index)
            return False

        return current == root
