"""
Unit tests for the region membership tree.
"""

import hashlib

import pytest

from ghosthire.zk import MerkleProof, ProofValidationError, RegionMembershipTree


REGIONS = ["US-CA", "US-NY", "CA-ON"]


class TestRegionMembershipTree:
    """Tests for RegionMembershipTree."""

    @pytest.fixture
    def tree(self) -> RegionMembershipTree:
        return RegionMembershipTree()

    def test_canonicalize(self, tree: RegionMembershipTree) -> None:
        assert tree.canonicalize(REGIONS) == ["CA-ON", "US-CA", "US-NY"]

    def test_proof_index_follows_canonical_order(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)

        assert proof.valid is True
        assert proof.leaf_index == 2
        assert proof.root == tree.build(REGIONS)

    def test_root_is_order_independent(self, tree: RegionMembershipTree) -> None:
        assert tree.build(["US-NY", "CA-ON", "US-CA"]) == tree.build(REGIONS)
        assert tree.build(REGIONS + ["US-CA"]) == tree.build(REGIONS)

    def test_root_changes_with_set(self, tree: RegionMembershipTree) -> None:
        assert tree.build(REGIONS) != tree.build(REGIONS + ["DE-BE"])

    def test_root_format(self, tree: RegionMembershipTree) -> None:
        root = tree.build(REGIONS)

        assert root.startswith("0x")
        assert len(root) == 66

    def test_single_region_root_is_leaf(self, tree: RegionMembershipTree) -> None:
        assert tree.build(["US-CA"]) == tree.leaf_hash("US-CA")

    def test_empty_set_rejected(self, tree: RegionMembershipTree) -> None:
        with pytest.raises(ProofValidationError):
            tree.build([])

    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 7, 8])
    def test_every_member_verifies(self, tree: RegionMembershipTree, size: int) -> None:
        regions = [f"R-{i:02d}" for i in range(size)]
        root = tree.build(regions)

        for region in regions:
            proof = tree.get_proof(region, regions)
            assert tree.verify(proof, tree.leaf_hash(region), root), region

    def test_absent_region(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("DE-BE", REGIONS)

        assert proof.valid is False
        assert proof.leaf_index == -1
        assert proof.siblings == []
        assert proof.root == tree.build(REGIONS)
        assert tree.verify(proof, tree.leaf_hash("DE-BE"), tree.build(REGIONS)) is False

    def test_absent_region_empty_set(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-CA", [])

        assert proof == MerkleProof(siblings=[], leaf_index=-1, root="", valid=False)

    def test_proof_for_other_region_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)

        assert tree.verify(proof, tree.leaf_hash("US-CA"), tree.build(REGIONS)) is False

    def test_tampered_sibling_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)
        proof.siblings[-1] = "0x" + "00" * 32

        assert tree.verify(proof, tree.leaf_hash("US-NY"), tree.build(REGIONS)) is False

    def test_wrong_index_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-CA", REGIONS)
        proof.leaf_index = 0

        assert tree.verify(proof, tree.leaf_hash("US-CA"), tree.build(REGIONS)) is False

    def test_index_out_of_range_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)
        proof.leaf_index = 2 ** len(proof.siblings) + 2

        assert tree.verify(proof, tree.leaf_hash("US-NY"), tree.build(REGIONS)) is False

    def test_non_hex_sibling_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)
        proof.siblings[0] = "0xnothex"

        assert tree.verify(proof, tree.leaf_hash("US-NY"), tree.build(REGIONS)) is False

    def test_empty_root_fails(self, tree: RegionMembershipTree) -> None:
        proof = tree.get_proof("US-NY", REGIONS)

        assert tree.verify(proof, tree.leaf_hash("US-NY"), "") is False


class TestDomainSeparation:
    """Leaves and internal nodes hash under different prefixes."""

    def test_leaf_prefix(self) -> None:
        expected = "0x" + hashlib.sha256(b"\x00" + b"US-CA").hexdigest()

        assert RegionMembershipTree.leaf_hash("US-CA") == expected

    def test_node_prefix(self) -> None:
        left = RegionMembershipTree.leaf_hash("CA-ON")
        right = RegionMembershipTree.leaf_hash("US-CA")
        raw = bytes.fromhex(left[2:]) + bytes.fromhex(right[2:])

        assert RegionMembershipTree.node_hash(left, right) == (
            "0x" + hashlib.sha256(b"\x01" + raw).hexdigest()
        )
        assert RegionMembershipTree.node_hash(left, right) != (
            "0x" + hashlib.sha256(raw).hexdigest()
        )

    def test_internal_node_is_not_a_leaf(self) -> None:
        """An internal node's preimage hashed as a leaf gives a different digest."""
        left = RegionMembershipTree.leaf_hash("CA-ON")
        right = RegionMembershipTree.leaf_hash("US-CA")
        raw = bytes.fromhex(left[2:]) + bytes.fromhex(right[2:])

        as_leaf = "0x" + hashlib.sha256(b"\x00" + raw).hexdigest()

        assert as_leaf != RegionMembershipTree.node_hash(left, right)
