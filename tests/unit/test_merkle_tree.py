"""
Merkle Tree Unit Tests
Tests for fixmerkle/merkle/merkle_tree.py

Covers:
1. Empty tree - root and proof requests fail with TreeEmpty
2. Insertion - leaf index assignment, root changes, capacity limit
3. Root invariant - cached root equals a fresh recomputation
4. Proof generation - length, bounds, independence from the tree
5. Proof verification - round trip, tamper detection, staleness
"""
import pytest

from fixmerkle.crypto.hashing import Blake2bBackend, Sha256Backend
from fixmerkle.merkle.merkle_node import MerkleNode
from fixmerkle.merkle.merkle_tree import (
    DEFAULT_TREE_HEIGHT,
    MAX_TREE_HEIGHT,
    MerkleTree,
    validate_height,
    verify_proof,
)
from fixmerkle.schemas.errors import (
    ErrorCodes,
    IndexOutOfRangeException,
    MerkleTreeException,
    TreeEmptyException,
    TreeFullException,
)
from fixtures.tree_fixtures import make_items, make_tree, reference_root


class TestConstruction:
    """Tests for tree construction and shape."""

    def test_default_height_and_capacity(self):
        tree = MerkleTree()

        assert tree.height == DEFAULT_TREE_HEIGHT == 5
        assert tree.capacity == 32
        assert tree.size == 0
        assert len(tree) == 0
        assert tree.is_empty
        assert not tree.is_full

    def test_custom_height(self):
        tree = MerkleTree(height=3)

        assert tree.capacity == 8
        assert len(tree.leaf_hashes) == 8

    def test_leaf_slots_start_as_placeholder(self):
        tree = MerkleTree()

        assert tree.leaf_hashes == (0,) * 32

    @pytest.mark.parametrize("height", [0, -1, MAX_TREE_HEIGHT + 1, 2.0, "5", True, None])
    def test_invalid_height_rejected(self, height):
        with pytest.raises(ValueError):
            MerkleTree(height=height)

    def test_validate_height_returns_value(self):
        assert validate_height(1) == 1
        assert validate_height(MAX_TREE_HEIGHT) == MAX_TREE_HEIGHT

    def test_default_backend_is_sha256(self):
        assert isinstance(MerkleTree().backend, Sha256Backend)

    def test_repr(self):
        tree = make_tree(2)

        assert repr(tree) == "MerkleTree(height=5, size=2, capacity=32, backend='sha256')"


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_root_hash_of_empty_tree_raises(self, empty_tree):
        with pytest.raises(TreeEmptyException) as exc_info:
            empty_tree.get_root_hash()

        assert exc_info.value.code == ErrorCodes.TREE_EMPTY

    def test_proof_for_empty_tree_raises(self, empty_tree):
        with pytest.raises(TreeEmptyException):
            empty_tree.generate_proof(0)

    def test_empty_check_takes_precedence_over_index(self, empty_tree):
        """An empty tree reports TreeEmpty, not IndexOutOfRange."""
        with pytest.raises(TreeEmptyException):
            empty_tree.generate_proof(40)

    def test_verify_against_empty_tree_is_false(self, empty_tree):
        assert empty_tree.verify((0,) * 5, "data") is False


class TestInsertion:
    """Tests for add_hash_of."""

    def test_kth_insertion_occupies_index_k(self):
        tree = MerkleTree()
        items = make_items(10)

        for k, item in enumerate(items):
            assert tree.add_hash_of(item) == k
            assert tree.leaf_hash(k) == tree.backend.hash_data(item)

        assert tree.size == 10

    def test_unfilled_slots_keep_placeholder(self):
        tree = make_tree(3)

        assert all(h == 0 for h in tree.leaf_hashes[3:])
        assert all(h != 0 for h in tree.leaf_hashes[:3])

    def test_root_changes_after_each_insertion(self):
        tree = MerkleTree()
        roots = []
        for item in make_items(tree.capacity):
            tree.add_hash_of(item)
            roots.append(tree.get_root_hash())

        assert len(set(roots)) == len(roots)

    def test_fill_to_capacity(self, full_tree):
        assert full_tree.size == 32
        assert full_tree.is_full

    def test_insert_into_full_tree_raises(self, full_tree):
        with pytest.raises(TreeFullException) as exc_info:
            full_tree.add_hash_of("33rd data node")

        assert exc_info.value.code == ErrorCodes.TREE_FULL
        assert exc_info.value.details == {"capacity": 32}

    def test_failed_insert_leaves_state_unchanged(self, full_tree):
        root_before = full_tree.get_root_hash()
        leaves_before = full_tree.leaf_hashes

        with pytest.raises(TreeFullException):
            full_tree.add_hash_of("overflow")

        assert full_tree.size == 32
        assert full_tree.get_root_hash() == root_before
        assert full_tree.leaf_hashes == leaves_before

    def test_non_data_rejected_without_mutation(self):
        tree = make_tree(2)
        root_before = tree.get_root_hash()

        with pytest.raises(TypeError):
            tree.add_hash_of(12345)

        assert tree.size == 2
        assert tree.get_root_hash() == root_before

    def test_str_and_utf8_bytes_hash_equally(self):
        tree_str = MerkleTree.from_items(["data1", "dätä2"])
        tree_bytes = MerkleTree.from_items([b"data1", "dätä2".encode("utf-8")])

        assert tree_str.get_root_hash() == tree_bytes.get_root_hash()

    def test_duplicate_items_get_separate_leaves(self):
        tree = MerkleTree.from_items(["data"] * 4)

        assert tree.size == 4
        assert tree.leaf_hash(0) == tree.leaf_hash(3)

    def test_from_items_overflow_raises(self):
        with pytest.raises(TreeFullException):
            MerkleTree.from_items(make_items(5), height=2)


class TestRootInvariant:
    """Cached root hash always matches a recomputation over the leaves."""

    @pytest.mark.parametrize("count", [1, 2, 3, 7, 16, 31, 32])
    def test_cached_root_equals_recursive_hash(self, count):
        tree = make_tree(count)

        assert tree.get_root_hash() == tree._node_hash(MerkleNode.root(tree.height))

    @pytest.mark.parametrize("count", [1, 2, 5, 17, 32])
    def test_cached_root_equals_level_fold(self, count):
        tree = make_tree(count)

        assert tree.get_root_hash() == reference_root(tree)

    def test_single_leaf_root_manual(self):
        """One leaf in a height-2 tree: combine up through placeholder subtrees."""
        tree = MerkleTree(height=2)
        tree.add_hash_of("only")
        b = tree.backend

        leaf = b.hash_data("only")
        empty_pair = b.combine(0, 0)
        expected = b.combine(b.combine(leaf, 0), empty_pair)

        assert tree.get_root_hash() == expected

    def test_same_items_same_root(self):
        roots = {make_tree(9).get_root_hash() for _ in range(5)}

        assert len(roots) == 1

    def test_backend_changes_root(self):
        sha = make_tree(4, backend=Sha256Backend())
        blake = make_tree(4, backend=Blake2bBackend())

        assert sha.get_root_hash() != blake.get_root_hash()


class TestProofGeneration:
    """Tests for generate_proof."""

    def test_proof_length_equals_height(self, three_item_tree):
        proof = three_item_tree.generate_proof(1)

        assert isinstance(proof, tuple)
        assert len(proof) == 5

    @pytest.mark.parametrize("height", [1, 2, 3, 6])
    def test_proof_length_other_heights(self, height):
        tree = make_tree(2, height=height)

        assert len(tree.generate_proof(0)) == height

    def test_first_entry_is_leaf_sibling(self, three_item_tree):
        proof = three_item_tree.generate_proof(1)

        assert proof[0] == three_item_tree.leaf_hash(0)

    def test_second_entry_is_parent_sibling(self, three_item_tree):
        b = three_item_tree.backend
        proof = three_item_tree.generate_proof(1)

        # Leaves 2 and 3 ("data3" and the placeholder) share a parent
        assert proof[1] == b.combine(b.hash_data("data3"), 0)

    def test_index_at_size_raises(self, three_item_tree):
        with pytest.raises(IndexOutOfRangeException) as exc_info:
            three_item_tree.generate_proof(3)

        assert exc_info.value.code == ErrorCodes.INDEX_OUT_OF_RANGE

    def test_index_below_capacity_but_unfilled_raises(self, three_item_tree):
        with pytest.raises(IndexOutOfRangeException):
            three_item_tree.generate_proof(10)

    def test_index_at_capacity_raises(self, full_tree):
        with pytest.raises(IndexOutOfRangeException):
            full_tree.generate_proof(32)

    @pytest.mark.parametrize("index", [-1, 1.0, "1", True, None])
    def test_invalid_index_types_raise(self, three_item_tree, index):
        with pytest.raises(IndexOutOfRangeException):
            three_item_tree.generate_proof(index)

    def test_errors_share_base_class(self, empty_tree):
        with pytest.raises(MerkleTreeException):
            empty_tree.generate_proof(0)

    def test_proof_is_a_snapshot(self, three_item_tree):
        proof = three_item_tree.generate_proof(1)
        three_item_tree.add_hash_of("data4")

        assert proof == tuple(proof)
        assert three_item_tree.generate_proof(1) != proof


class TestPreconditionChecks:
    """Tests for the non-raising check_* methods."""

    def test_check_insert_ok(self, empty_tree):
        assert empty_tree.check_insert() is None

    def test_check_insert_full(self, full_tree):
        error = full_tree.check_insert()

        assert error is not None
        assert error.code == ErrorCodes.TREE_FULL
        assert error.retryable is False

    def test_check_not_empty(self, empty_tree, three_item_tree):
        assert empty_tree.check_not_empty().code == ErrorCodes.TREE_EMPTY
        assert three_item_tree.check_not_empty() is None

    def test_check_proof_request(self, three_item_tree):
        assert three_item_tree.check_proof_request(2) is None

        error = three_item_tree.check_proof_request(3)
        assert error.code == ErrorCodes.INDEX_OUT_OF_RANGE
        assert error.details["size"] == 3

    def test_check_matches_raised_exception(self, full_tree):
        error = full_tree.check_insert()

        with pytest.raises(TreeFullException) as exc_info:
            full_tree.add_hash_of("x")

        assert exc_info.value.to_error_model() == error


class TestVerifyProof:
    """Tests for verify_proof."""

    def test_valid_proof_returns_true(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)

        assert verify_proof(root, proof, "data2") is True

    def test_fake_data_returns_false(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)

        assert verify_proof(root, proof, "fake data") is False

    def test_proof_becomes_invalid_after_insertion(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)
        assert verify_proof(root, proof, "data2") is True

        three_item_tree.add_hash_of("data4")
        new_root = three_item_tree.get_root_hash()

        assert verify_proof(new_root, proof, "data2") is False

    def test_old_proof_still_matches_old_root(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)
        three_item_tree.add_hash_of("data4")

        assert verify_proof(root, proof, "data2") is True

    def test_every_leaf_of_every_size_verifies(self):
        for n in range(1, 33):
            tree = make_tree(n)
            root = tree.get_root_hash()
            for i, item in enumerate(make_items(n)):
                assert verify_proof(root, tree.generate_proof(i), item), (n, i)

    def test_other_leaf_data_rejected(self):
        tree = make_tree(8)
        root = tree.get_root_hash()
        proof = tree.generate_proof(2)

        assert verify_proof(root, proof, "data 3") is True
        assert verify_proof(root, proof, "data 5") is False

    def test_tampered_sibling_rejected(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = list(three_item_tree.generate_proof(1))
        proof[2] ^= 1

        assert verify_proof(root, proof, "data2") is False

    def test_wrong_root_rejected(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)

        assert verify_proof(root ^ 1, proof, "data2") is False

    @pytest.mark.parametrize("proof", [
        (),
        (1, 2, 3, 4),
        (1, 2, 3, 4, 5, 6),
    ])
    def test_wrong_length_returns_false(self, three_item_tree, proof):
        assert verify_proof(three_item_tree.get_root_hash(), proof, "data2") is False

    @pytest.mark.parametrize("proof", [
        None,
        42,
        ("a", "b", "c", "d", "e"),
        (1.0, 2, 3, 4, 5),
        (True, 2, 3, 4, 5),
    ])
    def test_malformed_proof_returns_false(self, three_item_tree, proof):
        assert verify_proof(three_item_tree.get_root_hash(), proof, "data2") is False

    def test_malformed_data_returns_false(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)

        assert verify_proof(root, proof, 123) is False
        assert verify_proof(root, proof, None) is False

    def test_proof_as_list_accepted(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = list(three_item_tree.generate_proof(0))

        assert verify_proof(root, proof, "data1") is True

    def test_height_must_match(self):
        tree = make_tree(3, height=3)
        root = tree.get_root_hash()
        proof = tree.generate_proof(0)

        assert verify_proof(root, proof, "data 1") is False
        assert verify_proof(root, proof, "data 1", height=3) is True

    def test_backend_must_match(self):
        tree = make_tree(3, backend=Blake2bBackend())
        root = tree.get_root_hash()
        proof = tree.generate_proof(2)

        assert verify_proof(root, proof, "data 3") is False
        assert verify_proof(root, proof, "data 3", backend=Blake2bBackend()) is True

    def test_tree_verify_convenience(self, three_item_tree):
        proof = three_item_tree.generate_proof(2)

        assert three_item_tree.verify(proof, "data3") is True
        assert three_item_tree.verify(proof, "data2") is False

    def test_verification_needs_no_tree(self, three_item_tree):
        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)
        del three_item_tree

        assert verify_proof(root, proof, "data2") is True

    def test_backend_errors_return_false(self, three_item_tree):
        class StrictBackend(Sha256Backend):
            def hash_data(self, data):
                return self.digest(data.encode("utf-8"))

        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(1)

        assert verify_proof(root, proof, "data2", backend=StrictBackend()) is True
        assert verify_proof(root, proof, 123, backend=StrictBackend()) is False

    def test_failing_combine_returns_false(self, three_item_tree):
        class BrokenBackend(Sha256Backend):
            def combine(self, left, right):
                raise RuntimeError("backend unavailable")

        root = three_item_tree.get_root_hash()
        proof = three_item_tree.generate_proof(0)

        assert verify_proof(root, proof, "data1", backend=BrokenBackend()) is False
