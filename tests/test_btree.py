#!/usr/bin/env python3
"""
Unit Tests for B-Tree
=====================

Tests for the public BTree operations: insert, search, delete and the
iteration/inspection helpers built on them.
"""

import logging

import pytest

from keytree import BTree, InvalidBranchFactorError, check_invariants
from conftest import SCENARIO_KEYS


class TestBTreeBasics:
    """Test basic B-Tree operations"""

    def test_create_btree(self):
        """Test B-Tree creation"""
        btree = BTree(branch_factor=3)
        assert len(btree) == 0
        assert btree.root is not None
        assert btree.root.keys == []
        assert btree.height == 1
        assert btree.props.degree == 6

    def test_default_branch_factor(self):
        btree = BTree()
        assert btree.branch_factor == 2
        assert btree.props.max_keys == 3

    @pytest.mark.parametrize("branch_factor", [0, -1, -10])
    def test_branch_factor_too_small(self, branch_factor):
        with pytest.raises(InvalidBranchFactorError):
            BTree(branch_factor=branch_factor)

    @pytest.mark.parametrize("branch_factor", [2.5, "2", None, True])
    def test_branch_factor_not_integer(self, branch_factor):
        with pytest.raises(InvalidBranchFactorError):
            BTree(branch_factor=branch_factor)

    def test_invalid_branch_factor_is_value_error(self):
        with pytest.raises(ValueError):
            BTree(branch_factor=0)

    def test_insert_single(self):
        """Test inserting a single key"""
        btree = BTree(branch_factor=3)
        assert btree.insert(10) is True
        assert len(btree) == 1
        assert btree.search(10) is True

    def test_insert_multiple(self):
        """Test inserting multiple keys"""
        btree = BTree(branch_factor=3)
        for i in range(10):
            btree.insert(i)

        assert len(btree) == 10
        for i in range(10):
            assert btree.search(i) is True

    def test_insert_reverse_order(self):
        """Test inserting in reverse order"""
        btree = BTree(branch_factor=3)
        for i in range(10, 0, -1):
            btree.insert(i)

        assert len(btree) == 10
        for i in range(1, 11):
            assert btree.search(i) is True
        check_invariants(btree)

    def test_insert_duplicate_rejected(self, scenario_tree):
        """Existing keys, in leaves or internal nodes, are not added twice"""
        for key in [10, 6, 20, 5, 15]:
            assert scenario_tree.insert(key) is False

        assert len(scenario_tree) == len(SCENARIO_KEYS)
        assert list(scenario_tree) == sorted(SCENARIO_KEYS)
        check_invariants(scenario_tree)

    def test_insert_duplicate_of_promoted_median(self, tree):
        """A key equal to the median promoted by a split is still rejected"""
        for key in [10, 20, 30, 40]:
            tree.insert(key)
        # root [20], right leaf [30, 40]; fill the right leaf, then re-insert its median
        tree.insert(50)
        assert tree.root.children[1].keys == [30, 40, 50]
        assert tree.insert(40) is False
        assert tree.root.keys == [20, 40]
        assert len(tree) == 5
        check_invariants(tree)

    def test_string_keys(self):
        btree = BTree(branch_factor=2)
        words = ["pear", "apple", "fig", "kiwi", "date", "plum", "lime"]
        for word in words:
            btree.insert(word)

        assert list(btree) == sorted(words)
        assert "fig" in btree
        assert "grape" not in btree

    def test_incomparable_key_raises_type_error(self, tree):
        tree.insert(1)
        with pytest.raises(TypeError):
            tree.insert("one")

    def test_logs_creation(self, caplog):
        caplog.set_level(logging.INFO, logger="keytree.tree")
        BTree(branch_factor=3)
        assert "Created B-Tree with branch factor 3" in caplog.text


class TestBTreeSearch:
    """Test B-Tree search operations"""

    def test_search_existing(self):
        """Test searching for existing keys"""
        btree = BTree(branch_factor=3)
        btree.insert(10)
        btree.insert(20)
        btree.insert(30)

        assert btree.search(10) is True
        assert btree.search(20) is True
        assert btree.search(30) is True

    def test_search_nonexistent(self):
        """Test searching for non-existent keys"""
        btree = BTree(branch_factor=3)
        btree.insert(10)

        assert btree.search(5) is False
        assert btree.search(15) is False
        assert btree.search(100) is False

    def test_search_empty_tree(self, tree):
        assert tree.search(1) is False

    def test_search_internal_keys(self, scenario_tree):
        assert scenario_tree.root.keys == [10]
        assert scenario_tree.search(10) is True
        assert scenario_tree.search(6) is True
        assert scenario_tree.search(20) is True

    def test_scenario_search(self, scenario_tree):
        assert scenario_tree.search(15) is True
        assert scenario_tree.search(16) is False

    def test_contains(self):
        """Test __contains__ operator"""
        btree = BTree(branch_factor=3)
        btree.insert(10)

        assert 10 in btree
        assert 5 not in btree

    def test_search_does_not_mutate(self, scenario_tree):
        before = scenario_tree.render()
        for key in range(0, 40):
            scenario_tree.search(key)
        assert scenario_tree.render() == before


class TestBTreeDelete:
    """Test B-Tree deletion operations"""

    def test_delete_from_leaf(self):
        """Test deleting from leaf node"""
        btree = BTree(branch_factor=3)
        btree.insert(10)
        btree.insert(20)
        btree.insert(30)

        assert btree.delete(20) is True
        assert len(btree) == 2
        assert btree.search(20) is False
        assert btree.search(10) is True
        assert btree.search(30) is True

    def test_delete_nonexistent(self):
        """Test deleting non-existent key"""
        btree = BTree(branch_factor=3)
        btree.insert(10)

        assert btree.delete(20) is False
        assert len(btree) == 1

    def test_delete_from_empty_tree(self, tree):
        assert tree.delete(1) is False
        assert len(tree) == 0

    def test_delete_absent_leaves_tree_unchanged(self, scenario_tree):
        before = scenario_tree.render()
        for key in [0, 8, 13, 16, 25, 99]:
            assert scenario_tree.delete(key) is False
        assert scenario_tree.render() == before
        assert list(scenario_tree) == sorted(SCENARIO_KEYS)

    def test_delete_internal_key_uses_successor(self, scenario_tree):
        """Predecessor leaf [7] is at minimum, so 10 is replaced by 11"""
        assert scenario_tree.delete(10) is True

        assert scenario_tree.search(10) is False
        for key in [5, 7, 11, 12, 15, 30]:
            assert scenario_tree.search(key) is True
        assert scenario_tree.root.keys == [11]
        assert scenario_tree.root.children[1].children[0].keys == [12, 15]
        check_invariants(scenario_tree)

    def test_delete_internal_key_uses_predecessor(self, scenario_tree):
        """Predecessor leaf [11, 12, 15] can spare a key, so 20 becomes 15"""
        assert scenario_tree.delete(20) is True

        right = scenario_tree.root.children[1]
        assert right.keys == [15]
        assert right.children[0].keys == [11, 12]
        assert right.children[1].keys == [30]
        check_invariants(scenario_tree)

    def test_root_collapses_after_merge(self):
        """Deleting the only root key merges its children into the new root"""
        btree = BTree(branch_factor=2)
        for key in [1, 2, 3, 4]:
            btree.insert(key)
        btree.delete(4)
        assert btree.root.keys == [2]
        survivor = btree.root.children[0]
        assert btree.height == 2

        assert btree.delete(2) is True

        assert btree.height == 1
        assert btree.root is survivor
        assert btree.root.keys == [1, 3]
        assert btree.root.is_leaf()
        check_invariants(btree)

    def test_cascading_merge_reduces_height(self, scenario_tree):
        """Deleting 5 merges leaves, underflows [6], and merges up to the root"""
        assert scenario_tree.height == 3
        assert scenario_tree.delete(5) is True

        assert scenario_tree.height == 2
        assert scenario_tree.root.keys == [10, 20]
        assert [child.keys for child in scenario_tree.root.children] == [[6, 7], [11, 12, 15], [30]]
        check_invariants(scenario_tree)

    def test_delete_all(self):
        """Test deleting all keys"""
        btree = BTree(branch_factor=3)
        keys = [10, 20, 30, 40, 50]
        for key in keys:
            btree.insert(key)

        for key in keys:
            assert btree.delete(key) is True

        assert len(btree) == 0
        assert btree.height == 1
        assert btree.root.keys == []

    def test_delete_twice(self, scenario_tree):
        assert scenario_tree.delete(12) is True
        assert scenario_tree.delete(12) is False
        assert len(scenario_tree) == len(SCENARIO_KEYS) - 1


class TestBTreeTraversal:
    """Test B-Tree traversal operations"""

    def test_traverse_ordered(self):
        """Test in-order traversal"""
        btree = BTree(branch_factor=3)
        keys = [30, 10, 50, 20, 40]
        for key in keys:
            btree.insert(key)

        assert list(btree.traverse()) == sorted(keys)

    def test_traverse_empty(self):
        """Test traversing empty tree"""
        btree = BTree(branch_factor=3)
        assert list(btree.traverse()) == []

    def test_iter_matches_traverse(self, scenario_tree):
        assert list(scenario_tree) == list(scenario_tree.traverse())

    def test_clear(self, scenario_tree):
        scenario_tree.clear()
        assert len(scenario_tree) == 0
        assert list(scenario_tree) == []
        assert scenario_tree.insert(1) is True

    def test_repr(self, scenario_tree):
        assert repr(scenario_tree) == "BTree(branch_factor=2, size=9, height=3)"


class TestBTreeRender:
    """Test the indented debug rendering"""

    def test_render_scenario(self, scenario_tree):
        assert scenario_tree.render() == "\n".join([
            "        [5]",
            "    6",
            "        [7]",
            "10",
            "        [11, 12, 15]",
            "    20",
            "        [30]",
        ])

    def test_render_empty(self, tree):
        assert tree.render() == "[]"

    def test_render_strings(self):
        btree = BTree(branch_factor=2)
        btree.insert("b")
        btree.insert("a")
        assert btree.render() == "['a', 'b']"


class TestBTreeLargeDataset:
    """Test B-Tree with large datasets"""

    def test_insert_1000_keys(self):
        """Test inserting 1000 keys"""
        btree = BTree(branch_factor=3)
        for i in range(1000):
            btree.insert(i)

        assert len(btree) == 1000
        for i in [0, 100, 500, 999]:
            assert btree.search(i) is True
        assert btree.search(1000) is False
        check_invariants(btree)

    def test_delete_from_large_tree(self):
        """Test deleting from large tree"""
        btree = BTree(branch_factor=3)
        for i in range(100):
            btree.insert(i)

        # Delete every other key
        for i in range(0, 100, 2):
            assert btree.delete(i) is True

        assert len(btree) == 50
        for i in range(1, 100, 2):
            assert btree.search(i) is True
        for i in range(0, 100, 2):
            assert btree.search(i) is False
        check_invariants(btree)

    def test_height_is_logarithmic(self):
        btree = BTree(branch_factor=2)
        for i in range(4095):
            btree.insert(i)
        # every non-root node has at least 2 children, so height <= log2(n) + 1
        assert btree.height <= 12


class TestBTreePerformance:
    """Test B-Tree performance characteristics"""

    def test_search_performance(self):
        """Test that search is O(log n)"""
        btree = BTree(branch_factor=5)
        for i in range(10000):
            btree.insert(i)

        # A search visits one node per level; non-root nodes have >= 5 children
        assert btree.height <= 6
        for key in range(0, 10000, 97):
            assert btree.search(key) is True
        assert btree.search(10000) is False
