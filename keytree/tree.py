#!/usr/bin/env python3
"""
keytree B-Tree
==============

A balanced ordered-key search tree for in-memory use by a single caller.

Features:
- O(log n) search, insert, delete
- Unique keys (inserting an existing key is rejected)
- Ordered iteration
- Height-balanced after every single operation

The tree owns the root node. All structural work is delegated to
``TreeProperties``; the tree itself only handles the two cases that concern
the root: growing a level when the root is full before an insert, and
dropping levels when a delete leaves the root without keys. Trees with
branch factor 1 allow empty nodes, so they are also rebuilt from their keys
whenever they grow deeper than ``TreeProperties.height_limit`` allows.

Thread safety: none. Callers sharing a tree across threads must serialize
access themselves.
"""

import logging
from typing import Any, Iterator, Optional

from keytree.errors import InvalidBranchFactorError
from keytree.node import BTreeNode, NodeRef
from keytree.properties import DEFAULT_BRANCH_FACTOR, TreeProperties
from keytree.render import render_tree

logger = logging.getLogger(__name__)


class BTree:
    """
    B-Tree of unique, mutually comparable keys

    A branch factor of t gives degree 2t: every node holds at most 2t - 1
    keys and every node other than the root at least t - 1.

    Time Complexity:
    - Search: O(log n)
    - Insert: O(log n)
    - Delete: O(log n)
    """

    def __init__(self, branch_factor: int = DEFAULT_BRANCH_FACTOR):
        """
        Initialize B-Tree

        Args:
            branch_factor: Positive integer, half the maximum number of
                           children per node
        """
        if isinstance(branch_factor, bool) or not isinstance(branch_factor, int):
            raise InvalidBranchFactorError(
                f"B-Tree branch factor must be an integer, got {branch_factor!r}",
                {'branch_factor': branch_factor}
            )
        if branch_factor < 1:
            raise InvalidBranchFactorError(
                f"B-Tree branch factor must be at least 1, got {branch_factor}",
                {'branch_factor': branch_factor}
            )

        self.branch_factor = branch_factor
        self.props = TreeProperties.from_branch_factor(branch_factor)
        self.root = BTreeNode()
        self.size = 0

        logger.info(f"Created B-Tree with branch factor {branch_factor} (degree {self.props.degree})")

    def insert(self, key: Any) -> bool:
        """
        Insert a key into the B-Tree

        Returns:
            True if the key was added, False if it was already present
        """
        if self.props.is_maxed_out(self.root):
            old_root = self.root
            self.root = BTreeNode(children=[old_root])
            self.props.split_child(self.root, 0)
            logger.debug(f"Root split, tree height is now {self.height}")

        inserted = self.props.insert_non_full(self.root, key)
        if inserted:
            self.size += 1
        self._restore_height()
        return inserted

    def search(self, key: Any) -> bool:
        """Check whether ``key`` is stored in the tree"""
        node = self.root
        while True:
            idx = node.find_key_index(key)
            if node.holds(key, idx):
                return True
            if node.is_leaf():
                return False
            node = node.children[idx]

    def delete(self, key: Any) -> bool:
        """
        Delete a key from the B-Tree

        Returns:
            True if the key was found and deleted, False otherwise
        """
        ref = self._locate(key)
        if ref is None:
            return False

        self.props.delete_key(ref, key)
        self.size -= 1

        # While the root is empty, make its only child the new root
        while len(self.root.keys) == 0 and not self.root.is_leaf():
            self.root = self.root.children[0]
            logger.debug(f"Root collapsed, tree height is now {self.height}")

        self._restore_height()
        return True

    def _restore_height(self) -> None:
        """Rebuild a degree-2 tree that has grown past its height limit"""
        # Only trees that allow empty nodes can get there
        if self.props.min_keys > 0:
            return
        height = self.height
        if height <= self.props.height_limit(self.size):
            return
        self.root = self.props.build_sparse(list(self.traverse()))
        logger.debug(f"Rebuilt {self.size} keys from height {height} to {self.height}")

    def _locate(self, key: Any) -> Optional[NodeRef]:
        """Descend to the first node on the search path that holds ``key``"""
        ref = NodeRef(self.root)
        while True:
            idx = ref.node.find_key_index(key)
            if ref.node.holds(key, idx):
                return ref
            if ref.is_leaf():
                return None
            ref = ref.child_ref(idx)

    def clear(self) -> None:
        """Remove every key, keeping the branch factor"""
        self.root = BTreeNode()
        self.size = 0

    @property
    def height(self) -> int:
        """Number of levels, 1 for a tree that is a single root node"""
        levels = 1
        node = self.root
        while not node.is_leaf():
            node = node.children[0]
            levels += 1
        return levels

    def __len__(self) -> int:
        """Return number of keys in the tree"""
        return self.size

    def __contains__(self, key: Any) -> bool:
        return self.search(key)

    def __iter__(self) -> Iterator[Any]:
        return self.traverse()

    def traverse(self) -> Iterator[Any]:
        """
        Traverse the tree in sorted order

        Yields:
            Keys in ascending order
        """
        # (node, i): children[i] is visited next, after keys[i - 1]
        stack = [(self.root, 0)]
        while stack:
            node, i = stack.pop()
            if node.is_leaf():
                yield from node.keys
                continue
            if i > 0:
                yield node.keys[i - 1]
            if i < len(node.keys):
                stack.append((node, i + 1))
            stack.append((node.children[i], 0))

    def render(self) -> str:
        """Indented, in-order text rendering of the tree for debugging"""
        return render_tree(self)

    def __repr__(self) -> str:
        return f"BTree(branch_factor={self.branch_factor}, size={self.size}, height={self.height})"
