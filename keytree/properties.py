#!/usr/bin/env python3
"""
B-Tree Structural Algorithms
============================

``TreeProperties`` is the per-tree configuration derived once from the
degree, bundled with every algorithm that reshapes the tree:

- Node splitting on overflow and single-pass top-down insertion
- Predecessor-preferred, successor-fallback substitution deletion
- Rebalancing after deletion: donate from right/left sibling, merge with
  right/left sibling, cascading up the ancestor path
- Rebuilding degree-2 trees, whose empty nodes can outgrow the height limit

The properties object holds no per-call state. Everything that changes
lives in the nodes being mutated, and ancestors are re-entered through the
``NodeRef`` path recorded on the way down.
"""

import logging
from typing import Any, List, Optional
from dataclasses import dataclass

from keytree.errors import InvalidBranchFactorError, TreeInvariantError
from keytree.node import BTreeNode, NodeRef, PathEntry

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_FACTOR = 2


@dataclass(frozen=True)
class TreeProperties:
    """
    Occupancy bounds for one tree

    For degree d (maximum number of children):
    - max_keys = d - 1
    - min_keys = (d - 1) // 2, required of every non-root node
    - mid_key_index = min_keys, the key promoted when a node splits
    """
    degree: int
    max_keys: int
    min_keys: int
    mid_key_index: int

    @classmethod
    def from_degree(cls, degree: int) -> 'TreeProperties':
        if degree < 2:
            raise InvalidBranchFactorError(
                f"B-Tree degree must be at least 2, got {degree}",
                {'degree': degree}
            )
        min_keys = (degree - 1) // 2
        return cls(
            degree=degree,
            max_keys=degree - 1,
            min_keys=min_keys,
            mid_key_index=min_keys,
        )

    @classmethod
    def from_branch_factor(cls, branch_factor: int) -> 'TreeProperties':
        return cls.from_degree(2 * branch_factor)

    # ----------------------------- predicates --------------------------------

    def is_maxed_out(self, node: BTreeNode) -> bool:
        """Check if node holds the maximum number of keys"""
        return len(node.keys) == self.max_keys

    def height_limit(self, size: int) -> int:
        """
        Deepest a tree holding ``size`` keys may grow

        With min_keys >= 1 every non-root internal node has at least two
        children, which keeps the height within bit_length(size) on its own.
        Degree-2 trees may contain empty nodes and are rebuilt once they pass
        this limit.
        """
        return 2 * size.bit_length() + 1

    def can_donate_from_left(self, ref: NodeRef) -> bool:
        """True if the left sibling exists and can spare a key"""
        if not ref.has_left_sibling():
            return False
        return len(ref.parent.children[ref.sibling_index - 1].keys) > self.min_keys

    def can_donate_from_right(self, ref: NodeRef) -> bool:
        """True if the right sibling exists and can spare a key"""
        if not ref.has_right_sibling():
            return False
        return len(ref.parent.children[ref.sibling_index + 1].keys) > self.min_keys

    # ------------------------------ insertion --------------------------------

    def split_child(self, parent: BTreeNode, child_index: int) -> BTreeNode:
        """
        Split a full child node

        The median key moves up into the parent at ``child_index``; the keys
        (and children) after it move to a new right sibling placed at
        ``child_index + 1``. Returns the new sibling.
        """
        child = parent.children[child_index]
        if not self.is_maxed_out(child):
            raise TreeInvariantError(
                f"split_child called on a child with {len(child.keys)} of {self.max_keys} keys",
                {'child_index': child_index}
            )

        mid = self.mid_key_index
        sibling = BTreeNode(keys=child.keys[mid + 1:])
        if not child.is_leaf():
            sibling.children = child.children[mid + 1:]
            child.children = child.children[:mid + 1]

        median_key = child.keys[mid]
        child.keys = child.keys[:mid]

        parent.keys.insert(child_index, median_key)
        parent.children.insert(child_index + 1, sibling)
        logger.debug(f"Split child {child_index}, promoted {median_key!r}")
        return sibling

    def insert_non_full(self, node: BTreeNode, key: Any) -> bool:
        """Insert into a node that is not full. Returns False if key already exists."""
        while True:
            idx = node.find_key_index(key)

            if node.holds(key, idx):
                return False

            if node.is_leaf():
                node.keys.insert(idx, key)
                return True

            if self.is_maxed_out(node.children[idx]):
                self.split_child(node, idx)
                # The promoted median may be the key itself
                if node.keys[idx] == key:
                    return False
                if node.keys[idx] < key:
                    idx += 1

            node = node.children[idx]

    # ------------------------------- deletion --------------------------------

    def delete_key(self, ref: NodeRef, key: Any) -> None:
        """
        Delete ``key`` from the node referenced by ``ref``

        Leaf keys are removed directly. An internal key is overwritten with
        its predecessor when the predecessor leaf can spare a key, otherwise
        with its successor, and the donor leaf is then rebalanced.
        """
        node = ref.node
        idx = node.find_key_index(key)
        if not node.holds(key, idx):
            raise TreeInvariantError(f"delete_key called for {key!r} on a node that does not hold it")

        if node.is_leaf():
            node.keys.pop(idx)
            self.rebalance_after_deletion(ref)
            return

        leaf = self._descend_to_leaf(ref, idx, rightmost=True)
        if len(leaf.node.keys) > self.min_keys:
            node.keys[idx] = leaf.node.keys.pop()
            self.rebalance_after_deletion(leaf)
            return

        leaf = self._descend_to_leaf(ref, idx + 1, rightmost=False)
        if leaf.node.keys:
            node.keys[idx] = leaf.node.keys.pop(0)
            self.rebalance_after_deletion(leaf)
            return

        # Only reachable with min_keys == 0, where leaves may be empty
        self._delete_from_sparse(ref, idx)

    def _descend_to_leaf(self, ref: NodeRef, child_index: int, rightmost: bool) -> NodeRef:
        """Follow the rightmost (or leftmost) spine below ``children[child_index]``"""
        current = ref.child_ref(child_index)
        while not current.is_leaf():
            edge = len(current.node.children) - 1 if rightmost else 0
            current = current.child_ref(edge)
        return current

    def _nearest_key_holder(self, ref: NodeRef, child_index: int, rightmost: bool) -> Optional[NodeRef]:
        """Deepest node with keys on the spine below ``children[child_index]``"""
        holder = None
        current = ref.child_ref(child_index)
        while True:
            if current.node.keys:
                holder = current
            if current.is_leaf():
                return holder
            edge = len(current.node.children) - 1 if rightmost else 0
            current = current.child_ref(edge)

    def _delete_from_sparse(self, ref: NodeRef, idx: int) -> None:
        """Remove an internal key whose neighbouring leaves are both empty"""
        node = ref.node
        for child_index, rightmost in ((idx, True), (idx + 1, False)):
            holder = self._nearest_key_holder(ref, child_index, rightmost)
            if holder is not None:
                replacement = holder.node.keys[-1] if rightmost else holder.node.keys[0]
                self.delete_key(holder, replacement)
                node.keys[idx] = replacement
                return

        # Both neighbouring subtrees hold no keys at all
        node.keys.pop(idx)
        node.children.pop(idx + 1)

    # ----------------------------- rebalancing -------------------------------

    def rebalance_after_deletion(self, ref: NodeRef) -> None:
        """
        Restore minimum occupancy of ``ref.node`` after it lost a key

        Tries, in order: donation from the right sibling, donation from the
        left sibling, merge with the right sibling, merge with the left
        sibling. A merge takes a key from the parent, so the parent is
        checked next and the repair may cascade up to the root.
        """
        if ref.is_root() or len(ref.node.keys) >= self.min_keys:
            return

        if self.can_donate_from_right(ref):
            self.donate_from_right(ref)
        elif self.can_donate_from_left(ref):
            self.donate_from_left(ref)
        elif ref.has_right_sibling():
            self.merge_with_right(ref)
            self.rebalance_after_deletion(ref.parent_ref())
        elif ref.has_left_sibling():
            self.merge_with_left(ref)
            self.rebalance_after_deletion(ref.parent_ref())
        else:
            raise TreeInvariantError("Underflowing non-root node has no siblings")

    def _parent_of(self, ref: NodeRef, action: str) -> BTreeNode:
        """Return the parent of ``ref`` after checking the recorded position"""
        if ref.is_root():
            raise TreeInvariantError(f"Cannot {action} the root node")
        entry: PathEntry = ref.path[-1]
        siblings = entry.node.children
        if not 0 <= entry.index < len(siblings) or siblings[entry.index] is not ref.node:
            raise TreeInvariantError(
                f"Stale sibling index {entry.index} while trying to {action}",
                {'index': entry.index, 'children': len(siblings)}
            )
        return entry.node

    def donate_from_right(self, ref: NodeRef) -> None:
        """Rotate the right sibling's first key through the parent into the node"""
        parent = self._parent_of(ref, "donate from right sibling to")
        idx = ref.sibling_index
        node = ref.node
        sibling = parent.children[idx + 1]

        node.keys.append(parent.keys[idx])
        parent.keys[idx] = sibling.keys.pop(0)
        if not node.is_leaf():
            node.children.append(sibling.children.pop(0))
        logger.debug(f"Donated from right sibling at index {idx + 1}")

    def donate_from_left(self, ref: NodeRef) -> None:
        """Rotate the left sibling's last key through the parent into the node"""
        parent = self._parent_of(ref, "donate from left sibling to")
        idx = ref.sibling_index
        node = ref.node
        sibling = parent.children[idx - 1]

        node.keys.insert(0, parent.keys[idx - 1])
        parent.keys[idx - 1] = sibling.keys.pop()
        if not node.is_leaf():
            node.children.insert(0, sibling.children.pop())
        logger.debug(f"Donated from left sibling at index {idx - 1}")

    def merge_with_right(self, ref: NodeRef) -> None:
        """
        Absorb the right sibling into the node

        The separator key between them moves down from the parent, and the
        sibling's slot is removed from the parent.
        """
        parent = self._parent_of(ref, "merge")
        idx = ref.sibling_index
        node = ref.node
        sibling = parent.children[idx + 1]

        node.keys.append(parent.keys.pop(idx))
        node.keys.extend(sibling.keys)
        node.children.extend(sibling.children)
        parent.children.pop(idx + 1)
        logger.debug(f"Merged child {idx + 1} into child {idx}")

    def merge_with_left(self, ref: NodeRef) -> None:
        """Absorb the node into its left sibling (mirror of merge_with_right)"""
        parent = self._parent_of(ref, "merge")
        idx = ref.sibling_index
        node = ref.node
        sibling = parent.children[idx - 1]

        sibling.keys.append(parent.keys.pop(idx - 1))
        sibling.keys.extend(node.keys)
        sibling.children.extend(node.children)
        parent.children.pop(idx)
        logger.debug(f"Merged child {idx} into child {idx - 1}")

    # ------------------------------ rebuilding -------------------------------

    def build_sparse(self, keys: List[Any]) -> BTreeNode:
        """
        Build a minimum-height degree-2 tree from sorted, unique ``keys``

        Each node takes the middle key of its range and every leaf ends up at
        depth bit_length(len(keys)) - 1. Leaves may be left empty, so this is
        only valid while min_keys is 0.
        """
        if self.min_keys != 0:
            raise TreeInvariantError(
                f"Cannot build a sparse tree with min_keys {self.min_keys}",
                {'min_keys': self.min_keys}
            )
        height = max(1, len(keys).bit_length())
        return self._build_range(keys, 0, len(keys), height)

    def _build_range(self, keys: List[Any], lo: int, hi: int, height: int) -> BTreeNode:
        if height == 1:
            return BTreeNode(keys=keys[lo:hi])
        if lo == hi:
            return BTreeNode(children=[self._build_range(keys, lo, hi, height - 1)])

        mid = (lo + hi) // 2
        return BTreeNode(
            keys=[keys[mid]],
            children=[
                self._build_range(keys, lo, mid, height - 1),
                self._build_range(keys, mid + 1, hi, height - 1),
            ]
        )
