#!/usr/bin/env python3
"""
B-Tree Nodes and Ancestor Paths
===============================

A node only owns its keys and children. Nodes keep no reference to their
parent; instead every node reached by a top-down descent is wrapped in a
``NodeRef`` that carries the ancestor path taken to reach it. Rebalancing
walks that path back up, so sibling positions are always the ones observed
during the descent.
"""

from typing import Any, List, Optional
from dataclasses import dataclass, field


@dataclass
class BTreeNode:
    """
    Node in a B-Tree

    A B-Tree node contains:
    - keys: Strictly increasing list of keys
    - children: Child nodes, empty for a leaf, otherwise len(keys) + 1 long
    """
    keys: List[Any] = field(default_factory=list)
    children: List['BTreeNode'] = field(default_factory=list)

    def is_leaf(self) -> bool:
        """Check if node has no children"""
        return len(self.children) == 0

    def find_key_index(self, key: Any) -> int:
        """
        Find the first index whose key is not less than ``key``
        Uses binary search for efficiency
        """
        left, right = 0, len(self.keys)
        while left < right:
            mid = (left + right) // 2
            if self.keys[mid] < key:
                left = mid + 1
            else:
                right = mid
        return left

    def holds(self, key: Any, index: int) -> bool:
        """Check whether ``key`` sits at ``index`` in this node"""
        return index < len(self.keys) and self.keys[index] == key


@dataclass
class PathEntry:
    """An ancestor on a descent path and the child position taken below it"""
    node: BTreeNode
    index: int


@dataclass
class NodeRef:
    """A node together with the ancestor path that leads to it from the root"""
    node: BTreeNode
    path: List[PathEntry] = field(default_factory=list)

    @property
    def parent(self) -> Optional[BTreeNode]:
        return self.path[-1].node if self.path else None

    @property
    def sibling_index(self) -> int:
        """Position of this node in its parent's children (0 for the root)"""
        return self.path[-1].index if self.path else 0

    def is_leaf(self) -> bool:
        return self.node.is_leaf()

    def is_root(self) -> bool:
        return not self.path

    def has_left_sibling(self) -> bool:
        return not self.is_root() and self.sibling_index > 0

    def has_right_sibling(self) -> bool:
        return not self.is_root() and self.sibling_index < len(self.parent.children) - 1

    def parent_ref(self) -> 'NodeRef':
        """Reference to the parent, positioned by the remaining path"""
        return NodeRef(self.path[-1].node, self.path[:-1])

    def child_ref(self, index: int) -> 'NodeRef':
        """Reference to ``children[index]`` with this node appended to the path"""
        return NodeRef(self.node.children[index], self.path + [PathEntry(self.node, index)])
