#!/usr/bin/env python3
"""
B-Tree Invariant Audit
======================

Walks a whole tree and checks every structural guarantee:

- Internal nodes have exactly one more child than keys
- Non-root nodes hold between min_keys and max_keys keys
- Keys are strictly increasing inside each node
- Every separator lies strictly between the key ranges of its two children
- All leaves sit at the same depth
- The key count matches the tree's recorded size
- The height stays within the limit for the key count

Used by the test suite and by the shell's ``.check`` command. Each audit is
O(n), so it is never run implicitly by the tree itself.
"""

from typing import Any, List, Optional, Tuple
from dataclasses import dataclass

from keytree.errors import TreeInvariantError
from keytree.node import BTreeNode


@dataclass
class TreeStats:
    """Shape summary produced by a successful audit"""
    height: int
    node_count: int
    leaf_count: int
    key_count: int


def check_invariants(tree) -> TreeStats:
    """
    Audit ``tree`` (a ``BTree``)

    Returns:
        TreeStats describing the tree

    Raises:
        TreeInvariantError: naming the first violated property
    """
    stats = TreeStats(height=0, node_count=0, leaf_count=0, key_count=0)
    leaf_depths: List[int] = []

    # Pre-order walk: (node, depth, lower bound, upper bound)
    stack: List[Tuple[BTreeNode, int, Optional[Any], Optional[Any]]] = [(tree.root, 0, None, None)]
    while stack:
        node, depth, lower, upper = stack.pop()
        _check_node(tree, node, depth, lower, upper, stats, leaf_depths)
        if node.is_leaf():
            continue
        for i in reversed(range(len(node.children))):
            child_lower, child_upper = _child_bounds(node, i, lower, upper)
            stack.append((node.children[i], depth + 1, child_lower, child_upper))

    if len(set(leaf_depths)) > 1:
        raise TreeInvariantError(
            f"Leaves found at different depths: {sorted(set(leaf_depths))}"
        )
    stats.height = leaf_depths[0] + 1

    if stats.key_count != len(tree):
        raise TreeInvariantError(
            f"Tree reports {len(tree)} keys but holds {stats.key_count}"
        )

    limit = tree.props.height_limit(stats.key_count)
    if stats.height > limit:
        raise TreeInvariantError(
            f"Tree of {stats.key_count} keys is {stats.height} levels deep, limit is {limit}"
        )
    return stats


def _check_node(
    tree,
    node: BTreeNode,
    depth: int,
    lower: Optional[Any],
    upper: Optional[Any],
    stats: TreeStats,
    leaf_depths: List[int]
) -> None:
    """Check one node in isolation and add it to ``stats``"""
    props = tree.props
    is_root = node is tree.root
    details = {'depth': depth, 'keys': list(node.keys)}

    stats.node_count += 1
    stats.key_count += len(node.keys)

    if len(node.keys) > props.max_keys:
        raise TreeInvariantError(f"Node holds {len(node.keys)} keys, max is {props.max_keys}", details)
    if not is_root and len(node.keys) < props.min_keys:
        raise TreeInvariantError(f"Node holds {len(node.keys)} keys, min is {props.min_keys}", details)

    for left, right in zip(node.keys, node.keys[1:]):
        if not left < right:
            raise TreeInvariantError(f"Keys not strictly increasing: {left!r} before {right!r}", details)

    if node.keys:
        if lower is not None and not lower < node.keys[0]:
            raise TreeInvariantError(f"Key {node.keys[0]!r} not above separator {lower!r}", details)
        if upper is not None and not node.keys[-1] < upper:
            raise TreeInvariantError(f"Key {node.keys[-1]!r} not below separator {upper!r}", details)

    if node.is_leaf():
        stats.leaf_count += 1
        leaf_depths.append(depth)
        return

    if len(node.children) != len(node.keys) + 1:
        raise TreeInvariantError(
            f"Internal node has {len(node.keys)} keys but {len(node.children)} children", details
        )


def _child_bounds(node: BTreeNode, index: int, lower: Any, upper: Any) -> Tuple[Any, Any]:
    """Exclusive key bounds for ``node.children[index]``"""
    child_lower = node.keys[index - 1] if index > 0 else lower
    child_upper = node.keys[index] if index < len(node.keys) else upper
    return child_lower, child_upper
