#!/usr/bin/env python3
"""
Debug rendering of a B-Tree as indented text.

Keys come out in ascending order reading top to bottom. Each internal key
gets its own line, each leaf is printed as one bracketed line, and the
indentation level is the node's depth below the root.
"""

from typing import List, Tuple

from keytree.node import BTreeNode

INDENT = "    "


def render_tree(tree) -> str:
    """Render ``tree`` (a ``BTree``) as a multi-line string"""
    lines: List[str] = []
    # (node, depth, i): children[i] is rendered next, after keys[i - 1]
    stack: List[Tuple[BTreeNode, int, int]] = [(tree.root, 0, 0)]
    while stack:
        node, depth, i = stack.pop()
        prefix = INDENT * depth
        if node.is_leaf():
            lines.append(f"{prefix}[{', '.join(repr(key) for key in node.keys)}]")
            continue
        if i > 0:
            lines.append(f"{prefix}{node.keys[i - 1]!r}")
        if i < len(node.keys):
            stack.append((node, depth, i + 1))
        stack.append((node.children[i], depth + 1, 0))
    return "\n".join(lines)
