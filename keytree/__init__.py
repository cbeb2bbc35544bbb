#!/usr/bin/env python3
"""
keytree Package Initialization
Exports all main components for clean imports

Version: 1.0.0
"""

from keytree.errors import (
    ErrorCode,
    KeyTreeError,
    InvalidBranchFactorError,
    TreeInvariantError
)
from keytree.node import BTreeNode, NodeRef, PathEntry
from keytree.properties import DEFAULT_BRANCH_FACTOR, TreeProperties
from keytree.tree import BTree
from keytree.validation import TreeStats, check_invariants
from keytree.render import render_tree

__version__ = "1.0.0"

__all__ = [
    'BTree',
    'BTreeNode',
    'NodeRef',
    'PathEntry',
    'TreeProperties',
    'DEFAULT_BRANCH_FACTOR',
    'TreeStats',
    'check_invariants',
    'render_tree',
    'ErrorCode',
    'KeyTreeError',
    'InvalidBranchFactorError',
    'TreeInvariantError',
]
