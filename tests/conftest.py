#!/usr/bin/env python3
"""
keytree Test Configuration - PyTest Configuration and Fixtures

Shared tree fixtures and an environment guard so configuration tests are
not affected by KEYTREE_* variables exported in the developer's shell.
"""

import pytest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keytree import BTree

# Insertion order used by the reference scenarios
SCENARIO_KEYS = [10, 20, 30, 5, 6, 7, 11, 12, 15]

KEYTREE_ENV_VARS = [
    'KEYTREE_BRANCH_FACTOR',
    'KEYTREE_LOG_LEVEL',
    'KEYTREE_DEBUG',
    'KEYTREE_CHECK_INVARIANTS',
    'KEYTREE_HISTORY_FILE',
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove KEYTREE_* variables and point the shell history at a temp file"""
    for name in KEYTREE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('KEYTREE_HISTORY_FILE', str(tmp_path / 'history'))
    return monkeypatch


@pytest.fixture
def tree():
    """Empty tree with branch factor 2 (1-3 keys per node)"""
    return BTree(branch_factor=2)


@pytest.fixture
def scenario_tree():
    """
    Branch factor 2 tree after inserting SCENARIO_KEYS:

                10
          6            20
       5     7   11 12 15   30
    """
    btree = BTree(branch_factor=2)
    for key in SCENARIO_KEYS:
        btree.insert(key)
    return btree
