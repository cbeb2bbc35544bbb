#!/usr/bin/env python3
"""
Configuration Tests
===================

Environment overrides and logging setup for the command-line entry points.
"""

import logging
from pathlib import Path

import pytest

from keytree.config import TreeConfig, configure_logging, get_config
from keytree.errors import InvalidBranchFactorError


class TestTreeConfig:
    """Test TreeConfig defaults and KEYTREE_* overrides"""

    def test_defaults(self, clean_env, tmp_path):
        config = TreeConfig()
        assert config.branch_factor == 2
        assert config.log_level == "INFO"
        assert config.debug_mode is False
        assert config.check_invariants is False
        assert config.history_file == tmp_path / 'history'

    def test_branch_factor_from_env(self, clean_env):
        clean_env.setenv('KEYTREE_BRANCH_FACTOR', '8')
        assert TreeConfig().branch_factor == 8

    def test_env_overrides_constructor(self, clean_env):
        clean_env.setenv('KEYTREE_BRANCH_FACTOR', '5')
        assert TreeConfig(branch_factor=3).branch_factor == 5

    def test_invalid_branch_factor_env(self, clean_env):
        clean_env.setenv('KEYTREE_BRANCH_FACTOR', 'wide')
        with pytest.raises(InvalidBranchFactorError):
            TreeConfig()

    def test_log_level_from_env(self, clean_env):
        clean_env.setenv('KEYTREE_LOG_LEVEL', 'warning')
        assert TreeConfig().log_level == "WARNING"

    def test_debug_forces_debug_logging(self, clean_env):
        clean_env.setenv('KEYTREE_DEBUG', 'true')
        config = TreeConfig()
        assert config.debug_mode is True
        assert config.log_level == "DEBUG"

    def test_check_invariants_from_env(self, clean_env):
        clean_env.setenv('KEYTREE_CHECK_INVARIANTS', 'TRUE')
        assert TreeConfig().check_invariants is True

    def test_explicit_history_file(self, clean_env, tmp_path):
        config = TreeConfig(history_file=str(tmp_path / 'h'))
        assert config.history_file == Path(tmp_path / 'h')

    def test_safe_dict(self, clean_env, tmp_path):
        assert TreeConfig().get_safe_dict() == {
            'branch_factor': 2,
            'log_level': 'INFO',
            'debug_mode': False,
            'check_invariants': False,
            'history_file': str(tmp_path / 'history'),
        }

    def test_get_config_is_shared(self, clean_env):
        assert get_config() is get_config()


class TestConfigureLogging:
    """Test root logger setup"""

    def test_sets_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("warning")
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")
