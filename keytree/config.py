#!/usr/bin/env python3
"""
keytree Configuration
Reads settings for the shell and benchmark entry points from the environment.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from keytree.errors import InvalidBranchFactorError
from keytree.properties import DEFAULT_BRANCH_FACTOR

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class TreeConfig:
    """keytree configuration settings"""

    branch_factor: int = DEFAULT_BRANCH_FACTOR
    log_level: str = "INFO"
    debug_mode: bool = False

    # Audit the whole tree after every shell mutation
    check_invariants: bool = False

    history_file: Path = None

    def __post_init__(self):
        """Apply environment overrides (KEYTREE_*)"""
        raw_branch_factor = os.environ.get('KEYTREE_BRANCH_FACTOR')
        if raw_branch_factor is not None:
            try:
                self.branch_factor = int(raw_branch_factor)
            except ValueError:
                raise InvalidBranchFactorError(
                    f"KEYTREE_BRANCH_FACTOR must be an integer, got {raw_branch_factor!r}",
                    {'KEYTREE_BRANCH_FACTOR': raw_branch_factor}
                ) from None

        self.log_level = os.environ.get('KEYTREE_LOG_LEVEL', self.log_level).upper()
        if os.environ.get('KEYTREE_DEBUG', '').lower() == 'true':
            self.debug_mode = True
        if os.environ.get('KEYTREE_CHECK_INVARIANTS', '').lower() == 'true':
            self.check_invariants = True

        if self.debug_mode:
            self.log_level = 'DEBUG'

        if self.history_file is None:
            self.history_file = Path(os.environ.get(
                'KEYTREE_HISTORY_FILE', os.path.expanduser('~/.keytree_history')
            ))
        else:
            self.history_file = Path(self.history_file)

    def get_safe_dict(self) -> Dict[str, Any]:
        """Get configuration as a plain dict"""
        return {
            'branch_factor': self.branch_factor,
            'log_level': self.log_level,
            'debug_mode': self.debug_mode,
            'check_invariants': self.check_invariants,
            'history_file': str(self.history_file),
        }


_config: Optional[TreeConfig] = None


def get_config() -> TreeConfig:
    """Get the process-wide configuration instance"""
    global _config
    if _config is None:
        _config = TreeConfig()
    return _config


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler for command-line entry points"""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)
