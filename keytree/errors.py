#!/usr/bin/env python3
"""
keytree Error Hierarchy
Canonical exception classes for the B-tree engine.
"""

from enum import Enum


class ErrorCode(Enum):
    UNKNOWN = "UNKNOWN_ERROR"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"


class KeyTreeError(Exception):
    """Base class for all keytree exceptions"""
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class InvalidBranchFactorError(KeyTreeError, ValueError):
    """Raised when a tree is configured with an unusable branch factor"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.INVALID_CONFIGURATION, details)


class TreeInvariantError(KeyTreeError):
    """Raised when a structural invariant is broken.

    This always signals a bug in the tree algorithms, never bad input,
    so callers should not try to recover from it.
    """
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.INVARIANT_VIOLATION, details)
