#!/usr/bin/env python3
"""
Base Exception Contract for NodeMate

Provides the single source of truth for the NodeMate error contract.
All domain-specific exceptions must inherit from NodeMateError.
"""

from typing import Optional


class NodeMateError(Exception):
    """
    The Base Contract for all NodeMate errors.
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        user_hint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.user_hint = user_hint
        self.details = details or {}
