"""
Custom exceptions for the tree engines.
"""

from typing import Any


class TreeTraceError(Exception):
    """Base class for all errors raised by treetrace."""


class InvalidValueError(TreeTraceError, ValueError):
    """
    Raised when a value cannot be ordered safely against the tree's contents.

    This is a fail-fast error: the tree is never touched when it is raised.
    """

    def __init__(self, value: Any, reason: str):
        """
        Initialize invalid value error.

        Args:
            value: The rejected value.
            reason: Why the value was rejected.
        """
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid tree value {value!r}: {reason}")


class SerializationError(TreeTraceError, ValueError):
    """Raised when a serialized tree payload is malformed."""


class UnknownTreeTypeError(TreeTraceError, ValueError):
    """Raised when a tree type name is not one of the built-in engines."""

    def __init__(self, tree_type: Any):
        self.tree_type = tree_type
        super().__init__(f"Unknown tree type {tree_type!r}, expected 'rb' or 'avl'")
