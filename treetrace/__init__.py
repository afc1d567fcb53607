"""
Dual self-balancing binary search trees with traced operations.

This package provides Red-Black and AVL engines sharing one interface:
- insert(value) / delete(value) - return the ordered list of steps taken
- search(value) - node lookup (sentinel / None when absent)
- traversals, height, node count, black-height
- serialize() / deserialize() - plain nested-dict state transfer
"""

from treetrace.engine import TreeSession, TreeType, create_tree, validate_tree
from treetrace.interfaces import BalancedTree
from treetrace.models import (
    InvalidValueError,
    SerializationError,
    Severity,
    StepCode,
    StepRecord,
)
from treetrace.models.trees import NIL, AVLTree, RedBlackTree

__all__ = [
    "AVLTree",
    "BalancedTree",
    "InvalidValueError",
    "NIL",
    "RedBlackTree",
    "SerializationError",
    "Severity",
    "StepCode",
    "StepRecord",
    "TreeSession",
    "TreeType",
    "create_tree",
    "validate_tree",
]
