"""
Abstract base classes shared by the tree engines.
"""

from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.interfaces.traversable import Traversable

__all__ = ["BalancedTree", "Traversable"]
