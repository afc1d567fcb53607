"""
Self-balancing tree engines.
"""

from treetrace.models.trees.avl_tree import AVLNode, AVLTree
from treetrace.models.trees.red_black_tree import NIL, Color, RBNode, RedBlackTree

__all__ = ["AVLNode", "AVLTree", "Color", "NIL", "RBNode", "RedBlackTree"]
