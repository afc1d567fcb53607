"""
Construct an engine from its tree type name.
"""

from enum import Enum

from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.models.exceptions import UnknownTreeTypeError
from treetrace.models.trees import AVLTree, RedBlackTree


class TreeType(str, Enum):
    """Built-in balancing strategies."""

    RB = "rb"
    AVL = "avl"

    @classmethod
    def parse(cls, tree_type: "TreeType | str") -> "TreeType":
        if isinstance(tree_type, cls):
            return tree_type
        try:
            return cls(str(tree_type).strip().lower())
        except ValueError as exc:
            raise UnknownTreeTypeError(tree_type) from exc


_ENGINES: dict[TreeType, type[BalancedTree]] = {
    TreeType.RB: RedBlackTree,
    TreeType.AVL: AVLTree,
}


def create_tree(tree_type: TreeType | str) -> BalancedTree:
    """
    Create an empty tree of the given type.

    Args:
        tree_type: TreeType member or its name ("rb" / "avl").

    Returns:
        A new, empty engine instance.

    Raises:
        UnknownTreeTypeError: If tree_type is not a built-in engine.
    """
    return _ENGINES[TreeType.parse(tree_type)]()


def tree_type_of(tree: BalancedTree) -> TreeType:
    """Return the TreeType an engine instance was built for."""
    for tree_type, engine_cls in _ENGINES.items():
        if isinstance(tree, engine_cls):
            return tree_type
    raise UnknownTreeTypeError(type(tree).__name__)
