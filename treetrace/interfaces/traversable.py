"""
Traversable protocol for trees that expose depth-first value orderings.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from treetrace.models.value import Orderable


class Traversable(ABC):
    """
    Protocol for trees that support the three depth-first traversals.

    Implementations must support:
    - In-order traversal via get_inorder_values
    - Pre-order traversal via get_preorder_values
    - Post-order traversal via get_postorder_values

    Every call walks the live structure again; results are never cached.
    """

    @abstractmethod
    def get_inorder_values(self) -> list[Orderable]:
        """
        Return the values in in-order (left, node, right).

        Returns:
            A new list, ascending for a valid search tree.
        """
        pass

    @abstractmethod
    def get_preorder_values(self) -> list[Orderable]:
        """
        Return the values in pre-order (node, left, right).

        Returns:
            A new list of values.
        """
        pass

    @abstractmethod
    def get_postorder_values(self) -> list[Orderable]:
        """
        Return the values in post-order (left, right, node).

        Returns:
            A new list of values.
        """
        pass

    def __iter__(self) -> Iterator[Orderable]:
        """Iterate over a fresh in-order snapshot of the values."""
        return iter(self.get_inorder_values())
