"""
BalancedTree abstract base class shared by the Red-Black and AVL engines.
"""

from abc import abstractmethod
from typing import Any

from treetrace.interfaces.traversable import Traversable
from treetrace.models.serialized import SerializedNode
from treetrace.models.step import StepRecord
from treetrace.models.value import Orderable


class BalancedTree(Traversable):
    """
    Abstract base class for self-balancing search trees with traced mutations.

    Values double as keys. Every mutating operation returns the ordered list
    of steps describing what the balancing algorithm did.

    Implementations:
    - RedBlackTree: sentinel leaves, colors, parent back-references
    - AVLTree: explicit per-node height, no sentinel
    """

    @abstractmethod
    def insert(self, value: Orderable) -> list[StepRecord]:
        """
        Insert a value and rebalance.

        Args:
            value: The value to insert.

        Returns:
            Steps in chronological order.

        Raises:
            InvalidValueError: If the value is not orderable.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def delete(self, value: Orderable) -> list[StepRecord]:
        """
        Remove a value and rebalance.

        Args:
            value: The value to remove.

        Returns:
            Steps in chronological order. An absent value yields an
            error-severity step and leaves the tree unchanged.

        Raises:
            InvalidValueError: If the value is not orderable.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def search(self, value: Orderable) -> Any:
        """
        Find the node holding a value.

        Args:
            value: The value to look up.

        Returns:
            The node if found; the engine's "absent" marker otherwise
            (the sentinel for Red-Black, None for AVL).

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def trace_search(self, value: Orderable) -> list[StepRecord]:
        """
        Search for a value, recording the descent.

        Args:
            value: The value to look up.

        Returns:
            Steps ending in SEARCH_FOUND or SEARCH_NOT_FOUND.
        """
        pass

    @abstractmethod
    def contains(self, value: Orderable) -> bool:
        """
        Check if a value is stored in the tree.

        Args:
            value: The value to check.

        Returns:
            True if the value exists, False otherwise.
        """
        pass

    @abstractmethod
    def count_nodes(self) -> int:
        """
        Return the number of stored values.

        Time complexity: O(N), recounted on every call.
        """
        pass

    @abstractmethod
    def height(self) -> int:
        """Return the height of the tree (0 when empty)."""
        pass

    @abstractmethod
    def balance_metric(self) -> int | None:
        """
        Return the engine's whole-tree balance scalar.

        Returns:
            The black-height for Red-Black trees, None for AVL trees.
        """
        pass

    @abstractmethod
    def serialize(self) -> SerializedNode | None:
        """
        Mirror the live structure into the plain nested form.

        Returns:
            The root node dict, or None for an empty tree.
        """
        pass

    @abstractmethod
    def deserialize(self, data: SerializedNode | None) -> None:
        """
        Replace the entire tree with the given serialized structure.

        Args:
            data: Root node dict, or None to empty the tree.

        Raises:
            SerializationError: If the payload is malformed. The tree is
                left unchanged in that case.
        """
        pass

    def is_empty(self) -> bool:
        return self.count_nodes() == 0

    def __len__(self) -> int:
        return self.count_nodes()

    def __contains__(self, value: object) -> bool:
        return self.contains(value)  # type: ignore[arg-type]
