"""
AVL Tree engine with traced insert and delete.

Balance is kept through an explicit height stored on every node. Missing
children are plain None; there is no sentinel and no parent link, so
rotations return the new subtree root and the caller relinks it.
"""

import logging
from dataclasses import dataclass

from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.models.exceptions import SerializationError
from treetrace.models.serialized import SerializedNode, check_payload
from treetrace.models.step import Severity, StepCode, StepRecord, TraceRecorder
from treetrace.models.value import Orderable, validate_value

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class AVLNode:
    """Node in the AVL Tree."""

    value: Orderable
    left: "AVLNode | None" = None
    right: "AVLNode | None" = None
    height: int = 1


class AVLTree(BalancedTree):
    """
    AVL Tree implementation of BalancedTree.

    Properties maintained after every insert and delete:
    1. height = 1 + max(height(left), height(right)), with absent children at 0
    2. balance = height(left) - height(right) is -1, 0 or 1 at every node
    3. Values are unique; inserting a present value changes nothing
    """

    def __init__(self) -> None:
        self._root: AVLNode | None = None

    @property
    def root(self) -> AVLNode | None:
        return self._root

    def insert(self, value: Orderable) -> list[StepRecord]:
        """Insert a value and rebalance on the way back up. O(log N)"""
        validate_value(value)
        trace = TraceRecorder()
        trace.record(StepCode.AVL_INSERT_START, f"Inserting value {value}")

        if self.search(value) is not None:
            trace.record(
                StepCode.AVL_INSERT_DUPLICATE,
                f"Value {value} already exists - tree unchanged",
            )
            logger.debug("AVL insert %r: duplicate ignored", value)
            return trace.steps

        self._root = self._insert_node(self._root, value, trace)
        trace.record(StepCode.AVL_INSERT_COMPLETE, "AVL insertion complete!", Severity.SUCCESS)

        logger.debug("AVL insert %r finished with %d steps", value, len(trace))
        return trace.steps

    def delete(self, value: Orderable) -> list[StepRecord]:
        """Remove a value and rebalance on the way back up. O(log N)"""
        validate_value(value)
        trace = TraceRecorder()
        trace.record(StepCode.AVL_DELETE_START, f"Deleting value {value}")

        if self.search(value) is None:
            trace.record(StepCode.AVL_DELETE_NOT_FOUND, f"Value {value} not found", Severity.ERROR)
            logger.debug("AVL delete %r: not found", value)
            return trace.steps

        self._root = self._delete_node(self._root, value, trace)
        trace.record(StepCode.AVL_DELETE_COMPLETE, "AVL deletion complete!", Severity.SUCCESS)

        logger.debug("AVL delete %r finished with %d steps", value, len(trace))
        return trace.steps

    def search(self, value: Orderable) -> AVLNode | None:
        """Find the node holding value, or None. O(log N)"""
        validate_value(value)
        current = self._root
        while current is not None and current.value != value:
            if value < current.value:
                current = current.left
            else:
                current = current.right
        return current

    def trace_search(self, value: Orderable) -> list[StepRecord]:
        """Search for value, recording each comparison on the way down."""
        validate_value(value)
        trace = TraceRecorder()
        trace.record(StepCode.SEARCH_START, f"Searching for value {value}")

        current = self._root
        while current is not None:
            if value == current.value:
                trace.record(
                    StepCode.SEARCH_FOUND,
                    f"Found {value} (height {current.height}, balance {self.balance(current)})",
                    Severity.SUCCESS,
                )
                return trace.steps
            if value < current.value:
                trace.record(StepCode.SEARCH_GO_LEFT, f"{value} < {current.value}, going left")
                current = current.left
            else:
                trace.record(StepCode.SEARCH_GO_RIGHT, f"{value} > {current.value}, going right")
                current = current.right

        trace.record(StepCode.SEARCH_NOT_FOUND, f"Value {value} not found", Severity.ERROR)
        return trace.steps

    def contains(self, value: Orderable) -> bool:
        return self.search(value) is not None

    @staticmethod
    def node_height(node: AVLNode | None) -> int:
        if node is None:
            return 0
        return node.height

    def balance(self, node: AVLNode | None) -> int:
        """Left height minus right height; 0 for an absent node."""
        if node is None:
            return 0
        return self.node_height(node.left) - self.node_height(node.right)

    def minimum(self, node: AVLNode | None = None) -> AVLNode | None:
        """Return the leftmost node below node (the root by default)."""
        current = self._root if node is None else node
        if current is None:
            return None
        while current.left is not None:
            current = current.left
        return current

    def height(self) -> int:
        """Height of the tree, read from the root's stored height."""
        return self.node_height(self._root)

    def balance_metric(self) -> None:
        # AVL balance is a per-node property; see balance().
        return None

    def count_nodes(self) -> int:
        return self._count(self._root)

    def get_inorder_values(self) -> list[Orderable]:
        values: list[Orderable] = []
        self._inorder(self._root, values)
        return values

    def get_preorder_values(self) -> list[Orderable]:
        values: list[Orderable] = []
        self._preorder(self._root, values)
        return values

    def get_postorder_values(self) -> list[Orderable]:
        values: list[Orderable] = []
        self._postorder(self._root, values)
        return values

    def serialize(self) -> SerializedNode | None:
        return self._serialize_node(self._root)

    def deserialize(self, data: SerializedNode | None) -> None:
        """
        Replace the tree with the structure described by data.

        Colors are ignored and heights are recomputed. Values must be strictly
        ordered and every node balanced; otherwise SerializationError is raised
        and the tree is left unchanged.
        """
        try:
            root = self._deserialize_node(data, None, None)
        except RecursionError as exc:
            raise SerializationError("Tree payload is nested too deeply") from exc
        self._root = root
        logger.debug("AVL tree replaced from payload (%d nodes)", self.count_nodes())

    def _insert_node(
        self, node: AVLNode | None, value: Orderable, trace: TraceRecorder
    ) -> AVLNode:
        """Insert value (known to be absent) below node; return the new subtree root."""
        if node is None:
            trace.record(StepCode.AVL_INSERT_CREATE_NODE, f"Created new node with value {value}")
            return AVLNode(value)

        if value < node.value:
            trace.record(StepCode.AVL_INSERT_GO_LEFT, f"Going left from node {node.value}")
            node.left = self._insert_node(node.left, value, trace)
        else:
            trace.record(StepCode.AVL_INSERT_GO_RIGHT, f"Going right from node {node.value}")
            node.right = self._insert_node(node.right, value, trace)

        self._update_height(node)
        balance = self.balance(node)
        trace.record(
            StepCode.AVL_INSERT_CHECK_BALANCE,
            f"Node {node.value} balance factor: {balance}",
        )

        # Left Left
        if balance > 1 and value < node.left.value:
            trace.record(
                StepCode.AVL_INSERT_LL_CASE,
                f"Left-Left case at {node.value}: Right rotation",
                Severity.WARNING,
            )
            return self._rotate_right(node)

        # Right Right
        if balance < -1 and value > node.right.value:
            trace.record(
                StepCode.AVL_INSERT_RR_CASE,
                f"Right-Right case at {node.value}: Left rotation",
                Severity.WARNING,
            )
            return self._rotate_left(node)

        # Left Right
        if balance > 1 and value > node.left.value:
            trace.record(
                StepCode.AVL_INSERT_LR_CASE,
                f"Left-Right case at {node.value}: Left rotation at {node.left.value}, "
                f"then Right rotation",
                Severity.WARNING,
            )
            node.left = self._rotate_left(node.left)
            return self._rotate_right(node)

        # Right Left
        if balance < -1 and value < node.right.value:
            trace.record(
                StepCode.AVL_INSERT_RL_CASE,
                f"Right-Left case at {node.value}: Right rotation at {node.right.value}, "
                f"then Left rotation",
                Severity.WARNING,
            )
            node.right = self._rotate_right(node.right)
            return self._rotate_left(node)

        return node

    def _delete_node(
        self, node: AVLNode | None, value: Orderable, trace: TraceRecorder
    ) -> AVLNode | None:
        """Delete value below node; return the new subtree root."""
        if node is None:
            trace.record(StepCode.AVL_DELETE_NOT_FOUND, f"Value {value} not found", Severity.ERROR)
            return None

        if value < node.value:
            trace.record(StepCode.AVL_DELETE_GO_LEFT, f"Going left from node {node.value}")
            node.left = self._delete_node(node.left, value, trace)
        elif value > node.value:
            trace.record(StepCode.AVL_DELETE_GO_RIGHT, f"Going right from node {node.value}")
            node.right = self._delete_node(node.right, value, trace)
        elif node.left is None or node.right is None:
            child = node.left if node.left is not None else node.right
            if child is None:
                trace.record(StepCode.AVL_DELETE_REMOVE_LEAF, f"Removing leaf node {node.value}")
                return None
            trace.record(
                StepCode.AVL_DELETE_REPLACE_WITH_CHILD,
                f"Replacing node {node.value} with child {child.value}",
            )
            node = child
        else:
            successor = self.minimum(node.right)
            trace.record(
                StepCode.AVL_DELETE_REPLACE_WITH_SUCCESSOR,
                f"Replacing node {node.value} with successor {successor.value}",
            )
            node.value = successor.value
            node.right = self._delete_node(node.right, successor.value, trace)

        self._update_height(node)
        balance = self.balance(node)
        trace.record(
            StepCode.AVL_DELETE_CHECK_BALANCE,
            f"Node {node.value} balance factor: {balance}",
        )

        # Left Left
        if balance > 1 and self.balance(node.left) >= 0:
            trace.record(
                StepCode.AVL_DELETE_LL_CASE,
                f"Left-Left case at {node.value}: Right rotation",
                Severity.WARNING,
            )
            return self._rotate_right(node)

        # Left Right
        if balance > 1 and self.balance(node.left) < 0:
            trace.record(
                StepCode.AVL_DELETE_LR_CASE,
                f"Left-Right case at {node.value}: Left rotation at {node.left.value}, "
                f"then Right rotation",
                Severity.WARNING,
            )
            node.left = self._rotate_left(node.left)
            return self._rotate_right(node)

        # Right Right
        if balance < -1 and self.balance(node.right) <= 0:
            trace.record(
                StepCode.AVL_DELETE_RR_CASE,
                f"Right-Right case at {node.value}: Left rotation",
                Severity.WARNING,
            )
            return self._rotate_left(node)

        # Right Left
        if balance < -1 and self.balance(node.right) > 0:
            trace.record(
                StepCode.AVL_DELETE_RL_CASE,
                f"Right-Left case at {node.value}: Right rotation at {node.right.value}, "
                f"then Left rotation",
                Severity.WARNING,
            )
            node.right = self._rotate_right(node.right)
            return self._rotate_left(node)

        return node

    def _rotate_left(self, node: AVLNode) -> AVLNode:
        """Left rotation; returns the new subtree root."""
        pivot = node.right
        moved = pivot.left

        pivot.left = node
        node.right = moved

        self._update_height(node)
        self._update_height(pivot)
        return pivot

    def _rotate_right(self, node: AVLNode) -> AVLNode:
        """Right rotation; returns the new subtree root."""
        pivot = node.left
        moved = pivot.right

        pivot.right = node
        node.left = moved

        self._update_height(node)
        self._update_height(pivot)
        return pivot

    def _update_height(self, node: AVLNode) -> None:
        node.height = 1 + max(self.node_height(node.left), self.node_height(node.right))

    def _count(self, node: AVLNode | None) -> int:
        if node is None:
            return 0
        return 1 + self._count(node.left) + self._count(node.right)

    def _inorder(self, node: AVLNode | None, values: list[Orderable]) -> None:
        if node is None:
            return
        self._inorder(node.left, values)
        values.append(node.value)
        self._inorder(node.right, values)

    def _preorder(self, node: AVLNode | None, values: list[Orderable]) -> None:
        if node is None:
            return
        values.append(node.value)
        self._preorder(node.left, values)
        self._preorder(node.right, values)

    def _postorder(self, node: AVLNode | None, values: list[Orderable]) -> None:
        if node is None:
            return
        self._postorder(node.left, values)
        self._postorder(node.right, values)
        values.append(node.value)

    def _serialize_node(self, node: AVLNode | None) -> SerializedNode | None:
        if node is None:
            return None
        return {
            "value": node.value,
            "left": self._serialize_node(node.left),
            "right": self._serialize_node(node.right),
        }

    def _deserialize_node(
        self, data: SerializedNode | None, low: Orderable | None, high: Orderable | None
    ) -> AVLNode | None:
        if data is None:
            return None

        check_payload(data, colored=False)
        value = data["value"]
        if (low is not None and value <= low) or (high is not None and value >= high):
            raise SerializationError(f"Value {value} is out of order (bounds {low}, {high})")

        node = AVLNode(value)
        node.left = self._deserialize_node(data["left"], low, value)
        node.right = self._deserialize_node(data["right"], value, high)
        self._update_height(node)

        balance = self.balance(node)
        if abs(balance) > 1:
            raise SerializationError(f"Node {value} is unbalanced: {balance}")
        return node
