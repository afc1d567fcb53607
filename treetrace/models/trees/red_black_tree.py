"""
Red-Black Tree engine with traced insert and delete.

Every missing child and the root's parent resolve to one shared, immutable
BLACK sentinel, so color and child lookups during fixup never need None checks.
"""

import logging
import weakref
from enum import IntEnum
from typing import Union

from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.models.exceptions import SerializationError
from treetrace.models.serialized import SerializedNode, check_payload
from treetrace.models.step import Severity, StepCode, StepRecord, TraceRecorder
from treetrace.models.value import Orderable, validate_value

logger = logging.getLogger(__name__)


class Color(IntEnum):
    """Node color for Red-Black Tree."""

    RED = 0
    BLACK = 1


class _Sentinel:
    """
    The BLACK leaf shared by every Red-Black tree.

    Its children and parent are itself, it never holds a value, and any
    attempt to assign to it raises AttributeError.
    """

    __slots__ = ()

    value = None
    color = Color.BLACK

    @property
    def left(self) -> "_Sentinel":
        return self

    @property
    def right(self) -> "_Sentinel":
        return self

    @property
    def parent(self) -> "_Sentinel":
        return self

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"The Red-Black sentinel is immutable (tried to set {name!r})")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"The Red-Black sentinel is immutable (tried to delete {name!r})")

    def __repr__(self) -> str:
        return "NIL"


NIL = _Sentinel()


class RBNode:
    """
    Node in the Red-Black Tree.

    Children are owning references (a real node or NIL). The parent link is a
    weak back-reference and reads as NIL when the node is the root.
    """

    __slots__ = ("value", "color", "left", "right", "_parent_ref", "__weakref__")

    def __init__(self, value: Orderable, color: Color = Color.RED) -> None:
        self.value = value
        self.color = color
        self.left: RBLink = NIL
        self.right: RBLink = NIL
        self._parent_ref: weakref.ref | None = None

    @property
    def parent(self) -> "RBLink":
        if self._parent_ref is None:
            return NIL
        parent = self._parent_ref()
        return NIL if parent is None else parent

    @parent.setter
    def parent(self, node: "RBLink") -> None:
        self._parent_ref = None if node is NIL else weakref.ref(node)

    def __repr__(self) -> str:
        return f"RBNode({self.value!r}, {self.color.name})"


RBLink = Union[RBNode, _Sentinel]


def _color_name(node: RBLink) -> str:
    return node.color.name.lower()


class RedBlackTree(BalancedTree):
    """
    Red-Black Tree implementation of BalancedTree.

    Properties maintained after every insert and delete:
    1. Every node is either red or black
    2. Root is always black
    3. Sentinel leaves are black
    4. Red nodes cannot have red children
    5. Every path from a node to a descendant leaf has the same number of black nodes

    Duplicate values are not rejected: ties descend to the right, so a repeated
    value becomes a distinct node in the right subtree of its equal.
    """

    NIL = NIL

    def __init__(self) -> None:
        self._root: RBLink = NIL

    @property
    def root(self) -> RBLink:
        return self._root

    @staticmethod
    def is_nil(node: RBLink) -> bool:
        return node is NIL

    def insert(self, value: Orderable) -> list[StepRecord]:
        """Insert a value and restore the Red-Black properties. O(log N)"""
        validate_value(value)
        trace = TraceRecorder()
        trace.record(StepCode.RB_INSERT_START, f"Inserting value {value}")

        # Find insertion point
        parent: RBLink = NIL
        current = self._root
        while current is not NIL:
            parent = current
            if value < current.value:
                current = current.left
            else:
                current = current.right

        new_node = RBNode(value)
        new_node.parent = parent

        if parent is NIL:
            self._root = new_node
            trace.record(
                StepCode.RB_INSERT_ROOT,
                "Tree was empty, new node is root",
                Severity.SUCCESS,
            )
        elif value < parent.value:
            parent.left = new_node
            trace.record(
                StepCode.RB_INSERT_PLACE_LEFT,
                f"Inserted {value} as left child of {parent.value}",
            )
        else:
            parent.right = new_node
            trace.record(
                StepCode.RB_INSERT_PLACE_RIGHT,
                f"Inserted {value} as right child of {parent.value}",
            )

        trace.record(StepCode.RB_INSERT_FIXUP_START, "Fixing violations...", Severity.WARNING)
        self._fix_insert(new_node, trace)

        logger.debug("RB insert %r finished with %d steps", value, len(trace))
        return trace.steps

    def delete(self, value: Orderable) -> list[StepRecord]:
        """Remove a value and restore the Red-Black properties. O(log N)"""
        validate_value(value)
        trace = TraceRecorder()
        trace.record(StepCode.RB_DELETE_START, f"Deleting value {value}")

        node = self.search(value)
        if node is NIL:
            trace.record(StepCode.RB_DELETE_NOT_FOUND, f"Value {value} not found", Severity.ERROR)
            logger.debug("RB delete %r: not found", value)
            return trace.steps

        original_color = node.color

        # x takes the removed position; its parent is tracked separately
        # because x may be the sentinel, which cannot hold a parent link.
        if node.left is NIL:
            x = node.right
            x_parent = node.parent
            self._transplant(node, node.right)
            trace.record(
                StepCode.RB_DELETE_NODE_ONE_CHILD,
                f"Node {value} has one right child or none. Transplanting.",
            )
        elif node.right is NIL:
            x = node.left
            x_parent = node.parent
            self._transplant(node, node.left)
            trace.record(
                StepCode.RB_DELETE_NODE_ONE_CHILD,
                f"Node {value} has one left child. Transplanting.",
            )
        else:
            successor = self.minimum(node.right)
            original_color = successor.color
            x = successor.right

            if successor.parent is node:
                x_parent = successor
            else:
                x_parent = successor.parent
                self._transplant(successor, successor.right)
                successor.right = node.right
                successor.right.parent = successor

            self._transplant(node, successor)
            successor.left = node.left
            successor.left.parent = successor
            successor.color = node.color
            trace.record(
                StepCode.RB_DELETE_NODE_TWO_CHILDREN,
                f"Node {value} has two children. Replaced with successor {successor.value}.",
            )

        if original_color == Color.BLACK:
            trace.record(
                StepCode.RB_DELETE_FIXUP_START,
                "Removed a black node. Fixing violations after deletion...",
                Severity.WARNING,
            )
            self._fix_delete(x, x_parent, trace)
        else:
            trace.record(
                StepCode.RB_DELETE_NO_FIXUP,
                "Removed node was red. No fixup needed.",
                Severity.SUCCESS,
            )

        trace.record(StepCode.RB_DELETE_COMPLETE, "Deletion complete!", Severity.SUCCESS)
        logger.debug("RB delete %r finished with %d steps", value, len(trace))
        return trace.steps

    def search(self, value: Orderable) -> RBLink:
        """Find the node holding value, or NIL. O(log N)"""
        validate_value(value)
        current = self._root
        while current is not NIL and current.value != value:
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
        while current is not NIL:
            if value == current.value:
                trace.record(
                    StepCode.SEARCH_FOUND,
                    f"Found {value} ({_color_name(current)} node)",
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
        return self.search(value) is not NIL

    def minimum(self, node: RBLink | None = None) -> RBLink:
        """Return the leftmost node below node (the root by default)."""
        if node is None:
            node = self._root
        while node.left is not NIL:
            node = node.left
        return node

    def height(self, node: RBLink | None = None) -> int:
        """Height in nodes, recomputed by a full walk."""
        if node is None:
            node = self._root
        if node is NIL:
            return 0
        return 1 + max(self.height(node.left), self.height(node.right))

    def black_height(self, node: RBLink | None = None) -> int:
        """Largest count of black nodes on a path down from node, itself included."""
        if node is None:
            node = self._root
        if node is NIL:
            return 0
        below = max(self.black_height(node.left), self.black_height(node.right))
        return below + (1 if node.color == Color.BLACK else 0)

    def balance_metric(self) -> int:
        return self.black_height()

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

    def uncle(self, node: RBLink) -> RBLink:
        """Return the grandparent's other child, or NIL without a grandparent."""
        parent = node.parent
        if parent is NIL or parent.parent is NIL:
            return NIL
        grandparent = parent.parent
        if parent is grandparent.left:
            return grandparent.right
        return grandparent.left

    def serialize(self) -> SerializedNode | None:
        return self._serialize_node(self._root)

    def deserialize(self, data: SerializedNode | None) -> None:
        """
        Replace the tree with the structure described by data.

        The replacement is built and checked in full before it is installed.

        Raises:
            SerializationError: If data is malformed, out of order, too deep,
                or breaks a Red-Black property. The tree is left unchanged.
        """
        try:
            root, _ = self._deserialize_node(data, None, None)
        except RecursionError as exc:
            raise SerializationError("Tree payload is nested too deeply") from exc

        if root.color == Color.RED:
            raise SerializationError(f"Root {root.value} is red")
        self._root = root
        logger.debug("RB tree replaced from payload (%d nodes)", self.count_nodes())

    def _fix_insert(self, node: RBNode, trace: TraceRecorder) -> None:
        """Fix Red-Black Tree properties after insert."""
        while node is not self._root and node.parent.color == Color.RED:
            parent = node.parent
            grandparent = parent.parent

            if parent is grandparent.left:
                uncle = grandparent.right

                if uncle.color == Color.RED:
                    trace.record(
                        StepCode.RB_INSERT_CASE_1,
                        f"Case 1: Uncle {uncle.value} is red - Recoloring {parent.value} and "
                        f"{uncle.value} black, {grandparent.value} red",
                    )
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grandparent.color = Color.RED
                    node = grandparent
                else:
                    if node is parent.right:
                        trace.record(
                            StepCode.RB_INSERT_CASE_2,
                            f"Case 2: Triangle at {node.value} - Left rotation at {parent.value}",
                        )
                        node = parent
                        self._rotate_left(node)

                    trace.record(
                        StepCode.RB_INSERT_CASE_3,
                        f"Case 3: Line at {node.value} - Right rotation at {grandparent.value}",
                    )
                    node.parent.color = Color.BLACK
                    grandparent.color = Color.RED
                    self._rotate_right(grandparent)
            else:
                uncle = grandparent.left

                if uncle.color == Color.RED:
                    trace.record(
                        StepCode.RB_INSERT_CASE_1,
                        f"Case 1: Uncle {uncle.value} is red - Recoloring {parent.value} and "
                        f"{uncle.value} black, {grandparent.value} red",
                    )
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grandparent.color = Color.RED
                    node = grandparent
                else:
                    if node is parent.left:
                        trace.record(
                            StepCode.RB_INSERT_CASE_2,
                            f"Case 2: Triangle at {node.value} - Right rotation at {parent.value}",
                        )
                        node = parent
                        self._rotate_right(node)

                    trace.record(
                        StepCode.RB_INSERT_CASE_3,
                        f"Case 3: Line at {node.value} - Left rotation at {grandparent.value}",
                    )
                    node.parent.color = Color.BLACK
                    grandparent.color = Color.RED
                    self._rotate_left(grandparent)

        self._root.color = Color.BLACK
        trace.record(
            StepCode.RB_INSERT_COMPLETE,
            "Root colored black - Tree balanced!",
            Severity.SUCCESS,
        )

    def _fix_delete(self, x: RBLink, parent: RBLink, trace: TraceRecorder) -> None:
        """Fix Red-Black Tree properties after removing a black node."""
        while x is not self._root and x.color == Color.BLACK:
            if x is parent.left:
                sibling = parent.right

                if sibling.color == Color.RED:
                    trace.record(
                        StepCode.RB_DELETE_CASE_1,
                        f"Case 1: Sibling {sibling.value} is red - Left rotation at {parent.value}",
                    )
                    sibling.color = Color.BLACK
                    parent.color = Color.RED
                    self._rotate_left(parent)
                    sibling = parent.right

                if sibling.left.color == Color.BLACK and sibling.right.color == Color.BLACK:
                    trace.record(
                        StepCode.RB_DELETE_CASE_2,
                        f"Case 2: Both children of sibling {sibling.value} are black - "
                        f"Recoloring {sibling.value} red, moving up to {parent.value}",
                    )
                    sibling.color = Color.RED
                    x = parent
                    parent = x.parent
                else:
                    if sibling.right.color == Color.BLACK:
                        trace.record(
                            StepCode.RB_DELETE_CASE_3,
                            f"Case 3: Right child of sibling {sibling.value} is black - "
                            f"Right rotation at {sibling.value}",
                        )
                        sibling.left.color = Color.BLACK
                        sibling.color = Color.RED
                        self._rotate_right(sibling)
                        sibling = parent.right

                    trace.record(
                        StepCode.RB_DELETE_CASE_4,
                        f"Case 4: Right child of sibling {sibling.value} is red - "
                        f"Left rotation at {parent.value}",
                    )
                    sibling.color = parent.color
                    parent.color = Color.BLACK
                    sibling.right.color = Color.BLACK
                    self._rotate_left(parent)
                    x = self._root
                    parent = NIL
            else:
                sibling = parent.left

                if sibling.color == Color.RED:
                    trace.record(
                        StepCode.RB_DELETE_CASE_1,
                        f"Case 1: Sibling {sibling.value} is red - Right rotation at {parent.value}",
                    )
                    sibling.color = Color.BLACK
                    parent.color = Color.RED
                    self._rotate_right(parent)
                    sibling = parent.left

                if sibling.right.color == Color.BLACK and sibling.left.color == Color.BLACK:
                    trace.record(
                        StepCode.RB_DELETE_CASE_2,
                        f"Case 2: Both children of sibling {sibling.value} are black - "
                        f"Recoloring {sibling.value} red, moving up to {parent.value}",
                    )
                    sibling.color = Color.RED
                    x = parent
                    parent = x.parent
                else:
                    if sibling.left.color == Color.BLACK:
                        trace.record(
                            StepCode.RB_DELETE_CASE_3,
                            f"Case 3: Left child of sibling {sibling.value} is black - "
                            f"Left rotation at {sibling.value}",
                        )
                        sibling.right.color = Color.BLACK
                        sibling.color = Color.RED
                        self._rotate_left(sibling)
                        sibling = parent.left

                    trace.record(
                        StepCode.RB_DELETE_CASE_4,
                        f"Case 4: Left child of sibling {sibling.value} is red - "
                        f"Right rotation at {parent.value}",
                    )
                    sibling.color = parent.color
                    parent.color = Color.BLACK
                    sibling.left.color = Color.BLACK
                    self._rotate_right(parent)
                    x = self._root
                    parent = NIL

        # The sentinel is permanently black.
        if x is not NIL:
            x.color = Color.BLACK
        trace.record(StepCode.RB_DELETE_FIXUP_COMPLETE, "Delete fixup complete!", Severity.SUCCESS)

    def _rotate_left(self, node: RBNode) -> None:
        """Left rotation."""
        right_child = node.right

        node.right = right_child.left
        if right_child.left is not NIL:
            right_child.left.parent = node

        right_child.parent = node.parent

        if node.parent is NIL:
            self._root = right_child
        elif node is node.parent.left:
            node.parent.left = right_child
        else:
            node.parent.right = right_child

        right_child.left = node
        node.parent = right_child

    def _rotate_right(self, node: RBNode) -> None:
        """Right rotation."""
        left_child = node.left

        node.left = left_child.right
        if left_child.right is not NIL:
            left_child.right.parent = node

        left_child.parent = node.parent

        if node.parent is NIL:
            self._root = left_child
        elif node is node.parent.right:
            node.parent.right = left_child
        else:
            node.parent.left = left_child

        left_child.right = node
        node.parent = left_child

    def _transplant(self, node: RBNode, replacement: RBLink) -> None:
        """Put replacement where node hangs in the tree."""
        if node.parent is NIL:
            self._root = replacement
        elif node is node.parent.left:
            node.parent.left = replacement
        else:
            node.parent.right = replacement

        if replacement is not NIL:
            replacement.parent = node.parent

    def _count(self, node: RBLink) -> int:
        if node is NIL:
            return 0
        return 1 + self._count(node.left) + self._count(node.right)

    def _inorder(self, node: RBLink, values: list[Orderable]) -> None:
        if node is NIL:
            return
        self._inorder(node.left, values)
        values.append(node.value)
        self._inorder(node.right, values)

    def _preorder(self, node: RBLink, values: list[Orderable]) -> None:
        if node is NIL:
            return
        values.append(node.value)
        self._preorder(node.left, values)
        self._preorder(node.right, values)

    def _postorder(self, node: RBLink, values: list[Orderable]) -> None:
        if node is NIL:
            return
        self._postorder(node.left, values)
        self._postorder(node.right, values)
        values.append(node.value)

    def _serialize_node(self, node: RBLink) -> SerializedNode | None:
        if node is NIL:
            return None
        return {
            "value": node.value,
            "color": _color_name(node),
            "left": self._serialize_node(node.left),
            "right": self._serialize_node(node.right),
        }

    def _deserialize_node(
        self, data: SerializedNode | None, low: Orderable | None, high: Orderable | None
    ) -> tuple[RBLink, int]:
        """Build the subtree for data; return it with its black-height."""
        if data is None:
            return NIL, 1

        check_payload(data, colored=True)
        value = data["value"]
        if (low is not None and value < low) or (high is not None and value > high):
            raise SerializationError(f"Value {value} is out of order (bounds {low}, {high})")

        node = RBNode(value, Color[data["color"].upper()])
        node.left, left_height = self._deserialize_node(data["left"], low, value)
        node.right, right_height = self._deserialize_node(data["right"], value, high)

        if left_height != right_height:
            raise SerializationError(
                f"Black-height mismatch at {value}: left {left_height}, right {right_height}"
            )
        if node.color == Color.RED and Color.RED in (node.left.color, node.right.color):
            raise SerializationError(f"Red node {value} has a red child")

        if node.left is not NIL:
            node.left.parent = node
        if node.right is not NIL:
            node.right.parent = node
        return node, left_height + (1 if node.color == Color.BLACK else 0)
