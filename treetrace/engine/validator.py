"""
Read-only invariant checks for both engines.

These walk the live structure and report every violation they find; they
never repair anything. Tests run them after each mutation.
"""

from dataclasses import dataclass, field

from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.models.trees import AVLTree, RedBlackTree
from treetrace.models.trees.avl_tree import AVLNode
from treetrace.models.trees.red_black_tree import NIL, Color, RBLink


@dataclass
class ValidationReport:
    """Outcome of an invariant check."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)

    def fail(self, message: str) -> None:
        self.valid = False
        self.errors.append(message)

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        for message in other.errors:
            self.fail(message)
        return self

    def __bool__(self) -> bool:
        return self.valid


def validate_bst(tree: BalancedTree, *, strict: bool = True) -> ValidationReport:
    """
    Check the search ordering through the in-order sequence.

    Args:
        tree: Engine to check.
        strict: Require strictly ascending values (no duplicates).
    """
    report = ValidationReport()
    values = tree.get_inorder_values()
    for previous, current in zip(values, values[1:]):
        if current < previous or (strict and current == previous):
            report.fail(f"Ordering violated: {previous} before {current}")
    return report


def validate_red_black(tree: RedBlackTree) -> ValidationReport:
    """Check colors, black-heights and parent links of a Red-Black tree."""
    report = ValidationReport()
    root = tree.root

    if root is not NIL:
        if root.color != Color.BLACK:
            report.fail(f"Root {root.value} is red")
        if root.parent is not NIL:
            report.fail(f"Root {root.value} has a parent")

    _check_red_black(root, report)
    return report


def _check_red_black(node: RBLink, report: ValidationReport) -> int:
    """Return the black-height below node, recording violations on the way."""
    if node is NIL:
        return 1

    for child in (node.left, node.right):
        if child is NIL:
            continue
        if child.parent is not node:
            report.fail(f"Node {child.value} does not point back to parent {node.value}")
        if node.color == Color.RED and child.color == Color.RED:
            report.fail(f"Red node {node.value} has red child {child.value}")

    left_height = _check_red_black(node.left, report)
    right_height = _check_red_black(node.right, report)
    if left_height != right_height:
        report.fail(
            f"Black-height mismatch at {node.value}: left {left_height}, right {right_height}"
        )

    return max(left_height, right_height) + (1 if node.color == Color.BLACK else 0)


def validate_avl(tree: AVLTree) -> ValidationReport:
    """Check stored heights and balance factors of an AVL tree."""
    report = ValidationReport()
    _check_avl(tree.root, report)
    return report


def _check_avl(node: AVLNode | None, report: ValidationReport) -> int:
    """Return the recomputed height of node, recording violations on the way."""
    if node is None:
        return 0

    left_height = _check_avl(node.left, report)
    right_height = _check_avl(node.right, report)
    height = 1 + max(left_height, right_height)

    if node.height != height:
        report.fail(f"Node {node.value} stores height {node.height}, actual {height}")
    if abs(left_height - right_height) > 1:
        report.fail(f"Node {node.value} is unbalanced: {left_height - right_height}")
    return height


def validate_tree(tree: BalancedTree) -> ValidationReport:
    """Run the ordering check plus the engine-specific invariants."""
    if isinstance(tree, RedBlackTree):
        # Red-Black trees accept duplicates, so ordering is non-strict there.
        return validate_bst(tree, strict=False).merge(validate_red_black(tree))
    if isinstance(tree, AVLTree):
        return validate_bst(tree, strict=True).merge(validate_avl(tree))
    raise TypeError(f"No invariant checks for {type(tree).__name__}")
