"""
TreeSession - caller-side orchestration around the two engines.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from treetrace.engine.factory import TreeType, create_tree
from treetrace.engine.validator import ValidationReport, validate_tree
from treetrace.interfaces.balanced_tree import BalancedTree
from treetrace.models.exceptions import SerializationError
from treetrace.models.serialized import SerializedNode
from treetrace.models.step import Severity, StepCode, StepRecord, TraceRecorder
from treetrace.models.value import Orderable, validate_value

logger = logging.getLogger(__name__)

QUEUED_OPERATIONS = ("insert", "delete", "clear")


@dataclass(frozen=True)
class HistoryEntry:
    """One user-visible operation, as shown in an operation log."""

    operation: str
    value: Any
    tree_type: TreeType
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class OperationResult:
    """Trace produced by one queued operation."""

    operation: str
    value: Orderable | None
    steps: list[StepRecord]


@dataclass(frozen=True)
class TreeStats:
    """Summary numbers for the active tree."""

    node_count: int
    height: int
    tree_stat: int | None
    tree_stat_label: str


@dataclass(frozen=True)
class _Snapshot:
    tree_type: TreeType
    data: SerializedNode | None


class TreeSession:
    """
    Holds one tree per balancing strategy and the state around them.

    Provides:
    - insert/delete/trace_search on the active tree
    - enqueue/process_queue: FIFO of insert/delete/clear operations
    - undo(): restore the structure before the last mutation
    - switch_tree_type(): move between Red-Black and AVL
    - history, stats, traversals, export/import of plain state dicts

    Everything runs synchronously; one caller, sequential calls.
    """

    # Default number of undo snapshots kept
    DEFAULT_UNDO_LIMIT = 10

    # Default number of history entries kept
    DEFAULT_HISTORY_LIMIT = 20

    # Range used by generate_random()
    RANDOM_VALUE_RANGE = (0, 99)
    RANDOM_COUNT_RANGE = (5, 14)

    def __init__(
        self,
        tree_type: TreeType | str = TreeType.RB,
        undo_limit: int = DEFAULT_UNDO_LIMIT,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """
        Initialize the session.

        Args:
            tree_type: Engine to start with ("rb" or "avl").
            undo_limit: Maximum number of undo snapshots kept.
            history_limit: Maximum number of history entries kept.
        """
        if undo_limit <= 0:
            raise ValueError(f"undo_limit must be positive, got {undo_limit}")
        if history_limit <= 0:
            raise ValueError(f"history_limit must be positive, got {history_limit}")

        self._tree_type = TreeType.parse(tree_type)
        self._undo_limit = undo_limit
        self._history_limit = history_limit

        self._trees: dict[TreeType, BalancedTree] = {
            kind: create_tree(kind) for kind in TreeType
        }

        # Serialized state of inactive trees, saved on switch
        self._saved_states: dict[TreeType, SerializedNode | None] = {}

        self._undo_stack: deque[_Snapshot] = deque(maxlen=undo_limit)
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)
        self._queue: deque[tuple[str, Orderable | None]] = deque()

    @property
    def tree(self) -> BalancedTree:
        return self._trees[self._tree_type]

    @property
    def tree_type(self) -> TreeType:
        return self._tree_type

    @property
    def history(self) -> list[HistoryEntry]:
        """History entries, newest first."""
        return list(self._history)

    @property
    def pending_operations(self) -> int:
        return len(self._queue)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def insert(self, value: Orderable) -> list[StepRecord]:
        """Insert into the active tree, saving an undo snapshot first."""
        validate_value(value)
        self._save_for_undo()
        steps = self.tree.insert(value)
        self._add_history("Insert", value)
        return steps

    def delete(self, value: Orderable) -> list[StepRecord]:
        """Delete from the active tree, saving an undo snapshot first."""
        validate_value(value)
        self._save_for_undo()
        steps = self.tree.delete(value)
        self._add_history("Delete", value)
        return steps

    def trace_search(self, value: Orderable) -> list[StepRecord]:
        steps = self.tree.trace_search(value)
        self._add_history("Search", value)
        return steps

    def clear(self) -> list[StepRecord]:
        """Replace the active tree with an empty one, saving an undo snapshot first."""
        self._save_for_undo()
        self._reset_active_tree()
        self._add_history("Clear", None)

        trace = TraceRecorder()
        trace.record(StepCode.CLEAR_TREE, "Tree cleared", Severity.SUCCESS)
        return trace.steps

    def enqueue(self, operation: str, value: Orderable | None = None) -> None:
        """
        Queue an operation for process_queue().

        Args:
            operation: One of "insert", "delete", "clear".
            value: Operand for insert/delete; ignored for clear.
        """
        if operation not in QUEUED_OPERATIONS:
            raise ValueError(
                f"Unsupported operation {operation!r}, expected one of {QUEUED_OPERATIONS}"
            )
        if operation != "clear":
            validate_value(value)
        else:
            value = None
        self._queue.append((operation, value))

    def process_queue(self) -> list[OperationResult]:
        """Run every queued operation in FIFO order."""
        results: list[OperationResult] = []
        while self._queue:
            operation, value = self._queue.popleft()
            if operation == "insert":
                steps = self.insert(value)
            elif operation == "delete":
                steps = self.delete(value)
            else:
                steps = self.clear()
            results.append(OperationResult(operation, value, steps))

        logger.debug("Processed %d queued operations", len(results))
        return results

    def generate_random(
        self, count: int | None = None, rng: random.Random | None = None
    ) -> list[Orderable]:
        """
        Clear the active tree and fill it with distinct random values.

        Args:
            count: Number of values; random in RANDOM_COUNT_RANGE when None.
            rng: Random source, for reproducible trees.

        Returns:
            The inserted values in insertion order.
        """
        rng = rng or random.Random()
        low, high = self.RANDOM_VALUE_RANGE
        if count is None:
            count = rng.randint(*self.RANDOM_COUNT_RANGE)
        if count < 0 or count > high - low + 1:
            raise ValueError(f"count must be between 0 and {high - low + 1}, got {count}")

        self._save_for_undo()
        self._reset_active_tree()
        values = rng.sample(range(low, high + 1), count)
        for value in values:
            self.tree.insert(value)

        self._add_history("Generate Random", f"{count} nodes")
        return values

    def switch_tree_type(self, tree_type: TreeType | str) -> BalancedTree:
        """
        Make another engine active.

        The current tree's structure is saved. The target tree is restored
        from its own saved structure when it has one, otherwise rebuilt by
        inserting the current tree's values in order.
        """
        target = TreeType.parse(tree_type)
        if target is self._tree_type:
            return self.tree

        source = self._tree_type
        self._saved_states[source] = self.tree.serialize()
        values = self.tree.get_inorder_values()
        self._tree_type = target

        if self._saved_states.get(target) is not None:
            self.tree.deserialize(self._saved_states[target])
            self._add_history("Convert", f"{target.value} (restored)")
            logger.info("Restored saved %s tree", target.value)
        elif values:
            tree = create_tree(target)
            for value in values:
                tree.insert(value)
            self._trees[target] = tree
            self._add_history("Convert", target.value)
            logger.info("Converted %d values from %s to %s", len(values), source.value, target.value)

        return self.tree

    def undo(self) -> bool:
        """
        Restore the structure saved before the last mutation.

        Returns:
            True if a snapshot was restored, False if there was nothing to undo.
        """
        if not self._undo_stack:
            logger.warning("Undo requested with no saved operations")
            return False

        snapshot = self._undo_stack.pop()
        if snapshot.tree_type is not self._tree_type:
            self._saved_states[self._tree_type] = self.tree.serialize()
            self._tree_type = snapshot.tree_type
        self.tree.deserialize(snapshot.data)
        logger.info("Undid last operation on %s tree", snapshot.tree_type.value)
        return True

    def clear_history(self) -> None:
        self._history.clear()

    def stats(self) -> TreeStats:
        tree = self.tree
        if self._tree_type is TreeType.RB:
            label = "Black Height"
        else:
            label = "Balance Factor"
        return TreeStats(
            node_count=tree.count_nodes(),
            height=tree.height(),
            tree_stat=tree.balance_metric(),
            tree_stat_label=label,
        )

    def traversals(self) -> dict[str, list[Orderable]]:
        tree = self.tree
        return {
            "inorder": tree.get_inorder_values(),
            "preorder": tree.get_preorder_values(),
            "postorder": tree.get_postorder_values(),
        }

    def validate(self) -> ValidationReport:
        return validate_tree(self.tree)

    def export_state(self) -> dict[str, Any]:
        """
        Return the active tree as a plain dict.

        Format: {"type": "rb" | "avl", "tree": SerializedNode | None,
        "timestamp": ISO-8601 string}
        """
        return {
            "type": self._tree_type.value,
            "tree": self.tree.serialize(),
            "timestamp": datetime.now().isoformat(),
        }

    def import_state(self, state: dict[str, Any]) -> None:
        """
        Load a dict produced by export_state() into the matching engine.

        Raises:
            SerializationError: If the state is malformed. The session is
                left unchanged in that case.
        """
        if not isinstance(state, dict) or "type" not in state or "tree" not in state:
            raise SerializationError("State must be a dict with 'type' and 'tree' keys")

        target = TreeType.parse(state["type"])
        replacement = create_tree(target)
        replacement.deserialize(state["tree"])

        self._save_for_undo()
        self._trees[target] = replacement
        self._saved_states.pop(target, None)
        self._tree_type = target
        self._add_history("Load", state.get("timestamp"))
        logger.info("Imported %s tree with %d nodes", target.value, replacement.count_nodes())

    def _reset_active_tree(self) -> None:
        self._trees[self._tree_type] = create_tree(self._tree_type)
        self._saved_states.pop(self._tree_type, None)
        logger.info("Cleared %s tree", self._tree_type.value)

    def _save_for_undo(self) -> None:
        self._undo_stack.append(_Snapshot(self._tree_type, self.tree.serialize()))

    def _add_history(self, operation: str, value: Any) -> None:
        self._history.appendleft(HistoryEntry(operation, value, self._tree_type))
