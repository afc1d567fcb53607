"""
Step records describing the decisions an engine made during one operation.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """How a visualizer or logger should present a step."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


class StepCode(str, Enum):
    """
    Stable machine-readable step identifiers.

    External consumers match on these strings; never rename a member value.
    """

    # Red-Black insert
    RB_INSERT_START = "RB_INSERT_START"
    RB_INSERT_ROOT = "RB_INSERT_ROOT"
    RB_INSERT_PLACE_LEFT = "RB_INSERT_PLACE_LEFT"
    RB_INSERT_PLACE_RIGHT = "RB_INSERT_PLACE_RIGHT"
    RB_INSERT_FIXUP_START = "RB_INSERT_FIXUP_START"
    RB_INSERT_CASE_1 = "RB_INSERT_CASE_1"
    RB_INSERT_CASE_2 = "RB_INSERT_CASE_2"
    RB_INSERT_CASE_3 = "RB_INSERT_CASE_3"
    RB_INSERT_COMPLETE = "RB_INSERT_COMPLETE"

    # Red-Black delete
    RB_DELETE_START = "RB_DELETE_START"
    RB_DELETE_NOT_FOUND = "RB_DELETE_NOT_FOUND"
    RB_DELETE_NODE_ONE_CHILD = "RB_DELETE_NODE_ONE_CHILD"
    RB_DELETE_NODE_TWO_CHILDREN = "RB_DELETE_NODE_TWO_CHILDREN"
    RB_DELETE_FIXUP_START = "RB_DELETE_FIXUP_START"
    RB_DELETE_NO_FIXUP = "RB_DELETE_NO_FIXUP"
    RB_DELETE_CASE_1 = "RB_DELETE_CASE_1"
    RB_DELETE_CASE_2 = "RB_DELETE_CASE_2"
    RB_DELETE_CASE_3 = "RB_DELETE_CASE_3"
    RB_DELETE_CASE_4 = "RB_DELETE_CASE_4"
    RB_DELETE_FIXUP_COMPLETE = "RB_DELETE_FIXUP_COMPLETE"
    RB_DELETE_COMPLETE = "RB_DELETE_COMPLETE"

    # AVL insert
    AVL_INSERT_START = "AVL_INSERT_START"
    AVL_INSERT_CREATE_NODE = "AVL_INSERT_CREATE_NODE"
    AVL_INSERT_GO_LEFT = "AVL_INSERT_GO_LEFT"
    AVL_INSERT_GO_RIGHT = "AVL_INSERT_GO_RIGHT"
    AVL_INSERT_DUPLICATE = "AVL_INSERT_DUPLICATE"
    AVL_INSERT_CHECK_BALANCE = "AVL_INSERT_CHECK_BALANCE"
    AVL_INSERT_LL_CASE = "AVL_INSERT_LL_CASE"
    AVL_INSERT_RR_CASE = "AVL_INSERT_RR_CASE"
    AVL_INSERT_LR_CASE = "AVL_INSERT_LR_CASE"
    AVL_INSERT_RL_CASE = "AVL_INSERT_RL_CASE"
    AVL_INSERT_COMPLETE = "AVL_INSERT_COMPLETE"

    # AVL delete
    AVL_DELETE_START = "AVL_DELETE_START"
    AVL_DELETE_NOT_FOUND = "AVL_DELETE_NOT_FOUND"
    AVL_DELETE_GO_LEFT = "AVL_DELETE_GO_LEFT"
    AVL_DELETE_GO_RIGHT = "AVL_DELETE_GO_RIGHT"
    AVL_DELETE_REMOVE_LEAF = "AVL_DELETE_REMOVE_LEAF"
    AVL_DELETE_REPLACE_WITH_CHILD = "AVL_DELETE_REPLACE_WITH_CHILD"
    AVL_DELETE_REPLACE_WITH_SUCCESSOR = "AVL_DELETE_REPLACE_WITH_SUCCESSOR"
    AVL_DELETE_CHECK_BALANCE = "AVL_DELETE_CHECK_BALANCE"
    AVL_DELETE_LL_CASE = "AVL_DELETE_LL_CASE"
    AVL_DELETE_LR_CASE = "AVL_DELETE_LR_CASE"
    AVL_DELETE_RR_CASE = "AVL_DELETE_RR_CASE"
    AVL_DELETE_RL_CASE = "AVL_DELETE_RL_CASE"
    AVL_DELETE_COMPLETE = "AVL_DELETE_COMPLETE"

    # Traced search (both engines)
    SEARCH_START = "SEARCH_START"
    SEARCH_GO_LEFT = "SEARCH_GO_LEFT"
    SEARCH_GO_RIGHT = "SEARCH_GO_RIGHT"
    SEARCH_FOUND = "SEARCH_FOUND"
    SEARCH_NOT_FOUND = "SEARCH_NOT_FOUND"

    # Session
    CLEAR_TREE = "CLEAR_TREE"


@dataclass(frozen=True)
class StepRecord:
    """
    One decision made during a tree operation.

    Attributes:
        code: Stable identifier, one of the StepCode values.
        message: Human-readable description.
        severity: Presentation hint for the step.
    """

    code: str
    message: str
    severity: Severity = Severity.INFO

    def to_dict(self) -> dict[str, str]:
        """Return the plain wire shape consumed by visualizers."""
        return {
            "code": str(self.code),
            "message": self.message,
            "severity": self.severity.value,
        }


class TraceRecorder:
    """
    Append-only step accumulator for a single operation call.

    A new recorder is created at the start of every public engine operation
    and passed explicitly into the recursive helpers that need it.
    """

    def __init__(self) -> None:
        self._steps: list[StepRecord] = []

    def record(
        self, code: StepCode, message: str, severity: Severity = Severity.INFO
    ) -> StepRecord:
        """
        Append a step.

        Args:
            code: Which decision was taken.
            message: Description including the values involved.
            severity: Presentation hint.

        Returns:
            The recorded step.
        """
        step = StepRecord(code=code.value, message=message, severity=severity)
        self._steps.append(step)
        logger.debug("%s [%s] %s", step.code, severity.value, message)
        return step

    @property
    def steps(self) -> list[StepRecord]:
        """Recorded steps in chronological order (a copy)."""
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
