"""
Tests for data models: values, step records, trace recorder, serialized payloads.
"""

import math
from fractions import Fraction

import pytest

from treetrace.models.exceptions import InvalidValueError, SerializationError
from treetrace.models.serialized import COLOR_NAMES, check_payload
from treetrace.models.step import Severity, StepCode, StepRecord, TraceRecorder
from treetrace.models.trees.red_black_tree import NIL, Color, RBNode
from treetrace.models.value import validate_value


class TestValue:
    """Tests for validate_value."""

    @pytest.mark.parametrize("value", [0, -7, 42, 3.5, -0.25, Fraction(1, 3), math.inf])
    def test_accepts_real_numbers(self, value):
        """Test that real numbers pass through unchanged."""
        assert validate_value(value) == value

    @pytest.mark.parametrize("value", [None, True, False, "10", b"1", [1], 1 + 2j])
    def test_rejects_non_orderable(self, value):
        """Test that non-real values are rejected."""
        with pytest.raises(InvalidValueError) as exc_info:
            validate_value(value)
        assert exc_info.value.value is value

    def test_rejects_nan(self):
        """Test that NaN is rejected."""
        with pytest.raises(InvalidValueError, match="NaN"):
            validate_value(float("nan"))

    def test_invalid_value_is_value_error(self):
        """Test that callers can catch the builtin ValueError."""
        with pytest.raises(ValueError):
            validate_value("x")


class TestStepRecord:
    """Tests for StepRecord and TraceRecorder."""

    def test_to_dict(self):
        """Test the plain wire shape of a step."""
        step = StepRecord(code="RB_INSERT_ROOT", message="root", severity=Severity.SUCCESS)
        assert step.to_dict() == {
            "code": "RB_INSERT_ROOT",
            "message": "root",
            "severity": "success",
        }

    def test_default_severity_is_info(self):
        """Test the default severity."""
        assert StepRecord(code="X", message="y").severity is Severity.INFO

    def test_step_record_is_frozen(self):
        """Test that recorded steps cannot be altered afterwards."""
        step = StepRecord(code="X", message="y")
        with pytest.raises(AttributeError):
            step.message = "changed"

    def test_codes_are_stable_strings(self):
        """Test that code values equal their member names."""
        for code in StepCode:
            assert code.value == code.name

    def test_recorder_keeps_order(self):
        """Test that steps come back in recording order."""
        trace = TraceRecorder()
        trace.record(StepCode.RB_INSERT_START, "start")
        trace.record(StepCode.RB_INSERT_FIXUP_START, "fix", Severity.WARNING)
        trace.record(StepCode.RB_INSERT_COMPLETE, "done", Severity.SUCCESS)

        assert [s.code for s in trace.steps] == [
            "RB_INSERT_START",
            "RB_INSERT_FIXUP_START",
            "RB_INSERT_COMPLETE",
        ]
        assert [s.severity for s in trace.steps] == [
            Severity.INFO,
            Severity.WARNING,
            Severity.SUCCESS,
        ]
        assert len(trace) == 3

    def test_recorder_steps_is_a_copy(self):
        """Test that callers cannot mutate the recorder through steps."""
        trace = TraceRecorder()
        trace.record(StepCode.SEARCH_START, "start")
        trace.steps.clear()
        assert len(trace.steps) == 1

    def test_recorder_logs_steps(self, caplog):
        """Test that each step is logged at DEBUG."""
        trace = TraceRecorder()
        with caplog.at_level("DEBUG", logger="treetrace.models.step"):
            trace.record(StepCode.SEARCH_NOT_FOUND, "Value 4 not found", Severity.ERROR)
        assert "SEARCH_NOT_FOUND" in caplog.text


class TestSerializedPayload:
    """Tests for check_payload."""

    def test_valid_colored_node(self):
        """Test a well-formed Red-Black node."""
        node = {"value": 1, "color": "red", "left": None, "right": None}
        assert check_payload(node, colored=True) is node

    def test_color_not_required_for_avl(self):
        """Test that uncolored nodes are fine for AVL payloads."""
        check_payload({"value": 1, "left": None, "right": None}, colored=False)

    def test_missing_keys(self):
        """Test that missing keys are reported."""
        with pytest.raises(SerializationError, match="left, right"):
            check_payload({"value": 1}, colored=False)

    def test_not_a_mapping(self):
        """Test that non-mapping nodes are rejected."""
        with pytest.raises(SerializationError):
            check_payload([1, None, None], colored=False)

    def test_bad_color(self):
        """Test that unknown colors are rejected."""
        with pytest.raises(SerializationError, match="green"):
            check_payload({"value": 1, "color": "green", "left": None, "right": None}, colored=True)

    def test_color_names_match_engine_colors(self):
        """Test that the wire color names cover exactly the node colors."""
        assert COLOR_NAMES == ("red", "black")
        assert sorted(COLOR_NAMES) == sorted(color.name.lower() for color in Color)

    def test_bad_value(self):
        """Test that invalid values surface as serialization errors."""
        with pytest.raises(SerializationError):
            check_payload({"value": "one", "left": None, "right": None}, colored=False)


class TestSentinel:
    """Tests for the shared Red-Black sentinel."""

    def test_sentinel_is_black_and_empty(self):
        """Test the sentinel's fixed attributes."""
        assert NIL.color == Color.BLACK
        assert NIL.value is None

    def test_sentinel_links_to_itself(self):
        """Test that the sentinel's links resolve to itself."""
        assert NIL.left is NIL
        assert NIL.right is NIL
        assert NIL.parent is NIL

    def test_sentinel_is_immutable(self):
        """Test that nothing can be written to the sentinel."""
        with pytest.raises(AttributeError):
            NIL.color = Color.RED
        with pytest.raises(AttributeError):
            NIL.parent = RBNode(1)
        with pytest.raises(AttributeError):
            NIL.value = 3
        assert NIL.color == Color.BLACK

    def test_new_node_points_at_sentinel(self):
        """Test that a fresh node is red with sentinel links."""
        node = RBNode(7)
        assert node.color == Color.RED
        assert node.left is NIL
        assert node.right is NIL
        assert node.parent is NIL

    def test_parent_link_is_weak(self):
        """Test that a node does not keep its parent alive."""
        parent = RBNode(10)
        child = RBNode(5)
        child.parent = parent
        assert child.parent is parent

        del parent
        assert child.parent is NIL
