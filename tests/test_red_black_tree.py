"""
Tests for the Red-Black engine: traces, structure, queries and serialization.
"""

import pytest

from treetrace.engine.validator import validate_tree
from treetrace.models.exceptions import InvalidValueError, SerializationError
from treetrace.models.step import Severity
from treetrace.models.trees import NIL, Color, RedBlackTree


def codes(steps):
    return [step.code for step in steps]


def build(values):
    tree = RedBlackTree()
    for value in values:
        tree.insert(value)
    return tree


def colors(tree):
    """Map value -> color name for every node."""
    result = {}

    def walk(node):
        if node is NIL:
            return
        result[node.value] = node.color.name.lower()
        walk(node.left)
        walk(node.right)

    walk(tree.root)
    return result


class TestInsert:
    """Tests for RedBlackTree.insert."""

    def test_insert_into_empty_tree(self, rb_tree):
        """Test that the first value becomes the black root."""
        steps = rb_tree.insert(10)

        assert codes(steps) == [
            "RB_INSERT_START",
            "RB_INSERT_ROOT",
            "RB_INSERT_FIXUP_START",
            "RB_INSERT_COMPLETE",
        ]
        assert rb_tree.root.value == 10
        assert rb_tree.root.color == Color.BLACK
        assert rb_tree.root.parent is NIL

    def test_line_case_rotation(self, rb_tree):
        """Test inserting 10, 20, 30 triggers the line case."""
        rb_tree.insert(10)
        rb_tree.insert(20)
        steps = rb_tree.insert(30)

        assert codes(steps) == [
            "RB_INSERT_START",
            "RB_INSERT_PLACE_RIGHT",
            "RB_INSERT_FIXUP_START",
            "RB_INSERT_CASE_3",
            "RB_INSERT_COMPLETE",
        ]
        assert rb_tree.root.value == 20
        assert colors(rb_tree) == {20: "black", 10: "red", 30: "red"}
        assert rb_tree.black_height() == 1
        assert rb_tree.balance_metric() == 1

    def test_triangle_case_rotates_twice(self, rb_tree):
        """Test inserting 10, 30, 20 goes through case 2 then case 3."""
        rb_tree.insert(10)
        rb_tree.insert(30)
        steps = rb_tree.insert(20)

        assert codes(steps) == [
            "RB_INSERT_START",
            "RB_INSERT_PLACE_LEFT",
            "RB_INSERT_FIXUP_START",
            "RB_INSERT_CASE_2",
            "RB_INSERT_CASE_3",
            "RB_INSERT_COMPLETE",
        ]
        assert rb_tree.get_preorder_values() == [20, 10, 30]
        assert colors(rb_tree) == {20: "black", 10: "red", 30: "red"}

    def test_mirrored_triangle_case(self, rb_tree):
        """Test inserting 30, 10, 20 uses the mirrored rotations."""
        rb_tree.insert(30)
        rb_tree.insert(10)
        steps = rb_tree.insert(20)

        assert "RB_INSERT_CASE_2" in codes(steps)
        assert "Left rotation at 10" in steps[3].message
        assert "Right rotation at 30" in steps[4].message
        assert rb_tree.get_preorder_values() == [20, 10, 30]

    def test_red_uncle_recolors(self, rb_tree):
        """Test that a red uncle triggers recoloring without rotation."""
        for value in (20, 10, 30):
            rb_tree.insert(value)
        steps = rb_tree.insert(5)

        assert codes(steps) == [
            "RB_INSERT_START",
            "RB_INSERT_PLACE_LEFT",
            "RB_INSERT_FIXUP_START",
            "RB_INSERT_CASE_1",
            "RB_INSERT_COMPLETE",
        ]
        assert colors(rb_tree) == {20: "black", 10: "black", 30: "black", 5: "red"}
        assert rb_tree.black_height() == 2

    def test_last_step_signals_completion(self, rb_tree):
        """Test that every insert trace ends with a success step."""
        for value in range(1, 30):
            steps = rb_tree.insert(value)
            assert steps[-1].code == "RB_INSERT_COMPLETE"
            assert steps[-1].severity is Severity.SUCCESS

    def test_duplicates_are_inserted_to_the_right(self, rb_tree):
        """Test that the Red-Black engine keeps duplicate values."""
        rb_tree.insert(10)
        steps = rb_tree.insert(10)

        assert "RB_INSERT_PLACE_RIGHT" in codes(steps)
        assert rb_tree.count_nodes() == 2
        assert rb_tree.get_inorder_values() == [10, 10]
        assert validate_tree(rb_tree).valid

    @pytest.mark.parametrize("value", [None, "7", float("nan"), True])
    def test_invalid_value_rejected(self, rb_tree, value):
        """Test that invalid values raise without touching the tree."""
        rb_tree.insert(1)
        before = rb_tree.serialize()

        with pytest.raises(InvalidValueError):
            rb_tree.insert(value)
        assert rb_tree.serialize() == before


class TestDelete:
    """Tests for RedBlackTree.delete."""

    def test_delete_missing_value(self):
        """Test deleting an absent value reports one error and changes nothing."""
        tree = build([10, 20, 30])
        before = tree.serialize()

        steps = tree.delete(99)

        assert codes(steps) == ["RB_DELETE_START", "RB_DELETE_NOT_FOUND"]
        assert [s.severity for s in steps].count(Severity.ERROR) == 1
        assert tree.serialize() == before

    def test_delete_node_with_two_children(self, sample_values):
        """Test successor-based removal of an inner node."""
        tree = build(sample_values)
        steps = tree.delete(3)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_TWO_CHILDREN",
            "RB_DELETE_NO_FIXUP",
            "RB_DELETE_COMPLETE",
        ]
        assert "successor 4" in steps[1].message
        assert tree.get_inorder_values() == [1, 4, 5, 7, 8, 9]
        assert colors(tree)[4] == "black"
        assert validate_tree(tree).valid

    def test_delete_successor_not_direct_child(self):
        """Test removal when the successor sits deeper in the right subtree."""
        tree = build([50, 30, 70, 60, 80, 65])
        steps = tree.delete(50)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_TWO_CHILDREN",
            "RB_DELETE_FIXUP_START",
            "RB_DELETE_FIXUP_COMPLETE",
            "RB_DELETE_COMPLETE",
        ]
        assert tree.root.value == 60
        assert tree.get_inorder_values() == [30, 60, 65, 70, 80]
        assert colors(tree)[65] == "black"
        assert validate_tree(tree).valid

    def test_delete_red_leaf(self):
        """Test that removing a red leaf needs no fixup."""
        tree = build([10, 5, 15])
        steps = tree.delete(5)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_ONE_CHILD",
            "RB_DELETE_NO_FIXUP",
            "RB_DELETE_COMPLETE",
        ]

    def test_delete_case_1_then_case_2(self):
        """Test a red sibling rotated away, then a black sibling recolored."""
        tree = build([10, 5, 20, 15, 25, 30])
        steps = tree.delete(5)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_ONE_CHILD",
            "RB_DELETE_FIXUP_START",
            "RB_DELETE_CASE_1",
            "RB_DELETE_CASE_2",
            "RB_DELETE_FIXUP_COMPLETE",
            "RB_DELETE_COMPLETE",
        ]
        assert tree.root.value == 20
        assert tree.get_preorder_values() == [20, 10, 15, 25, 30]
        assert validate_tree(tree).valid

    def test_delete_case_2_only(self):
        """Test a black sibling with black children is recolored red."""
        tree = build([10, 5, 15, 1])
        tree.delete(1)
        steps = tree.delete(15)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_ONE_CHILD",
            "RB_DELETE_FIXUP_START",
            "RB_DELETE_CASE_2",
            "RB_DELETE_FIXUP_COMPLETE",
            "RB_DELETE_COMPLETE",
        ]
        assert colors(tree) == {10: "black", 5: "red"}

    def test_delete_case_3_then_case_4(self):
        """Test a near red nephew rotated into the far position."""
        tree = build([10, 5, 15, 7])
        steps = tree.delete(15)

        assert codes(steps) == [
            "RB_DELETE_START",
            "RB_DELETE_NODE_ONE_CHILD",
            "RB_DELETE_FIXUP_START",
            "RB_DELETE_CASE_3",
            "RB_DELETE_CASE_4",
            "RB_DELETE_FIXUP_COMPLETE",
            "RB_DELETE_COMPLETE",
        ]
        assert tree.root.value == 7
        assert colors(tree) == {7: "black", 5: "black", 10: "black"}

    def test_delete_case_4(self):
        """Test a far red nephew resolves the fixup in one rotation."""
        tree = build([10, 5, 15, 1])
        steps = tree.delete(15)

        assert codes(steps)[3] == "RB_DELETE_CASE_4"
        assert tree.get_preorder_values() == [5, 1, 10]
        assert colors(tree) == {5: "black", 1: "black", 10: "black"}

    def test_delete_root_only_node(self, rb_tree):
        """Test deleting the last node empties the tree."""
        rb_tree.insert(42)
        rb_tree.delete(42)

        assert rb_tree.root is NIL
        assert rb_tree.count_nodes() == 0
        assert rb_tree.is_empty()

    def test_delete_then_search(self, sample_values):
        """Test that deleted values are gone and the rest still found."""
        tree = build(sample_values)
        for value in (5, 9, 1):
            tree.delete(value)
            assert tree.search(value) is NIL
            assert validate_tree(tree).valid

        for value in (3, 4, 7, 8):
            assert tree.search(value).value == value

    def test_delete_all_values(self):
        """Test deleting every value in a different order than inserted."""
        values = list(range(1, 41))
        tree = build(values)
        for value in reversed(values[::2]):
            tree.delete(value)
            assert validate_tree(tree).valid
        for value in values[1::2]:
            tree.delete(value)
            assert validate_tree(tree).valid
        assert tree.root is NIL


class TestQueries:
    """Tests for read-only queries."""

    def test_search(self, sample_values):
        """Test node lookup."""
        tree = build(sample_values)
        assert tree.search(7).value == 7
        assert tree.search(6) is NIL
        assert tree.contains(8)
        assert 8 in tree
        assert not tree.contains(100)

    def test_trace_search_not_found(self):
        """Test a traced search for an absent value."""
        tree = build([10, 20, 30])
        steps = tree.trace_search(99)

        assert codes(steps) == [
            "SEARCH_START",
            "SEARCH_GO_RIGHT",
            "SEARCH_GO_RIGHT",
            "SEARCH_NOT_FOUND",
        ]
        assert [s.severity for s in steps].count(Severity.ERROR) == 1

    def test_trace_search_found(self):
        """Test a traced search for a present value."""
        tree = build([10, 20, 30])
        steps = tree.trace_search(10)

        assert codes(steps) == ["SEARCH_START", "SEARCH_GO_LEFT", "SEARCH_FOUND"]
        assert "red" in steps[-1].message

    def test_traversals(self, sample_values):
        """Test in-, pre- and post-order sequences."""
        tree = build(sample_values)

        assert tree.get_inorder_values() == [1, 3, 4, 5, 7, 8, 9]
        assert tree.get_preorder_values() == [5, 3, 1, 4, 8, 7, 9]
        assert tree.get_postorder_values() == [1, 4, 3, 7, 9, 8, 5]
        assert list(tree) == [1, 3, 4, 5, 7, 8, 9]

    def test_traversals_are_fresh_lists(self, sample_values):
        """Test that mutating a returned list does not affect the tree."""
        tree = build(sample_values)
        tree.get_inorder_values().append(100)
        assert tree.get_inorder_values() == [1, 3, 4, 5, 7, 8, 9]

    def test_counts_and_heights(self, rb_tree, sample_values):
        """Test count, height and black-height."""
        assert rb_tree.count_nodes() == 0
        assert rb_tree.height() == 0
        assert rb_tree.black_height() == 0

        for value in sample_values:
            rb_tree.insert(value)
        assert rb_tree.count_nodes() == 7
        assert len(rb_tree) == 7
        assert rb_tree.height() == 3
        assert rb_tree.black_height() == 2

    def test_minimum(self, sample_values):
        """Test the leftmost node lookup."""
        tree = build(sample_values)
        assert tree.minimum().value == 1
        assert tree.minimum(tree.search(8)).value == 7

    def test_uncle(self):
        """Test uncle lookup."""
        tree = build([10, 5, 15, 1])
        assert tree.uncle(tree.search(1)).value == 15
        assert tree.uncle(tree.search(5)) is NIL
        assert tree.uncle(tree.root) is NIL

    def test_height_sublinear_on_sorted_input(self, rb_tree):
        """Test that ascending inserts stay within 2*log2(n+1)."""
        for value in range(1, 128):
            rb_tree.insert(value)
        assert rb_tree.height() <= 14


class TestSerialization:
    """Tests for serialize/deserialize."""

    def test_serialize_empty(self, rb_tree):
        """Test that an empty tree serializes to None."""
        assert rb_tree.serialize() is None

    def test_deserialize_none(self):
        """Test that None empties the tree and points root at the sentinel."""
        tree = build([1, 2, 3])
        tree.deserialize(None)

        assert tree.root is NIL
        assert tree.count_nodes() == 0

    def test_serialize_shape(self):
        """Test the nested payload including colors."""
        tree = build([10, 20, 30])
        assert tree.serialize() == {
            "value": 20,
            "color": "black",
            "left": {"value": 10, "color": "red", "left": None, "right": None},
            "right": {"value": 30, "color": "red", "left": None, "right": None},
        }

    def test_round_trip(self, sample_values):
        """Test that deserialize(serialize()) reproduces the structure."""
        tree = build(sample_values)
        tree.delete(8)
        copy = RedBlackTree()
        copy.deserialize(tree.serialize())

        assert copy.get_inorder_values() == tree.get_inorder_values()
        assert copy.get_preorder_values() == tree.get_preorder_values()
        assert copy.get_postorder_values() == tree.get_postorder_values()
        assert colors(copy) == colors(tree)
        assert validate_tree(copy).valid

    def test_deserialize_restores_parent_links(self):
        """Test that parent references are rebuilt."""
        tree = RedBlackTree()
        tree.deserialize(build([10, 20, 30]).serialize())

        assert tree.root.parent is NIL
        assert tree.root.left.parent is tree.root
        assert tree.root.right.parent is tree.root
        assert tree.root.left.left is NIL

    def test_deserialized_tree_accepts_mutations(self):
        """Test inserting and deleting after a restore."""
        tree = RedBlackTree()
        tree.deserialize(build([5, 3, 8]).serialize())
        tree.insert(1)
        tree.insert(2)
        tree.delete(5)

        assert tree.get_inorder_values() == [1, 2, 3, 8]
        assert validate_tree(tree).valid

    def test_malformed_payload_leaves_tree_unchanged(self):
        """Test that a bad nested node aborts the whole restore."""
        tree = build([1, 2, 3])
        before = tree.serialize()
        payload = {
            "value": 5,
            "color": "black",
            "left": {"value": 2, "color": "purple", "left": None, "right": None},
            "right": None,
        }

        with pytest.raises(SerializationError):
            tree.deserialize(payload)
        assert tree.serialize() == before

    def test_missing_color_rejected(self, rb_tree):
        """Test that uncolored (AVL) payloads are not accepted."""
        with pytest.raises(SerializationError):
            rb_tree.deserialize({"value": 1, "left": None, "right": None})

    @pytest.mark.parametrize(
        "payload, message",
        [
            (
                {
                    "value": 5,
                    "color": "black",
                    "left": {"value": 9, "color": "red", "left": None, "right": None},
                    "right": None,
                },
                "out of order",
            ),
            ({"value": 1, "color": "red", "left": None, "right": None}, "Root 1 is red"),
            (
                {
                    "value": 10,
                    "color": "black",
                    "left": {
                        "value": 5,
                        "color": "red",
                        "left": {"value": 1, "color": "red", "left": None, "right": None},
                        "right": None,
                    },
                    "right": {"value": 15, "color": "black", "left": None, "right": None},
                },
                "Red node 5 has a red child",
            ),
            (
                {
                    "value": 10,
                    "color": "black",
                    "left": {"value": 5, "color": "black", "left": None, "right": None},
                    "right": None,
                },
                "Black-height mismatch at 10",
            ),
        ],
    )
    def test_invalid_structure_rejected(self, payload, message):
        """Test that payloads breaking ordering or coloring are refused."""
        tree = build([1, 2, 3])
        before = tree.serialize()

        with pytest.raises(SerializationError, match=message):
            tree.deserialize(payload)
        assert tree.serialize() == before
        assert validate_tree(tree).valid

    def test_equal_values_accepted(self, rb_tree):
        """Test that duplicates on either side of their equal are valid."""
        rb_tree.deserialize(
            {
                "value": 4,
                "color": "black",
                "left": {"value": 4, "color": "red", "left": None, "right": None},
                "right": {"value": 4, "color": "red", "left": None, "right": None},
            }
        )
        assert rb_tree.get_inorder_values() == [4, 4, 4]

    def test_deeply_nested_payload_rejected(self):
        """Test that a payload deeper than the interpreter can walk is refused."""
        tree = build([1, 2, 3])
        before = tree.serialize()
        payload = None
        for value in range(3000, 0, -1):
            payload = {"value": value, "color": "black", "left": None, "right": payload}

        with pytest.raises(SerializationError, match="nested too deeply"):
            tree.deserialize(payload)
        assert tree.serialize() == before
