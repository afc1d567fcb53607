"""
Plain nested-dict wire format shared by both engines.
"""

from collections.abc import Mapping
from typing import Any, Literal, Optional, TypedDict, get_args

from treetrace.models.exceptions import InvalidValueError, SerializationError
from treetrace.models.value import Orderable, validate_value

ColorName = Literal["red", "black"]

COLOR_NAMES: tuple[str, ...] = get_args(ColorName)


class _SerializedNodeBase(TypedDict):
    value: Orderable
    left: Optional["SerializedNode"]
    right: Optional["SerializedNode"]


class SerializedNode(_SerializedNodeBase, total=False):
    """
    Serialized tree node.

    ``color`` is present only in payloads produced by the Red-Black engine.
    ``None`` children stand for "no child" in both engines.
    """

    color: ColorName


def check_payload(data: Any, *, colored: bool) -> Mapping[str, Any]:
    """
    Validate the shape of one serialized node (not its children).

    Args:
        data: Candidate node mapping.
        colored: Whether a ``color`` entry is required.

    Returns:
        The node mapping.

    Raises:
        SerializationError: If the node is not a well-formed SerializedNode.
    """
    if not isinstance(data, Mapping):
        raise SerializationError(f"Expected a mapping for a tree node, got {type(data).__name__}")

    missing = [key for key in ("value", "left", "right") if key not in data]
    if missing:
        raise SerializationError(f"Tree node is missing keys: {', '.join(missing)}")

    try:
        validate_value(data["value"])
    except InvalidValueError as exc:
        raise SerializationError(str(exc)) from exc

    if colored and data.get("color") not in COLOR_NAMES:
        raise SerializationError(
            f"Tree node {data['value']!r} has invalid color {data.get('color')!r}, "
            f"expected one of {COLOR_NAMES}"
        )
    return data
