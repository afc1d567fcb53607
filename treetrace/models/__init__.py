"""
Data models for the tree engines.
"""

from treetrace.models.exceptions import (
    InvalidValueError,
    SerializationError,
    TreeTraceError,
    UnknownTreeTypeError,
)
from treetrace.models.serialized import SerializedNode
from treetrace.models.step import Severity, StepCode, StepRecord, TraceRecorder
from treetrace.models.value import Orderable, validate_value

__all__ = [
    "InvalidValueError",
    "Orderable",
    "SerializationError",
    "SerializedNode",
    "Severity",
    "StepCode",
    "StepRecord",
    "TraceRecorder",
    "TreeTraceError",
    "UnknownTreeTypeError",
    "validate_value",
]
