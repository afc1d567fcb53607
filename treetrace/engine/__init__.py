"""
Orchestration around the tree engines: factory, invariant checks, sessions.
"""

from treetrace.engine.factory import TreeType, create_tree
from treetrace.engine.session import TreeSession
from treetrace.engine.validator import ValidationReport, validate_tree

__all__ = ["TreeSession", "TreeType", "ValidationReport", "create_tree", "validate_tree"]
