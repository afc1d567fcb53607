"""
Shared pytest fixtures for tree engine tests.
"""

import pytest

from treetrace.engine.session import TreeSession
from treetrace.models.trees import AVLTree, RedBlackTree


@pytest.fixture
def rb_tree():
    """Provide a fresh, empty Red-Black tree."""
    return RedBlackTree()


@pytest.fixture
def avl_tree():
    """Provide a fresh, empty AVL tree."""
    return AVLTree()


@pytest.fixture(params=["rb", "avl"])
def any_tree(request):
    """Provide an empty tree of each engine type."""
    return RedBlackTree() if request.param == "rb" else AVLTree()


@pytest.fixture
def sample_values():
    """Provide the seven-value sample used across scenarios."""
    return [5, 3, 8, 1, 4, 7, 9]


@pytest.fixture
def session():
    """Provide a Red-Black session with default limits."""
    return TreeSession()


@pytest.fixture
def avl_session():
    """Provide an AVL session with default limits."""
    return TreeSession(tree_type="avl")
