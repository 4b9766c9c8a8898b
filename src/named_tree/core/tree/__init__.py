"""
树模块 - 视图构建、结构修改与遍历
"""

from .view import TreeView
from .builder import TreeBuilder
from .mutator import TreeMutator
from .traversal import TraversalEngine, Traversal

__all__ = ['TreeView', 'TreeBuilder', 'TreeMutator', 'TraversalEngine', 'Traversal']
