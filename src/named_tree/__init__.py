"""
命名树存储引擎 - 基于扁平节点表的有序N叉树
"""

__version__ = "1.0.0"
__author__ = "zjy"

from .system import NamedTreeSystem
from .core import (
    IncrementalIdProvider,
    ReadWriteLock,
    TreeNode,
    NodeStore,
    TreeView,
    TreeBuilder,
    TreeMutator,
    TraversalEngine,
)

__all__ = [
    'NamedTreeSystem',
    'IncrementalIdProvider',
    'ReadWriteLock',
    'TreeNode',
    'NodeStore',
    'TreeView',
    'TreeBuilder',
    'TreeMutator',
    'TraversalEngine',
]
