"""
核心模块包
包含节点存储、ID分配、读写锁以及树的构建、修改和遍历
"""

# 导入ID模块
from .ids import IncrementalIdProvider

# 导入锁
from .lock import ReadWriteLock

# 导入节点模块
from .node import TreeNode, NodeStore

# 导入树模块
from .tree import TreeView, TreeBuilder, TreeMutator, TraversalEngine

__all__ = [
    # ID模块
    'IncrementalIdProvider',
    'ReadWriteLock',

    # 节点模块
    'TreeNode',
    'NodeStore',

    # 树模块
    'TreeView',
    'TreeBuilder',
    'TreeMutator',
    'TraversalEngine',
]
