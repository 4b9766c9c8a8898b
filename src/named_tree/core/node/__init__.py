"""
节点模块 - 节点记录与节点存储
"""

from .entity import TreeNode
from .store import NodeStore, check_forest

__all__ = ['TreeNode', 'NodeStore', 'check_forest']
