"""
ID模块 - 节点ID分配
"""

from .provider import IncrementalIdProvider

__all__ = ['IncrementalIdProvider']
