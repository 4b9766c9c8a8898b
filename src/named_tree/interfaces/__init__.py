"""
接口定义包
"""

from .inode import INode
from .iprovider import IIdProvider

__all__ = [
    'INode',
    'IIdProvider',
]
