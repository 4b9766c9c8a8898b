"""
节点接口定义
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple


class INode(ABC):
    """节点接口 - 定义树节点的只读形状：ID、名称、有序子节点ID"""

    @property
    @abstractmethod
    def node_id(self) -> int:
        """节点唯一标识"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """节点名称"""
        pass

    @property
    @abstractmethod
    def child_ids(self) -> Tuple[int, ...]:
        """子节点ID序列（有序，无重复）"""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        转换为字典

        Returns:
            {'node_id': ..., 'name': ..., 'child_ids': [...]}
        """
        pass

    def is_leaf(self) -> bool:
        """是否为叶子节点"""
        return len(self.child_ids) == 0
