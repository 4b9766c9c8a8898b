"""
节点ID提供者接口
"""
from abc import ABC, abstractmethod


class IIdProvider(ABC):
    """
    节点ID分配器接口

    约定：同一个实例内分配的ID单调递增、永不复用，但不保证连续
    """

    @abstractmethod
    def allocate(self) -> int:
        """
        分配一个新的节点ID

        Returns:
            新ID

        Raises:
            IdAllocationError: ID空间耗尽
        """
        pass

    @abstractmethod
    def peek_next(self) -> int:
        """返回下一次将要分配的ID（不消耗）"""
        pass

    @abstractmethod
    def advance_past(self, node_id: int) -> None:
        """
        保证之后分配的ID都大于node_id

        用于从持久化数据恢复后避免ID复用
        """
        pass
