"""
存储适配器接口
定义统一的树数据存储操作接口，核心模块不依赖具体存储引擎
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional

from ...exceptions import DataStoreError


class DataStoreAdapter(ABC):
    """
    数据存储适配器抽象基类

    树数据格式（所有后端一致）：
        {
            'tree_id': str,
            'next_id': int,
            'nodes': [{'node_id': int, 'name': str, 'child_ids': [int, ...]}, ...],
            'metadata': {'node_count': int, 'root_count': int, 'saved_at': str}
        }
    """

    @abstractmethod
    def save_tree(self, tree_id: str, tree_data: Dict[str, Any]) -> bool:
        """保存树数据（覆盖同ID的旧数据）"""
        pass

    @abstractmethod
    def load_tree(self, tree_id: str) -> Optional[Dict[str, Any]]:
        """加载树数据，不存在时返回None"""
        pass

    @abstractmethod
    def delete_tree(self, tree_id: str) -> bool:
        """删除树，返回是否删除了数据"""
        pass

    @abstractmethod
    def exists_tree(self, tree_id: str) -> bool:
        """检查树是否存在"""
        pass

    @abstractmethod
    def list_trees(self) -> List[Dict[str, Any]]:
        """
        列出所有树

        Returns:
            [{'tree_id': str, 'node_count': int, 'saved_at': str}, ...]，按tree_id排序
        """
        pass

    @abstractmethod
    def close(self):
        """关闭存储连接"""
        pass

    @abstractmethod
    def clear(self):
        """清空所有数据（测试用）"""
        pass

    @staticmethod
    def _check_tree_data(tree_id: str, tree_data: Dict[str, Any], store_type: str) -> None:
        """保存前的基本格式检查"""
        if not tree_id:
            raise DataStoreError("树数据缺少tree_id", operation="save_tree", store_type=store_type)
        if not isinstance(tree_data, dict) or not isinstance(tree_data.get('nodes', []), list):
            raise DataStoreError("树数据格式无效", operation="save_tree", store_type=store_type)


class StorageContext:
    """存储上下文管理器"""

    def __init__(self, adapter: DataStoreAdapter):
        self.adapter = adapter

    def __enter__(self):
        return self.adapter

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.adapter.close()
