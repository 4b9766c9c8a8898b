"""
内存存储实现
数据保存在内存中，程序结束即消失
"""
import copy
import threading
from typing import Dict, List, Any, Optional

from .adapter import DataStoreAdapter


class MemoryStore(DataStoreAdapter):
    """内存存储实现"""

    def __init__(self):
        self._lock = threading.RLock()  # 线程安全锁
        self._trees: Dict[str, Dict[str, Any]] = {}  # tree_id -> tree_data

    def save_tree(self, tree_id: str, tree_data: Dict[str, Any]) -> bool:
        """保存树数据（深拷贝，调用方之后的修改不会影响存储）"""
        self._check_tree_data(tree_id, tree_data, "memory")
        with self._lock:
            data = copy.deepcopy(tree_data)
            data['tree_id'] = tree_id
            self._trees[tree_id] = data
            return True

    def load_tree(self, tree_id: str) -> Optional[Dict[str, Any]]:
        """加载树数据"""
        with self._lock:
            if tree_id not in self._trees:
                return None
            return copy.deepcopy(self._trees[tree_id])

    def delete_tree(self, tree_id: str) -> bool:
        """删除树"""
        with self._lock:
            return self._trees.pop(tree_id, None) is not None

    def exists_tree(self, tree_id: str) -> bool:
        """检查树是否存在"""
        with self._lock:
            return tree_id in self._trees

    def list_trees(self) -> List[Dict[str, Any]]:
        """列出所有树"""
        with self._lock:
            trees = []
            for tree_id in sorted(self._trees):
                tree_data = self._trees[tree_id]
                trees.append({
                    'tree_id': tree_id,
                    'node_count': len(tree_data.get('nodes', [])),
                    'saved_at': tree_data.get('metadata', {}).get('saved_at'),
                })
            return trees

    def close(self):
        """关闭存储连接（内存存储无操作）"""
        pass

    def clear(self):
        """清空所有数据（测试用）"""
        with self._lock:
            self._trees.clear()

    def __str__(self):
        """字符串表示"""
        node_count = sum(len(t.get('nodes', [])) for t in self._trees.values())
        return f"MemoryStore(trees={len(self._trees)}, nodes={node_count})"
