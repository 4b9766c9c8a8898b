"""
JSON文件存储实现
将所有树数据存储在单个JSON文件中，人类可读，轻量级
适用于小项目、原型开发
"""

import json
import os
import threading
from typing import Any, Optional, List, Dict
from pathlib import Path

from ..serializer import DateTimeEncoder
from .adapter import DataStoreAdapter
from ...exceptions import StorageError


class JSONStore(DataStoreAdapter):
    """JSON文件存储 - 所有数据存在单个JSON文件中"""

    def __init__(self, file_path: str):
        """
        初始化JSON存储

        Args:
            file_path: JSON文件路径
        """
        self.file_path = Path(file_path)
        self._lock = threading.RLock()
        self._ensure_file_exists()

    def _ensure_file_exists(self):
        """确保JSON文件存在"""
        if not self.file_path.exists() or self.file_path.stat().st_size == 0:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._save_data({'trees': {}})

    def _load_data(self) -> Dict:
        """加载JSON文件"""
        try:
            if self.file_path.exists():
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                data.setdefault('trees', {})
                return data
            return {'trees': {}}
        except json.JSONDecodeError as e:
            raise StorageError(f"JSON文件损坏: {e}")
        except OSError as e:
            raise StorageError(f"读取JSON文件失败: {e}")

    def _save_data(self, data: Dict):
        """保存JSON文件（先写临时文件再替换，避免写到一半损坏）"""
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + '.tmp')
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, cls=DateTimeEncoder, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"写入JSON文件失败: {e}")

    # ========== 接口实现 ==========

    def save_tree(self, tree_id: str, tree_data: Dict[str, Any]) -> bool:
        """保存整棵树的数据"""
        self._check_tree_data(tree_id, tree_data, "json")
        with self._lock:
            data = self._load_data()
            stored = dict(tree_data)
            stored['tree_id'] = tree_id
            data['trees'][tree_id] = stored
            self._save_data(data)
            return True

    def load_tree(self, tree_id: str) -> Optional[Dict[str, Any]]:
        """加载整棵树的数据"""
        with self._lock:
            data = self._load_data()
            return data['trees'].get(tree_id)

    def delete_tree(self, tree_id: str) -> bool:
        """删除整棵树"""
        with self._lock:
            data = self._load_data()
            if tree_id not in data['trees']:
                return False
            del data['trees'][tree_id]
            self._save_data(data)
            return True

    def exists_tree(self, tree_id: str) -> bool:
        """检查树是否存在"""
        with self._lock:
            return tree_id in self._load_data()['trees']

    def list_trees(self) -> List[Dict[str, Any]]:
        """列出所有树"""
        with self._lock:
            trees = self._load_data()['trees']
            return [
                {
                    'tree_id': tree_id,
                    'node_count': len(trees[tree_id].get('nodes', [])),
                    'saved_at': trees[tree_id].get('metadata', {}).get('saved_at'),
                }
                for tree_id in sorted(trees)
            ]

    # ========== 工具方法 ==========

    def close(self):
        """关闭存储（文件每次读写后即关闭）"""
        pass

    def clear(self):
        """清空所有数据（用于测试）"""
        with self._lock:
            if self.file_path.exists():
                self.file_path.unlink()
            self._ensure_file_exists()

    def get_file_path(self) -> str:
        """获取文件路径"""
        return str(self.file_path)

    def __str__(self):
        return f"JSONStore({self.file_path})"
