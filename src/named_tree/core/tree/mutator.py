"""
树修改器
对 NodeStore 进行结构性修改（插入、移动、重命名、删除子树），
每个操作都在事务中执行，失败时存储保持调用前的状态
"""
import logging
from typing import List, Optional, Set

from ..node.store import NodeStore
from ...exceptions import (
    WouldCreateCycleError, AlreadyChildError, NotAChildError
)

logger = logging.getLogger(__name__)


class TreeMutator:
    """树结构修改器"""

    def __init__(self, store: NodeStore):
        self._store = store

    @property
    def store(self) -> NodeStore:
        return self._store

    # ========== 结构修改 ==========

    def insert_child(self, parent_id: int, child_id: int, index: Optional[int] = None) -> None:
        """
        把child_id插入为parent_id的子节点

        Args:
            parent_id: 父节点ID
            child_id: 子节点ID（必须当前没有父节点）
            index: 插入位置，超出范围时截断到 [0, 子节点数]；None表示追加到末尾

        Raises:
            NodeNotFoundError: 任一节点不存在
            WouldCreateCycleError: child_id是parent_id自身或其祖先
            AlreadyChildError: child_id已有父节点
        """
        with self._store.transaction():
            self._insert(parent_id, child_id, index)

        logger.debug(f"插入子节点: {child_id} -> {parent_id}")

    def remove_child(self, parent_id: int, child_id: int) -> None:
        """
        把child_id从parent_id下摘除，child_id成为新的根节点（不删除）

        Raises:
            NodeNotFoundError: 任一节点不存在
            NotAChildError: child_id不是parent_id的子节点
        """
        with self._store.transaction():
            self._remove(parent_id, child_id)

        logger.debug(f"移除子节点: {child_id} <- {parent_id}")

    def move_subtree(self, child_id: int, new_parent_id: int, index: Optional[int] = None) -> None:
        """
        把以child_id为根的子树移动到new_parent_id下

        先从原父节点摘除（如果有），再插入；插入失败时摘除操作一并回滚。

        Raises:
            NodeNotFoundError: 任一节点不存在
            WouldCreateCycleError: new_parent_id是child_id自身或其后代
        """
        store = self._store
        with store.transaction():
            store._require(child_id)
            store._require(new_parent_id)

            old_parent_id = store._parent(child_id)
            if old_parent_id is not None:
                self._remove(old_parent_id, child_id)
            self._insert(new_parent_id, child_id, index)

        logger.debug(f"移动子树: {child_id} -> {new_parent_id} (原父节点: {old_parent_id})")

    def delete_subtree(self, root_id: int) -> List[int]:
        """
        删除root_id及其所有后代

        Returns:
            被删除的节点ID（前序）

        Raises:
            NodeNotFoundError: root_id不存在
        """
        store = self._store
        with store.transaction():
            store._require(root_id)
            doomed = self._collect_subtree(root_id)

            parent_id = store._parent(root_id)
            if parent_id is not None and store._has(parent_id):
                store._detach(parent_id, root_id)

            for node_id in doomed:
                store._discard(node_id)

        logger.debug(f"删除子树: root={root_id}, 共 {len(doomed)} 个节点")
        return doomed

    def rename(self, node_id: int, new_name: str) -> None:
        """重命名节点"""
        self._store.set_name(node_id, new_name)

    # ========== 组合操作 ==========

    def create_child(self, parent_id: int, name: str, index: Optional[int] = None) -> int:
        """
        创建节点并插入为parent_id的子节点

        Returns:
            新节点ID
        """
        store = self._store
        with store.transaction():
            store._require(parent_id)
            child_id = store.create(name)
            self._insert(parent_id, child_id, index)
        return child_id

    def ancestors_of(self, node_id: int) -> List[int]:
        """获取祖先节点ID（从父节点到根）"""
        with self._store.read_locked():
            self._store._require(node_id)
            return self._ancestors(node_id)

    # ========== 内部实现（调用方需持有写锁） ==========

    def _insert(self, parent_id: int, child_id: int, index: Optional[int]) -> None:
        store = self._store
        parent = store._require(parent_id)
        store._require(child_id)

        if child_id == parent_id or child_id in self._ancestors(parent_id):
            raise WouldCreateCycleError(child_id, parent_id)

        current_parent = store._parent(child_id)
        if current_parent is not None:
            raise AlreadyChildError(child_id, parent_id=current_parent)

        count = parent._child_count()
        if index is None or index > count:
            index = count
        elif index < 0:
            index = 0

        store._attach(parent_id, child_id, index)

    def _remove(self, parent_id: int, child_id: int) -> None:
        store = self._store
        parent = store._require(parent_id)
        store._require(child_id)

        if child_id not in parent.child_ids:
            raise NotAChildError(child_id, parent_id)

        store._detach(parent_id, child_id)

    def _ancestors(self, node_id: int) -> List[int]:
        """沿父索引向上遍历；防御损坏数据中的环"""
        ancestors: List[int] = []
        visited: Set[int] = {node_id}
        current = self._store._parent(node_id)
        while current is not None and current not in visited:
            ancestors.append(current)
            visited.add(current)
            current = self._store._parent(current)
        return ancestors

    def _collect_subtree(self, root_id: int) -> List[int]:
        """收集root_id及所有后代（前序），已访问的节点不会重复收集"""
        store = self._store
        collected: List[int] = []
        visited: Set[int] = set()
        stack = [root_id]
        while stack:
            node_id = stack.pop()
            if node_id in visited or not store._has(node_id):
                continue
            visited.add(node_id)
            collected.append(node_id)
            stack.extend(reversed(store._require(node_id).child_ids))
        return collected
