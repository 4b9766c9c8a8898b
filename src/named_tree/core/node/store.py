"""
节点存储模块
以扁平的 ID -> 节点记录 映射保存所有节点，维护唯一性、存在性和森林约束
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional, Dict, Any, List, Set, Callable, Iterable, Union

from .entity import TreeNode
from ..ids import IncrementalIdProvider
from ..lock import ReadWriteLock
from ...config.validator import ConfigValidator
from ...interfaces import IIdProvider
from ...exceptions import (
    NodeNotFoundError, TreeNotFoundError, ValidationError,
    DanglingReferenceError, AlreadyChildError, CycleDetectedError
)

logger = logging.getLogger(__name__)


class NodeStore:
    """
    节点存储，拥有全部节点记录

    - 节点ID由ID提供者分配，在同一存储的生命周期内不会复用
    - 所有写操作持有独占锁；读操作持有共享锁
    - 额外维护 child -> parent 索引，用于向上遍历祖先
    - transaction() 内的每个原子修改都会记录撤销动作，异常时回滚
    """

    def __init__(self, id_provider: Optional[IIdProvider] = None):
        """
        初始化节点存储

        Args:
            id_provider: ID分配器，默认从1开始递增
        """
        self._ids = id_provider or IncrementalIdProvider()
        self._nodes: Dict[int, TreeNode] = {}
        self._parents: Dict[int, int] = {}  # child_id -> parent_id
        self._lock = ReadWriteLock()
        self._journal: Optional[List[Callable[[], None]]] = None
        self._validator = ConfigValidator()

    # ========== 锁 ==========

    def read_locked(self):
        """共享锁上下文"""
        return self._lock.read_locked()

    def write_locked(self):
        """独占锁上下文（同一线程可重入）"""
        return self._lock.write_locked()

    @property
    def id_provider(self) -> IIdProvider:
        return self._ids

    # ========== 基本操作 ==========

    def create(self, name: str) -> int:
        """
        创建节点

        Args:
            name: 节点名称，可以为空字符串，不能为None

        Returns:
            新节点ID

        Raises:
            ValidationError: 名称不是字符串
            IdAllocationError: ID空间耗尽
        """
        name = self._validator.validate_node_name(name)

        with self.write_locked():
            node_id = self._ids.allocate()
            if node_id in self._nodes:
                # 分配器落后于已加载的数据
                self._ids.advance_past(max(self._nodes))
                node_id = self._ids.allocate()

            self._nodes[node_id] = TreeNode(node_id, name)
            self._record_undo(lambda: self._nodes.pop(node_id, None))

        logger.debug(f"创建节点: id={node_id}, name={name!r}")
        return node_id

    def get(self, node_id: int) -> TreeNode:
        """获取节点（返回副本）"""
        with self.read_locked():
            return self._require(node_id).copy()

    def set_name(self, node_id: int, name: str) -> None:
        """修改节点名称"""
        name = self._validator.validate_node_name(name)

        with self.write_locked():
            node = self._require(node_id)
            old_name = node.name
            node._rename(name)
            self._record_undo(lambda: node._rename(old_name))

        logger.debug(f"重命名节点: id={node_id}, {old_name!r} -> {name!r}")

    def exists(self, node_id: int) -> bool:
        """检查节点是否存在"""
        with self.read_locked():
            return node_id in self._nodes

    def all_ids(self) -> Set[int]:
        """获取所有节点ID"""
        with self.read_locked():
            return set(self._nodes)

    def parent_of(self, node_id: int) -> Optional[int]:
        """获取父节点ID，根节点返回None"""
        with self.read_locked():
            self._require(node_id)
            return self._parents.get(node_id)

    def root_ids(self) -> List[int]:
        """获取所有根节点ID（升序）"""
        with self.read_locked():
            return sorted(n for n in self._nodes if n not in self._parents)

    def __len__(self) -> int:
        with self.read_locked():
            return len(self._nodes)

    def __contains__(self, node_id: int) -> bool:
        return self.exists(node_id)

    def __repr__(self) -> str:
        return f"NodeStore(nodes={len(self._nodes)}, next_id={self._ids.peek_next()})"

    # ========== 内部原子操作（调用方需持有写锁） ==========

    def _require(self, node_id: int) -> TreeNode:
        try:
            return self._nodes[node_id]
        except (KeyError, TypeError):
            raise NodeNotFoundError(node_id=node_id)

    def _has(self, node_id: int) -> bool:
        return node_id in self._nodes

    def _parent(self, node_id: int) -> Optional[int]:
        return self._parents.get(node_id)

    def _attach(self, parent_id: int, child_id: int, index: int) -> None:
        """把child_id插入到parent_id的子节点列表index处"""
        parent = self._nodes[parent_id]
        parent._insert_child_id(index, child_id)
        self._parents[child_id] = parent_id
        self._record_undo(lambda: self._detach_raw(parent_id, child_id))

    def _detach(self, parent_id: int, child_id: int) -> int:
        """从parent_id的子节点列表中移除child_id，返回原位置"""
        index = self._detach_raw(parent_id, child_id)
        self._record_undo(lambda: self._attach_raw(parent_id, child_id, index))
        return index

    def _discard(self, node_id: int) -> None:
        """删除节点记录（不处理父节点的子节点列表）"""
        node = self._nodes.pop(node_id)
        parent_id = self._parents.pop(node_id, None)

        def undo():
            self._nodes[node_id] = node
            if parent_id is not None:
                self._parents[node_id] = parent_id

        self._record_undo(undo)

    def _attach_raw(self, parent_id: int, child_id: int, index: int) -> None:
        self._nodes[parent_id]._insert_child_id(index, child_id)
        self._parents[child_id] = parent_id

    def _detach_raw(self, parent_id: int, child_id: int) -> int:
        index = self._nodes[parent_id]._remove_child_id(child_id)
        self._parents.pop(child_id, None)
        return index

    # ========== 事务 ==========

    @contextmanager
    def transaction(self):
        """
        事务上下文

        持有独占锁；块内抛出异常时把存储恢复到进入时的状态并重新抛出。
        嵌套事务使用保存点，内层失败只回滚内层的修改。
        """
        with self.write_locked():
            outermost = self._journal is None
            if outermost:
                self._journal = []
            savepoint = len(self._journal)

            try:
                yield self
            except BaseException:
                self._rollback_to(savepoint)
                raise
            finally:
                if outermost:
                    self._journal = None

    def _record_undo(self, undo: Callable[[], None]) -> None:
        if self._journal is not None:
            self._journal.append(undo)

    def _rollback_to(self, savepoint: int) -> None:
        undone = 0
        while len(self._journal) > savepoint:
            self._journal.pop()()
            undone += 1
        if undone:
            logger.debug(f"事务回滚: 撤销 {undone} 个修改")

    # ========== 批量加载与导出 ==========

    def to_dict(self) -> Dict[str, Any]:
        """
        导出全部节点

        Returns:
            {'next_id': int, 'nodes': [{'node_id', 'name', 'child_ids'}, ...]}
        """
        with self.read_locked():
            return self._to_dict_unlocked()

    def _to_dict_unlocked(self) -> Dict[str, Any]:
        return {
            'next_id': self._ids.peek_next(),
            'nodes': [self._nodes[n].to_dict() for n in sorted(self._nodes)],
        }

    def load_records(
        self,
        records: Iterable[Union[TreeNode, Dict[str, Any]]],
        next_id: Optional[int] = None,
        validate: bool = True
    ) -> int:
        """
        用一批节点记录整体替换存储内容

        Args:
            records: 节点记录（TreeNode 或 to_dict() 格式的字典）
            next_id: 持久化时的下一个ID，用于保证ID不复用
            validate: 是否检查悬空引用、共享子节点和环

        Returns:
            加载的节点数

        Raises:
            ValidationError: 记录中存在重复ID
            DanglingReferenceError / AlreadyChildError / CycleDetectedError: 记录不构成森林
        """
        nodes: Dict[int, TreeNode] = {}
        for record in records:
            node = record.copy() if isinstance(record, TreeNode) else TreeNode.from_dict(record)
            if node.node_id in nodes:
                raise ValidationError(
                    message=f"重复的节点ID: {node.node_id}",
                    field="node_id",
                    value=node.node_id,
                    reason="duplicate_id"
                )
            nodes[node.node_id] = node

        if validate:
            parents = check_forest(nodes)
        else:
            parents = {}
            for node in nodes.values():
                for child_id in node.child_ids:
                    parents[child_id] = node.node_id

        with self.write_locked():
            old_nodes, old_parents = self._nodes, self._parents

            def undo():
                self._nodes, self._parents = old_nodes, old_parents

            self._nodes, self._parents = nodes, parents
            self._record_undo(undo)

            if nodes:
                self._ids.advance_past(max(nodes))
            if next_id is not None:
                self._ids.advance_past(int(next_id) - 1)

        logger.debug(f"加载 {len(nodes)} 个节点记录")
        return len(nodes)

    def load_tree_data(self, tree_data: Dict[str, Any], validate: bool = True) -> int:
        """从持久化格式的树数据加载"""
        return self.load_records(
            tree_data.get('nodes', []),
            next_id=tree_data.get('next_id'),
            validate=validate
        )

    def to_tree_data(self, tree_id: str) -> Dict[str, Any]:
        """生成持久化格式的树数据"""
        with self.read_locked():
            data = self._to_dict_unlocked()
            data['tree_id'] = tree_id
            data['metadata'] = {
                'node_count': len(self._nodes),
                'root_count': sum(1 for n in self._nodes if n not in self._parents),
                'saved_at': datetime.now().isoformat(),
            }
            return data

    # ===== 存储 =====
    def save_to_storage(self, storage, tree_id: str) -> Dict[str, Any]:
        """将内存中的全部节点保存到存储"""
        tree_data = self.to_tree_data(tree_id)
        storage.save_tree(tree_id, tree_data)
        logger.info(f"保存树到存储: {tree_id}, 共 {tree_data['metadata']['node_count']} 个节点")
        return tree_data

    @classmethod
    def load_from_storage(
        cls,
        storage,
        tree_id: str,
        id_provider: Optional[IIdProvider] = None,
        validate: bool = True
    ) -> 'NodeStore':
        """从存储加载整个节点集合"""
        tree_data = storage.load_tree(tree_id)
        if not tree_data:
            raise TreeNotFoundError(tree_id)

        store = cls(id_provider)
        count = store.load_tree_data(tree_data, validate=validate)
        logger.info(f"从存储加载树: {tree_id}, 共 {count} 个节点")
        return store


def check_forest(nodes: Dict[int, TreeNode]) -> Dict[int, int]:
    """
    检查节点集合构成合法森林

    Args:
        nodes: node_id -> TreeNode

    Returns:
        child_id -> parent_id 索引

    Raises:
        DanglingReferenceError: 子节点ID不存在
        AlreadyChildError: 节点被多个父节点引用（或在同一列表中重复）
        CycleDetectedError: 存在环
    """
    parents: Dict[int, int] = {}
    for node_id in sorted(nodes):
        for child_id in nodes[node_id].child_ids:
            if child_id not in nodes:
                raise DanglingReferenceError(child_id, parent_id=node_id)
            if child_id in parents:
                raise AlreadyChildError(child_id, parent_id=parents[child_id])
            parents[child_id] = node_id

    # 每个节点沿父链向上都必须到达一个根
    reaches_root: Set[int] = set()
    for start in sorted(nodes):
        trail: List[int] = []
        on_trail: Set[int] = set()
        current = start
        while current not in reaches_root:
            if current in on_trail:
                cycle = trail[trail.index(current):] + [current]
                cycle.reverse()
                raise CycleDetectedError(cycle)
            on_trail.add(current)
            trail.append(current)
            if current not in parents:
                break
            current = parents[current]
        reaches_root.update(trail)

    return parents
