"""
树构建器
从 NodeStore 的扁平记录构建不可变的 TreeView，检测环和悬空引用
"""
import logging
from typing import List, Set, Tuple, Iterator

from .view import TreeView
from ..node.store import NodeStore
from ...exceptions import (
    NodeNotFoundError, CycleDetectedError, DanglingReferenceError, AlreadyChildError
)

logger = logging.getLogger(__name__)


class TreeBuilder:
    """
    树构建器

    build / build_forest 只读、无副作用，整个遍历期间持有存储的共享锁，
    因此看到的是一个一致的快照；多个构建可以并发执行。
    """

    def __init__(self, store: NodeStore):
        self._store = store

    def build(self, root_id: int) -> TreeView:
        """
        从root_id构建子树视图

        Raises:
            NodeNotFoundError: root_id不存在
            CycleDetectedError: 当前路径上再次出现同一节点
            DanglingReferenceError: 子节点ID不存在
            AlreadyChildError: 同一节点经由两个父节点到达
        """
        with self._store.read_locked():
            return self._build_unlocked(root_id, set())

    def build_forest(self) -> List[TreeView]:
        """
        构建所有根节点的视图（按根节点ID升序）

        根节点是从未出现在任何子节点列表中的节点。
        若有节点无法从任何根到达，说明它们位于环上。
        """
        with self._store.read_locked():
            seen: Set[int] = set()
            views = [self._build_unlocked(root_id, seen) for root_id in self._find_roots_unlocked()]

            all_ids = set(self._store._nodes)
            if len(seen) != len(all_ids):
                unreachable = sorted(all_ids - seen)
                raise CycleDetectedError(self._find_cycle(unreachable[0]))

        logger.debug(f"构建森林: {len(views)} 棵树, {len(seen)} 个节点")
        return views

    def find_roots(self) -> List[int]:
        """获取所有根节点ID（按ID升序）"""
        with self._store.read_locked():
            return self._find_roots_unlocked()

    # ========== 内部实现 ==========

    def _find_roots_unlocked(self) -> List[int]:
        nodes = self._store._nodes
        referenced: Set[int] = set()
        for node in nodes.values():
            referenced.update(node.child_ids)
        return sorted(n for n in nodes if n not in referenced)

    def _build_unlocked(self, root_id: int, seen: Set[int]) -> TreeView:
        """
        迭代式后序构建，避免深树触发递归上限

        seen 记录本次构建（或整个森林构建）中已经放入视图的节点
        """
        store = self._store
        if not store._has(root_id):
            raise NodeNotFoundError(node_id=root_id)

        root = store._require(root_id)
        path: List[int] = [root_id]
        on_path: Set[int] = {root_id}
        seen.add(root_id)

        # (节点ID, 节点名称, 子节点ID迭代器, 已构建的子视图)
        stack: List[Tuple[int, str, Iterator[int], List[TreeView]]] = [
            (root_id, root.name, iter(root.child_ids), [])
        ]

        while True:
            node_id, name, pending, built = stack[-1]
            child_id = next(pending, None)

            if child_id is None:
                stack.pop()
                path.pop()
                on_path.discard(node_id)
                view = TreeView(node_id=node_id, name=name, children=tuple(built))
                if not stack:
                    return view
                stack[-1][3].append(view)
                continue

            if child_id in on_path:
                raise CycleDetectedError(path + [child_id])
            if not store._has(child_id):
                raise DanglingReferenceError(child_id, parent_id=node_id)
            if child_id in seen:
                raise AlreadyChildError(child_id, parent_id=node_id)

            child = store._require(child_id)
            seen.add(child_id)
            path.append(child_id)
            on_path.add(child_id)
            stack.append((child_id, child.name, iter(child.child_ids), []))

    def _find_cycle(self, start_id: int) -> List[int]:
        """
        沿父链从start_id向上找出一个环

        start_id不可从任何根到达，所以它的父链不会终止于根，必然进入环
        """
        parent_of = {}
        for node in self._store._nodes.values():
            for child_id in node.child_ids:
                parent_of.setdefault(child_id, node.node_id)

        trail: List[int] = []
        index_of = {}
        current = start_id
        while current not in index_of:
            index_of[current] = len(trail)
            trail.append(current)
            current = parent_of[current]

        cycle = trail[index_of[current]:] + [current]
        cycle.reverse()
        return cycle
