"""
遍历引擎
在已构建的 TreeView 上产生惰性、可重复的节点序列
"""
from collections import deque
from typing import Callable, Iterator, Optional, Tuple

from .view import TreeView


class Traversal:
    """
    惰性遍历序列

    每次 iter() 都从头开始一次新的遍历，因此可以被多次消费；
    遍历只读取视图，不访问 NodeStore，也不加锁。
    """

    def __init__(self, view: TreeView, walker: Callable[[TreeView], Iterator], order: str):
        self._view = view
        self._walker = walker
        self.order = order

    def __iter__(self) -> Iterator:
        return self._walker(self._view)

    def ids(self) -> list:
        """遍历结果的节点ID列表"""
        return [item.node_id for item in self]

    def names(self) -> list:
        """遍历结果的节点名称列表"""
        return [item.name for item in self]

    def __repr__(self) -> str:
        return f"Traversal(order={self.order}, root={self._view.node_id})"


def _depth_first(view: TreeView) -> Iterator[TreeView]:
    stack = [view]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _breadth_first(view: TreeView) -> Iterator[TreeView]:
    queue = deque([view])
    while queue:
        current = queue.popleft()
        yield current
        queue.extend(current.children)


def _post_order(view: TreeView) -> Iterator[TreeView]:
    stack = [(view, False)]
    while stack:
        current, expanded = stack.pop()
        if expanded:
            yield current
            continue
        stack.append((current, True))
        for child in reversed(current.children):
            stack.append((child, False))


def _walk(view: TreeView) -> Iterator[Tuple[int, Optional[int], TreeView]]:
    stack = [(0, None, view)]
    while stack:
        depth, parent_id, current = stack.pop()
        yield depth, parent_id, current
        for child in reversed(current.children):
            stack.append((depth + 1, current.node_id, child))


class TraversalEngine:
    """遍历引擎"""

    ORDERS = {
        "depth_first": _depth_first,
        "breadth_first": _breadth_first,
        "post_order": _post_order,
    }

    def depth_first(self, view: TreeView) -> Traversal:
        """前序深度优先，子节点按 child_ids 顺序"""
        return Traversal(view, _depth_first, "depth_first")

    def breadth_first(self, view: TreeView) -> Traversal:
        """层序遍历，兄弟节点按 child_ids 顺序"""
        return Traversal(view, _breadth_first, "breadth_first")

    def post_order(self, view: TreeView) -> Traversal:
        """后序深度优先，子节点先于父节点"""
        return Traversal(view, _post_order, "post_order")

    def walk(self, view: TreeView) -> Iterator[Tuple[int, Optional[int], TreeView]]:
        """
        前序遍历，附带深度和父节点ID

        Yields:
            (depth, parent_id, view)，根节点的 depth 为0、parent_id 为None
        """
        return _walk(view)

    def traverse(self, view: TreeView, order: str = "depth_first") -> Traversal:
        """
        按名称选择遍历顺序

        Args:
            order: "depth_first", "breadth_first" 或 "post_order"
        """
        walker = self.ORDERS.get(order)
        if walker is None:
            raise ValueError(f"不支持的遍历顺序: {order}")
        return Traversal(view, walker, order)
