"""
树视图
某一时刻从 NodeStore 构建出的不可变嵌套快照
"""
from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, Optional, List


@dataclass(frozen=True, eq=False)
class TreeView:
    """
    不可变的子树快照

    视图构建完成后与 NodeStore 不再有任何关联，存储之后的修改不会反映到视图中。
    """

    node_id: int
    name: str
    children: Tuple['TreeView', ...] = field(default_factory=tuple)

    @property
    def child_ids(self) -> Tuple[int, ...]:
        """子节点ID（与存储中的顺序一致）"""
        return tuple(child.node_id for child in self.children)

    def is_leaf(self) -> bool:
        return not self.children

    def size(self) -> int:
        """子树节点总数（含自身）"""
        count = 0
        stack: List[TreeView] = [self]
        while stack:
            view = stack.pop()
            count += 1
            stack.extend(view.children)
        return count

    def height(self) -> int:
        """子树高度，单个节点为0"""
        height = 0
        frontier: List[TreeView] = [self]
        while True:
            frontier = [child for view in frontier for child in view.children]
            if not frontier:
                return height
            height += 1

    def find(self, node_id: int) -> Optional['TreeView']:
        """在子树中查找节点"""
        stack: List[TreeView] = [self]
        while stack:
            view = stack.pop()
            if view.node_id == node_id:
                return view
            stack.extend(reversed(view.children))
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为嵌套字典

        Returns:
            {'node_id': ..., 'name': ..., 'children': [...]}
        """
        root: Dict[str, Any] = {'node_id': self.node_id, 'name': self.name, 'children': []}
        stack = [(self, root)]
        while stack:
            view, out = stack.pop()
            for child in view.children:
                child_out = {'node_id': child.node_id, 'name': child.name, 'children': []}
                out['children'].append(child_out)
                stack.append((child, child_out))
        return root

    def __eq__(self, other) -> bool:
        """逐层比较节点ID、名称和子节点顺序（迭代实现，深树不会触发递归上限）"""
        if not isinstance(other, TreeView):
            return NotImplemented

        stack: List[Tuple[TreeView, TreeView]] = [(self, other)]
        while stack:
            left, right = stack.pop()
            if left is right:
                continue
            if (left.node_id != right.node_id or left.name != right.name
                    or len(left.children) != len(right.children)):
                return False
            stack.extend(zip(left.children, right.children))
        return True

    def __hash__(self) -> int:
        return hash((self.node_id, self.name, self.child_ids))

    def __repr__(self) -> str:
        return f"TreeView(id={self.node_id}, name={self.name!r}, children={list(self.child_ids)})"
