"""
树节点实体模块
定义节点记录：ID、名称、有序的子节点ID列表
"""

from typing import Dict, Any, List, Optional, Iterable, Tuple

from ...interfaces import INode


class TreeNode(INode):
    """
    树节点记录

    节点只通过ID引用子节点，不直接持有子节点对象：
    1. 身份信息：node_id, name
    2. 树关系：child_ids（有序，插入顺序有意义，无重复）

    子节点列表只应由 NodeStore / TreeMutator 修改；
    NodeStore.get() 返回的是副本，修改副本不会影响存储。
    """

    __slots__ = ('_node_id', '_name', '_child_ids')

    def __init__(self, node_id: int, name: str, child_ids: Optional[Iterable[int]] = None):
        """
        初始化树节点

        Args:
            node_id: 节点唯一标识
            name: 节点名称（可以为空字符串）
            child_ids: 子节点ID序列
        """
        self._node_id = node_id
        self._name = name
        self._child_ids: List[int] = list(child_ids) if child_ids else []

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def child_ids(self) -> Tuple[int, ...]:
        return tuple(self._child_ids)

    # ========== 存储内部使用 ==========

    def _rename(self, name: str) -> None:
        self._name = name

    def _insert_child_id(self, index: int, child_id: int) -> None:
        self._child_ids.insert(index, child_id)

    def _remove_child_id(self, child_id: int) -> int:
        """移除子节点ID，返回它原来的位置"""
        index = self._child_ids.index(child_id)
        del self._child_ids[index]
        return index

    def _child_count(self) -> int:
        return len(self._child_ids)

    # ========== 复制与序列化 ==========

    def copy(self) -> 'TreeNode':
        """返回独立副本"""
        return TreeNode(self._node_id, self._name, self._child_ids)

    def to_dict(self) -> Dict[str, Any]:
        """序列化节点"""
        return {
            'node_id': self._node_id,
            'name': self._name,
            'child_ids': list(self._child_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TreeNode':
        """
        反序列化创建节点

        Args:
            data: {'node_id': int, 'name': str, 'child_ids': [int, ...]}
        """
        return cls(
            node_id=int(data['node_id']),
            name=data['name'],
            child_ids=[int(c) for c in data.get('child_ids', [])]
        )

    # ========== 特殊方法 ==========

    def __repr__(self) -> str:
        return f"TreeNode(id={self._node_id}, name={self._name!r}, children={self._child_ids})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeNode):
            return False
        return (self._node_id == other._node_id
                and self._name == other._name
                and self._child_ids == other._child_ids)

    def __hash__(self) -> int:
        return hash(self._node_id)
