"""
层级导入器基类
子类负责把某种文件读成带层级的行，基类负责由层级确定父子关系并写入树
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional

from ...exceptions import TreeImportError

logger = logging.getLogger(__name__)


class HierarchyImporter(ABC):
    """
    层级导入器

    流程：validate_file -> parse_data（子类）-> convert_to_tree_nodes -> load_into

    parse_data 返回的每一行至少包含：
        row: 源文件中的行号
        name: 节点名称
        level: 层级，0 为根
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._validate_config()

        self.stats = {
            'files_processed': 0,
            'rows_parsed': 0,
            'rows_skipped': 0,
            'nodes_created': 0,
            'trees_created': 0
        }

    def _validate_config(self):
        pass

    # ============ 子类实现 ============

    @abstractmethod
    def validate_file(self, file_path: str) -> bool:
        """文件是否可以由本导入器读取"""
        pass

    @abstractmethod
    def extract_metadata(self, file_path: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    def parse_data(self, file_path: str) -> List[Dict[str, Any]]:
        """读取文件为 [{'row', 'name', 'level'}, ...]"""
        pass

    # ============ 层级 -> 父子关系 ============

    def convert_to_tree_nodes(self, data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        根据层级确定每行的父行

        Returns:
            [{'row': int, 'name': str, 'level': int, 'parent_row': Optional[int]}, ...]

        Raises:
            TreeImportError: 层级一次跳跃超过一级
        """
        converted = []
        hierarchy: List[Dict[str, Any]] = []  # 当前路径上的行，下标即层级

        for item in data:
            level = item['level']
            if level > len(hierarchy):
                raise TreeImportError(
                    f"层级跳跃: 第 {item['row']} 行层级为 {level}，上一层级最多为 {len(hierarchy) - 1}",
                    row=item['row']
                )

            hierarchy = hierarchy[:level]
            node = {
                'row': item['row'],
                'name': item['name'],
                'level': level,
                'parent_row': hierarchy[-1]['row'] if hierarchy else None,
            }
            hierarchy.append(node)
            converted.append(node)

        return converted

    def import_data(self, file_path: str) -> List[Dict[str, Any]]:
        """校验、解析并确定父子关系"""
        if not self.validate_file(file_path):
            raise TreeImportError(f"无效的文件: {file_path}", source=file_path)

        return self.convert_to_tree_nodes(self.parse_data(file_path))

    # ============ 写入树 ============

    def load_into(self, mutator, nodes: List[Dict[str, Any]]) -> List[int]:
        """
        在一个事务中创建全部节点，任何一行失败都不会留下部分结果

        Args:
            mutator: TreeMutator
            nodes: convert_to_tree_nodes() 的结果

        Returns:
            新建的根节点ID列表
        """
        store = mutator.store
        root_ids: List[int] = []
        row_to_id: Dict[int, int] = {}

        with store.transaction():
            for node in nodes:
                parent_row = node['parent_row']
                if parent_row is None:
                    node_id = store.create(node['name'])
                    root_ids.append(node_id)
                else:
                    node_id = mutator.create_child(row_to_id[parent_row], node['name'])
                row_to_id[node['row']] = node_id

        self.stats['nodes_created'] += len(row_to_id)
        self.stats['trees_created'] += len(root_ids)
        logger.info(f"导入完成: {len(row_to_id)} 个节点, {len(root_ids)} 棵树")
        return root_ids

    def import_into(self, file_path: str, mutator) -> List[int]:
        """读取文件并写入树，返回新建的根节点ID"""
        return self.load_into(mutator, self.import_data(file_path))
