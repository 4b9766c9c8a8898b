"""
表格导出器
把 TreeView 展开成行（前序），写入 CSV / Excel，或渲染为缩进文本
"""
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ...core.tree.traversal import TraversalEngine
from ...core.tree.view import TreeView
from ...exceptions import StorageError

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ['node_id', 'parent_id', 'position', 'level', 'name']


class TabularTreeExporter:
    """表格树导出器"""

    def __init__(self, traversal: Optional[TraversalEngine] = None, indent_width: int = 2):
        self._traversal = traversal or TraversalEngine()
        self.indent_width = indent_width

    def to_rows(self, views: Iterable[TreeView]) -> List[Dict[str, Any]]:
        """
        展开为行列表（前序）

        Returns:
            [{'node_id', 'parent_id', 'position', 'level', 'name'}, ...]
        """
        rows = []
        for root_position, root in enumerate(views):
            positions = {root.node_id: root_position}
            for depth, parent_id, view in self._traversal.walk(root):
                for index, child in enumerate(view.children):
                    positions[child.node_id] = index
                rows.append({
                    'node_id': view.node_id,
                    'parent_id': parent_id,
                    'position': positions[view.node_id],
                    'level': depth,
                    'name': view.name,
                })
        return rows

    def to_dataframe(self, views: Iterable[TreeView]) -> pd.DataFrame:
        """展开为DataFrame，parent_id 列使用可空整数类型"""
        frame = pd.DataFrame(self.to_rows(views), columns=EXPORT_COLUMNS)
        frame['parent_id'] = frame['parent_id'].astype('Int64')
        return frame

    def to_indented_text(self, views: Iterable[TreeView]) -> str:
        """渲染为缩进文本，每行一个节点"""
        lines = []
        for root in views:
            for depth, _, view in self._traversal.walk(root):
                lines.append(' ' * (depth * self.indent_width) + view.name)
        return '\n'.join(lines)

    def export(self, views: Iterable[TreeView], file_path: str) -> int:
        """
        写入文件，按后缀选择格式（.csv / .tsv / .xlsx）

        Returns:
            写入的行数
        """
        path = Path(file_path)
        frame = self.to_dataframe(views)
        ext = path.suffix.lower()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if ext == '.csv':
                frame.to_csv(path, index=False)
            elif ext == '.tsv':
                frame.to_csv(path, index=False, sep='\t')
            elif ext == '.xlsx':
                frame.to_excel(path, index=False)
            else:
                raise ValueError(f"不支持的导出格式: {ext}")
        except OSError as e:
            raise StorageError(f"导出文件失败: {e}")

        logger.info(f"导出 {len(frame)} 个节点到 {path}")
        return len(frame)
