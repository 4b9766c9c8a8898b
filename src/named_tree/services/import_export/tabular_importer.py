"""
表格导入器
从 CSV / Excel 读取层级名称列表，批量创建节点并建立父子关系

支持两种层级表示：
1. 名称列的前导缩进（默认每2个空格算一级）
2. 显式的 level 列（0 为根）
"""
import os
import logging
from typing import Dict, List, Any, Optional
from datetime import datetime
from pathlib import Path

import pandas as pd

from .base_importer import HierarchyImporter
from ...exceptions import TreeImportError

logger = logging.getLogger(__name__)

CSV_SUFFIXES = ['.csv', '.tsv', '.txt']
EXCEL_SUFFIXES = ['.xlsx', '.xls', '.xlsm']


class TabularTreeImporter(HierarchyImporter):
    """
    表格树导入器

    配置项：
        indent_width: 每级缩进的空格数（默认2）
        name_column: 名称列，默认自动查找 name / 名称 / 节点，找不到用第一列
        level_column: 层级列，默认存在名为 level 的列时使用
        sheet_name: Excel 工作表（默认第一个）
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.indent_width = int(self.config.get('indent_width', 2))
        self.name_column = self.config.get('name_column')
        self.level_column = self.config.get('level_column')
        self.sheet_name = self.config.get('sheet_name', 0)

    def _validate_config(self):
        indent_width = self.config.get('indent_width', 2)
        if not isinstance(indent_width, int) or indent_width <= 0:
            raise TreeImportError(f"缩进宽度必须是正整数: {indent_width}")

    # ============ 抽象方法实现 ============

    def validate_file(self, file_path: str) -> bool:
        """验证文件"""
        if not os.path.exists(file_path):
            return False

        ext = Path(file_path).suffix.lower()
        return ext in CSV_SUFFIXES + EXCEL_SUFFIXES

    def extract_metadata(self, file_path: str) -> Dict[str, Any]:
        """提取文件元数据"""
        metadata = {
            'file_path': file_path,
            'file_name': Path(file_path).name,
            'import_time': datetime.now().isoformat(),
            'config': self.config
        }

        if os.path.exists(file_path):
            file_stat = os.stat(file_path)
            metadata.update({
                'file_size': file_stat.st_size,
                'modified_time': datetime.fromtimestamp(file_stat.st_mtime).isoformat()
            })

        return metadata

    def parse_data(self, file_path: str) -> List[Dict[str, Any]]:
        """解析文件为行列表"""
        if not self.validate_file(file_path):
            raise TreeImportError(f"无效的文件: {file_path}", source=file_path)

        rows = self.parse_frame(self.read_frame(file_path), source=file_path)
        self.stats['files_processed'] += 1
        logger.debug(f"解析 {file_path}: {len(rows)} 行")
        return rows

    # ============ pandas 读取 ============

    def read_frame(self, file_path: str) -> pd.DataFrame:
        """读取文件为DataFrame（所有列按字符串读取）"""
        ext = Path(file_path).suffix.lower()
        try:
            if ext in EXCEL_SUFFIXES:
                return pd.read_excel(file_path, sheet_name=self.sheet_name, dtype=str)
            sep = '\t' if ext == '.tsv' else ','
            return pd.read_csv(file_path, sep=sep, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as e:
            raise TreeImportError(f"读取文件失败: {e}", source=file_path)

    def parse_frame(self, frame: pd.DataFrame, source: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        解析DataFrame

        Returns:
            [{'row': int, 'raw_name': str, 'name': str, 'level': int}, ...]
        """
        if frame.empty or len(frame.columns) == 0:
            return []

        columns = [str(c) for c in frame.columns]
        frame = frame.copy()
        frame.columns = columns

        name_column = self.name_column or self._find_name_column(columns)
        if name_column not in columns:
            raise TreeImportError(f"未找到名称列: {name_column}", source=source)

        level_column = self.level_column
        if level_column is None and 'level' in columns and name_column != 'level':
            level_column = 'level'
        if level_column is not None and level_column not in columns:
            raise TreeImportError(f"未找到层级列: {level_column}", source=source)

        rows = []
        for idx, record in frame.iterrows():
            raw_value = record[name_column]
            raw_name = '' if pd.isna(raw_value) else str(raw_value)

            if level_column is not None:
                level_value = record[level_column]
                if pd.isna(level_value) or str(level_value).strip() == '':
                    self.stats['rows_skipped'] += 1
                    continue
                level = self._parse_level_value(level_value, idx, source)
                name = raw_name
            else:
                if not raw_name.strip():
                    self.stats['rows_skipped'] += 1
                    continue
                level = self._parse_level(raw_name)
                name = raw_name.strip()

            rows.append({
                'row': int(idx),
                'raw_name': raw_name,
                'name': name,
                'level': level,
            })
            self.stats['rows_parsed'] += 1

        return rows

    def import_frame(self, frame: pd.DataFrame, mutator) -> List[int]:
        """从已有DataFrame导入"""
        return self.load_into(mutator, self.convert_to_tree_nodes(self.parse_frame(frame)))

    # ============ 工具方法 ============

    def _find_name_column(self, columns: List[str]) -> str:
        """查找名称列"""
        for col in columns:
            if '节点' in col or '名称' in col or col.strip().lower() == 'name':
                return col

        return columns[0]

    def _parse_level(self, raw_name: str) -> int:
        """由前导空格解析层级"""
        expanded = raw_name.expandtabs(self.indent_width)
        leading_spaces = len(expanded) - len(expanded.lstrip(' '))
        return leading_spaces // self.indent_width

    def _parse_level_value(self, value: Any, row: int, source: Optional[str]) -> int:
        try:
            level = int(float(str(value).strip()))
        except ValueError:
            raise TreeImportError(f"无效的层级值: {value!r}", source=source, row=int(row))
        if level < 0:
            raise TreeImportError(f"层级不能为负数: {level}", source=source, row=int(row))
        return level
