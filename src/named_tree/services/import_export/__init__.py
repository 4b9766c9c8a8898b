"""
导入导出服务
"""

from .base_importer import HierarchyImporter
from .tabular_importer import TabularTreeImporter
from .tabular_exporter import TabularTreeExporter

__all__ = ['HierarchyImporter', 'TabularTreeImporter', 'TabularTreeExporter']
