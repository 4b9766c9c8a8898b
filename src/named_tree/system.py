"""
命名树存储引擎主入口
集成节点存储、树构建、树修改、遍历、持久化和导入导出，提供完整的管理接口
"""

import logging
from typing import Dict, List, Optional, Any, Set, Union
from datetime import datetime

from .exceptions import TreeNotFoundError
from .config.settings import SystemSettings
from .config.validator import ConfigValidator

from .core.ids import IncrementalIdProvider
from .core.node import NodeStore, TreeNode
from .core.tree import TreeView, TreeBuilder, TreeMutator, TraversalEngine, Traversal
from .data.storage import DataStoreAdapter, create_store
from .services.import_export import TabularTreeImporter, TabularTreeExporter


class NamedTreeSystem:
    """
    命名树系统主类

    一个系统实例对应一个 NodeStore；持久化时以 tree_id 为键保存到存储后端。
    """

    def __init__(
            self,
            config: Optional[Dict[str, Any]] = None,
            storage: Optional[DataStoreAdapter] = None
    ):
        """
        初始化系统

        Args:
            config: 系统配置字典
            storage: 存储适配器（默认按配置的 storage_backend 创建）
        """
        # 加载配置
        self.validator = ConfigValidator()
        if config:
            self.validator.validate_system_config({**SystemSettings().to_dict(), **config})
        self.settings = SystemSettings.from_dict(config) if config else SystemSettings()

        # 初始化日志
        self._setup_logging()
        self.logger = logging.getLogger(__name__)

        # 存储适配器
        self._storage = storage or self._create_storage()
        self.logger.info(f"使用存储引擎: {self._storage.__class__.__name__}")

        # 核心组件
        self._store = NodeStore(IncrementalIdProvider(
            start=self.settings.id_start,
            limit=self.settings.id_limit
        ))
        self._builder = TreeBuilder(self._store)
        self._mutator = TreeMutator(self._store)
        self._traversal = TraversalEngine()

        # 导入导出
        self._importer_config = {'indent_width': self.settings.import_indent_width}
        self._exporter = TabularTreeExporter(self._traversal, self.settings.import_indent_width)

        self._start_time = datetime.now()
        self.logger.info(f"{self.settings.system_name} 初始化完成")

    def _setup_logging(self):
        """配置日志系统"""
        if not self.settings.enable_logging:
            return

        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if self.settings.log_file:
            handlers.append(logging.FileHandler(self.settings.log_file, encoding='utf-8'))

        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            format=self.settings.log_format,
            handlers=handlers
        )

    def _create_storage(self) -> DataStoreAdapter:
        """按配置创建存储后端"""
        backend = self.settings.storage_backend
        if backend == 'json':
            return create_store('json', file_path=self.settings.storage_path)
        if backend == 'sqlite':
            return create_store('sqlite', db_path=self.settings.storage_path)
        return create_store('memory')

    # ========== 组件访问 ==========

    @property
    def store(self) -> NodeStore:
        return self._store

    @property
    def builder(self) -> TreeBuilder:
        return self._builder

    @property
    def mutator(self) -> TreeMutator:
        return self._mutator

    @property
    def traversal(self) -> TraversalEngine:
        return self._traversal

    @property
    def storage(self) -> DataStoreAdapter:
        return self._storage

    # ========== 节点管理 ==========

    def create_node(self, name: str, parent_id: Optional[int] = None, index: Optional[int] = None) -> int:
        """
        创建节点

        Args:
            name: 节点名称
            parent_id: 父节点ID，None表示创建根节点
            index: 在父节点子列表中的位置

        Returns:
            新节点ID
        """
        try:
            if parent_id is None:
                node_id = self._store.create(name)
            else:
                node_id = self._mutator.create_child(parent_id, name, index)
        except Exception as e:
            self.logger.error(f"创建节点失败: {name!r}, 错误: {e}")
            raise

        self.logger.info(f"创建节点成功: {node_id} ({name!r})")
        return node_id

    def get_node(self, node_id: int) -> TreeNode:
        """获取节点"""
        return self._store.get(node_id)

    def exists(self, node_id: int) -> bool:
        return self._store.exists(node_id)

    def all_ids(self) -> Set[int]:
        return self._store.all_ids()

    def rename(self, node_id: int, new_name: str) -> None:
        """重命名节点"""
        self._mutator.rename(node_id, new_name)
        self.logger.info(f"重命名节点: {node_id} -> {new_name!r}")

    # ========== 结构修改 ==========

    def insert_child(self, parent_id: int, child_id: int, index: Optional[int] = None) -> None:
        try:
            self._mutator.insert_child(parent_id, child_id, index)
        except Exception as e:
            self.logger.warning(f"插入子节点失败: {child_id} -> {parent_id}, 错误: {e}")
            raise

    def remove_child(self, parent_id: int, child_id: int) -> None:
        try:
            self._mutator.remove_child(parent_id, child_id)
        except Exception as e:
            self.logger.warning(f"移除子节点失败: {child_id} <- {parent_id}, 错误: {e}")
            raise

    def move_subtree(self, child_id: int, new_parent_id: int, index: Optional[int] = None) -> None:
        try:
            self._mutator.move_subtree(child_id, new_parent_id, index)
        except Exception as e:
            self.logger.warning(f"移动子树失败: {child_id} -> {new_parent_id}, 错误: {e}")
            raise

    def delete_subtree(self, root_id: int) -> List[int]:
        """删除子树，返回被删除的节点ID"""
        try:
            removed = self._mutator.delete_subtree(root_id)
        except Exception as e:
            self.logger.warning(f"删除子树失败: {root_id}, 错误: {e}")
            raise

        self.logger.info(f"删除子树成功: {root_id}, 共 {len(removed)} 个节点")
        return removed

    # ========== 构建与遍历 ==========

    def build(self, root_id: int) -> TreeView:
        return self._builder.build(root_id)

    def build_forest(self) -> List[TreeView]:
        return self._builder.build_forest()

    def depth_first(self, root: Union[int, TreeView]) -> Traversal:
        """前序遍历；传入节点ID时先构建视图"""
        return self._traversal.depth_first(self._as_view(root))

    def breadth_first(self, root: Union[int, TreeView]) -> Traversal:
        """层序遍历；传入节点ID时先构建视图"""
        return self._traversal.breadth_first(self._as_view(root))

    def _as_view(self, root: Union[int, TreeView]) -> TreeView:
        return root if isinstance(root, TreeView) else self._builder.build(root)

    # ========== 持久化 ==========

    def save(self, tree_id: Optional[str] = None) -> Dict[str, Any]:
        """
        保存全部节点到存储

        Returns:
            保存的元数据
        """
        tree_id = tree_id or self.settings.default_tree_id
        try:
            tree_data = self._store.save_to_storage(self._storage, tree_id)
        except Exception as e:
            self.logger.error(f"保存树失败: {tree_id}, 错误: {e}")
            raise

        return {"tree_id": tree_id, **tree_data['metadata']}

    def load(self, tree_id: Optional[str] = None) -> int:
        """
        从存储加载，整体替换当前节点

        Returns:
            加载的节点数
        """
        tree_id = tree_id or self.settings.default_tree_id
        tree_data = self._storage.load_tree(tree_id)
        if not tree_data:
            raise TreeNotFoundError(tree_id)

        try:
            count = self._store.load_tree_data(tree_data, validate=self.settings.validate_on_load)
        except Exception as e:
            self.logger.error(f"加载树失败: {tree_id}, 错误: {e}")
            raise

        self.logger.info(f"加载树成功: {tree_id}, 共 {count} 个节点")
        return count

    def list_saved_trees(self) -> List[Dict[str, Any]]:
        return self._storage.list_trees()

    def delete_saved_tree(self, tree_id: str) -> bool:
        deleted = self._storage.delete_tree(tree_id)
        if deleted:
            self.logger.info(f"删除已保存的树: {tree_id}")
        return deleted

    # ========== 导入导出 ==========

    def import_table(self, file_path: str, config: Optional[Dict[str, Any]] = None) -> List[int]:
        """
        从 CSV / Excel 导入，返回新建的根节点ID
        """
        importer = TabularTreeImporter({**self._importer_config, **(config or {})})
        try:
            root_ids = importer.import_into(file_path, self._mutator)
        except Exception as e:
            self.logger.error(f"导入失败: {file_path}, 错误: {e}")
            raise

        self.logger.info(f"导入成功: {file_path}, 根节点 {root_ids}")
        return root_ids

    def export_table(self, file_path: str, root_id: Optional[int] = None) -> int:
        """
        导出到 CSV / Excel

        Args:
            root_id: 只导出该子树，None表示导出整个森林

        Returns:
            导出的节点数
        """
        views = [self.build(root_id)] if root_id is not None else self.build_forest()
        return self._exporter.export(views, file_path)

    def render_text(self, root_id: Optional[int] = None) -> str:
        """渲染为缩进文本"""
        views = [self.build(root_id)] if root_id is not None else self.build_forest()
        return self._exporter.to_indented_text(views)

    # ========== 系统状态 ==========

    def get_system_info(self) -> Dict[str, Any]:
        """获取系统信息"""
        return {
            "system_name": self.settings.system_name,
            "version": self.settings.version,
            "start_time": self._start_time.isoformat(),
            "uptime": str(datetime.now() - self._start_time),
            "node_count": len(self._store),
            "root_count": len(self._store.root_ids()),
            "next_id": self._store.id_provider.peek_next(),
            "storage": self._storage.__class__.__name__,
            "settings": {
                "storage_backend": self.settings.storage_backend,
                "default_tree_id": self.settings.default_tree_id,
                "log_level": self.settings.log_level
            }
        }

    def close(self) -> None:
        """关闭存储"""
        self._storage.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"NamedTreeSystem(nodes={len(self._store)}, storage={self._storage.__class__.__name__})"
