"""
SQLite数据库存储实现
节点与父子关系分表保存，每次保存在一个数据库事务内完成
"""
import sqlite3
import threading
from typing import Dict, List, Any, Optional
from datetime import datetime
from pathlib import Path
from contextlib import contextmanager

from ..serializer import JSONSerializer
from .adapter import DataStoreAdapter
from .exceptions import StorageConnectionError, StorageOperationError


class SQLiteStore(DataStoreAdapter):
    """SQLite数据库存储实现"""

    def __init__(self, db_path: str, serializer=None):
        """
        初始化SQLite存储

        Args:
            db_path: 数据库文件路径
            serializer: 序列化器，默认为JSONSerializer
        """
        self.db_path = Path(db_path)
        self.serializer = serializer or JSONSerializer(indent=None)
        self._lock = threading.RLock()

        # 确保目录存在
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # 确保文件可写
        try:
            self.db_path.touch(exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(f"无法创建数据库文件: {e}", store_type="sqlite")

        # 初始化数据库
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """获取数据库连接（上下文管理器）"""
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0
        )
        conn.row_factory = sqlite3.Row  # 返回字典式行
        conn.execute("PRAGMA foreign_keys = ON")

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """初始化数据库表结构"""
        with self._get_connection() as conn:
            # 树表
            conn.execute("""
                CREATE TABLE IF NOT EXISTS trees (
                    tree_id TEXT PRIMARY KEY,
                    next_id INTEGER NOT NULL,
                    metadata TEXT,  -- JSON字符串
                    saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # 节点表
            conn.execute("""
                CREATE TABLE IF NOT EXISTS nodes (
                    tree_id TEXT NOT NULL,
                    node_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    PRIMARY KEY (tree_id, node_id),
                    FOREIGN KEY (tree_id) REFERENCES trees(tree_id) ON DELETE CASCADE
                )
            """)

            # 父子关系表，position 保存子节点顺序
            conn.execute("""
                CREATE TABLE IF NOT EXISTS edges (
                    tree_id TEXT NOT NULL,
                    parent_id INTEGER NOT NULL,
                    child_id INTEGER NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (tree_id, parent_id, position),
                    FOREIGN KEY (tree_id) REFERENCES trees(tree_id) ON DELETE CASCADE
                )
            """)

            # 创建索引
            conn.execute("CREATE INDEX IF NOT EXISTS idx_edges_child ON edges(tree_id, child_id)")

    def save_tree(self, tree_id: str, tree_data: Dict[str, Any]) -> bool:
        """保存树数据（整体覆盖）"""
        self._check_tree_data(tree_id, tree_data, "sqlite")
        nodes = tree_data.get('nodes', [])
        metadata_json = self.serializer.dumps(tree_data.get('metadata', {}))
        next_id = int(tree_data.get('next_id', 1))

        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("DELETE FROM edges WHERE tree_id = ?", (tree_id,))
                    conn.execute("DELETE FROM nodes WHERE tree_id = ?", (tree_id,))
                    conn.execute("""
                        INSERT OR REPLACE INTO trees (tree_id, next_id, metadata, saved_at)
                        VALUES (?, ?, ?, ?)
                    """, (tree_id, next_id, metadata_json, datetime.now().isoformat()))

                    conn.executemany(
                        "INSERT INTO nodes (tree_id, node_id, name) VALUES (?, ?, ?)",
                        [(tree_id, int(n['node_id']), n['name']) for n in nodes]
                    )
                    conn.executemany(
                        """
                        INSERT INTO edges (tree_id, parent_id, child_id, position)
                        VALUES (?, ?, ?, ?)
                        """,
                        [
                            (tree_id, int(n['node_id']), int(child_id), position)
                            for n in nodes
                            for position, child_id in enumerate(n.get('child_ids', []))
                        ]
                    )
            except sqlite3.Error as e:
                raise StorageOperationError(str(e), operation="save_tree", store_type="sqlite")

        return True

    def load_tree(self, tree_id: str) -> Optional[Dict[str, Any]]:
        """加载树数据"""
        with self._lock:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT * FROM trees WHERE tree_id = ?",
                    (tree_id,)
                ).fetchone()

                if not row:
                    return None

                nodes: Dict[int, Dict[str, Any]] = {}
                for node_row in conn.execute(
                    "SELECT node_id, name FROM nodes WHERE tree_id = ? ORDER BY node_id",
                    (tree_id,)
                ):
                    nodes[node_row['node_id']] = {
                        'node_id': node_row['node_id'],
                        'name': node_row['name'],
                        'child_ids': [],
                    }

                for edge in conn.execute(
                    """
                    SELECT parent_id, child_id FROM edges
                    WHERE tree_id = ? ORDER BY parent_id, position
                    """,
                    (tree_id,)
                ):
                    parent = nodes.get(edge['parent_id'])
                    if parent is not None:
                        parent['child_ids'].append(edge['child_id'])

                next_id = row['next_id']
                metadata_json = row['metadata']

        metadata = self.serializer.loads(metadata_json) if metadata_json else {}
        return {
            'tree_id': tree_id,
            'next_id': next_id,
            'nodes': list(nodes.values()),
            'metadata': metadata,
        }

    def delete_tree(self, tree_id: str) -> bool:
        """删除树（级联删除节点和父子关系）"""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("DELETE FROM trees WHERE tree_id = ?", (tree_id,))
                return cursor.rowcount > 0

    def exists_tree(self, tree_id: str) -> bool:
        """检查树是否存在"""
        with self._lock:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT 1 FROM trees WHERE tree_id = ?",
                    (tree_id,)
                ).fetchone()
                return row is not None

    def list_trees(self) -> List[Dict[str, Any]]:
        """列出所有树"""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    SELECT t.tree_id, t.saved_at, COUNT(n.node_id) AS node_count
                    FROM trees t
                    LEFT JOIN nodes n ON t.tree_id = n.tree_id
                    GROUP BY t.tree_id
                    ORDER BY t.tree_id
                """)
                return [
                    {
                        'tree_id': row['tree_id'],
                        'node_count': row['node_count'],
                        'saved_at': row['saved_at'],
                    }
                    for row in cursor.fetchall()
                ]

    def close(self):
        """关闭存储（每次操作使用独立连接，无需处理）"""
        pass

    def clear(self):
        """清空所有数据（测试用）"""
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM edges")
                conn.execute("DELETE FROM nodes")
                conn.execute("DELETE FROM trees")

    def __str__(self):
        return f"SQLiteStore({self.db_path})"
