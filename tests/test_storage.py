#!/usr/bin/env python3
"""
测试存储模块
三种存储实现使用相同的树数据格式
"""
import json

import pytest

from named_tree.data.storage import (
    MemoryStore, JSONStore, SQLiteStore, StorageContext, create_store
)
from named_tree.data.serializer import JSONSerializer
from named_tree.core.node import NodeStore
from named_tree.core.tree import TreeMutator
from named_tree.exceptions import StorageError, SerializationError


def create_test_tree(tree_id="test_tree"):
    """创建测试树数据"""
    return {
        "tree_id": tree_id,
        "next_id": 5,
        "nodes": [
            {"node_id": 1, "name": "根节点", "child_ids": [3, 2]},
            {"node_id": 2, "name": "子节点B", "child_ids": []},
            {"node_id": 3, "name": "子节点A", "child_ids": [4]},
            {"node_id": 4, "name": "", "child_ids": []},
        ],
        "metadata": {"node_count": 4, "root_count": 1, "saved_at": "2024-01-01T00:00:00"},
    }


class TestStorageAdapters:
    """测试所有存储实现"""

    @pytest.fixture(params=['memory', 'json', 'sqlite'])
    def storage(self, request, tmp_path):
        """参数化测试三种存储实现"""
        if request.param == 'memory':
            return MemoryStore()
        elif request.param == 'json':
            return JSONStore(str(tmp_path / "trees.json"))
        else:  # sqlite
            return SQLiteStore(str(tmp_path / "trees.db"))

    def test_save_and_load(self, storage):
        assert storage.save_tree("t1", create_test_tree("t1"))
        loaded = storage.load_tree("t1")

        assert loaded["tree_id"] == "t1"
        assert loaded["next_id"] == 5
        nodes = {n["node_id"]: n for n in loaded["nodes"]}
        assert nodes[1]["child_ids"] == [3, 2]
        assert nodes[3]["child_ids"] == [4]
        assert nodes[4]["name"] == ""
        assert loaded["metadata"]["node_count"] == 4

    def test_load_missing(self, storage):
        assert storage.load_tree("nope") is None
        assert not storage.exists_tree("nope")

    def test_overwrite(self, storage):
        storage.save_tree("t1", create_test_tree("t1"))
        smaller = create_test_tree("t1")
        smaller["nodes"] = [{"node_id": 1, "name": "只剩根", "child_ids": []}]
        storage.save_tree("t1", smaller)

        loaded = storage.load_tree("t1")
        assert len(loaded["nodes"]) == 1
        assert loaded["nodes"][0]["name"] == "只剩根"

    def test_list_and_delete(self, storage):
        storage.save_tree("b", create_test_tree("b"))
        storage.save_tree("a", create_test_tree("a"))

        listed = storage.list_trees()
        assert [t["tree_id"] for t in listed] == ["a", "b"]
        assert listed[0]["node_count"] == 4

        assert storage.delete_tree("a")
        assert not storage.delete_tree("a")
        assert [t["tree_id"] for t in storage.list_trees()] == ["b"]

    def test_clear(self, storage):
        storage.save_tree("t1", create_test_tree("t1"))
        storage.clear()
        assert storage.list_trees() == []

    def test_loaded_copy_is_independent(self, storage):
        storage.save_tree("t1", create_test_tree("t1"))
        loaded = storage.load_tree("t1")
        loaded["nodes"].clear()
        assert len(storage.load_tree("t1")["nodes"]) == 4

    def test_node_store_round_trip(self, storage):
        store = NodeStore()
        mutator = TreeMutator(store)
        root = store.create("root")
        mutator.create_child(root, "x")
        mutator.create_child(root, "y", 0)
        store.create("second root")

        store.save_to_storage(storage, "round")
        restored = NodeStore.load_from_storage(storage, "round")

        assert restored.to_dict() == store.to_dict()
        assert restored.create("fresh") == store.id_provider.peek_next()

    def test_invalid_tree_data(self, storage):
        with pytest.raises(StorageError):
            storage.save_tree("", create_test_tree())

    def test_context_manager(self, storage):
        with StorageContext(storage) as ctx:
            ctx.save_tree("ctx", create_test_tree("ctx"))
            assert ctx.exists_tree("ctx")


class TestJSONStore:
    """JSON存储特有行为"""

    def test_file_contents(self, tmp_path):
        path = tmp_path / "nested" / "trees.json"
        store = JSONStore(str(path))
        store.save_tree("t1", create_test_tree("t1"))

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert "t1" in data["trees"]
        assert data["trees"]["t1"]["nodes"][0]["name"] == "根节点"

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "trees.json")
        JSONStore(path).save_tree("t1", create_test_tree("t1"))
        assert JSONStore(path).exists_tree("t1")

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{broken", encoding="utf-8")
        store = JSONStore(str(path))
        with pytest.raises(StorageError):
            store.load_tree("t1")


class TestSQLiteStore:
    """SQLite存储特有行为"""

    def test_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "trees.db")
        SQLiteStore(path).save_tree("t1", create_test_tree("t1"))

        loaded = SQLiteStore(path).load_tree("t1")
        assert {n["node_id"] for n in loaded["nodes"]} == {1, 2, 3, 4}


class TestFactoryAndSerializer:
    """测试工厂方法与序列化器"""

    def test_create_store(self, tmp_path):
        assert isinstance(create_store('memory'), MemoryStore)
        assert isinstance(create_store('JSON', file_path=str(tmp_path / "a.json")), JSONStore)
        assert isinstance(create_store('sqlite', db_path=str(tmp_path / "a.db")), SQLiteStore)
        with pytest.raises(ValueError):
            create_store('redis')

    def test_serializer_round_trip(self, tmp_path):
        serializer = JSONSerializer()
        data = create_test_tree()
        assert serializer.loads(serializer.dumps(data)) == data

        path = tmp_path / "tree.json"
        serializer.save_to_file(data, str(path))
        assert serializer.load_from_file(str(path)) == data

    def test_serializer_errors(self):
        serializer = JSONSerializer()
        with pytest.raises(SerializationError):
            serializer.loads("{not json")
