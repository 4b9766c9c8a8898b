"""
测试树构建器与树视图
"""
import threading

import pytest

from named_tree.core.node import TreeNode
from named_tree.core.tree import TreeView
from named_tree.exceptions import (
    NodeNotFoundError, CycleDetectedError, DanglingReferenceError, AlreadyChildError
)


class TestBuild:
    """测试单棵树构建"""

    def test_build_structure(self, builder, sample_tree):
        view = builder.build(sample_tree['root'])
        assert view.name == "root"
        assert view.child_ids == (sample_tree['a'], sample_tree['b'])
        assert view.children[0].child_ids == (sample_tree['a1'], sample_tree['a2'])
        assert view.size() == 6
        assert view.height() == 2

    def test_build_subtree(self, builder, sample_tree):
        view = builder.build(sample_tree['b'])
        assert view.size() == 2
        assert view.children[0].name == "b1"

    def test_build_leaf(self, store, builder):
        node_id = store.create("alone")
        view = builder.build(node_id)
        assert view.is_leaf()
        assert view.height() == 0

    def test_build_missing(self, builder):
        with pytest.raises(NodeNotFoundError):
            builder.build(1)

    def test_view_is_snapshot(self, store, builder, mutator, sample_tree):
        view = builder.build(sample_tree['root'])
        mutator.delete_subtree(sample_tree['a'])
        store.set_name(sample_tree['root'], "changed")

        assert view.name == "root"
        assert view.size() == 6
        assert builder.build(sample_tree['root']).size() == 3

    def test_view_is_immutable(self, builder, sample_tree):
        view = builder.build(sample_tree['root'])
        with pytest.raises(AttributeError):
            view.name = "x"

    def test_view_find_and_dict(self, builder, sample_tree):
        view = builder.build(sample_tree['root'])
        assert view.find(sample_tree['a2']).name == "a2"
        assert view.find(999) is None

        data = view.to_dict()
        assert data['name'] == "root"
        assert [c['name'] for c in data['children']] == ["a", "b"]
        assert data['children'][0]['children'][1]['name'] == "a2"

    def test_deep_tree_no_recursion_limit(self, store, mutator, builder):
        root = store.create("0")
        current = root
        for depth in range(1, 2000):
            current = mutator.create_child(current, str(depth))

        view = builder.build(root)
        assert view.height() == 1999
        assert view.size() == 2000


class TestBuildCorruptData:
    """测试损坏数据的检测（绕过校验直接加载）"""

    def test_cycle(self, store, builder):
        store.load_records([
            TreeNode(1, "a", [2]),
            TreeNode(2, "b", [3]),
            TreeNode(3, "c", [1]),
        ], validate=False)

        with pytest.raises(CycleDetectedError) as exc_info:
            builder.build(1)
        assert exc_info.value.path == [1, 2, 3, 1]

    def test_self_reference(self, store, builder):
        store.load_records([TreeNode(1, "a", [1])], validate=False)
        with pytest.raises(CycleDetectedError) as exc_info:
            builder.build(1)
        assert exc_info.value.path == [1, 1]

    def test_dangling(self, store, builder):
        store.load_records([TreeNode(1, "a", [2, 7]), TreeNode(2, "b")], validate=False)
        with pytest.raises(DanglingReferenceError) as exc_info:
            builder.build(1)
        assert exc_info.value.node_id == 7
        assert exc_info.value.parent_id == 1

    def test_shared_child(self, store, builder):
        store.load_records([
            TreeNode(1, "r", [2, 3]),
            TreeNode(2, "x", [4]),
            TreeNode(3, "y", [4]),
            TreeNode(4, "shared"),
        ], validate=False)
        with pytest.raises(AlreadyChildError):
            builder.build(1)

    def test_forest_detects_rootless_cycle(self, store, builder):
        store.load_records([
            TreeNode(1, "ok"),
            TreeNode(2, "a", [3]),
            TreeNode(3, "b", [2]),
        ], validate=False)
        with pytest.raises(CycleDetectedError) as exc_info:
            builder.build_forest()
        path = exc_info.value.path
        assert path[0] == path[-1]
        assert set(path) == {2, 3}


class TestBuildForest:
    """测试森林构建"""

    def test_forest_order(self, store, builder, mutator):
        r1 = store.create("r1")
        r2 = store.create("r2")
        mutator.create_child(r1, "c")
        r3 = store.create("r3")

        views = builder.build_forest()
        assert [v.node_id for v in views] == [r1, r2, r3]
        assert builder.find_roots() == [r1, r2, r3]

    def test_empty_forest(self, builder):
        assert builder.build_forest() == []

    def test_concurrent_builds(self, store, builder, sample_tree):
        results = []
        errors = []

        def worker():
            try:
                for _ in range(50):
                    results.append(builder.build(sample_tree['root']).size())
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert results == [6] * 200


def test_tree_view_equality():
    leaf = TreeView(2, "leaf")
    assert TreeView(1, "root", (leaf,)) == TreeView(1, "root", (TreeView(2, "leaf"),))


def make_chain(depth, leaf_name="leaf"):
    """自底向上构建单链视图"""
    view = TreeView(depth, leaf_name)
    for node_id in range(depth - 1, -1, -1):
        view = TreeView(node_id, str(node_id), (view,))
    return view


def test_tree_view_inequality():
    base = TreeView(1, "root", (TreeView(2, "a"), TreeView(3, "b")))
    assert base != TreeView(1, "root", (TreeView(3, "b"), TreeView(2, "a")))
    assert base != TreeView(1, "root", (TreeView(2, "a"),))
    assert base != TreeView(1, "renamed", base.children)
    assert base != "root"


def test_deep_view_equality_and_hash():
    left = make_chain(5000)
    right = make_chain(5000)
    assert left == right
    assert hash(left) == hash(right)
    assert len({left, right}) == 1

    # 只在最深处不同
    assert left != make_chain(5000, leaf_name="other")


def test_deep_built_views_compare(store, mutator, builder):
    root = store.create("0")
    current = root
    for depth in range(1, 1500):
        current = mutator.create_child(current, str(depth))

    assert builder.build(root) == builder.build(root)
    store.set_name(current, "changed")
    first = builder.build(root)
    store.set_name(current, "again")
    assert first != builder.build(root)
