"""
测试遍历引擎
"""
import pytest

from named_tree.core.tree import TreeView, TraversalEngine


def make_view():
    """
        1
          2
            4
            5
          3
            6
    """
    return TreeView(1, "r", (
        TreeView(2, "a", (TreeView(4, "a1"), TreeView(5, "a2"))),
        TreeView(3, "b", (TreeView(6, "b1"),)),
    ))


class TestTraversalEngine:
    """测试各种遍历顺序"""

    def test_depth_first(self, traversal):
        assert traversal.depth_first(make_view()).ids() == [1, 2, 4, 5, 3, 6]

    def test_breadth_first(self, traversal):
        assert traversal.breadth_first(make_view()).ids() == [1, 2, 3, 4, 5, 6]

    def test_post_order(self, traversal):
        assert traversal.post_order(make_view()).ids() == [4, 5, 2, 6, 3, 1]

    def test_names(self, traversal):
        assert traversal.depth_first(make_view()).names() == ["r", "a", "a1", "a2", "b", "b1"]

    def test_single_node(self, traversal):
        view = TreeView(7, "solo")
        assert traversal.depth_first(view).ids() == [7]
        assert traversal.breadth_first(view).ids() == [7]

    def test_restartable(self, traversal):
        seq = traversal.depth_first(make_view())
        first = [v.node_id for v in seq]
        second = [v.node_id for v in seq]
        assert first == second == [1, 2, 4, 5, 3, 6]

    def test_lazy(self, traversal):
        iterator = iter(traversal.breadth_first(make_view()))
        assert next(iterator).node_id == 1
        assert next(iterator).node_id == 2

    def test_walk_depth_and_parent(self, traversal):
        walked = [(depth, parent, view.node_id) for depth, parent, view in traversal.walk(make_view())]
        assert walked == [
            (0, None, 1),
            (1, 1, 2),
            (2, 2, 4),
            (2, 2, 5),
            (1, 1, 3),
            (2, 3, 6),
        ]

    def test_traverse_by_name(self, traversal):
        assert traversal.traverse(make_view(), "breadth_first").ids() == [1, 2, 3, 4, 5, 6]
        with pytest.raises(ValueError):
            traversal.traverse(make_view(), "sideways")

    def test_built_from_store(self, builder, traversal, sample_tree):
        view = builder.build(sample_tree['root'])
        names = traversal.depth_first(view).names()
        assert names == ["root", "a", "a1", "a2", "b", "b1"]
        assert traversal.breadth_first(view).names() == ["root", "a", "b", "a1", "a2", "b1"]

    def test_size_matches_traversal(self, traversal):
        view = make_view()
        assert len(traversal.depth_first(view).ids()) == view.size()


def test_engine_orders():
    assert set(TraversalEngine.ORDERS) == {"depth_first", "breadth_first", "post_order"}
