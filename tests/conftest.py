"""
pytest配置文件
用于设置测试环境和共享fixtures
"""
import sys
import os

import pytest

# 将src目录添加到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from named_tree.core.node import NodeStore
from named_tree.core.tree import TreeBuilder, TreeMutator, TraversalEngine


@pytest.fixture
def store():
    """空的节点存储"""
    return NodeStore()


@pytest.fixture
def builder(store):
    return TreeBuilder(store)


@pytest.fixture
def mutator(store):
    return TreeMutator(store)


@pytest.fixture
def traversal():
    return TraversalEngine()


@pytest.fixture
def sample_tree(store, mutator):
    """
    构建示例树并返回名称到ID的映射

        root
          a
            a1
            a2
          b
            b1
    """
    ids = {}
    ids['root'] = store.create('root')
    ids['a'] = mutator.create_child(ids['root'], 'a')
    ids['a1'] = mutator.create_child(ids['a'], 'a1')
    ids['a2'] = mutator.create_child(ids['a'], 'a2')
    ids['b'] = mutator.create_child(ids['root'], 'b')
    ids['b1'] = mutator.create_child(ids['b'], 'b1')
    return ids
