# -*- coding: utf-8 -*-
"""
ID提供者实现 - 管理节点ID的递增分配
"""
import threading
from typing import Optional

from ...interfaces import IIdProvider
from ...exceptions import IdAllocationError


class IncrementalIdProvider(IIdProvider):
    """
    递增ID提供者

    按 start, start+1, start+2 ... 分配ID；已分配或已跳过的ID不会再次分配。
    例如删除节点 2 之后，下一次仍然分配 4 而不是 2。
    """

    def __init__(self, start: int = 1, limit: Optional[int] = None):
        """
        初始化ID提供者

        Args:
            start: 第一个分配的ID
            limit: 允许分配的最大ID（含），None表示不限制
        """
        if start < 0:
            raise ValueError(f"起始ID必须是非负整数: {start}")
        if limit is not None and limit < start:
            raise ValueError(f"ID上限不能小于起始ID: {limit} < {start}")

        self._start = start
        self._limit = limit
        self._next = start
        self._lock = threading.Lock()

    def allocate(self) -> int:
        """分配新ID"""
        with self._lock:
            if self._limit is not None and self._next > self._limit:
                raise IdAllocationError(reason=f"达到ID上限: {self._limit}")

            node_id = self._next
            self._next += 1
            return node_id

    def peek_next(self) -> int:
        """下一次将要分配的ID"""
        with self._lock:
            return self._next

    def advance_past(self, node_id: int) -> None:
        """跳过node_id及之前的所有ID"""
        with self._lock:
            if node_id >= self._next:
                self._next = node_id + 1

    @property
    def start(self) -> int:
        return self._start

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    def __repr__(self) -> str:
        return f"IncrementalIdProvider(next={self._next}, limit={self._limit})"
