"""
读写锁
多个读者可以同时持有共享锁；写者独占，且对持有者线程可重入
"""
import threading
from contextlib import contextmanager
from typing import Dict, Optional


class ReadWriteLock:
    """
    读写锁（写者优先）

    - 有写者等待时，新的读者会等待，避免写者饿死
    - 写锁可被持有线程重复获取
    - 持有写锁的线程获取读锁时直接通过
    - 读锁对持有者线程可重入，重入时不等待排队的写者
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._read_depth: Dict[int, int] = {}  # 线程ID -> 读锁重入深度
        self._writer: Optional[int] = None
        self._writer_depth = 0
        self._waiting_writers = 0

    # ========== 共享锁 ==========

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if me in self._read_depth:
                self._read_depth[me] += 1
                self._readers += 1
                return

            while self._writer is not None or self._waiting_writers > 0:
                self._cond.wait()
            self._readers += 1
            self._read_depth[me] = 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            depth = self._read_depth.get(me, 0)
            if depth <= 0:
                raise RuntimeError("释放了未持有的读锁")
            if depth == 1:
                del self._read_depth[me]
            else:
                self._read_depth[me] = depth - 1
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    # ========== 独占锁 ==========

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth += 1
                return

            self._waiting_writers += 1
            try:
                while self._writer is not None or self._readers > 0:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1

            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError("释放了未持有的写锁")
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._cond.notify_all()

    def is_write_locked_by_current_thread(self) -> bool:
        return self._writer == threading.get_ident()

    # ========== 上下文管理器 ==========

    @contextmanager
    def read_locked(self):
        """获取共享锁（已持有写锁时直接执行）"""
        if self.is_write_locked_by_current_thread():
            yield
            return

        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self):
        """获取独占锁"""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def __repr__(self) -> str:
        return (f"ReadWriteLock(readers={self._readers}, writer={self._writer}, "
                f"waiting_writers={self._waiting_writers})")
