"""
数据模块
包含存储后端与序列化
"""

from .serializer import JSONSerializer
from .storage import (
    DataStoreAdapter,
    StorageContext,
    MemoryStore,
    JSONStore,
    SQLiteStore,
    create_store
)

__all__ = [
    'JSONSerializer',
    'DataStoreAdapter',
    'StorageContext',
    'MemoryStore',
    'JSONStore',
    'SQLiteStore',
    'create_store'
]
