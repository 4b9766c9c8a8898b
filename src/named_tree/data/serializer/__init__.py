"""
序列化模块
负责将树数据转换为可存储格式
"""

from .base import Serializer, Deserializer
from .json_serializer import JSONSerializer, DateTimeEncoder

__all__ = [
    'Serializer',
    'Deserializer',
    'JSONSerializer',
    'DateTimeEncoder',
]
