"""
JSON序列化器
使用标准json模块进行序列化
"""
import json
from datetime import datetime, date
from pathlib import Path
from typing import Any, Dict

from .base import Serializer, Deserializer
from ...exceptions import SerializationError


class DateTimeEncoder(json.JSONEncoder):
    """处理日期时间、集合以及带 to_dict() 的对象"""

    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj)
        elif hasattr(obj, 'to_dict'):
            # 支持 TreeNode / TreeView 等自定义对象
            return obj.to_dict()

        return super().default(obj)


class JSONSerializer(Serializer, Deserializer):
    """JSON序列化器"""

    def __init__(self,
                 ensure_ascii: bool = False,
                 indent: int = 2,
                 sort_keys: bool = True):
        """
        初始化JSON序列化器

        Args:
            ensure_ascii: 是否确保ASCII编码
            indent: 缩进空格数，None表示紧凑输出
            sort_keys: 是否按键排序
        """
        self.ensure_ascii = ensure_ascii
        self.indent = indent
        self.sort_keys = sort_keys

    def dumps(self, obj: Any) -> str:
        """序列化为JSON字符串"""
        try:
            return json.dumps(
                obj,
                ensure_ascii=self.ensure_ascii,
                indent=self.indent,
                sort_keys=self.sort_keys,
                cls=DateTimeEncoder
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"JSON序列化失败: {e}", data_type=type(obj).__name__)

    def loads(self, text: str) -> Any:
        """从JSON字符串反序列化"""
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"JSON反序列化失败: {e}", data_type="str")

    def serialize(self, obj: Any) -> bytes:
        """序列化为字节流"""
        return self.dumps(obj).encode('utf-8')

    def serialize_to_dict(self, obj: Any) -> Dict:
        """序列化为字典"""
        if obj is None:
            return {}
        if hasattr(obj, 'to_dict') and callable(obj.to_dict):
            return obj.to_dict()
        if isinstance(obj, dict):
            return self.loads(self.dumps(obj))
        raise SerializationError(f"无法转换为字典: {type(obj).__name__}", data_type=type(obj).__name__)

    def deserialize(self, data: bytes) -> Any:
        """从字节流反序列化"""
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SerializationError(f"JSON反序列化失败: {e}", data_type="bytes")
        return self.loads(text)

    def save_to_file(self, obj: Any, filepath: str) -> None:
        """保存对象到文件"""
        data = self.serialize(obj)
        with open(filepath, 'wb') as f:
            f.write(data)

    def load_from_file(self, filepath: str) -> Any:
        """从文件加载对象"""
        with open(filepath, 'rb') as f:
            data = f.read()
        return self.deserialize(data)
