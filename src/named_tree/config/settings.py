"""
系统配置设置
"""
import json
import os
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

from ..exceptions import ConfigError


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_STORAGE_BACKENDS = ["memory", "json", "sqlite"]


@dataclass
class SystemSettings:
    """
    系统配置类
    使用dataclass确保配置的类型安全，构造时即完成校验
    """

    # 系统基本配置
    system_name: str = "named_tree"
    version: str = "1.0.0"

    # 日志配置
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_logging: bool = True

    # 存储配置
    storage_backend: str = "memory"  # memory, json, sqlite
    storage_path: Optional[str] = None
    default_tree_id: str = "default"
    validate_on_load: bool = True

    # ID分配配置
    id_start: int = 1
    id_limit: Optional[int] = None  # None表示不限制

    # 导入配置
    import_indent_width: int = 2

    def __post_init__(self):
        """初始化后处理，验证配置"""
        self._validate_settings()
        self._set_defaults()

    def _validate_settings(self):
        """验证配置值"""
        # 验证日志级别
        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigError(
                message=f"无效的日志级别: {self.log_level}",
                config_key="log_level"
            )
        self.log_level = self.log_level.upper()

        # 验证存储后端
        if self.storage_backend not in VALID_STORAGE_BACKENDS:
            raise ConfigError(
                message=f"不支持的存储类型: {self.storage_backend}",
                config_key="storage_backend"
            )

        # 验证ID范围
        if not isinstance(self.id_start, int) or self.id_start < 0:
            raise ConfigError(
                message=f"起始ID必须是非负整数: {self.id_start}",
                config_key="id_start"
            )

        if self.id_limit is not None and self.id_limit < self.id_start:
            raise ConfigError(
                message=f"ID上限不能小于起始ID: {self.id_limit} < {self.id_start}",
                config_key="id_limit"
            )

        if self.import_indent_width <= 0:
            raise ConfigError(
                message=f"缩进宽度必须大于0: {self.import_indent_width}",
                config_key="import_indent_width"
            )

    def _set_defaults(self):
        """设置默认值"""
        # 设置默认存储路径
        if self.storage_backend in ["json", "sqlite"] and not self.storage_path:
            self.storage_path = os.path.join(
                os.getcwd(),
                "data",
                f"{self.system_name.lower().replace(' ', '_')}.{'json' if self.storage_backend == 'json' else 'db'}"
            )

        # 确保目录存在
        if self.storage_path:
            directory = os.path.dirname(self.storage_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SystemSettings':
        """从字典创建配置"""
        # 过滤无效的配置键
        valid_keys = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_keys}

        return cls(**filtered_config)

    @classmethod
    def from_file(cls, file_path: str) -> 'SystemSettings':
        """从JSON配置文件创建配置"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"配置文件不存在: {file_path}", config_key="config_file")
        except json.JSONDecodeError as e:
            raise ConfigError(f"配置文件格式错误: {e}", config_key="config_file")

        if not isinstance(config_dict, dict):
            raise ConfigError("配置文件顶层必须是对象", config_key="config_file")

        return cls.from_dict(config_dict)
