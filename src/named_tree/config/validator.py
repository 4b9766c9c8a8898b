"""
配置验证器
"""
import logging
from typing import Dict, Any

from ..exceptions import ValidationError, ConfigError
from .settings import VALID_LOG_LEVELS, VALID_STORAGE_BACKENDS


class ConfigValidator:
    """配置验证器"""

    def validate_system_config(self, config: Dict[str, Any]) -> bool:
        """验证系统配置"""
        try:
            # 验证必需字段
            required_fields = ['system_name', 'storage_backend']
            for field in required_fields:
                if field not in config:
                    raise ValidationError(
                        message=f"缺少必需配置项: {field}",
                        field=field,
                        reason="required_field_missing"
                    )

            # 验证存储后端
            if config.get('storage_backend') not in VALID_STORAGE_BACKENDS:
                raise ValidationError(
                    message=f"无效的存储后端: {config.get('storage_backend')}",
                    field="storage_backend",
                    value=config.get('storage_backend'),
                    reason=f"必须是 {VALID_STORAGE_BACKENDS} 之一"
                )

            # 验证日志级别
            if 'log_level' in config:
                self.validate_log_level(config['log_level'])

            # 验证日志格式
            if 'log_format' in config:
                self.validate_log_format(config['log_format'])

            return True

        except ValidationError:
            raise
        except Exception as e:
            raise ConfigError(f"配置验证失败: {str(e)}")

    def validate_log_level(self, log_level: str) -> bool:
        """验证日志级别"""
        if not isinstance(log_level, str) or log_level.upper() not in VALID_LOG_LEVELS:
            raise ValidationError(
                message=f"无效的日志级别: {log_level}",
                field="log_level",
                value=log_level,
                reason=f"必须是 {VALID_LOG_LEVELS} 之一"
            )
        return True

    def validate_log_format(self, log_format: str) -> bool:
        """验证日志格式字符串"""
        if not isinstance(log_format, str):
            raise ValidationError(
                message="日志格式必须是字符串",
                field="log_format",
                value=log_format,
                reason="invalid_type"
            )

        try:
            # 尝试用该格式格式化一条日志记录
            record = logging.LogRecord("validator", logging.INFO, __file__, 0, "probe", None, None)
            logging.Formatter(log_format).format(record)
        except (KeyError, ValueError, TypeError):
            raise ValidationError(
                message="无效的日志格式",
                field="log_format",
                value=log_format,
                reason="invalid_format_string"
            )
        return True

    def validate_node_name(self, name: Any) -> str:
        """
        验证节点名称

        名称可以为空字符串，但不能为None，也必须是字符串

        Returns:
            验证通过的名称
        """
        if name is None:
            raise ValidationError(
                message="节点名称不能为None",
                field="name",
                value=name,
                reason="null_value"
            )

        if not isinstance(name, str):
            raise ValidationError(
                message="节点名称必须是字符串",
                field="name",
                value=name,
                reason="invalid_type"
            )

        return name
