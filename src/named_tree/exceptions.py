"""
命名树存储引擎异常体系
"""
from datetime import datetime
from typing import Dict, Any, Optional, List


class BaseError(Exception):
    """所有异常的基类"""
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，便于序列化"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# ==================== 配置和验证异常 ====================
class ConfigError(BaseError):
    """配置错误"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details, **kwargs)


class ValidationError(BaseError):
    """数据验证错误"""
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        details = {
            "field": field,
            "value": value,
            "reason": reason
        }
        super().__init__(message, code="VALIDATION_ERROR", details=details, **kwargs)


# ==================== 树结构相关异常 ====================
class TreeError(BaseError):
    """树结构错误基类"""
    pass


class TreeNotFoundError(TreeError):
    """持久化的树不存在"""
    def __init__(self, tree_id: str, **kwargs):
        super().__init__(
            message=f"树不存在: {tree_id}",
            code="TREE_NOT_FOUND",
            details={"tree_id": tree_id},
            **kwargs
        )


class NodeError(TreeError):
    """节点操作错误"""
    pass


class NodeNotFoundError(NodeError):
    """节点不存在"""
    def __init__(self, node_id: Optional[int] = None, **kwargs):
        message = "节点不存在"
        if node_id is not None:
            message += f": id={node_id}"

        super().__init__(
            message,
            code="NODE_NOT_FOUND",
            details={"node_id": node_id},
            **kwargs
        )
        self.node_id = node_id


class CycleDetectedError(NodeError):
    """遍历时在当前路径上再次遇到同一节点"""
    def __init__(self, path: List[int], **kwargs):
        path = list(path)
        super().__init__(
            message=f"检测到环: {' -> '.join(str(p) for p in path)}",
            code="CYCLE_DETECTED",
            details={"path": path},
            **kwargs
        )
        self.path = path


class DanglingReferenceError(NodeError):
    """子节点引用指向不存在的节点"""
    def __init__(self, node_id: int, parent_id: Optional[int] = None, **kwargs):
        message = f"悬空引用: 子节点 {node_id} 不存在"
        if parent_id is not None:
            message += f" (父节点 {parent_id})"

        super().__init__(
            message,
            code="DANGLING_REFERENCE",
            details={"node_id": node_id, "parent_id": parent_id},
            **kwargs
        )
        self.node_id = node_id
        self.parent_id = parent_id


class WouldCreateCycleError(NodeError):
    """操作会使节点成为自己的后代"""
    def __init__(self, child_id: int, parent_id: int, **kwargs):
        super().__init__(
            message=f"操作会产生环: {child_id} 是 {parent_id} 的祖先或自身",
            code="WOULD_CREATE_CYCLE",
            details={"child_id": child_id, "parent_id": parent_id},
            **kwargs
        )
        self.child_id = child_id
        self.parent_id = parent_id


class AlreadyChildError(NodeError):
    """节点已经有父节点（森林约束：每个节点最多一个父节点）"""
    def __init__(self, child_id: int, parent_id: Optional[int] = None, **kwargs):
        message = f"节点 {child_id} 已有父节点"
        if parent_id is not None:
            message += f": {parent_id}"

        super().__init__(
            message,
            code="ALREADY_CHILD",
            details={"child_id": child_id, "parent_id": parent_id},
            **kwargs
        )
        self.child_id = child_id
        self.parent_id = parent_id


class NotAChildError(NodeError):
    """目标节点不是给定父节点的子节点"""
    def __init__(self, child_id: int, parent_id: int, **kwargs):
        super().__init__(
            message=f"节点 {child_id} 不是 {parent_id} 的子节点",
            code="NOT_A_CHILD",
            details={"child_id": child_id, "parent_id": parent_id},
            **kwargs
        )
        self.child_id = child_id
        self.parent_id = parent_id


# ==================== ID相关异常 ====================
class IdAllocationError(TreeError):
    """节点ID分配失败"""
    def __init__(self, reason: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"节点ID分配失败: {reason or '未知原因'}",
            code="ID_ALLOCATION_ERROR",
            details={"reason": reason},
            **kwargs
        )


# ==================== 存储相关异常 ====================
class StorageError(BaseError):
    """存储错误"""
    pass


class DataStoreError(StorageError):
    """数据存储异常"""
    def __init__(self, message: str, operation: str = None, store_type: str = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        details.update({"operation": operation, "store_type": store_type})
        super().__init__(
            message=f"存储错误[{operation or 'unknown'}]: {message}",
            code="DATA_STORE_ERROR",
            details=details,
            **kwargs
        )


class SerializationError(DataStoreError):
    """序列化异常"""
    def __init__(self, message: str, data_type: str = None, **kwargs):
        super().__init__(
            message=f"序列化错误: {message}",
            operation="SERIALIZATION",
            store_type="serialization",
            details={"data_type": data_type},
            **kwargs
        )


# ==================== 导入导出异常 ====================
class TreeImportError(BaseError):
    """导入过程异常"""
    def __init__(self, message: str, source: Optional[str] = None, row: Optional[int] = None, **kwargs):
        super().__init__(
            message=f"导入失败: {message}",
            code="IMPORT_ERROR",
            details={"source": source, "row": row},
            **kwargs
        )
