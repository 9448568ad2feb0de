"""
数据模型包
提供所有核心数据结构的导入
"""
from .results import (
    KILLED_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    Capability,
    CheckOutcome,
    OutcomeAlreadyRecordedError,
    RunResults,
    StepResult,
)
from .task import StepInvocation, ToolCandidate

__all__ = [
    # 枚举类型
    "Capability",
    "CheckOutcome",
    # 调用相关
    "StepInvocation",
    "ToolCandidate",
    # 结果相关
    "StepResult",
    "RunResults",
    "OutcomeAlreadyRecordedError",
    "TIMEOUT_EXIT_CODE",
    "KILLED_EXIT_CODE",
]
