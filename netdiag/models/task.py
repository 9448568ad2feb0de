"""
任务相关数据模型
定义单步调用和工具候选的数据结构
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .results import Capability


@dataclass(frozen=True)
class StepInvocation:
    """
    单步调用

    一条命令及其参数、可读标题和超时预算，只在一次执行期间存在
    """
    title: str                           # 步骤标题
    argv: List[str]                      # 命令及参数
    timeout: Optional[float] = None      # 超时（秒），None 使用执行器默认值，0 表示不限时

    def __str__(self) -> str:
        return f"{self.title}: {' '.join(self.argv)}"


@dataclass(frozen=True)
class ToolCandidate:
    """
    诊断能力的一种实现

    program 用于存在性检查，build_args 根据目标主机生成参数列表
    """
    capability: Capability
    name: str                            # 展示名，例如 "traceroute"
    program: str                         # 可执行文件名
    build_args: Callable[[str], List[str]] = field(compare=False)
    requires_answer: bool = False        # 退出码为0但输出为空时视为失败

    def argv_for(self, target: str) -> List[str]:
        return [self.program, *self.build_args(target)]
