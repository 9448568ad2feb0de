"""
执行结果相关数据模型
定义单步执行结果、检查结论以及整次运行的结果汇总
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# timeout(1) 的约定退出码，超时被杀死的子进程统一归一到该值
TIMEOUT_EXIT_CODE = 124
KILLED_EXIT_CODE = 137


class Capability(str, Enum):
    """诊断能力枚举（顺序即执行顺序）"""
    REACHABILITY = "reachability"       # ICMP 连通性
    TRACE = "trace"                     # 路由追踪
    DNS = "dns"                         # DNS 解析

    @property
    def label(self) -> str:
        return _CAPABILITY_LABELS[self]


_CAPABILITY_LABELS = {
    Capability.REACHABILITY: "PING",
    Capability.TRACE: "TRACE",
    Capability.DNS: "DNS",
}


class CheckOutcome(str, Enum):
    """单项检查结论"""
    OK = "OK"
    FAILED = "Failed"
    UNAVAILABLE = "Unavailable"


@dataclass
class StepResult:
    """
    单步执行结果

    记录一次外部诊断程序调用的退出码、合并输出和耗时
    """
    title: str                          # 步骤标题，例如 "PING 8.8.8.8"
    argv: List[str]                     # 实际执行的命令及参数
    exit_code: int                      # 退出码（超时为 TIMEOUT_EXIT_CODE）
    output: str = ""                    # stdout + stderr 合并输出
    timed_out: bool = False             # 是否因超时被终止
    bounded: bool = True                # 是否在超时限制下执行
    timeout: Optional[float] = None     # 实际使用的超时（秒），不限时为 None
    execution_time: float = 0.0         # 执行耗时（秒）
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return (f"[{status}] {self.title}: {' '.join(self.argv)} "
                f"(exit={self.exit_code}, time={self.execution_time:.2f}s)")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "title": self.title,
            "argv": list(self.argv),
            "exit_code": self.exit_code,
            "output": self.output,
            "timed_out": self.timed_out,
            "bounded": self.bounded,
            "timeout": self.timeout,
            "execution_time": self.execution_time,
            "timestamp": self.timestamp.isoformat()
        }


class OutcomeAlreadyRecordedError(Exception):
    """同一 (目标, 能力) 的结论被重复写入"""

    def __init__(self, target: str, capability: Capability):
        super().__init__(f"Outcome for {target}/{capability.value} already recorded")
        self.target = target
        self.capability = capability


class RunResults:
    """
    整次运行的结果汇总

    按目标顺序保存 target → capability → CheckOutcome。
    每个结论只能写入一次，总体结论只在全部目标执行完之后计算。
    """

    def __init__(self, targets: Optional[List[str]] = None):
        self._outcomes: "OrderedDict[str, Dict[Capability, CheckOutcome]]" = OrderedDict()
        for target in targets or []:
            self.add_target(target)

    def add_target(self, target: str) -> None:
        self._outcomes.setdefault(target, {})

    def record(self, target: str, capability: Capability, outcome: CheckOutcome) -> None:
        """
        写入一项检查结论

        Raises:
            OutcomeAlreadyRecordedError: 该项结论已经存在
        """
        checks = self._outcomes.setdefault(target, {})
        if capability in checks:
            raise OutcomeAlreadyRecordedError(target, capability)
        checks[capability] = CheckOutcome(outcome)

    def get(self, target: str, capability: Capability) -> Optional[CheckOutcome]:
        return self._outcomes.get(target, {}).get(capability)

    @property
    def targets(self) -> List[str]:
        return list(self._outcomes.keys())

    def outcomes(self) -> List[CheckOutcome]:
        """按目标、能力顺序展开所有已记录的结论"""
        return [
            checks[capability]
            for checks in self._outcomes.values()
            for capability in Capability
            if capability in checks
        ]

    def is_complete(self) -> bool:
        """每个目标都恰好有三项结论"""
        return all(len(checks) == len(Capability) for checks in self._outcomes.values())

    @property
    def all_ok(self) -> bool:
        # 没有任何结论（没有目标）不算成功
        outcomes = self.outcomes()
        if not outcomes or not self.is_complete():
            return False
        return all(outcome is CheckOutcome.OK for outcome in outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.all_ok else 1

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        """转换为字典格式（缺失项为 NA）"""
        return {
            target: {
                capability.value: (checks[capability].value if capability in checks else "NA")
                for capability in Capability
            }
            for target, checks in self._outcomes.items()
        }
