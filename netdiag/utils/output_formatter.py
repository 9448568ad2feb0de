"""
终端输出格式化器

把三值检查结论映射为带颜色的 Rich 标记，只负责展示，不参与结论计算
"""
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..models.results import Capability, CheckOutcome


NA_LABEL = "NA"

STATUS_STYLES = {
    CheckOutcome.OK: "green",
    CheckOutcome.FAILED: "red",
    CheckOutcome.UNAVAILABLE: "yellow",
}


def status_markup(outcome: Optional[CheckOutcome]) -> str:
    """结论 → Rich 标记，缺失结论显示为 NA"""
    if outcome is None:
        return f"[dim]{NA_LABEL}[/dim]"
    style = STATUS_STYLES[outcome]
    return f"[{style}]{outcome.value}[/{style}]"


def status_text(outcome: Optional[CheckOutcome]) -> str:
    """结论 → 纯文本（写入日志用）"""
    return outcome.value if outcome is not None else NA_LABEL


class StatusFormatter:
    """检查状态格式化器"""

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """
        初始化格式化器

        Args:
            console: Rich 控制台
            verbose: 是否在状态行下显示解析出的摘要
        """
        self.console = console or Console(emoji=False, highlight=False)
        self.verbose = verbose

    def print_check(
        self,
        capability: Capability,
        outcome: CheckOutcome,
        tool_name: Optional[str] = None,
        detail: Optional[str] = None
    ):
        """
        打印单项检查的精简状态行

        Args:
            capability: 诊断能力
            outcome: 检查结论
            tool_name: 使用的工具（不可用时为 None）
            detail: 解析摘要（仅 verbose 模式显示）
        """
        line = f"{capability.label:<5}: {status_markup(outcome)}"
        if outcome is CheckOutcome.UNAVAILABLE:
            line += " [dim]- 工具不可用[/dim]"
        elif tool_name and self.verbose:
            line += f" [dim]({escape(tool_name)})[/dim]"
        self.console.print(line)

        if self.verbose and detail:
            self.console.print(f"  [dim]→ {escape(detail)}[/dim]")
