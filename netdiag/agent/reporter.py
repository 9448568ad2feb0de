"""
结果汇总报告

终端输出 Rich 表格，日志中写入等宽纯文本表格
"""
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models.results import Capability, RunResults
from ..utils.output_formatter import status_markup, status_text


TARGET_COLUMN_WIDTH = 28
STATUS_COLUMN_WIDTH = 12
SEPARATOR_WIDTH = 48


class ReportGenerator:
    """
    汇总报告生成器

    一行一个目标，一列一种能力；缺失结论显示 NA
    """

    def __init__(self, console: Console):
        self.console = console

    def build_table(self, results: RunResults) -> Table:
        """构建终端表格"""
        table = Table(title="结果汇总", show_header=True, header_style="bold cyan")
        table.add_column("目标", min_width=TARGET_COLUMN_WIDTH, no_wrap=True)
        for capability in Capability:
            table.add_column(capability.label, min_width=8)

        for target in results.targets:
            table.add_row(
                escape(target),
                *(status_markup(results.get(target, capability)) for capability in Capability)
            )
        return table

    def plain_lines(self, results: RunResults) -> List[str]:
        """
        生成等宽纯文本表格（写入日志）

        Returns:
            表头、分隔线和每个目标一行
        """
        header = f"{'TARGET':<{TARGET_COLUMN_WIDTH}} " + " ".join(
            f"{capability.label:<{STATUS_COLUMN_WIDTH}}" for capability in Capability
        )
        lines = [header.rstrip(), "-" * SEPARATOR_WIDTH]
        for target in results.targets:
            row = f"{target:<{TARGET_COLUMN_WIDTH}} " + " ".join(
                f"{status_text(results.get(target, capability)):<{STATUS_COLUMN_WIDTH}}"
                for capability in Capability
            )
            lines.append(row.rstrip())
        return lines

    def print_summary(self, results: RunResults, log_path: str):
        """
        打印汇总表格和总体状态

        Args:
            results: 结果汇总
            log_path: 日志文件路径
        """
        self.console.print()
        self.console.print(self.build_table(results))
        if results.all_ok:
            self.console.print("状态: [bold green]全部检查通过 (ALL CHECKS OK)[/bold green]")
        else:
            self.console.print("状态: [bold red]一项或多项检查失败 (ONE OR MORE CHECKS FAILED)[/bold red]")
        self.console.print(f"日志已保存: [bold]{escape(log_path)}[/bold]")
