"""
运行编排器

解析一次工具可用性，按顺序诊断每个目标，汇总结果并给出退出码
"""
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from ..integrations.config_loader import DiagnosticsConfig
from ..integrations.step_runner import StepRunner
from ..integrations.tool_resolver import INSTALL_HINT, ToolResolver, ToolSelection
from ..models.results import RunResults
from ..utils.output_formatter import StatusFormatter
from ..utils.run_log import RunLog, format_utc, utc_now
from .reporter import ReportGenerator
from .sequencer import TargetSequencer


TOOL_NAME = "Mini Network Diagnostic Tool"
BANNER_WIDTH = 50


class RunOrchestrator:
    """
    运行编排器

    流程:
        1. 终端和日志输出运行头
        2. 解析工具可用性（只解析一次），缺失时警告一次
        3. 逐个目标执行 TargetSequencer
        4. 输出汇总表格、总体状态和日志路径
    """

    def __init__(
        self,
        config: DiagnosticsConfig,
        resolver: ToolResolver,
        run_log: RunLog,
        runner: Optional[StepRunner] = None,
        console: Optional[Console] = None,
        verbose: bool = False
    ):
        """
        初始化编排器

        Args:
            config: 诊断配置
            resolver: 工具可用性解析器
            run_log: 运行日志
            runner: 步骤执行器，默认基于 run_log 和配置的单步超时创建
            console: Rich 控制台
            verbose: 是否显示解析摘要
        """
        self.config = config
        self.resolver = resolver
        self.run_log = run_log
        self.runner = runner or StepRunner(run_log, step_timeout=config.step_timeout or None)
        self.console = console or Console(emoji=False, highlight=False)
        self.formatter = StatusFormatter(self.console, verbose=verbose)
        self.reporter = ReportGenerator(self.console)

    def run(self, targets: List[str], started_at: Optional[datetime] = None) -> RunResults:
        """
        执行整次诊断

        Args:
            targets: 目标列表，为空时使用配置中的默认目标；重复目标只诊断一次
            started_at: 运行开始时间

        Returns:
            RunResults: 全部目标的结果汇总
        """
        targets = list(dict.fromkeys(targets or self.config.default_targets))
        self._print_header(started_at or utc_now())

        selection = self.resolver.resolve()
        self._warn_missing(selection)

        sequencer = TargetSequencer(
            selection=selection,
            runner=self.runner,
            run_log=self.run_log,
            formatter=self.formatter,
            config=self.config,
        )

        results = RunResults(targets)
        for target in targets:
            self.console.print()
            self.console.print(f"[bold cyan]>> 测试: {escape(target)}[/bold cyan]")
            self.run_log.write_raw("\n")
            self.run_log.write(f">> Testing: {target}")
            sequencer.run(target, results)

        self._finish(results)
        return results

    def _print_header(self, started_at: datetime):
        """运行头同时写入终端和日志"""
        lines = [
            "-" * BANNER_WIDTH,
            TOOL_NAME,
            f"Time (UTC): {format_utc(started_at)}",
            f"Log: {self.run_log.path}",
            "-" * BANNER_WIDTH,
        ]
        for line in lines:
            self.console.print(escape(line))
            self.run_log.write(line)

    def _warn_missing(self, selection: ToolSelection):
        """缺少某项能力的全部实现时，终端和日志各警告一次"""
        if not selection.missing:
            return
        missing = ", ".join(self.resolver.describe_missing(selection))
        self.console.print(f"[red]缺少工具:[/red] {escape(missing)}")
        self.console.print(f"[yellow]{escape(INSTALL_HINT)}[/yellow]")
        self.run_log.write(f"[WARNING] missing tools: {missing}")
        for line in INSTALL_HINT.splitlines():
            self.run_log.write(line)

    def _finish(self, results: RunResults):
        """输出汇总并写入日志"""
        self.reporter.print_summary(results, str(self.run_log.path))

        self.run_log.write_raw("\n")
        self.run_log.write("=================== RESULT ===================")
        for line in self.reporter.plain_lines(results):
            self.run_log.write(line)
        status = "ALL CHECKS OK" if results.all_ok else "ONE OR MORE CHECKS FAILED"
        self.run_log.write(f"Status: {status} (exit code {results.exit_code})")
