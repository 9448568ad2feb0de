"""
单目标诊断序列

对一个目标按固定顺序执行 PING → TRACE → DNS 三项检查
"""
from typing import Optional

from ..integrations.config_loader import DiagnosticsConfig
from ..integrations.step_runner import StepRunner, format_seconds
from ..integrations.tool_resolver import ToolSelection
from ..models.results import Capability, CheckOutcome, RunResults, StepResult
from ..models.task import StepInvocation, ToolCandidate
from ..utils.output_formatter import StatusFormatter
from ..utils.parsers import (
    DnsAnswer,
    parse_dig_short_output,
    parse_nslookup_output,
    parse_ping_result,
    parse_traceroute_output,
)
from ..utils.run_log import RunLog


def parse_dns_answer(tool: ToolCandidate, result: StepResult, name: str) -> DnsAnswer:
    """按DNS工具的输出格式解析答案"""
    if tool.name == "dig":
        return parse_dig_short_output(result, name)
    return parse_nslookup_output(result, name)


def classify(tool: ToolCandidate, result: StepResult, name: str = "") -> CheckOutcome:
    """
    根据执行结果判定检查结论

    任何非0退出码或超时都是 Failed；requires_answer 的工具在解析不到任何记录时也是 Failed

    Args:
        tool: 执行该步骤的工具
        result: 步骤执行结果
        name: 查询的目标（只用于解析结果的展示）

    Returns:
        CheckOutcome
    """
    if not result.success:
        return CheckOutcome.FAILED
    if tool.requires_answer and not parse_dns_answer(tool, result, name).has_answer:
        return CheckOutcome.FAILED
    return CheckOutcome.OK


class TargetSequencer:
    """
    单目标诊断序列

    - 三项检查互不影响，任何一项失败都不会跳过后续检查
    - 能力不可用时直接记录 Unavailable，不调用步骤执行器
    - 每项检查完成后立即打印状态行
    """

    def __init__(
        self,
        selection: ToolSelection,
        runner: StepRunner,
        run_log: RunLog,
        formatter: StatusFormatter,
        config: DiagnosticsConfig
    ):
        self.selection = selection
        self.runner = runner
        self.run_log = run_log
        self.formatter = formatter
        self.config = config

    def run(self, target: str, results: RunResults) -> RunResults:
        """
        执行一个目标的全部检查

        Args:
            target: 目标主机
            results: 结果汇总（原地写入并返回）

        Returns:
            RunResults
        """
        results.add_target(target)
        for capability in Capability:
            outcome = self.run_check(target, capability)
            results.record(target, capability, outcome)
        return results

    def run_check(self, target: str, capability: Capability) -> CheckOutcome:
        """执行单项检查并打印状态行"""
        tool = self.selection.tool_for(capability)
        if tool is None:
            self.run_log.write(f"{capability.label} {target}: {CheckOutcome.UNAVAILABLE.value} (no tool)")
            self.formatter.print_check(capability, CheckOutcome.UNAVAILABLE)
            return CheckOutcome.UNAVAILABLE

        title = f"{capability.label} {target}"
        invocation = StepInvocation(title=title, argv=tool.argv_for(target), timeout=self.config.step_timeout)
        step = self.runner.run(invocation)
        outcome = classify(tool, step, target)

        detail = self._summarize(capability, tool, step, target)
        if detail:
            self.run_log.write(f"[SUMMARY] {title}: {detail}")
        self.run_log.write(f"{title}: {outcome.value} (exit={step.exit_code}, {step.execution_time:.2f}s)")

        self.formatter.print_check(capability, outcome, tool_name=tool.name, detail=detail)
        return outcome

    def _summarize(
        self,
        capability: Capability,
        tool: ToolCandidate,
        step: StepResult,
        target: str
    ) -> Optional[str]:
        """解析工具输出，生成一行摘要（不影响结论）"""
        if step.timed_out:
            if step.bounded:
                return f"timed out after {format_seconds(step.timeout)}s"
            return "timeout exit status (unbounded)"
        try:
            if capability is Capability.REACHABILITY:
                return parse_ping_result(step).summary()
            if capability is Capability.TRACE:
                return parse_traceroute_output(step, target).summary()
            return parse_dns_answer(tool, step, target).summary()
        except Exception as e:
            return f"parse error: {e}"
