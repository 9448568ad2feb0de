"""
单目标诊断序列单元测试
"""
import pytest

from netdiag.agent.sequencer import TargetSequencer, classify
from netdiag.integrations.config_loader import DiagnosticsConfig
from netdiag.integrations.tool_resolver import ToolResolver, default_candidates
from netdiag.models.results import TIMEOUT_EXIT_CODE, Capability, CheckOutcome, RunResults, StepResult
from netdiag.utils.output_formatter import StatusFormatter


ALL_TOOLS = {"ping", "traceroute", "tracepath", "nslookup", "dig"}
NSLOOKUP_NO_ANSWER = """Server:		127.0.0.53
Address:	127.0.0.53#53

Non-authoritative answer:
*** Can't find ipv4only.example: No answer
"""


def _selection(present, config=None):
    config = config or DiagnosticsConfig()
    which = lambda program: f"/usr/bin/{program}" if program in present else None  # noqa: E731
    return ToolResolver(default_candidates(config), which=which).resolve()


def _sequencer(present, runner, run_log, console, config=None, verbose=False):
    config = config or DiagnosticsConfig()
    return TargetSequencer(
        selection=_selection(present, config),
        runner=runner,
        run_log=run_log,
        formatter=StatusFormatter(console, verbose=verbose),
        config=config,
    )


class TestClassify:
    """结论判定测试"""

    def setup_method(self):
        candidates = default_candidates(DiagnosticsConfig())
        self.nslookup, self.dig = candidates[Capability.DNS]

    @pytest.mark.parametrize("attempt", range(3))
    def test_dig_nonempty_answer_is_ok(self, attempt):
        """同样的输入每次都得到同样的结论"""
        result = StepResult(title="DNS a", argv=["dig"], exit_code=0, output="93.184.216.34\n")
        assert classify(self.dig, result) is CheckOutcome.OK

    @pytest.mark.parametrize("attempt", range(3))
    def test_dig_empty_answer_is_failed(self, attempt):
        result = StepResult(title="DNS a", argv=["dig"], exit_code=0, output="   \n")
        assert classify(self.dig, result) is CheckOutcome.FAILED

    def test_nslookup_no_answer_is_failed(self):
        """nslookup 查不到记录时退出码仍为0，结论必须是 Failed"""
        result = StepResult(
            title="DNS ipv4only.example",
            argv=["nslookup", "ipv4only.example"],
            exit_code=0,
            output=NSLOOKUP_NO_ANSWER
        )
        assert classify(self.nslookup, result, "ipv4only.example") is CheckOutcome.FAILED
        assert classify(self.nslookup, result) is CheckOutcome.FAILED

    def test_nslookup_answer_is_ok(self):
        output = "Server:\t\t127.0.0.53\nAddress:\t127.0.0.53#53\n\nName:\texample.com\nAddress: 93.184.216.34\n"
        result = StepResult(title="DNS example.com", argv=["nslookup", "example.com"], exit_code=0, output=output)
        assert classify(self.nslookup, result, "example.com") is CheckOutcome.OK

    def test_nslookup_server_lines_are_not_an_answer(self):
        """只有DNS服务器信息、没有 Name: 段时不算答案"""
        output = "Server:\t\t127.0.0.53\nAddress:\t127.0.0.53#53\n"
        result = StepResult(title="DNS a", argv=["nslookup", "a"], exit_code=0, output=output)
        assert classify(self.nslookup, result, "a") is CheckOutcome.FAILED

    def test_nonzero_exit_is_failed(self):
        result = StepResult(title="DNS a", argv=["nslookup"], exit_code=1, output="** server can't find a: NXDOMAIN")
        assert classify(self.nslookup, result) is CheckOutcome.FAILED

    def test_timeout_same_as_failure(self):
        timed_out = StepResult(title="t", argv=["x"], exit_code=TIMEOUT_EXIT_CODE, timed_out=True)
        exited = StepResult(title="t", argv=["x"], exit_code=1)
        assert classify(self.nslookup, timed_out) is classify(self.nslookup, exited) is CheckOutcome.FAILED


class TestTargetSequencer:
    """单目标检查序列测试"""

    def test_three_checks_in_fixed_order(self, fake_runner, run_log, console):
        runner = fake_runner()
        results = RunResults()

        _sequencer(ALL_TOOLS, runner, run_log, console).run("8.8.8.8", results)

        assert [call["title"] for call in runner.calls] == ["PING 8.8.8.8", "TRACE 8.8.8.8", "DNS 8.8.8.8"]
        assert [call["argv"][0] for call in runner.calls] == ["ping", "traceroute", "nslookup"]
        assert all(call["timeout"] == 25 for call in runner.calls)
        assert len(results.outcomes()) == 3

    def test_failure_does_not_short_circuit(self, fake_runner, step, run_log, console):
        """PING 失败后 TRACE 和 DNS 仍然执行"""
        runner = fake_runner({"ping": step.failed(), "traceroute": step.timed_out()})
        results = RunResults()

        _sequencer(ALL_TOOLS, runner, run_log, console).run("10.255.255.1", results)

        assert len(runner.calls) == 3
        assert results.get("10.255.255.1", Capability.REACHABILITY) is CheckOutcome.FAILED
        assert results.get("10.255.255.1", Capability.TRACE) is CheckOutcome.FAILED
        assert results.get("10.255.255.1", Capability.DNS) is CheckOutcome.OK

    def test_unavailable_skips_runner(self, fake_runner, run_log, console):
        """能力不可用时不调用执行器"""
        runner = fake_runner()
        results = RunResults()

        _sequencer({"ping", "tracepath"}, runner, run_log, console).run("example.com", results)

        assert [call["argv"][0] for call in runner.calls] == ["ping", "tracepath"]
        assert results.get("example.com", Capability.DNS) is CheckOutcome.UNAVAILABLE
        assert "DNS  : Unavailable" in console.file.getvalue()

    def test_dig_empty_answer_recorded_as_failed(self, fake_runner, step, run_log, console):
        runner = fake_runner({"dig": step.ok(output="")})
        results = RunResults()

        _sequencer({"ping", "traceroute", "dig"}, runner, run_log, console).run("nothing.example", results)

        assert runner.calls[-1]["argv"] == ["dig", "+short", "nothing.example"]
        assert results.get("nothing.example", Capability.DNS) is CheckOutcome.FAILED

    def test_nslookup_no_answer_recorded_as_failed(self, fake_runner, step, run_log, console):
        runner = fake_runner({"nslookup": step.ok(output=NSLOOKUP_NO_ANSWER)})
        results = RunResults()

        _sequencer(ALL_TOOLS, runner, run_log, console, verbose=True).run("ipv4only.example", results)

        assert runner.calls[-1]["argv"] == ["nslookup", "ipv4only.example"]
        assert results.get("ipv4only.example", Capability.DNS) is CheckOutcome.FAILED
        output = console.file.getvalue()
        assert "DNS  : Failed (nslookup)" in output
        assert "ipv4only.example: No answer" in output

    def test_status_lines_printed_per_check(self, fake_runner, step, run_log, console):
        runner = fake_runner({"traceroute": step.failed()})

        _sequencer(ALL_TOOLS, runner, run_log, console).run("1.1.1.1", RunResults())

        output = console.file.getvalue().splitlines()
        assert output == ["PING : OK", "TRACE: Failed", "DNS  : OK"]

    def test_verbose_prints_parsed_summary(self, fake_runner, step, run_log, console):
        ping_output = ("--- 1.1.1.1 ping statistics ---\n"
                       "4 packets transmitted, 4 received, 0% packet loss, time 3004ms\n"
                       "rtt min/avg/max/mdev = 9.1/10.2/11.3/0.8 ms\n")
        runner = fake_runner({"ping": step.ok(output=ping_output)})

        _sequencer(ALL_TOOLS, runner, run_log, console, verbose=True).run("1.1.1.1", RunResults())

        output = console.file.getvalue()
        assert "PING : OK (ping)" in output
        assert "4 transmitted, 4 received, 0% loss, rtt avg 10.2 ms" in output
        assert "[SUMMARY] PING 1.1.1.1" in run_log.path.read_text(encoding="utf-8")

    def test_zero_step_timeout_runs_unbounded(self, fake_runner, run_log, console):
        runner = fake_runner()
        config = DiagnosticsConfig(step_timeout=0)

        _sequencer(ALL_TOOLS, runner, run_log, console, config=config).run("1.1.1.1", RunResults())

        assert all(not call["timeout"] for call in runner.calls)

    def test_timeout_summary_uses_step_timeout(self, fake_runner, step, run_log, console):
        """摘要中的超时秒数来自实际执行的步骤"""
        runner = fake_runner({"ping": step.timed_out()})
        config = DiagnosticsConfig(step_timeout=7)

        _sequencer(ALL_TOOLS, runner, run_log, console, config=config, verbose=True).run("10.255.255.1", RunResults())

        assert "timed out after 7s" in console.file.getvalue()
        assert "[SUMMARY] PING 10.255.255.1: timed out after 7s" in run_log.path.read_text(encoding="utf-8")

    def test_timeout_summary_when_unbounded(self, fake_runner, step, run_log, console):
        """不限时的步骤返回超时状态时，摘要不写虚假的秒数"""
        runner = fake_runner({"ping": step.timed_out()})
        config = DiagnosticsConfig(step_timeout=0)

        _sequencer(ALL_TOOLS, runner, run_log, console, config=config, verbose=True).run("10.255.255.1", RunResults())

        output = console.file.getvalue()
        assert "PING : Failed (ping)" in output
        assert "timeout exit status (unbounded)" in output
        assert "after 0s" not in run_log.path.read_text(encoding="utf-8")
