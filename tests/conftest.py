"""
Pytest配置和全局fixtures
"""
import io
import sys
from types import SimpleNamespace
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
from rich.console import Console

# 添加项目根目录到Python路径，以便导入模块
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from netdiag.models.results import TIMEOUT_EXIT_CODE, Capability, StepResult  # noqa: E402
from netdiag.models.task import StepInvocation, ToolCandidate  # noqa: E402
from netdiag.utils.run_log import RunLog  # noqa: E402


# 未预设结果时的默认输出：nslookup 需要一条真实的答案才算 OK
DEFAULT_OUTPUTS = {
    "nslookup": "Server:\t\t127.0.0.53\nAddress:\t127.0.0.53#53\n\n"
                "Non-authoritative answer:\nName:\texample.com\nAddress: 93.184.216.34\n",
}


def _python_tool(
    capability: Capability,
    name: str,
    code: str,
    requires_answer: bool = False
) -> ToolCandidate:
    """用当前解释器执行一段代码来模拟外部诊断程序（目标主机作为 argv[1]）"""
    return ToolCandidate(
        capability=capability,
        name=name,
        program=sys.executable,
        build_args=lambda host: ["-c", code, host],
        requires_answer=requires_answer,
    )


class FakeRunner:
    """
    模拟步骤执行器

    按程序名返回预设结果，并记录每次调用
    """

    def __init__(self, responses: Optional[Dict[str, Callable[[str], StepResult]]] = None):
        self.responses = responses or {}
        self.calls: List[Dict] = []

    def run(self, invocation: StepInvocation) -> StepResult:
        return self.run_step(invocation.title, invocation.argv, invocation.timeout)

    def run_step(self, title: str, argv: List[str], timeout: Optional[float] = None) -> StepResult:
        self.calls.append({"title": title, "argv": list(argv), "timeout": timeout})
        factory = self.responses.get(argv[0])
        if factory is None:
            result = StepResult(title=title, argv=list(argv), exit_code=0, output=DEFAULT_OUTPUTS.get(argv[0], "ok"))
        else:
            result = factory(argv[-1])
            result.title = title
            result.argv = list(argv)
        result.bounded = bool(timeout)
        result.timeout = timeout or None
        return result


def ok(output: str = "ok") -> Callable[[str], StepResult]:
    return lambda host: StepResult(title="", argv=[], exit_code=0, output=output)


def failed(exit_code: int = 1, output: str = "") -> Callable[[str], StepResult]:
    return lambda host: StepResult(title="", argv=[], exit_code=exit_code, output=output)


def timed_out() -> Callable[[str], StepResult]:
    return lambda host: StepResult(
        title="", argv=[], exit_code=TIMEOUT_EXIT_CODE, output="", timed_out=True
    )


@pytest.fixture
def run_log(tmp_path) -> RunLog:
    """写入临时目录的运行日志"""
    return RunLog(tmp_path / "logs" / "netdiag_test.log")


@pytest.fixture
def console() -> Console:
    """输出到内存的 Rich 控制台（无颜色）"""
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=200)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """避免本机环境变量影响配置相关测试"""
    for name in ("PING_COUNT", "PING_TIMEOUT", "STEP_TIMEOUT", "NETDIAG_LOG_DIR", "NETDIAG_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def python_tool():
    """返回构造 Python 模拟工具的函数"""
    return _python_tool


@pytest.fixture
def fake_runner():
    """返回 FakeRunner 类，测试中按需传入预设结果"""
    return FakeRunner


@pytest.fixture
def step():
    """预设步骤结果的工厂函数"""
    return SimpleNamespace(ok=ok, failed=failed, timed_out=timed_out)
