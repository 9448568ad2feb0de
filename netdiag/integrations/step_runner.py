"""
步骤执行器

以子进程方式执行一次外部诊断程序：限时、输出只写入日志、返回归一化的结果
"""
import os
import signal
import subprocess
import time
from typing import List, Optional

from ..models.results import KILLED_EXIT_CODE, TIMEOUT_EXIT_CODE, StepResult
from ..models.task import StepInvocation
from ..utils.run_log import RunLog


# 与 shell 约定一致：找不到程序 127，无执行权限 126
NOT_FOUND_EXIT_CODE = 127
NOT_EXECUTABLE_EXIT_CODE = 126


class StepRunner:
    """
    步骤执行器

    - stdout 和 stderr 合并后追加到运行日志，不输出到终端
    - 超时后杀死子进程所在的整个进程组，结果退出码归一为 TIMEOUT_EXIT_CODE
    - timeout 为 None 或 0 时不限时执行，并在日志中标记
    """

    def __init__(self, run_log: RunLog, step_timeout: Optional[float] = None):
        """
        初始化步骤执行器

        Args:
            run_log: 运行日志
            step_timeout: 默认单步超时（秒）
        """
        self.run_log = run_log
        self.step_timeout = step_timeout

    def run(self, invocation: StepInvocation) -> StepResult:
        """执行一个 StepInvocation"""
        timeout = invocation.timeout if invocation.timeout is not None else self.step_timeout
        return self.run_step(invocation.title, invocation.argv, timeout)

    def run_step(
        self,
        title: str,
        argv: List[str],
        timeout: Optional[float] = None
    ) -> StepResult:
        """
        执行单个步骤

        Args:
            title: 步骤标题（写入日志的 "==> title" 标记）
            argv: 命令及参数
            timeout: 超时时间（秒），None 或 0 表示不限时

        Returns:
            StepResult: 执行结果
        """
        argv = list(argv)
        bounded = bool(timeout) and timeout > 0
        limit = timeout if bounded else None
        self.run_log.write(f"==> {title}")
        if not bounded:
            self.run_log.write(f"[NO-TIMEOUT] {title} runs without a time bound")

        started = time.monotonic()
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                start_new_session=_supports_process_groups(),
            )
        except FileNotFoundError as e:
            return self._spawn_failed(title, argv, NOT_FOUND_EXIT_CODE, e, limit)
        except OSError as e:
            return self._spawn_failed(title, argv, NOT_EXECUTABLE_EXIT_CODE, e, limit)

        timed_out = False
        try:
            output, _ = process.communicate(timeout=limit)
            exit_code = process.returncode
        except subprocess.TimeoutExpired:
            timed_out = True
            _kill_process_tree(process)
            output, _ = process.communicate()
            exit_code = TIMEOUT_EXIT_CODE

        execution_time = time.monotonic() - started
        self.run_log.write_raw(output or "")

        if exit_code in (TIMEOUT_EXIT_CODE, KILLED_EXIT_CODE):
            timed_out = True
            if not bounded:
                self.run_log.write(f"[TIMEOUT] {title} exited with status {exit_code} (unbounded)")
            exit_code = TIMEOUT_EXIT_CODE
        if timed_out and bounded:
            self.run_log.write(f"[TIMEOUT] {title} after {format_seconds(limit)}s")

        return StepResult(
            title=title,
            argv=argv,
            exit_code=exit_code,
            output=output or "",
            timed_out=timed_out,
            bounded=bounded,
            timeout=limit,
            execution_time=execution_time,
        )

    def _spawn_failed(
        self,
        title: str,
        argv: List[str],
        exit_code: int,
        error: OSError,
        timeout: Optional[float]
    ) -> StepResult:
        """子进程无法启动时记录错误并返回失败结果"""
        message = f"{argv[0] if argv else '<empty>'}: {error.strerror or error}"
        self.run_log.write(f"[ERROR] {title}: {message}")
        return StepResult(
            title=title,
            argv=argv,
            exit_code=exit_code,
            output=message,
            bounded=timeout is not None,
            timeout=timeout,
        )


def _supports_process_groups() -> bool:
    return hasattr(os, "killpg") and os.name == "posix"


def _kill_process_tree(process: subprocess.Popen) -> None:
    """杀死子进程及其进程组内的后代进程"""
    if _supports_process_groups():
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass
    process.kill()


def format_seconds(timeout: Optional[float]) -> str:
    """秒数的简短写法；不限时为 "unbounded"。"""
    if timeout is None:
        return "unbounded"
    return str(int(timeout)) if float(timeout).is_integer() else f"{timeout:g}"
