"""
运行日志

每次运行一个追加写入的纯文本日志文件，终端只显示精简状态，详细输出都写在这里
"""
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


LOG_FILE_PREFIX = "netdiag_"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_utc(moment: datetime) -> str:
    """格式化为 2025-01-13T10:30:00Z"""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def log_path_for(log_dir: Union[str, Path], started_at: Optional[datetime] = None) -> Path:
    """
    根据运行开始时间生成日志文件路径

    Args:
        log_dir: 日志目录
        started_at: 运行开始时间，默认当前时间

    Returns:
        <log_dir>/netdiag_<YYYYmmddTHHMMSSZ>.log
    """
    started_at = started_at or utc_now()
    stamp = started_at.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return Path(log_dir).expanduser() / f"{LOG_FILE_PREFIX}{stamp}.log"


class RunLog:
    """
    单文件追加日志

    - 路径在构造时确定，整次运行不变
    - 目录和文件在第一次写入时创建
    - 写入失败不会中断诊断步骤，只在 stderr 提示一次
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.write_errors = 0
        self._dir_ready = False

    def write(self, message: str) -> None:
        """追加一行带UTC时间戳的日志"""
        self._append(f"{format_utc(utc_now())} {message}\n")

    def write_raw(self, text: str) -> None:
        """原样追加外部工具的输出"""
        if not text:
            return
        if not text.endswith("\n"):
            text += "\n"
        self._append(text)

    def _append(self, text: str) -> None:
        try:
            if not self._dir_ready:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._dir_ready = True
            # 命令行中的非UTF-8字节以代理字符出现，按转义形式写入
            with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(text)
        except (OSError, ValueError) as e:
            self.write_errors += 1
            if self.write_errors == 1:
                print(f"[netdiag] 警告: 无法写入日志 {self.path}: {e}", file=sys.stderr)
