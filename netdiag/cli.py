"""
CLI命令行入口

使用Typer框架提供命令行接口
"""
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from . import __version__
from .agent import RunOrchestrator
from .integrations import ConfigError, ToolResolver, default_candidates, load_config
from .utils.run_log import RunLog, log_path_for, utc_now

# 加载环境变量（PING_COUNT / PING_TIMEOUT / STEP_TIMEOUT / NETDIAG_LOG_DIR）
load_dotenv()

app = typer.Typer(
    name="netdiag",
    help="网络连通性诊断工具：对每个目标执行 PING、TRACE、DNS 三项检查",
    add_completion=False
)
console = Console(emoji=False, highlight=False)


def _version_callback(value: bool):
    if value:
        console.print(f"[bold cyan]netdiag[/bold cyan] v{__version__}")
        raise typer.Exit()


@app.command()
def diagnose(
    targets: Optional[List[str]] = typer.Argument(None, help="目标主机（IP或域名），不填则使用默认目标"),
    count: Optional[int] = typer.Option(None, "--count", "-c", min=1, help="每个目标的ping次数 [env: PING_COUNT]"),
    ping_timeout: Optional[int] = typer.Option(None, "--ping-timeout", "-W", min=1, help="每次ping回复的等待秒数 [env: PING_TIMEOUT]"),
    step_timeout: Optional[int] = typer.Option(None, "--step-timeout", "-t", min=0, help="单步最长秒数，0表示不限时 [env: STEP_TIMEOUT]"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="日志目录 [env: NETDIAG_LOG_DIR]"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML配置文件 [env: NETDIAG_CONFIG]"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="在状态行下显示解析出的摘要"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True, help="显示版本信息"),
):
    """
    执行网络诊断

    示例:
        # 使用默认目标 1.1.1.1 8.8.8.8 google.com
        netdiag

        # 指定目标并缩短单步超时
        netdiag example.com 10.0.0.1 --step-timeout 10
    """
    try:
        config = load_config(config_file).with_overrides(
            ping_count=count,
            ping_timeout=ping_timeout,
            step_timeout=step_timeout,
            log_dir=str(log_dir) if log_dir is not None else None,
        )
    except ConfigError as e:
        console.print(f"[red]配置错误: {e}[/red]")
        raise typer.Exit(code=2)

    started_at = utc_now()
    run_log = RunLog(log_path_for(config.log_dir, started_at))
    resolver = ToolResolver(default_candidates(config))

    orchestrator = RunOrchestrator(
        config=config,
        resolver=resolver,
        run_log=run_log,
        console=console,
        verbose=verbose,
    )
    results = orchestrator.run(list(targets or []), started_at=started_at)
    raise typer.Exit(code=results.exit_code)


def main():
    """主入口函数"""
    app()


if __name__ == "__main__":
    main()
