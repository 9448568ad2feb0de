"""
外部程序集成包

提供配置加载、工具可用性解析和步骤执行器
"""
from .config_loader import ConfigError, DiagnosticsConfig, load_config
from .step_runner import StepRunner
from .tool_resolver import ToolResolver, ToolSelection, default_candidates

__all__ = [
    "ConfigError",
    "DiagnosticsConfig",
    "load_config",
    "StepRunner",
    "ToolResolver",
    "ToolSelection",
    "default_candidates",
]
