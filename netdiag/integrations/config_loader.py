"""
诊断配置加载器

按 默认值 → YAML配置文件 → 环境变量(.env) → 命令行参数 的顺序合并配置
"""
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml


DEFAULT_TARGETS = ["1.1.1.1", "8.8.8.8", "google.com"]
DEFAULT_LOG_DIR = "~/.local/var/netdiag"

# 环境变量名 → 配置字段
ENV_VARS = {
    "PING_COUNT": "ping_count",
    "PING_TIMEOUT": "ping_timeout",
    "STEP_TIMEOUT": "step_timeout",
    "NETDIAG_LOG_DIR": "log_dir",
}
CONFIG_FILE_ENV = "NETDIAG_CONFIG"

_INT_FIELDS = ("ping_count", "ping_timeout", "step_timeout")


class ConfigError(Exception):
    """配置错误（文件缺失、格式错误或取值非法）"""
    pass


@dataclass
class DiagnosticsConfig:
    """
    诊断配置

    step_timeout 为 0 表示不限制单步执行时间
    """
    ping_count: int = 4                  # 每个目标的 ping 次数
    ping_timeout: int = 2                # 每次回复的等待时间（秒）
    step_timeout: int = 25               # 单步最长执行时间（秒）
    log_dir: str = DEFAULT_LOG_DIR       # 日志目录
    default_targets: List[str] = field(default_factory=lambda: list(DEFAULT_TARGETS))

    @property
    def log_path_dir(self) -> Path:
        return Path(self.log_dir).expanduser()

    def validate(self) -> "DiagnosticsConfig":
        """
        校验取值

        Raises:
            ConfigError: 取值非法
        """
        if self.ping_count < 1:
            raise ConfigError(f"ping_count 必须 >= 1: {self.ping_count}")
        if self.ping_timeout < 1:
            raise ConfigError(f"ping_timeout 必须 >= 1: {self.ping_timeout}")
        if self.step_timeout < 0:
            raise ConfigError(f"step_timeout 不能为负数: {self.step_timeout}")
        if not self.default_targets:
            raise ConfigError("default_targets 不能为空")
        return self

    def with_overrides(self, **overrides: Any) -> "DiagnosticsConfig":
        """返回应用了非 None 覆盖值的新配置"""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **_coerce(values, source="命令行参数")).validate()


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None
) -> DiagnosticsConfig:
    """
    加载诊断配置

    Args:
        config_path: YAML配置文件路径，为None时读取 NETDIAG_CONFIG 环境变量
        environ: 环境变量映射，默认 os.environ

    Returns:
        合并后的 DiagnosticsConfig

    Raises:
        ConfigError: 配置文件不存在、格式错误或取值非法
    """
    environ = os.environ if environ is None else environ
    config = DiagnosticsConfig()

    if config_path is None:
        config_path = environ.get(CONFIG_FILE_ENV) or None
    if config_path is not None:
        config = replace(config, **_load_yaml(Path(config_path)))

    env_values = {
        field_name: environ[env_var]
        for env_var, field_name in ENV_VARS.items()
        if environ.get(env_var, "").strip()
    }
    config = replace(config, **_coerce(env_values, source="环境变量"))

    return config.validate()


def _load_yaml(config_path: Path) -> Dict[str, Any]:
    """读取YAML配置文件，只保留已知字段"""
    if not config_path.exists():
        raise ConfigError(f"配置文件不存在: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"配置文件格式错误: {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"配置文件顶层必须是映射: {config_path}")

    known = {"ping_count", "ping_timeout", "step_timeout", "log_dir", "default_targets"}
    unknown = sorted(set(config_data) - known)
    if unknown:
        raise ConfigError(f"未知配置项: {', '.join(unknown)}")

    values = dict(config_data)
    targets = values.get("default_targets")
    if targets is not None:
        if not isinstance(targets, list) or not all(isinstance(t, str) and t.strip() for t in targets):
            raise ConfigError("default_targets 必须是非空字符串列表")
        values["default_targets"] = [t.strip() for t in targets]
    return _coerce(values, source=str(config_path))


def _coerce(values: Dict[str, Any], source: str) -> Dict[str, Any]:
    """把整数字段转换为 int，失败时抛出 ConfigError"""
    coerced = dict(values)
    for name in _INT_FIELDS:
        if name not in coerced:
            continue
        raw = coerced[name]
        if isinstance(raw, bool):
            raise ConfigError(f"{source}: {name} 必须是整数: {raw!r}")
        try:
            coerced[name] = int(str(raw).strip())
        except ValueError as e:
            raise ConfigError(f"{source}: {name} 必须是整数: {raw!r}") from e
    if "log_dir" in coerced:
        coerced["log_dir"] = str(coerced["log_dir"])
    return coerced
