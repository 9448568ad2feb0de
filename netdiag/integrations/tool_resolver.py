"""
诊断工具可用性解析

为每种诊断能力按优先级选择本机已安装的实现（首选 → 降级替代 → 不可用）
"""
import shutil
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from ..models.results import Capability
from ..models.task import ToolCandidate
from .config_loader import DiagnosticsConfig


INSTALL_HINT = (
    "在 Ubuntu/WSL 上安装所需工具:\n"
    "  sudo apt update && sudo apt install -y iputils-ping traceroute dnsutils\n"
    "(可选降级: 'tracepath' (iputils) 和 'dig' (dnsutils) 会被自动使用)"
)

# 逐跳探测参数：每跳一个探测包，最多等待2秒
TRACE_WAIT_SECONDS = 2
TRACE_QUERIES_PER_HOP = 1


def default_candidates(config: DiagnosticsConfig) -> Dict[Capability, List[ToolCandidate]]:
    """
    构建各能力的候选实现列表（按优先级排序）

    Args:
        config: 诊断配置（ping 次数与超时）

    Returns:
        capability → [首选, 降级, ...]
    """
    return {
        Capability.REACHABILITY: [
            ToolCandidate(
                capability=Capability.REACHABILITY,
                name="ping",
                program="ping",
                build_args=lambda host: [
                    "-c", str(config.ping_count), "-W", str(config.ping_timeout), host
                ],
            ),
        ],
        Capability.TRACE: [
            ToolCandidate(
                capability=Capability.TRACE,
                name="traceroute",
                program="traceroute",
                build_args=lambda host: [
                    "-n", "-w", str(TRACE_WAIT_SECONDS), "-q", str(TRACE_QUERIES_PER_HOP), host
                ],
            ),
            ToolCandidate(
                capability=Capability.TRACE,
                name="tracepath",
                program="tracepath",
                build_args=lambda host: ["-n", host],
            ),
        ],
        # nslookup 和 dig +short 在查询无记录时都可能返回0，需要检查输出
        Capability.DNS: [
            ToolCandidate(
                capability=Capability.DNS,
                name="nslookup",
                program="nslookup",
                build_args=lambda host: [host],
                requires_answer=True,
            ),
            ToolCandidate(
                capability=Capability.DNS,
                name="dig",
                program="dig",
                build_args=lambda host: ["+short", host],
                requires_answer=True,
            ),
        ],
    }


class ToolSelection:
    """
    工具选择结果

    一次解析后保持不变，运行期间不再重新探测
    """

    def __init__(self, selected: Mapping[Capability, Optional[ToolCandidate]]):
        self._selected = {capability: selected.get(capability) for capability in Capability}

    def tool_for(self, capability: Capability) -> Optional[ToolCandidate]:
        return self._selected[capability]

    def is_available(self, capability: Capability) -> bool:
        return self._selected[capability] is not None

    @property
    def missing(self) -> List[Capability]:
        return [capability for capability, tool in self._selected.items() if tool is None]

    def __repr__(self) -> str:
        names = {
            capability.value: (tool.name if tool else None)
            for capability, tool in self._selected.items()
        }
        return f"ToolSelection({names})"


class ToolResolver:
    """
    工具可用性解析器

    只做存在性检查（PATH 中能否找到可执行文件），不做功能性检查
    """

    def __init__(
        self,
        candidates: Mapping[Capability, Sequence[ToolCandidate]],
        which: Callable[[str], Optional[str]] = shutil.which
    ):
        """
        初始化解析器

        Args:
            candidates: 各能力的候选实现（按优先级）
            which: 存在性检查函数，默认 shutil.which
        """
        self.candidates = {capability: list(tools) for capability, tools in candidates.items()}
        self.which = which
        self._selection: Optional[ToolSelection] = None

    def resolve(self) -> ToolSelection:
        """解析一次并缓存结果"""
        if self._selection is None:
            self._selection = ToolSelection({
                capability: self._pick(self.candidates.get(capability, []))
                for capability in Capability
            })
        return self._selection

    def _pick(self, tools: Sequence[ToolCandidate]) -> Optional[ToolCandidate]:
        for tool in tools:
            if self.which(tool.program):
                return tool
        return None

    def describe_missing(self, selection: ToolSelection) -> List[str]:
        """
        生成缺失能力的描述，例如 "traceroute / tracepath"

        Args:
            selection: 解析结果

        Returns:
            每个缺失能力一条描述
        """
        return [
            " / ".join(tool.name for tool in self.candidates.get(capability, [])) or capability.value
            for capability in selection.missing
        ]
