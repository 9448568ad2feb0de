"""
Traceroute输出解析器

解析 traceroute -n / tracepath -n 输出，识别网络路径和断点位置
"""
import re
from typing import List, Optional

from ...models.results import StepResult
from .base import TracerouteHop, TracerouteResult


_IP = r"\d{1,3}(?:\.\d{1,3}){3}|[0-9a-fA-F]*:[0-9a-fA-F:]+"

# traceroute: " 1  10.0.1.1  0.512 ms" 或 " 1  10.0.1.1 (10.0.1.1)  0.512 ms"
# tracepath:  " 1:  10.0.1.1   0.512ms"
HOP_PATTERN = re.compile(
    rf"^\s*(\d+)\??:?\s+({_IP})(?:\s+\([^)]*\))?\s+([\d.]+)\s*ms"
)
# traceroute: " 3  * * *" 或 " 3  *"；tracepath: " 3:  no reply"
TIMEOUT_PATTERN = re.compile(r"^\s*(\d+):?\s+(?:\*(?:\s+\*)*|no reply)\s*$")
TARGET_PATTERN = re.compile(rf"traceroute to \S+ \(({_IP})\)")


def parse_traceroute_output(result: StepResult, target: Optional[str] = None) -> TracerouteResult:
    """
    解析traceroute/tracepath输出

    Args:
        result: 步骤执行结果
        target: 目标主机，输出中没有目标IP（tracepath）时使用

    Returns:
        TracerouteResult: 包含所有跳点和分析结果

    示例输入:
        traceroute to 10.0.2.20 (10.0.2.20), 30 hops max, 60 byte packets
         1  10.0.1.1  0.512 ms
         2  10.10.1.1  1.234 ms
         3  *
         4  *

    解析逻辑:
        1. 提取目标IP
        2. 逐行解析每一跳（tracepath 同一跳可能出现多行，只保留第一行）
        3. 识别第一个超时的hop
        4. 记录最后一个可达的hop
    """
    stdout = result.output

    target_match = TARGET_PATTERN.search(stdout)
    target_ip = target_match.group(1) if target_match else (target or "")

    hops: List[TracerouteHop] = []
    seen = set()
    last_reachable_hop: Optional[TracerouteHop] = None
    first_timeout_hop: Optional[int] = None

    for line in stdout.split('\n'):
        hop_match = HOP_PATTERN.match(line)
        if hop_match:
            hop_number = int(hop_match.group(1))
            if hop_number in seen:
                continue
            seen.add(hop_number)
            hop = TracerouteHop(
                hop_number=hop_number,
                ip_address=hop_match.group(2),
                rtt_ms=float(hop_match.group(3)),
                is_timeout=False
            )
            hops.append(hop)
            last_reachable_hop = hop
            continue

        timeout_match = TIMEOUT_PATTERN.match(line)
        if timeout_match:
            hop_number = int(timeout_match.group(1))
            if hop_number in seen:
                continue
            seen.add(hop_number)
            hops.append(TracerouteHop(
                hop_number=hop_number,
                ip_address=None,
                rtt_ms=None,
                is_timeout=True
            ))
            if first_timeout_hop is None:
                first_timeout_hop = hop_number

    is_complete = bool(
        last_reachable_hop and target_ip and last_reachable_hop.ip_address == target_ip
    )

    return TracerouteResult(
        target_ip=target_ip,
        hops=hops,
        last_reachable_hop=last_reachable_hop,
        first_timeout_hop=first_timeout_hop,
        is_complete=is_complete
    )
