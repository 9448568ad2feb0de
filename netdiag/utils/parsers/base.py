"""
解析器通用数据结构

定义所有解析器共用的结果类型
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PingResult:
    """Ping命令结果"""
    packets_transmitted: int
    packets_received: int
    packet_loss_percent: float
    rtt_min: Optional[float] = None    # ms
    rtt_avg: Optional[float] = None    # ms
    rtt_max: Optional[float] = None    # ms
    is_reachable: bool = False

    def summary(self) -> str:
        text = (f"{self.packets_transmitted} transmitted, {self.packets_received} received, "
                f"{self.packet_loss_percent:g}% loss")
        if self.rtt_avg is not None:
            text += f", rtt avg {self.rtt_avg:g} ms"
        return text


@dataclass
class TracerouteHop:
    """Traceroute单个跳点"""
    hop_number: int
    ip_address: Optional[str]          # None表示超时（* * * / no reply）
    rtt_ms: Optional[float]            # 第一次RTT
    is_timeout: bool


@dataclass
class TracerouteResult:
    """Traceroute完整结果"""
    target_ip: str
    hops: List[TracerouteHop]
    last_reachable_hop: Optional[TracerouteHop] = None
    first_timeout_hop: Optional[int] = None  # 第一个超时的hop编号
    is_complete: bool = False          # 是否到达目标

    def summary(self) -> str:
        if not self.hops:
            return "no hops parsed"
        text = f"{len(self.hops)} hops"
        if self.last_reachable_hop:
            text += f", last reply {self.last_reachable_hop.ip_address}"
        if self.first_timeout_hop is not None:
            text += f", first silent hop {self.first_timeout_hop}"
        text += ", reached target" if self.is_complete else ", target not reached"
        return text


@dataclass
class DnsAnswer:
    """DNS查询结果"""
    name: str
    addresses: List[str] = field(default_factory=list)
    error: Optional[str] = None        # NXDOMAIN / SERVFAIL 等

    @property
    def has_answer(self) -> bool:
        return bool(self.addresses)

    def summary(self) -> str:
        if self.addresses:
            return f"{self.name}: {', '.join(self.addresses)}"
        if self.error:
            return f"{self.name}: {self.error}"
        return f"{self.name}: empty answer"
