"""
命令输出解析器包

提供 ping / traceroute / DNS 三类解析器的导入
"""
from .base import DnsAnswer, PingResult, TracerouteHop, TracerouteResult
from .dns_parser import parse_dig_short_output, parse_nslookup_output
from .ping_parser import parse_ping_result
from .traceroute_parser import parse_traceroute_output

__all__ = [
    # 数据结构
    "PingResult",
    "TracerouteHop",
    "TracerouteResult",
    "DnsAnswer",
    # 解析器函数
    "parse_ping_result",
    "parse_traceroute_output",
    "parse_nslookup_output",
    "parse_dig_short_output",
]
