"""
DNS查询输出解析器

解析 nslookup 与 dig +short 的输出，提取解析到的地址或名称
"""
import re

from ...models.results import StepResult
from .base import DnsAnswer


NSLOOKUP_ERROR_PATTERN = re.compile(r"\*\* server can't find \S+?:?\s+(\S+)")
# 名称存在但没有对应记录时退出码仍为0: "*** Can't find x: No answer"
NSLOOKUP_NO_ANSWER_PATTERN = re.compile(r"\*\*\* Can't find \S+?:\s+(.+)$")
# "Address: 142.250.74.46" 只在 "Name:" 之后出现的才是答案，前面的是DNS服务器
NSLOOKUP_ADDRESS_PATTERN = re.compile(r"^Address(?:es)?:\s+(\S+)")
# 反向解析: "8.8.8.8.in-addr.arpa	name = dns.google."
NSLOOKUP_PTR_PATTERN = re.compile(r"\bname = (\S+)")


def parse_nslookup_output(result: StepResult, name: str) -> DnsAnswer:
    """
    解析nslookup输出

    Args:
        result: 步骤执行结果
        name: 查询的名称

    Returns:
        DnsAnswer

    示例输入:
        Server:		127.0.0.53
        Address:	127.0.0.53#53

        Non-authoritative answer:
        Name:	google.com
        Address: 142.250.74.46
    """
    answer = DnsAnswer(name=name)
    in_answer = False

    for line in result.output.splitlines():
        line = line.strip()
        error_match = NSLOOKUP_ERROR_PATTERN.search(line)
        if error_match:
            answer.error = error_match.group(1)
            continue
        no_answer_match = NSLOOKUP_NO_ANSWER_PATTERN.search(line)
        if no_answer_match:
            answer.error = no_answer_match.group(1)
            continue
        if line.startswith("Name:"):
            in_answer = True
            continue
        ptr_match = NSLOOKUP_PTR_PATTERN.search(line)
        if ptr_match:
            answer.addresses.append(ptr_match.group(1))
            continue
        address_match = NSLOOKUP_ADDRESS_PATTERN.match(line)
        if address_match and in_answer:
            answer.addresses.append(address_match.group(1))

    return answer


def parse_dig_short_output(result: StepResult, name: str) -> DnsAnswer:
    """
    解析dig +short输出（每行一条记录，无结果时输出为空）

    Args:
        result: 步骤执行结果
        name: 查询的名称

    Returns:
        DnsAnswer
    """
    records = [
        line.strip()
        for line in result.output.splitlines()
        if line.strip() and not line.lstrip().startswith(";")
    ]
    return DnsAnswer(name=name, addresses=records)
