"""
诊断流程包

提供单目标诊断序列、运行编排器和汇总报告
"""
from .orchestrator import RunOrchestrator
from .reporter import ReportGenerator
from .sequencer import TargetSequencer, classify

__all__ = [
    "RunOrchestrator",
    "ReportGenerator",
    "TargetSequencer",
    "classify",
]
