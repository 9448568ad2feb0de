"""
netdiag - 网络连通性诊断工具
"""
__version__ = "1.0.0"
