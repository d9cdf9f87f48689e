"""
Agent Capability Hub

让 Agent 通过统一的工具接口调用任意 REST API
"""

__version__ = "0.1.0"
