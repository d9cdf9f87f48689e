"""
Capability 模块

面向 Agent 的可授权能力，执行前经过 License 闸门
"""

from capability_hub.capabilities.anyapi import AnyApiCapability
from capability_hub.capabilities.base import (
    Capability,
    CapabilityContext,
    CapabilityExecutionResult,
)
from capability_hub.capabilities.registry import CapabilityRegistry, get_capability_registry

__all__ = [
    "AnyApiCapability",
    "Capability",
    "CapabilityContext",
    "CapabilityExecutionResult",
    "CapabilityRegistry",
    "get_capability_registry",
]
