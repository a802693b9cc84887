"""
Medgate access gate module.
"""

from .gate import AccessGate, GateState

__all__ = [
    "AccessGate",
    "GateState",
]
