"""
Access gating package.
"""

from .access_gate import AccessGate

__all__ = ["AccessGate"]
