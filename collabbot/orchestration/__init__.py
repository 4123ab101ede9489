"""Request routing."""

from .router import CapabilityRouter, DelegationResult

__all__ = ["CapabilityRouter", "DelegationResult"]
