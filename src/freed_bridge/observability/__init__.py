"""
Observability Module
====================

This module provides:
    - RateMeter: Accepted frames per wall-clock second

DESIGN RULES:
    - Does NOT influence framing or dispatch
"""

from freed_bridge.observability.rate import RateMeter


__all__ = [
    "RateMeter",
]
