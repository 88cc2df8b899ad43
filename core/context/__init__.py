"""
Tailorbook Context — Public API
=================================
"""

from core.context.live import LIVE_COLLECTIONS, LiveCollections

__all__ = [
    "LIVE_COLLECTIONS",
    "LiveCollections",
]
