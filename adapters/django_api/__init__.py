"""
Tailorbook Django HTTP adapter.
Thin framework glue over the engines and projections.
"""

from adapters.django_api.wiring import (
    DEV_OWNER_API_KEY,
    DEV_STAFF_API_KEY,
    TailorbookDependencies,
    build_dependencies,
)

__all__ = [
    "DEV_OWNER_API_KEY",
    "DEV_STAFF_API_KEY",
    "TailorbookDependencies",
    "build_dependencies",
]
