"""Model adapter used by every generator."""

from .lib import (
    CACHE_CONTROL,
    ModelAdapter,
    ModelResponse,
    default_generation_config,
    mark_cacheable,
)

__all__ = [
    "CACHE_CONTROL",
    "ModelResponse",
    "ModelAdapter",
    "default_generation_config",
    "mark_cacheable",
]
