"""Local caches."""

from .sml_cache import SMLCache

__all__ = ["SMLCache"]
