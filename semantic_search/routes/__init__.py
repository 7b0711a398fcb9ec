"""
API Routes module.

- search: index, search, uuid and the optional embed endpoint
"""

from .search import router, embed_router, get_engine

__all__ = [
    "router",
    "embed_router",
    "get_engine",
]
