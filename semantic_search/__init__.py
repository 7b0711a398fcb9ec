"""
Semantic Search API.

A FastAPI service that embeds text with a local sentence model and stores /
searches it in a Qdrant collection, with BM25 sparse vectors for hybrid
keyword retrieval.

Main components:
- main: FastAPI application factory and lifespan
- config: Configuration and environment variables
- models: Pydantic request/response and domain models
- routes: API endpoint handlers
- services: Embedding engine, dense model handle, sparse encoder, Qdrant glue
- client: Async httpx client for the HTTP API
"""

from .config import QDRANT_URL, QDRANT_COLLECTION, MODEL_DIR
from .models import Item, SearchResult, SparseVector, Bm25Params
from .services import Engine

__all__ = [
    "QDRANT_URL",
    "QDRANT_COLLECTION",
    "MODEL_DIR",
    "Item",
    "SearchResult",
    "SparseVector",
    "Bm25Params",
    "Engine",
]
