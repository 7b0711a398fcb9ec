"""
Services module for the Semantic Search API.

This module contains the embedding-and-indexing core:
- embedder: Serialized, batched access to the local dense model
- sparse: BM25-style sparse term vectors
- vector_store: Qdrant collection bootstrap, upsert and nearest-neighbour queries
- engine: Composes the above into index / search / embed operations
- utils: Point id derivation and request body helpers
"""

from .embedder import DenseModel, VECTOR_DIMENSION
from .engine import Engine
from .errors import EmbeddingError, ModelLoadError
from .sparse import encode as sparse_encode
from .utils import point_id
from .vector_store import VectorStore

__all__ = [
    "DenseModel",
    "VECTOR_DIMENSION",
    "Engine",
    "EmbeddingError",
    "ModelLoadError",
    "sparse_encode",
    "point_id",
    "VectorStore",
]
