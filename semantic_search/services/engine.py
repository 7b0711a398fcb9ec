"""
Embedding engine.

Composes the dense model handle, the sparse encoder and the Qdrant
collection. One Engine is built at startup and shared by every request.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from qdrant_client import models

from ..config import MODEL_DIR, QDRANT_COLLECTION, QDRANT_URL, SEARCH_LIMIT
from ..models import Bm25Params, Item, SearchResult, SparseVector
from . import sparse
from .embedder import DenseModel
from .errors import EmbeddingError
from .vector_store import VectorStore


class Engine:
    def __init__(self, store: VectorStore, model: DenseModel):
        self.store = store
        self.model = model

    @property
    def collection(self) -> str:
        return self.store.collection

    @classmethod
    async def start(cls, qdrant_url: str = QDRANT_URL, collection: str = QDRANT_COLLECTION,
                    model_dir=MODEL_DIR, **model_kwargs) -> "Engine":
        """Bootstrap the collection, then load the model. Any failure here is fatal."""
        store = VectorStore.connect(qdrant_url, collection)
        await store.ensure_collection()
        try:
            model = DenseModel.load(model_dir, **model_kwargs)
        except Exception:
            await store.close()
            raise
        logging.info(f"🚀 Engine ready on {qdrant_url} / '{collection}'")
        return cls(store, model)

    # -------------------------
    # INDEX
    # -------------------------
    async def index(self, items: Iterable[Item]) -> None:
        texts = []
        id_payloads = []
        for item in items:
            texts.append(item.text)
            id_payloads.append((item.id, item.payload))

        if not texts:
            return

        # Nothing is written unless every text embedded
        vectors = await self.model.embed(texts)
        points = [
            models.PointStruct(id=str(point_id), vector=vector, payload=payload)
            for (point_id, payload), vector in zip(id_payloads, vectors)
        ]
        await self.store.upsert(points)

    # -------------------------
    # EMBED
    # -------------------------
    async def embed(self, texts: Sequence[str], batch_size: Optional[int] = None) -> List[List[float]]:
        return await self.model.embed(texts, batch_size)

    async def embed_single(self, text: str) -> List[float]:
        vectors = await self.model.embed([text])
        if len(vectors) != 1:
            raise EmbeddingError(f"Expected exactly one vector for one input, got {len(vectors)}")
        return vectors[0]

    def sparse_encode(self, text: str, params: Bm25Params) -> SparseVector:
        return sparse.encode(text, params)

    # -------------------------
    # SEARCH
    # -------------------------
    async def search(self, text: str, limit: Optional[int] = None) -> List[SearchResult]:
        limit = SEARCH_LIMIT if limit is None else limit
        if limit < 1:
            raise ValueError("limit must be a positive integer")

        vector = await self.embed_single(text)
        points = await self.store.query(vector, limit)

        results = []
        for point in points:
            key = (point.payload or {}).get("id")
            if not isinstance(key, str):
                logging.warning(f"[Engine] Dropping point {point.id}: payload has no string 'id'")
                continue
            results.append(SearchResult(id=key, score=point.score))
        return results

    async def close(self) -> None:
        await self.store.close()
