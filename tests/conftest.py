import asyncio
import hashlib
import threading
import time

import numpy as np
import pytest
from qdrant_client import AsyncQdrantClient

from semantic_search.services.embedder import DenseModel, VECTOR_DIMENSION
from semantic_search.services.engine import Engine
from semantic_search.services.vector_store import VectorStore


class FakeSentenceModel:
    """Deterministic stand-in for SentenceTransformer: each text seeds its own vector."""

    def __init__(self, dimension: int = VECTOR_DIMENSION, delay: float = 0.0):
        self.dimension = dimension
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._guard = threading.Lock()

    def get_sentence_embedding_dimension(self):
        return self.dimension

    def encode(self, texts, batch_size=32, **kwargs):
        with self._guard:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.calls.append((list(texts), batch_size))
            if self.delay:
                time.sleep(self.delay)
            return np.stack([self.vector(t) for t in texts])
        finally:
            with self._guard:
                self.in_flight -= 1

    def vector(self, text):
        seed = int.from_bytes(hashlib.md5(text.encode("utf-8")).digest()[:4], "little")
        return np.random.default_rng(seed).standard_normal(self.dimension).astype(np.float32)


@pytest.fixture
def fake_model():
    return FakeSentenceModel()


@pytest.fixture
def dense_model(fake_model):
    return DenseModel(fake_model)


@pytest.fixture
def memory_store():
    store = VectorStore(AsyncQdrantClient(location=":memory:"), "test_collection")
    asyncio.run(store.ensure_collection())
    return store


@pytest.fixture
def engine(memory_store, dense_model):
    return Engine(memory_store, dense_model)
