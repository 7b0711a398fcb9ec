import asyncio
import logging
import threading
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
from fastapi.concurrency import run_in_threadpool
from sentence_transformers import SentenceTransformer

from ..config import BATCH_SIZE, DEVICE, MODEL_DIR, NORMALIZE
from .errors import EmbeddingError, ModelLoadError

# Output size of the bundled all-MiniLM style model; the Qdrant collection is created with it
VECTOR_DIMENSION = 384

MODEL_FILE = "model.onnx"
MODEL_ARTIFACTS = (
    MODEL_FILE,
    "tokenizer.json",
    "config.json",
    "special_tokens_map.json",
    "tokenizer_config.json",
)


def check_artifacts(model_dir) -> Path:
    path = Path(model_dir)
    missing = [name for name in MODEL_ARTIFACTS if not (path / name).is_file()]
    if missing:
        raise ModelLoadError(f"Missing model artifacts in {path}: {', '.join(missing)}")
    return path


class DenseModel:
    """
    Serialized, batched access to one embedding model instance.

    The runtime is not safe to call concurrently, so every embed call holds
    the lock for the whole batch. Inference itself runs in a worker thread
    to keep the event loop free while callers queue on the asyncio lock.
    The thread lock is held by the worker doing the inference, so a caller
    that is cancelled mid-batch cannot let the next batch start early.
    """

    def __init__(self, model, batch_size: int = BATCH_SIZE, normalize: bool = NORMALIZE,
                 dimension: int = VECTOR_DIMENSION):
        if batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self._model = model
        self._lock = asyncio.Lock()
        self._model_lock = threading.Lock()
        self.batch_size = batch_size
        self.normalize = normalize
        self.dimension = dimension

    @classmethod
    def load(cls, model_dir=MODEL_DIR, device: str = DEVICE, **kwargs) -> "DenseModel":
        path = check_artifacts(model_dir)
        logging.info(f"[Embedder] Loading model from {path} on device {device}")
        try:
            model = SentenceTransformer(
                str(path),
                device=device,
                backend="onnx",
                model_kwargs={"file_name": MODEL_FILE},
            )
        except Exception as e:
            raise ModelLoadError(f"Could not load model from {path}: {e}") from e

        handle = cls(model, **kwargs)
        dimension = model.get_sentence_embedding_dimension()
        if dimension != handle.dimension:
            raise ModelLoadError(
                f"Model dimension mismatch. Expected {handle.dimension}, got {dimension}"
            )
        logging.info(f"[Embedder] Vector dimension locked at {dimension}")
        return handle

    def _encode(self, texts: List[str], batch_size: int) -> List[List[float]]:
        try:
            with self._model_lock:
                raw_vectors = self._model.encode(
                    texts,
                    batch_size=batch_size,
                    convert_to_numpy=True,
                    normalize_embeddings=False,
                    show_progress_bar=False,
                )
        except Exception as e:
            raise EmbeddingError(f"Embedding runtime failed: {e}") from e

        raw_vectors = np.asarray(raw_vectors, dtype=np.float32)
        if raw_vectors.ndim != 2 or raw_vectors.shape[0] != len(texts):
            raise EmbeddingError(
                f"Runtime returned {raw_vectors.shape} for {len(texts)} input(s)"
            )
        if raw_vectors.shape[1] != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch. "
                f"Expected {self.dimension}, got {raw_vectors.shape[1]}"
            )

        if self.normalize:
            norms = np.linalg.norm(raw_vectors, axis=1, keepdims=True)
            norms[norms == 0] = 1
            raw_vectors = raw_vectors / norms

        return raw_vectors.tolist()

    async def embed(self, texts: Sequence[str], batch_size: Optional[int] = None) -> List[List[float]]:
        """One vector per text, in input order. An empty input returns []."""
        texts = list(texts)
        if not texts:
            return []
        batch_size = self.batch_size if batch_size is None else batch_size
        if batch_size < 1:
            raise ValueError("batch_size must be a positive integer")

        async with self._lock:
            vectors = await run_in_threadpool(self._encode, texts, batch_size)

        logging.debug(f"[Embedder] Embedded {len(vectors)} text(s) with batch size {batch_size}")
        return vectors
