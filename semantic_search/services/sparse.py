"""
BM25 sparse encoding on fastembed's Qdrant/bm25 model.

No corpus statistics are kept here: the caller supplies the average
document length through Bm25Params. One fastembed model is cached per
(k1, b, avgdl) triple; the models are read-only after construction so
concurrent callers need no locking.
"""

import logging
from functools import lru_cache
from typing import Dict, Iterable, Optional

from fastembed import SparseTextEmbedding

from ..models import Bm25Params, SparseVector

BM25_MODEL = "Qdrant/bm25"


@lru_cache(maxsize=16)
def get_bm25_model(k1: float, b: float, avgdl: float) -> SparseTextEmbedding:
    logging.info(f"[Sparse] Loading {BM25_MODEL} (k1={k1}, b={b}, avgdl={avgdl})")
    return SparseTextEmbedding(model_name=BM25_MODEL, k=k1, b=b, avg_len=avgdl)


def collapse(indices: Iterable[int], values: Iterable[float]) -> SparseVector:
    """
    Fold (index, weight) pairs into a vector with unique, sorted indices.

    When an index repeats, the last pair wins. Weights are never summed.
    """
    weights: Dict[int, float] = {}
    for index, value in zip(indices, values):
        weights[int(index)] = float(value)

    ordered = sorted(weights)
    return SparseVector(indices=ordered, values=[weights[i] for i in ordered])


def encode(text: str, params: Optional[Bm25Params] = None, **kwargs) -> SparseVector:
    """
    Encode text into a sparse vector of (term id, BM25 weight) pairs.

    Params can be passed as a Bm25Params or as keyword arguments
    (avgdl, k1, b). Empty or token-less text yields an empty vector.
    """
    if params is None:
        params = Bm25Params(**kwargs)
    if not text or not text.strip():
        return SparseVector()

    model = get_bm25_model(params.k1, params.b, params.avgdl)
    embedding = next(iter(model.embed([text])))
    return collapse(embedding.indices.tolist(), embedding.values.tolist())
