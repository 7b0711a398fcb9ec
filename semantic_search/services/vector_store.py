import logging
from typing import List

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import UnexpectedResponse

from ..config import QDRANT_COLLECTION, QDRANT_URL
from .embedder import VECTOR_DIMENSION


# -------------------------
# VECTOR STORE
# -------------------------

class VectorStore:
    """Thin handle on one Qdrant collection. Holds no copy of remote state."""

    def __init__(self, client: AsyncQdrantClient, collection: str = QDRANT_COLLECTION,
                 dimension: int = VECTOR_DIMENSION):
        self.client = client
        self.collection = collection
        self.dimension = dimension

    @classmethod
    def connect(cls, url: str = QDRANT_URL, collection: str = QDRANT_COLLECTION, **kwargs) -> "VectorStore":
        return cls(AsyncQdrantClient(url=url), collection, **kwargs)

    def vectors_config(self) -> models.VectorParams:
        return models.VectorParams(
            size=self.dimension,
            distance=models.Distance.COSINE,
            quantization_config=models.ScalarQuantization(
                scalar=models.ScalarQuantizationConfig(type=models.ScalarType.INT8),
            ),
        )

    # -------------------------
    # BOOTSTRAP (IDEMPOTENT)
    # -------------------------
    async def ensure_collection(self) -> bool:
        """Create the collection if absent. Returns True when this call created it."""
        if await self.client.collection_exists(self.collection):
            logging.info(f"[VectorStore] Using existing collection '{self.collection}'")
            return False

        try:
            await self.client.create_collection(
                collection_name=self.collection,
                vectors_config=self.vectors_config(),
            )
        except UnexpectedResponse:
            # Another process may have created it between the check and the create
            if await self.client.collection_exists(self.collection):
                logging.info(f"[VectorStore] Collection '{self.collection}' created concurrently")
                return False
            raise

        logging.info(
            f"[VectorStore] Created collection '{self.collection}' "
            f"(size={self.dimension}, cosine, int8 scalar quantization)"
        )
        return True

    # -------------------------
    # UPSERT
    # -------------------------
    async def upsert(self, points: List[models.PointStruct]) -> None:
        await self.client.upsert(collection_name=self.collection, points=points, wait=True)
        logging.info(f"[VectorStore] Upserted {len(points)} point(s) into '{self.collection}'")

    # -------------------------
    # NEAREST NEIGHBOURS
    # -------------------------
    async def query(self, vector: List[float], limit: int) -> List[models.ScoredPoint]:
        response = await self.client.query_points(
            collection_name=self.collection,
            query=vector,
            limit=limit,
            with_payload=True,
        )
        return response.points

    async def close(self) -> None:
        await self.client.close()
