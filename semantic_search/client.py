"""Async client for a running Semantic Search API."""

import httpx
from typing import Any, Dict, List, Optional

from .config import SEMANTIC_SEARCH_URL


def _client(base_url: Optional[str], transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url or SEMANTIC_SEARCH_URL, transport=transport, timeout=30.0)


async def get_uuid(key: str, base_url: Optional[str] = None, transport=None) -> str:
    """Point UUID the service derives for an external key."""
    async with _client(base_url, transport) as client:
        resp = await client.get(f"/uuid/{key}")
        resp.raise_for_status()
        return resp.text


async def index_text(key: str, text: str, base_url: Optional[str] = None, transport=None) -> str:
    """Index text under an external key. Returns the point UUID."""
    async with _client(base_url, transport) as client:
        resp = await client.post(f"/index/{key}", content=text.encode("utf-8"))
        resp.raise_for_status()
        return resp.json()["uuid"]


async def search(query: str, limit: Optional[int] = None, base_url: Optional[str] = None,
                 transport=None) -> List[Dict[str, Any]]:
    params = {"limit": limit} if limit is not None else None
    async with _client(base_url, transport) as client:
        resp = await client.post("/search", content=query.encode("utf-8"), params=params)
        resp.raise_for_status()
        return resp.json()


async def embed(text: str, dense: bool = True, bm25: Optional[Dict[str, float]] = None,
                base_url: Optional[str] = None, transport=None) -> Dict[str, Any]:
    """Call the embed endpoint. Pass bm25={"avgdl": ...} to also get a sparse vector."""
    payload = {"text": text, "dense": dense, "bm25": bm25}
    async with _client(base_url, transport) as client:
        resp = await client.post("/embed", json=payload)
        resp.raise_for_status()
        return resp.json()
