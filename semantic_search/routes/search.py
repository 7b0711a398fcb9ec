import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse

from ..models import EmbedRequest, EmbedResponse, IndexResponse, Item, SearchResult
from ..services.engine import Engine
from ..services.utils import decode_body, point_id

router = APIRouter()
embed_router = APIRouter()


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


# -------------------------
# UUID FOR AN EXTERNAL KEY
# -------------------------
@router.get("/uuid/{key}", response_class=PlainTextResponse)
async def get_uuid(key: str):
    return str(point_id(key))


# -------------------------
# INDEX TEXT
# -------------------------
@router.post("/index/{key}", response_model=IndexResponse)
async def index_text(key: str, request: Request, engine: Engine = Depends(get_engine)):
    try:
        text = decode_body(await request.body())
        uuid = point_id(key)
        await engine.index([Item(id=uuid, text=text, payload={"id": key})])
        return IndexResponse(uuid=uuid)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"[Search:index] Failed for '{key}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


# -------------------------
# SEARCH TEXT
# -------------------------
@router.post("/search", response_model=List[SearchResult])
async def search(request: Request, limit: Optional[int] = Query(default=None, ge=1),
                 engine: Engine = Depends(get_engine)):
    try:
        text = decode_body(await request.body())
        return await engine.search(text, limit)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"[Search:search] Failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


# -------------------------
# RAW EMBEDDINGS (OPTIONAL)
# -------------------------
@embed_router.post("/embed", response_model=EmbedResponse, response_model_exclude_none=True)
async def embed(req: EmbedRequest, engine: Engine = Depends(get_engine)):
    """Dense and/or BM25 vectors for one text, for callers doing their own hybrid queries."""
    try:
        resp = EmbedResponse()
        if req.dense:
            resp.dense = await engine.embed_single(req.text)
        if req.bm25 is not None:
            resp.bm25 = engine.sparse_encode(req.text, req.bm25)
        return resp

    except Exception as e:
        logging.error(f"[Search:embed] Failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
