import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from .config import ENABLE_EMBED_ENDPOINT, HOST, LOG_LEVEL, PORT, QDRANT_COLLECTION, QDRANT_URL
from .routes import embed_router, router
from .services.embedder import VECTOR_DIMENSION
from .services.engine import Engine

logging.basicConfig(level=LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared engine once; startup fails if the store or model is unavailable."""
    engine = await Engine.start(QDRANT_URL, QDRANT_COLLECTION)
    app.state.engine = engine
    yield
    await engine.close()


def create_app(enable_embed_endpoint: bool = ENABLE_EMBED_ENDPOINT) -> FastAPI:
    app = FastAPI(
        title="Semantic Search API",
        version="1.0",
        description="Embeds text with a local model and indexes / searches it in Qdrant",
        lifespan=lifespan,
    )
    app.include_router(router)
    if enable_embed_endpoint:
        app.include_router(embed_router)

    @app.get("/")
    def root(request: Request):
        engine = getattr(request.app.state, "engine", None)
        return {
            "status": "ok",
            "collection": engine.collection if engine else None,
            "vector_dimension": VECTOR_DIMENSION,
            "embed_endpoint": enable_embed_endpoint,
        }

    return app


app = create_app()


# -------- Run the server --------
if __name__ == "__main__":
    import uvicorn
    print(f"Starting Semantic Search API on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
