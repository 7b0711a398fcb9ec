import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


# Qdrant connection (REST port by default)
QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_COLLECTION = os.getenv("QDRANT_COLLECTION", "semantic_search_api")

# Local model artifacts and runtime
MODEL_DIR = os.getenv("MODEL_DIR", "./model")
DEVICE = os.getenv("DEVICE", "cpu")  # "cpu" or "cuda"
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "25"))
NORMALIZE = _flag("NORMALIZE", "true")

# HTTP service
# The generic embed endpoint lets anyone submit anything for embedding, keep it off in production
ENABLE_EMBED_ENDPOINT = _flag("ENABLE_EMBED_ENDPOINT", "false")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
SEARCH_LIMIT = int(os.getenv("SEARCH_LIMIT", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Used by semantic_search.client
SEMANTIC_SEARCH_URL = os.getenv("SEMANTIC_SEARCH_URL", "http://localhost:3000")
