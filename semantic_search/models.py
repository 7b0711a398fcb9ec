from uuid import UUID
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, JsonValue

# Arbitrary caller-controlled metadata stored next to each point
Payload = Dict[str, JsonValue]


class Item(BaseModel):
    id: UUID
    text: str
    payload: Payload = Field(default_factory=dict)


class SearchResult(BaseModel):
    id: str
    score: float


class SparseVector(BaseModel):
    indices: List[int] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)


class Bm25Params(BaseModel):
    avgdl: float = Field(gt=0)
    k1: float = Field(default=1.2, ge=0)
    b: float = Field(default=0.75, ge=0, le=1)


class EmbedRequest(BaseModel):
    text: str
    dense: bool = True
    bm25: Optional[Bm25Params] = None


class EmbedResponse(BaseModel):
    dense: Optional[List[float]] = None
    bm25: Optional[SparseVector] = None


class IndexResponse(BaseModel):
    uuid: UUID
