import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from qdrant_client import AsyncQdrantClient, models

from semantic_search.models import Bm25Params, Item, SearchResult
from semantic_search.services.embedder import DenseModel, VECTOR_DIMENSION
from semantic_search.services.engine import Engine
from semantic_search.services.errors import EmbeddingError, ModelLoadError
from semantic_search.services.vector_store import VectorStore
from tests.conftest import FakeSentenceModel


def _item(text, key, **payload):
    return Item(id=uuid.uuid4(), text=text, payload={"id": key, **payload})


def _mock_store(points=()):
    store = MagicMock(spec=VectorStore)
    store.collection = "mocked"
    store.upsert = AsyncMock()
    store.query = AsyncMock(return_value=list(points))
    return store


def test_index_then_search(engine):
    asyncio.run(engine.index([Item(id=uuid.uuid4(), text="hello world", payload={"id": "doc-1"})]))
    results = asyncio.run(engine.search("hello", limit=1))

    assert len(results) == 1
    assert results[0].id == "doc-1"
    assert -1.0 <= results[0].score <= 1.0


def test_index_empty_is_a_noop(fake_model):
    store = _mock_store()
    engine = Engine(store, DenseModel(fake_model))

    asyncio.run(engine.index([]))

    store.upsert.assert_not_called()
    assert fake_model.calls == []


def test_index_embeds_in_one_call_and_writes_once(fake_model):
    store = _mock_store()
    engine = Engine(store, DenseModel(fake_model))
    items = [_item(f"text {i}", f"doc-{i}", n=i) for i in range(4)]

    asyncio.run(engine.index(items))

    assert len(fake_model.calls) == 1
    store.upsert.assert_awaited_once()
    points = store.upsert.call_args.args[0]
    assert [p.id for p in points] == [str(i.id) for i in items]
    assert [p.payload for p in points] == [i.payload for i in items]
    assert all(len(p.vector) == VECTOR_DIMENSION for p in points)


def test_index_accepts_any_iterable(engine):
    items = (_item(t, t) for t in ["one", "two"])
    asyncio.run(engine.index(items))

    count = asyncio.run(engine.store.client.count(engine.collection))
    assert count.count == 2


def test_embedding_failure_writes_nothing():
    broken = MagicMock()
    broken.encode.side_effect = RuntimeError("boom")
    store = _mock_store()
    engine = Engine(store, DenseModel(broken))

    with pytest.raises(EmbeddingError):
        asyncio.run(engine.index([_item("hello", "doc")]))
    store.upsert.assert_not_called()


def test_store_failure_propagates(fake_model):
    store = _mock_store()
    store.upsert.side_effect = ConnectionError("qdrant down")
    engine = Engine(store, DenseModel(fake_model))

    with pytest.raises(ConnectionError):
        asyncio.run(engine.index([_item("hello", "doc")]))


def test_reindexing_same_uuid_replaces_point(engine):
    point = uuid.uuid4()
    asyncio.run(engine.index([Item(id=point, text="first version", payload={"id": "old"})]))
    asyncio.run(engine.index([Item(id=point, text="second version", payload={"id": "new"})]))

    results = asyncio.run(engine.search("second version", limit=10))
    count = asyncio.run(engine.store.client.count(engine.collection))

    assert [r.id for r in results] == ["new"]
    assert results[0].score == pytest.approx(1.0, abs=1e-4)
    assert count.count == 1


def test_search_respects_limit_and_order(engine):
    asyncio.run(engine.index([_item(f"document number {i}", f"doc-{i}") for i in range(8)]))
    results = asyncio.run(engine.search("document", limit=5))

    assert len(results) <= 5
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


def test_search_default_limit(engine):
    asyncio.run(engine.index([_item(f"text {i}", f"doc-{i}") for i in range(12)]))
    assert len(asyncio.run(engine.search("text"))) == 10


def test_search_drops_points_without_string_id(engine):
    asyncio.run(engine.index([
        _item("good", "ok"),
        Item(id=uuid.uuid4(), text="numeric", payload={"id": 7}),
        Item(id=uuid.uuid4(), text="missing", payload={"name": "x"}),
    ]))

    results = asyncio.run(engine.search("anything", limit=10))
    assert [r.id for r in results] == ["ok"]


def test_search_keeps_store_order(fake_model):
    points = [
        models.ScoredPoint(id=1, version=0, score=0.9, payload={"id": "a"}),
        models.ScoredPoint(id=2, version=0, score=0.8, payload=None),
        models.ScoredPoint(id=3, version=0, score=0.7, payload={"id": "c"}),
    ]
    store = _mock_store(points)
    engine = Engine(store, DenseModel(fake_model))

    results = asyncio.run(engine.search("query", limit=3))

    assert results == [SearchResult(id="a", score=0.9), SearchResult(id="c", score=0.7)]
    assert store.query.call_args.args[1] == 3


def test_search_rejects_non_positive_limit(engine):
    with pytest.raises(ValueError):
        asyncio.run(engine.search("hello", limit=0))


def test_embed_single_matches_batch(engine):
    batch = asyncio.run(engine.embed(["hello", "world"]))
    single = asyncio.run(engine.embed_single("hello"))

    assert len(batch) == 2
    assert single == pytest.approx(batch[0])
    assert len(single) == VECTOR_DIMENSION


def test_embed_single_requires_exactly_one_vector():
    model = MagicMock(spec=DenseModel)
    model.embed = AsyncMock(return_value=[[0.0] * VECTOR_DIMENSION] * 2)
    engine = Engine(_mock_store(), model)

    with pytest.raises(EmbeddingError):
        asyncio.run(engine.embed_single("hello"))


def test_sparse_encode_skips_the_model(engine, fake_model):
    vec = engine.sparse_encode("hello hello world", Bm25Params(avgdl=1000))

    assert len(vec.indices) == 2
    assert len(set(vec.indices)) == len(vec.indices)
    assert fake_model.calls == []


def test_start_is_idempotent(fake_model):
    client = AsyncQdrantClient(location=":memory:")

    with patch.object(VectorStore, "connect", side_effect=lambda url, name: VectorStore(client, name)), \
            patch.object(DenseModel, "load", return_value=DenseModel(fake_model)) as load:
        first = asyncio.run(Engine.start("http://qdrant:6333", "shared"))
        second = asyncio.run(Engine.start("http://qdrant:6333", "shared"))

    assert first.collection == second.collection == "shared"
    assert load.call_count == 2
    assert asyncio.run(client.collection_exists("shared"))


def test_start_fails_when_store_unreachable():
    store = MagicMock(spec=VectorStore)
    store.ensure_collection = AsyncMock(side_effect=ConnectionError("refused"))

    with patch.object(VectorStore, "connect", return_value=store), \
            patch.object(DenseModel, "load") as load:
        with pytest.raises(ConnectionError):
            asyncio.run(Engine.start("http://nowhere:6333", "docs"))
    load.assert_not_called()


def test_start_closes_store_when_model_fails():
    store = MagicMock(spec=VectorStore)
    store.ensure_collection = AsyncMock(return_value=False)
    store.close = AsyncMock()

    with patch.object(VectorStore, "connect", return_value=store), \
            patch.object(DenseModel, "load", side_effect=ModelLoadError("missing model.onnx")):
        with pytest.raises(ModelLoadError):
            asyncio.run(Engine.start("http://qdrant:6333", "docs"))
    store.close.assert_awaited_once()
