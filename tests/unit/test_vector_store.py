"""
Test suite for vector storage.

Covers metadata filter semantics, the in-memory and FAISS backends, and
VectorStoreClient behavior: deterministic ids, idempotent upsert, exact
document deletes, batching and retry/error wrapping.

System role: Verification of the vector boundary
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from compliance_portal.boundary.vdb.embeddings import HashingEmbeddings, build_embeddings
from compliance_portal.boundary.vdb.faiss_vector_backend import FAISSVectorBackend
from compliance_portal.boundary.vdb.vector_backend import InMemoryVectorBackend
from compliance_portal.boundary.vdb.vector_schemas import ChunkMetadata, VectorEntry, matches_filter
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.boundary.vdb.vector_store_factory import get_vector_backend
from compliance_portal.configs.vector_store import VectorStoreSettings
from compliance_portal.core.document_processing.models import EnhancedChunk
from compliance_portal.core.exceptions import EmbeddingError, VectorStoreError


def make_chunk(index: int, text: str) -> EnhancedChunk:
    return EnhancedChunk(
        chunk_index=index,
        text=text,
        original_start_char=index * 100,
        original_end_char=index * 100 + len(text),
    )


def make_metadata(document_id: str, chunk: EnhancedChunk, state: str = "CO") -> ChunkMetadata:
    return ChunkMetadata(
        document_id=document_id,
        chunk_index=chunk.chunk_index,
        original_start_char=chunk.original_start_char,
        original_end_char=chunk.original_end_char,
        title="Rules",
        state=state,
        document_types=["regulation"],
        chunk_text=chunk.text,
    )


class TestMatchesFilter:
    """Equality and one-of filter semantics."""

    @pytest.fixture
    def metadata(self) -> dict:
        return {"state": "CO", "documentId": "doc-1", "documentTypes": ["regulation", "statute"]}

    def test_no_filter_matches(self, metadata) -> None:
        assert matches_filter(metadata, None)
        assert matches_filter(metadata, {})

    def test_plain_equality(self, metadata) -> None:
        assert matches_filter(metadata, {"state": "CO"})
        assert not matches_filter(metadata, {"state": "MI"})

    def test_eq_operator(self, metadata) -> None:
        assert matches_filter(metadata, {"documentId": {"$eq": "doc-1"}})
        assert not matches_filter(metadata, {"documentId": {"$eq": "doc-10"}})

    def test_in_operator_and_list_shorthand(self, metadata) -> None:
        assert matches_filter(metadata, {"state": {"$in": ["MI", "CO"]}})
        assert matches_filter(metadata, {"state": ["NJ", "CO"]})
        assert not matches_filter(metadata, {"state": {"$in": ["MI", "NJ"]}})

    def test_list_valued_metadata_matches_any_element(self, metadata) -> None:
        assert matches_filter(metadata, {"documentTypes": "statute"})
        assert not matches_filter(metadata, {"documentTypes": "aml"})

    def test_all_conditions_must_hold(self, metadata) -> None:
        assert not matches_filter(metadata, {"state": "CO", "documentId": "doc-2"})

    def test_unknown_operator_rejected(self, metadata) -> None:
        with pytest.raises(ValueError):
            matches_filter(metadata, {"state": {"$gt": "A"}})


class TestChunkMetadata:
    def test_wire_format_uses_camel_case(self) -> None:
        chunk = make_chunk(2, "Licensing fee is $500.")

        wire = make_metadata("doc-1", chunk).to_wire()

        assert wire["documentId"] == "doc-1"
        assert wire["chunkIndex"] == 2
        assert wire["originalStartChar"] == 200
        assert wire["chunkText"] == "Licensing fee is $500."
        assert "document_id" not in wire


class TestHashingEmbeddings:
    def test_deterministic_and_normalized(self) -> None:
        embeddings = HashingEmbeddings(dimension=64)

        first = embeddings.embed_query("Colorado licensing fees")
        second = embeddings.embed_query("Colorado licensing fees")

        assert first == second
        assert len(first) == 64
        assert sum(x * x for x in first) == pytest.approx(1.0)

    def test_empty_text_is_zero_vector(self) -> None:
        assert HashingEmbeddings(dimension=8).embed_query("") == [0.0] * 8

    def test_factory_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            build_embeddings(VectorStoreSettings(embedding_provider="nope"))

    def test_backend_factory_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            get_vector_backend(VectorStoreSettings(store_type="pinecone"), HashingEmbeddings())


@pytest.fixture(params=["memory", "faiss"])
def backend(request, tmp_path):
    if request.param == "memory":
        return InMemoryVectorBackend()
    return FAISSVectorBackend(str(tmp_path / "faiss"), HashingEmbeddings(dimension=256))


@pytest.fixture
def client(backend, fast_retry) -> VectorStoreClient:
    return VectorStoreClient(
        embeddings=HashingEmbeddings(dimension=256),
        backend=backend,
        namespace="unit",
        retry_settings=fast_retry,
        batch_size=2,
    )


class TestVectorStoreClient:
    """Behavior shared by every backend."""

    @pytest.mark.asyncio
    async def test_upsert_uses_deterministic_id(self, client) -> None:
        chunk = make_chunk(0, "Operators must renew licenses annually.")

        vector_id = await client.upsert_chunk("doc-1", chunk, make_metadata("doc-1", chunk))

        assert vector_id == "doc-1_chunk_0"

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, client) -> None:
        # Arrange
        chunk = make_chunk(0, "Operators must renew licenses annually.")
        metadata = make_metadata("doc-1", chunk)

        # Act
        await client.upsert_chunk("doc-1", chunk, metadata)
        await client.upsert_chunk("doc-1", chunk, metadata)

        # Assert
        entries = await client.list_entries()
        assert [entry.id for entry in entries] == ["doc-1_chunk_0"]
        assert (await client.get_index_stats()).total_vectors == 1

    @pytest.mark.asyncio
    async def test_search_ranks_similar_text_first_and_filters(self, client) -> None:
        # Arrange
        fee = make_chunk(0, "Colorado sports betting license fee schedule")
        aml = make_chunk(1, "Anti money laundering reporting thresholds")
        other = make_chunk(0, "Michigan sports betting license fee schedule")
        await client.upsert_chunk("doc-co", fee, make_metadata("doc-co", fee))
        await client.upsert_chunk("doc-co", aml, make_metadata("doc-co", aml))
        await client.upsert_chunk("doc-mi", other, make_metadata("doc-mi", other, state="MI"))

        # Act
        vector = await client.embed_query("license fee schedule")
        all_matches = await client.search(vector, top_k=3)
        co_matches = await client.search(vector, top_k=3, metadata_filter={"state": {"$in": ["CO"]}})

        # Assert
        assert all_matches[0].id in {"doc-co_chunk_0", "doc-mi_chunk_0"}
        assert all_matches[0].score >= all_matches[-1].score
        assert {m.document_id for m in co_matches} == {"doc-co"}
        assert co_matches[0].id == "doc-co_chunk_0"
        assert co_matches[0].metadata["chunkText"] == fee.text

    @pytest.mark.asyncio
    async def test_delete_document_is_exact_match(self, client) -> None:
        # Arrange: doc-1 must not remove doc-10
        for doc_id in ("doc-1", "doc-10"):
            for index in range(3):
                chunk = make_chunk(index, f"{doc_id} clause {index}")
                await client.upsert_chunk(doc_id, chunk, make_metadata(doc_id, chunk))

        # Act
        deleted = await client.delete_document("doc-1")

        # Assert
        assert deleted == 3
        remaining = {entry.metadata["documentId"] for entry in await client.list_entries()}
        assert remaining == {"doc-10"}

    @pytest.mark.asyncio
    async def test_delete_all_clears_namespace(self, client) -> None:
        chunk = make_chunk(0, "text")
        await client.upsert_chunk("doc-1", chunk, make_metadata("doc-1", chunk))

        await client.delete_all()

        assert await client.list_entries() == []
        assert (await client.get_index_stats()).total_vectors == 0


class TestVectorStoreClientErrors:
    """Retry and typed error wrapping."""

    @pytest.mark.asyncio
    async def test_delete_ids_batches_calls(self, fast_retry) -> None:
        backend = InMemoryVectorBackend()
        backend.delete = AsyncMock()
        client = VectorStoreClient(HashingEmbeddings(), backend, "unit", fast_retry, batch_size=2)

        count = await client.delete_ids(["a", "b", "c", "d", "e"])

        assert count == 5
        assert backend.delete.await_count == 3

    @pytest.mark.asyncio
    async def test_transient_backend_failure_is_retried(self, fast_retry) -> None:
        backend = InMemoryVectorBackend()
        backend.stats = AsyncMock(side_effect=[ConnectionError("blip"), await backend.stats("unit")])
        client = VectorStoreClient(HashingEmbeddings(), backend, "unit", fast_retry)

        stats = await client.get_index_stats()

        assert stats.total_vectors == 0
        assert backend.stats.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_backend_failure_raises_vector_store_error(self, fast_retry) -> None:
        backend = InMemoryVectorBackend()
        backend.query = AsyncMock(side_effect=ConnectionError("down"))
        client = VectorStoreClient(HashingEmbeddings(), backend, "unit", fast_retry)

        with pytest.raises(VectorStoreError) as exc_info:
            await client.search([0.1] * 256, top_k=5)

        assert exc_info.value.details["operation"] == "query"
        assert backend.query.await_count == fast_retry.max_attempts

    @pytest.mark.asyncio
    async def test_embedding_failure_raises_embedding_error(self, fast_retry) -> None:
        embeddings = HashingEmbeddings()
        embeddings.aembed_query = AsyncMock(side_effect=TimeoutError("slow"))
        client = VectorStoreClient(embeddings, InMemoryVectorBackend(), "unit", fast_retry)

        with pytest.raises(EmbeddingError):
            await client.embed("text")


class TestFAISSPersistence:
    @pytest.mark.asyncio
    async def test_index_survives_reload(self, tmp_path) -> None:
        # Arrange
        embeddings = HashingEmbeddings(dimension=32)
        backend = FAISSVectorBackend(str(tmp_path), embeddings)
        vector = embeddings.embed_query("renewal fee")
        await backend.upsert("ns", [VectorEntry(id="d_chunk_0", vector=vector, metadata={"documentId": "d"})])

        # Act
        reopened = FAISSVectorBackend(str(tmp_path), embeddings)
        matches = await reopened.query("ns", vector, top_k=1)

        # Assert
        assert matches[0].id == "d_chunk_0"
        assert matches[0].score == pytest.approx(1.0, abs=1e-4)
        assert matches[0].metadata == {"documentId": "d"}

    @pytest.mark.asyncio
    async def test_concurrent_upserts_and_deletes_keep_index_consistent(self, tmp_path) -> None:
        # Arrange
        embeddings = HashingEmbeddings(dimension=32)
        backend = FAISSVectorBackend(str(tmp_path), embeddings)

        def entries(document_id: str) -> list[VectorEntry]:
            return [
                VectorEntry(
                    id=f"{document_id}_chunk_{i}",
                    vector=embeddings.embed_query(f"{document_id} rule {i}"),
                    metadata={"documentId": document_id},
                )
                for i in range(5)
            ]

        # Act
        await asyncio.gather(*(backend.upsert("ns", entries(f"doc-{n}")) for n in range(12)))
        await asyncio.gather(
            *(backend.delete("ns", [f"doc-{n}_chunk_{i}" for i in range(5)]) for n in range(0, 12, 2)),
            *(backend.upsert("ns", entries(f"doc-{n}")) for n in range(1, 12, 2)),
        )

        # Assert
        stats = await backend.stats("ns")
        assert stats.total_vectors == 30
        reopened = FAISSVectorBackend(str(tmp_path), embeddings)
        listed = await reopened.list_entries("ns")
        assert {entry.metadata["documentId"] for entry in listed} == {f"doc-{n}" for n in range(1, 12, 2)}
        assert len(listed) == 30
