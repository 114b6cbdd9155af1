"""
FAISS vector backend for local and single-node deployments.

Wraps LangChain's FAISS vector store with one persisted index per namespace.
Vectors are L2-normalized and scored by inner product, so scores are cosine
similarities (higher is better) like a hosted index returns.

Dependencies: faiss-cpu, langchain_community, langchain_core, fastapi.concurrency
System role: Persistent vector store behind the VectorBackend protocol
"""

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import faiss
from fastapi.concurrency import run_in_threadpool
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.embeddings import Embeddings

from compliance_portal.boundary.vdb.vector_schemas import (
    IndexStats,
    MetadataFilter,
    VectorEntry,
    VectorMatch,
    matches_filter,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Stored alongside user metadata so query results can be keyed by vector id
_ID_KEY = "_vectorId"


class FAISSVectorBackend:
    """
    FAISS-backed implementation of VectorBackend.

    Every mutation is persisted with save_local. Blocking FAISS calls run
    in the threadpool so the event loop stays free, and all of them hold
    one re-entrant lock: FAISS indexes and the store cache are not
    thread-safe.
    """

    def __init__(self, persist_directory: str, embeddings: Embeddings) -> None:
        """
        Initialize backend.

        Args:
            persist_directory: Directory holding one index per namespace
            embeddings: Embedding function LangChain's FAISS wrapper requires
                (vectors are always supplied precomputed)
        """
        self._directory = Path(persist_directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._embeddings = embeddings
        self._stores: dict[str, FAISS] = {}
        self._lock = threading.RLock()

    def _locked(self, fn: Callable[..., T], *args: Any) -> T:
        with self._lock:
            return fn(*args)

    def _index_path(self, namespace: str) -> Path:
        return self._directory / f"{namespace}.faiss"

    def _load(self, namespace: str) -> FAISS | None:
        if namespace in self._stores:
            return self._stores[namespace]
        if not self._index_path(namespace).exists():
            return None
        logger.info(f"{__name__}:_load - Loading namespace={namespace} from {self._directory}")
        store = FAISS.load_local(
            str(self._directory),
            self._embeddings,
            index_name=namespace,
            allow_dangerous_deserialization=True,
        )
        self._stores[namespace] = store
        return store

    def _create(self, namespace: str, dimension: int) -> FAISS:
        logger.info(f"{__name__}:_create - Creating namespace={namespace}, dimension={dimension}")
        store = FAISS(
            embedding_function=self._embeddings,
            index=faiss.IndexFlatIP(dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            normalize_L2=True,
            distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
        )
        self._stores[namespace] = store
        return store

    def _save(self, namespace: str, store: FAISS) -> None:
        store.save_local(str(self._directory), index_name=namespace)

    def _upsert_sync(self, namespace: str, entries: Sequence[VectorEntry]) -> None:
        if not entries:
            return
        store = self._load(namespace) or self._create(namespace, len(entries[0].vector))
        existing = set(store.index_to_docstore_id.values())
        stale = [entry.id for entry in entries if entry.id in existing]
        if stale:
            store.delete(ids=stale)

        store.add_embeddings(
            text_embeddings=[
                (entry.metadata.get("chunkText", ""), list(entry.vector)) for entry in entries
            ],
            metadatas=[{**entry.metadata, _ID_KEY: entry.id} for entry in entries],
            ids=[entry.id for entry in entries],
        )
        self._save(namespace, store)

    async def upsert(self, namespace: str, entries: Sequence[VectorEntry]) -> None:
        await run_in_threadpool(self._locked, self._upsert_sync, namespace, list(entries))

    def _query_sync(
        self,
        namespace: str,
        vector: list[float],
        top_k: int,
        metadata_filter: MetadataFilter | None,
    ) -> list[VectorMatch]:
        store = self._load(namespace)
        if store is None or top_k <= 0:
            return []
        total = len(store.index_to_docstore_id)
        if total == 0:
            return []

        results = store.similarity_search_with_score_by_vector(
            vector,
            k=top_k,
            filter=(lambda metadata: matches_filter(metadata, metadata_filter))
            if metadata_filter
            else None,
            fetch_k=total if metadata_filter else top_k,
        )
        matches = []
        for doc, score in results:
            metadata = dict(doc.metadata or {})
            vector_id = metadata.pop(_ID_KEY, None) or getattr(doc, "id", None) or ""
            matches.append(VectorMatch(id=vector_id, score=float(score), metadata=metadata))
        return matches

    async def query(
        self,
        namespace: str,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorMatch]:
        return await run_in_threadpool(
            self._locked, self._query_sync, namespace, list(vector), top_k, metadata_filter
        )

    def _delete_sync(self, namespace: str, ids: Sequence[str]) -> None:
        store = self._load(namespace)
        if store is None:
            return
        existing = set(store.index_to_docstore_id.values())
        present = [vector_id for vector_id in ids if vector_id in existing]
        if not present:
            return
        store.delete(ids=present)
        self._save(namespace, store)

    async def delete(self, namespace: str, ids: Sequence[str]) -> None:
        await run_in_threadpool(self._locked, self._delete_sync, namespace, list(ids))

    def _delete_all_sync(self, namespace: str) -> None:
        self._stores.pop(namespace, None)
        for suffix in (".faiss", ".pkl"):
            path = self._directory / f"{namespace}{suffix}"
            if path.exists():
                path.unlink()

    async def delete_all(self, namespace: str) -> None:
        await run_in_threadpool(self._locked, self._delete_all_sync, namespace)

    def _entries_sync(
        self,
        namespace: str,
        metadata_filter: MetadataFilter | None,
    ) -> list[VectorEntry]:
        store = self._load(namespace)
        if store is None:
            return []
        entries = []
        for vector_id in list(store.index_to_docstore_id.values()):
            doc = store.docstore.search(vector_id)
            if isinstance(doc, str):
                # InMemoryDocstore returns a message string for unknown ids
                continue
            metadata: dict[str, Any] = dict(doc.metadata or {})
            metadata.pop(_ID_KEY, None)
            if matches_filter(metadata, metadata_filter):
                entries.append(VectorEntry(id=vector_id, metadata=metadata))
        return entries

    async def list_entries(
        self,
        namespace: str,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorEntry]:
        return await run_in_threadpool(self._locked, self._entries_sync, namespace, metadata_filter)

    def _stats_sync(self, namespace: str) -> IndexStats:
        store = self._load(namespace)
        if store is None:
            return IndexStats(namespace=namespace, total_vectors=0)
        return IndexStats(
            namespace=namespace,
            total_vectors=len(store.index_to_docstore_id),
            dimension=store.index.d,
        )

    async def stats(self, namespace: str) -> IndexStats:
        return await run_in_threadpool(self._locked, self._stats_sync, namespace)
