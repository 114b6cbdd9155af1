"""
Vector database boundary layer.

- VectorBackend: protocol with in-memory and FAISS implementations
- VectorStoreClient: embedding + vector facade with retries

Dependencies: langchain_core, langchain_community, faiss-cpu, numpy
System role: Vector store adapter for ingestion and retrieval
"""

from compliance_portal.boundary.vdb.vector_backend import InMemoryVectorBackend, VectorBackend
from compliance_portal.boundary.vdb.vector_schemas import (
    ChunkMetadata,
    IndexStats,
    MetadataFilter,
    VectorEntry,
    VectorMatch,
    matches_filter,
)
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient

__all__ = [
    "ChunkMetadata",
    "InMemoryVectorBackend",
    "IndexStats",
    "MetadataFilter",
    "VectorBackend",
    "VectorEntry",
    "VectorMatch",
    "VectorStoreClient",
    "matches_filter",
]
