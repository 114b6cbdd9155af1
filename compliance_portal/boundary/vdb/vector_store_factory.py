"""
Vector backend factory.

Selects the in-memory or FAISS backend from VECTOR_STORE_STORE_TYPE and
assembles the VectorStoreClient around it.

Dependencies: compliance_portal.boundary.vdb, compliance_portal.configs
System role: Vector store instantiation and selection
"""

import logging

from langchain_core.embeddings import Embeddings

from compliance_portal.boundary.vdb.embeddings import build_embeddings
from compliance_portal.boundary.vdb.faiss_vector_backend import FAISSVectorBackend
from compliance_portal.boundary.vdb.vector_backend import InMemoryVectorBackend, VectorBackend
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.configs import Settings, get_settings
from compliance_portal.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_backend(settings: VectorStoreSettings, embeddings: Embeddings) -> VectorBackend:
    """
    Create the configured vector backend.

    Raises:
        ValueError: If store_type is invalid
    """
    store_type = settings.store_type.lower()

    if store_type == "memory":
        logger.info(f"{__name__}:get_vector_backend - Creating in-memory vector backend")
        return InMemoryVectorBackend()

    if store_type == "faiss":
        logger.info(
            f"{__name__}:get_vector_backend - Creating FAISS backend at {settings.persist_directory}"
        )
        return FAISSVectorBackend(settings.persist_directory, embeddings)

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. Must be 'memory' or 'faiss'."
    )


def build_vector_store_client(settings: Settings | None = None) -> VectorStoreClient:
    """Assemble a VectorStoreClient from application settings."""
    settings = settings or get_settings()
    embeddings = build_embeddings(settings.vector_store)
    return VectorStoreClient(
        embeddings=embeddings,
        backend=get_vector_backend(settings.vector_store, embeddings),
        namespace=settings.vector_store.namespace,
        retry_settings=settings.retry,
        batch_size=settings.vector_store.upsert_batch_size,
    )
