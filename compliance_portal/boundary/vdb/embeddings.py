"""
Embedding providers.

FixedDimensionEmbeddings wraps Google Generative AI embeddings so every
call uses the same output dimension. HashingEmbeddings is a deterministic
signed bag-of-words embedder for offline development and tests.

Dependencies: langchain_core, langchain_google_genai, python-dotenv
System role: Text-to-vector conversion for chunks and queries
"""

import hashlib
import logging
import math
import re

from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from compliance_portal.configs.vector_store import VectorStoreSettings

load_dotenv()
logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[a-z0-9]+")


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings with a fixed output dimensionality.

    The base class ignores output_dimensionality in the constructor, so
    both embed methods pass it explicitly on every call.
    """

    _output_dimensionality: int = 1024

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1024,
        **kwargs,
    ) -> None:
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - model={model}, output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: list[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: list[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> list[list[float]]:
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> list[float]:
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )


class HashingEmbeddings(Embeddings):
    """
    Deterministic embeddings from hashed tokens.

    Each lowercase alphanumeric token is mapped to a bucket and sign by
    SHA-256; the vector is L2-normalized. Texts sharing vocabulary score
    high cosine similarity, texts with disjoint vocabulary score ~0.
    """

    def __init__(self, dimension: int = 256) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in _TOKEN.findall((text or "").lower()):
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "little") % self.dimension
            sign = 1.0 if digest[4] & 1 == 0 else -1.0
            vector[bucket] += sign
        norm = math.sqrt(sum(x * x for x in vector))
        if norm > 0:
            vector = [x / norm for x in vector]
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)


def build_embeddings(settings: VectorStoreSettings) -> Embeddings:
    """
    Create the configured embedding provider.

    Args:
        settings: Vector store settings

    Returns:
        Embeddings: LangChain embeddings instance

    Raises:
        ValueError: Unknown provider
    """
    provider = settings.embedding_provider.lower()
    if provider == "google":
        return FixedDimensionEmbeddings(
            model=settings.embedding_model,
            output_dimensionality=settings.embedding_dimension,
        )
    if provider == "hash":
        return HashingEmbeddings(dimension=settings.embedding_dimension)
    raise ValueError(f"Invalid embedding provider: {provider}. Must be 'google' or 'hash'.")
