"""LLM boundary: answer generation providers."""

from compliance_portal.boundary.llm.generation_provider import (
    GenerationOptions,
    GenerationProvider,
    LangChainGenerationProvider,
    build_generation_provider,
)

__all__ = [
    "GenerationOptions",
    "GenerationProvider",
    "LangChainGenerationProvider",
    "build_generation_provider",
]
