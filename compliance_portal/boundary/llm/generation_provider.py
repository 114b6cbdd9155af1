"""
Answer generation providers.

A GenerationProvider turns a list of chat messages into answer text. The
LangChain implementation wraps any chat model (Gemini, Claude on Bedrock,
or an injected test model) and retries transient failures.

Dependencies: langchain_core, langchain_google_genai, langchain_aws, tenacity
System role: LLM adapter for the retrieval resolver
"""

import logging
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from langchain_aws import ChatBedrockConverse
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field

from compliance_portal.configs.retrieval import GenerationSettings
from compliance_portal.configs.vector_store import RetrySettings
from compliance_portal.core.exceptions import GenerationError
from compliance_portal.core.retrying import build_async_retrying

logger = logging.getLogger(__name__)


class GenerationOptions(BaseModel):
    """Per-call sampling options."""

    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)


@runtime_checkable
class GenerationProvider(Protocol):
    """Produces answer text for a chat prompt."""

    async def generate(self, messages: Sequence[BaseMessage], options: GenerationOptions) -> str:
        """
        Generate an answer.

        Raises:
            GenerationError: Provider failed after retries
        """
        ...


ChatModelFactory = Callable[[GenerationOptions], BaseChatModel]


def _message_text(content) -> str:
    """Flatten AIMessage content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class LangChainGenerationProvider:
    """GenerationProvider backed by a LangChain chat model."""

    def __init__(
        self,
        model_factory: ChatModelFactory,
        provider_name: str,
        retry_settings: RetrySettings | None = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            model_factory: Builds a chat model for the given options
            provider_name: Name reported in errors and logs
            retry_settings: Backoff policy (defaults from environment if None)
        """
        self._model_factory = model_factory
        self.provider_name = provider_name
        self._retry_settings = retry_settings or RetrySettings()

    async def generate(self, messages: Sequence[BaseMessage], options: GenerationOptions) -> str:
        logger.info(
            f"{__name__}:generate - START",
            extra={
                "provider": self.provider_name,
                "prompt_chars": sum(len(_message_text(m.content)) for m in messages),
            },
        )
        model = self._model_factory(options)
        try:
            async for attempt in build_async_retrying(
                self._retry_settings, logger, "generate"
            ):
                with attempt:
                    response = await model.ainvoke(list(messages))
        except Exception as e:
            logger.error(
                f"{__name__}:generate - FAILED: {type(e).__name__}: {e}",
                extra={"provider": self.provider_name},
            )
            raise GenerationError(
                "Answer generation failed",
                provider=self.provider_name,
                details={"error_type": type(e).__name__},
            ) from e

        answer = _message_text(response.content)
        logger.info(
            f"{__name__}:generate - SUCCESS",
            extra={"provider": self.provider_name, "answer_chars": len(answer)},
        )
        return answer


def build_generation_provider(
    settings: GenerationSettings,
    retry_settings: RetrySettings | None = None,
) -> LangChainGenerationProvider:
    """
    Create the configured generation provider.

    Raises:
        ValueError: Unknown provider
    """
    provider = settings.provider.lower()

    if provider == "google":
        def factory(options: GenerationOptions) -> BaseChatModel:
            return ChatGoogleGenerativeAI(
                model=settings.model,
                temperature=options.temperature,
                max_output_tokens=options.max_tokens,
            )
    elif provider == "bedrock":
        def factory(options: GenerationOptions) -> BaseChatModel:
            return ChatBedrockConverse(
                model=settings.model,
                region_name=settings.region,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
            )
    else:
        raise ValueError(
            f"Invalid GENERATION_PROVIDER: {provider}. Must be 'google' or 'bedrock'."
        )

    logger.info(
        f"{__name__}:build_generation_provider - provider={provider}, model={settings.model}"
    )
    return LangChainGenerationProvider(factory, provider, retry_settings)
