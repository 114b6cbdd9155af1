"""
Retry policy helpers.

Builds tenacity AsyncRetrying controllers from RetrySettings so every
provider call (embedding, vector backend, generation) backs off the same way.

Dependencies: tenacity, compliance_portal.configs.vector_store
System role: Transient-failure handling for remote collaborators
"""

import logging

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from compliance_portal.configs.vector_store import RetrySettings


def build_async_retrying(
    settings: RetrySettings,
    logger: logging.Logger,
    operation: str,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> AsyncRetrying:
    """
    Create an AsyncRetrying controller with exponential backoff and jitter.

    Args:
        settings: Attempt count and wait bounds
        logger: Logger receiving a warning before each sleep
        operation: Operation name used in the warning
        retry_on: Exception types worth retrying

    Returns:
        AsyncRetrying: Controller that reraises the last error when exhausted

    Usage:
        async for attempt in build_async_retrying(settings, logger, "embed"):
            with attempt:
                vector = await embeddings.aembed_query(text)
    """

    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"{logger.name}:{operation} - Retry {retry_state.attempt_number}/"
            f"{settings.max_attempts} after {type(exc).__name__}: {exc}"
        )

    return AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(settings.max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.initial_wait,
            max=settings.max_wait,
            jitter=settings.jitter,
        ),
        before_sleep=_before_sleep,
        reraise=True,
    )
