"""
Reference data service.

Two-tier lookup for verticals and document types: the remote
authoritative API first (retried with exponential backoff), then the
static tables when the API is unset or keeps failing.

Dependencies: httpx, tenacity, compliance_portal.configs
System role: Classification vocabularies for uploads and filters
"""

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from compliance_portal.configs.auxiliary import ReferenceDataSettings
from compliance_portal.core.exceptions import ReferenceDataError
from compliance_portal.core.retrieval.mention_parser import DOCUMENT_TYPES, VERTICALS
from compliance_portal.models.reference_data import ReferenceDataResponse, ReferenceItem

logger = logging.getLogger(__name__)

STATIC_VERTICALS = sorted(VERTICALS)
STATIC_DOCUMENT_TYPES = sorted(DOCUMENT_TYPES)


def display_name(slug: str) -> str:
    """'sports-online' -> 'Sports Online'."""
    return " ".join(word.capitalize() for word in slug.split("-"))


def static_items(slugs: list[str]) -> list[ReferenceItem]:
    return [ReferenceItem(name=slug, display_name=display_name(slug)) for slug in slugs]


def parse_items(payload: object) -> list[ReferenceItem]:
    """
    Accept a list of slugs or of ``{name, displayName}`` objects, optionally
    wrapped as ``{"items": [...]}``.

    Raises:
        ReferenceDataError: Unrecognized payload shape
    """
    if isinstance(payload, dict):
        payload = payload.get("items", payload.get("data"))
    if not isinstance(payload, list):
        raise ReferenceDataError("Reference data payload is not a list")

    items = []
    for raw in payload:
        if isinstance(raw, str):
            items.append(ReferenceItem(name=raw, display_name=display_name(raw)))
        elif isinstance(raw, dict) and raw.get("name"):
            label = raw.get("displayName") or raw.get("display_name") or display_name(raw["name"])
            items.append(ReferenceItem(name=raw["name"], display_name=label))
        else:
            raise ReferenceDataError("Reference data item has no name", details={"item": raw})
    return items


class ReferenceDataService:
    """Verticals and document types with static fallback."""

    def __init__(
        self,
        settings: ReferenceDataSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            settings: API location and retry policy (loaded from environment if None)
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._settings = settings or ReferenceDataSettings()
        self._transport = transport

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"{__name__}:_fetch - Retry {retry_state.attempt_number} after {type(exc).__name__}: {exc}"
        )

    async def _fetch(self, path: str) -> list[ReferenceItem]:
        settings = self._settings
        headers = {"Authorization": f"Bearer {settings.api_key}"} if settings.api_key else {}
        url = f"{settings.api_base_url.rstrip('/')}/{path}"

        retrying = AsyncRetrying(
            retry=retry_if_exception_type((httpx.HTTPError, ReferenceDataError)),
            stop=stop_after_attempt(settings.max_retries + 1),
            wait=wait_exponential(multiplier=settings.base_delay, min=0, max=30),
            before_sleep=self._before_sleep,
            reraise=True,
        )
        async with httpx.AsyncClient(timeout=settings.timeout, transport=self._transport) as client:
            async for attempt in retrying:
                with attempt:
                    response = await client.get(url, headers=headers)
                    response.raise_for_status()
                    items = parse_items(response.json())
                    if not items:
                        raise ReferenceDataError(f"Reference data '{path}' is empty")
                    return items

    async def _lookup(self, path: str, fallback: list[str]) -> ReferenceDataResponse:
        if not self._settings.api_base_url:
            return ReferenceDataResponse(items=static_items(fallback), source="static")
        try:
            items = await self._fetch(path)
        except (httpx.HTTPError, ReferenceDataError, ValueError) as e:
            logger.warning(
                f"{__name__}:_lookup - Falling back to static {path}: {type(e).__name__}: {e}"
            )
            return ReferenceDataResponse(items=static_items(fallback), source="static")
        return ReferenceDataResponse(items=items, source="api")

    async def get_verticals(self) -> ReferenceDataResponse:
        return await self._lookup("verticals", STATIC_VERTICALS)

    async def get_document_types(self) -> ReferenceDataResponse:
        return await self._lookup("document-types", STATIC_DOCUMENT_TYPES)
