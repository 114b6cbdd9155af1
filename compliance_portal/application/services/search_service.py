"""
Search service.

Runs the retrieval resolver and records the query in the user's recent
searches.

Dependencies: compliance_portal.core.retrieval, compliance_portal.application.services
System role: Search orchestration
"""

import logging

from compliance_portal.application.services.activity_service import ActivityService
from compliance_portal.core.retrieval.resolver import RetrievalResolver
from compliance_portal.models.search import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)


class SearchService:
    """Cited search plus recent-search tracking."""

    def __init__(
        self,
        resolver: RetrievalResolver,
        activity_service: ActivityService | None = None,
    ) -> None:
        self._resolver = resolver
        self._activity = activity_service

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Answer a search request.

        Raises:
            ValidationError: Empty query
            GenerationError: Provider failed after retries
        """
        response = await self._resolver.search(request.query, request.to_options())
        if request.user_id and self._activity is not None:
            await self._activity.record_search(
                request.user_id,
                request.query,
                results_count=len(response.citations)
                + sum(len(answer.citations) for answer in response.state_answers),
                state_filter=response.state_filter,
            )
        return response
