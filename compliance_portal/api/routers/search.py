"""
Search API endpoints.

Routes: POST /search

Dependencies: compliance_portal.application.services, compliance_portal.models
System role: Cited question-answering HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from compliance_portal.api.deps import get_search_service
from compliance_portal.application.services.search_service import SearchService
from compliance_portal.core.exceptions import (
    EmbeddingError,
    GenerationError,
    ValidationError,
    VectorStoreError,
)
from compliance_portal.models.search import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    search_service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Answer a question from the indexed documents with numbered citations.

    ``@CO``-style mentions in the query scope retrieval to those states and
    ``#lottery``-style mentions to verticals or document types. With
    ``per_state_answers`` each mentioned state gets its own answer.

    Raises:
        HTTPException(400): Query is empty once mentions are removed
        HTTPException(502): Embedding, vector or generation provider failed
    """
    try:
        return await search_service.search(request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except GenerationError as e:
        logger.error("Answer generation failed", extra={"provider": e.details.get("provider"), "error": str(e)})
        raise HTTPException(status_code=502, detail="Answer generation is unavailable; try again shortly")
    except (EmbeddingError, VectorStoreError) as e:
        logger.error("Retrieval failed", extra={"error": str(e)})
        raise HTTPException(status_code=502, detail="Search is unavailable; try again shortly")
