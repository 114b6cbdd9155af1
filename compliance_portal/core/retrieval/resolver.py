"""
Retrieval and citation resolver.

Answers a question with citations back to exact source passages:

1. Strip ``@state`` and ``#category`` mentions into metadata filters
2. Embed the cleaned query, search, drop results under the similarity floor
3. Drop chunks whose document no longer exists
4. Generate from a numbered-source prompt
5. Resolve ``[Source N]`` markers to chunks and narrow each to a span

In per-state mode steps 2-5 run once per state with that state's sources
only.

Dependencies: sqlalchemy, compliance_portal.boundary, compliance_portal.core.retrieval
System role: RAG query orchestration
"""

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.llm.generation_provider import (
    GenerationOptions,
    GenerationProvider,
)
from compliance_portal.boundary.vdb.vector_schemas import MetadataFilter, VectorMatch
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.configs.retrieval import GenerationSettings, RetrievalSettings
from compliance_portal.core.exceptions import ValidationError
from compliance_portal.core.retrieval.citation_markers import (
    extract_citation_markers,
    sentences_by_source,
    strip_markers,
)
from compliance_portal.core.retrieval.mention_parser import ALL_STATES, US_STATES, parse_query_mentions
from compliance_portal.core.retrieval.prompt_builder import build_answer_messages
from compliance_portal.core.retrieval.span_selection import pick_most_relevant_span
from compliance_portal.models.search import (
    Citation,
    RelatedDocument,
    SearchOptions,
    SearchResponse,
    Span,
    StateAnswer,
)

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = "I couldn't find any relevant information to answer your question."


def state_no_results_answer(code: str) -> str:
    return (
        f"Based on the available {code} regulatory documents, I couldn't find "
        "sufficient information to answer your question."
    )


def merge_tags(
    mentioned: Sequence[str],
    requested: Sequence[str] | None,
    normalize: Callable[[str], str],
) -> list[str]:
    """Mentioned tags first, then requested ones, normalized and deduplicated."""
    merged = list(mentioned)
    for tag in requested or []:
        tag = normalize(tag.strip())
        if tag and tag not in merged:
            merged.append(tag)
    return merged


def build_state_filter(codes: Sequence[str]) -> MetadataFilter | None:
    """Equality filter for one code, one-of for several, None when unscoped."""
    if not codes:
        return None
    if len(codes) == 1:
        return {"state": codes[0]}
    return {"state": {"$in": list(codes)}}


def build_category_filter(verticals: Sequence[str], document_types: Sequence[str]) -> MetadataFilter:
    """One-of filters on the list-valued category fields; empty when unscoped."""
    metadata_filter: MetadataFilter = {}
    if verticals:
        metadata_filter["verticals"] = {"$in": list(verticals)}
    if document_types:
        metadata_filter["documentTypes"] = {"$in": list(document_types)}
    return metadata_filter


def aggregate_related_documents(sources: Sequence[VectorMatch]) -> list[RelatedDocument]:
    """Deduplicate sources by document, keeping max and summed scores."""
    related: dict[str, RelatedDocument] = {}
    for match in sources:
        doc_id = match.document_id
        if not doc_id:
            continue
        existing = related.get(doc_id)
        if existing is None:
            related[doc_id] = RelatedDocument(
                document_id=doc_id,
                title=match.metadata.get("title", ""),
                state=match.metadata.get("state"),
                max_score=match.score,
                total_score=match.score,
                chunk_count=1,
            )
        else:
            existing.max_score = max(existing.max_score, match.score)
            existing.total_score += match.score
            existing.chunk_count += 1
    return sorted(related.values(), key=lambda doc: doc.max_score, reverse=True)


def build_citation(number: int, match: VectorMatch, answer_text: str) -> Citation:
    """Resolve one source to a citation whose span is in document coordinates."""
    meta = match.metadata
    chunk_text = meta.get("chunkText", "")
    local = pick_most_relevant_span(chunk_text, answer_text)
    offset = int(meta.get("originalStartChar", 0))
    return Citation(
        number=number,
        chunk_id=match.id,
        document_id=match.document_id or "",
        document_title=meta.get("title", ""),
        page_number=int(meta.get("pageNumber", 1)),
        section_title=meta.get("sectionTitle"),
        text=chunk_text,
        span=Span(start=offset + local.start, end=offset + local.end, text=local.text),
        score=match.score,
    )


class RetrievalResolver:
    """Single search path over swappable vector and generation backends."""

    def __init__(
        self,
        vector_client: VectorStoreClient,
        generation_provider: GenerationProvider,
        session_factory: async_sessionmaker[AsyncSession],
        settings: RetrievalSettings | None = None,
        generation_settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            vector_client: Embedding + vector facade
            generation_provider: Answer generator
            session_factory: Session factory for the document-existence guard
            settings: Retrieval defaults (loaded from environment if None)
            generation_settings: Sampling defaults (loaded from environment if None)
        """
        self._vector_client = vector_client
        self._generator = generation_provider
        self._session_factory = session_factory
        self._settings = settings or RetrievalSettings()
        self._generation_settings = generation_settings or GenerationSettings()

    async def search(self, query: str, options: SearchOptions | None = None) -> SearchResponse:
        """
        Answer a question with citations.

        Args:
            query: Raw user query, possibly with ``@state`` and ``#category``
                mentions
            options: Per-query overrides

        Returns:
            SearchResponse: Answer, citations and related documents. The
                canned no-results answer when nothing survives filtering.
                With ``per_state_answers`` and two or more states, one
                isolated answer per state in ``state_answers``.

        Raises:
            ValidationError: Query is empty once mentions are removed
            EmbeddingError: Query embedding failed
            VectorStoreError: Vector search failed
            GenerationError: Answer generation failed
        """
        options = options or SearchOptions()
        parsed = parse_query_mentions(query)
        if not parsed.clean_query:
            raise ValidationError("Query is empty", field="query")

        codes = merge_tags(parsed.state_codes, options.jurisdiction_filter, str.upper)
        if ALL_STATES in codes:
            codes = []
        verticals = merge_tags(parsed.vertical_ids, options.vertical_filter, str.lower)
        document_types = merge_tags(parsed.document_type_ids, options.document_type_filter, str.lower)
        category_filter = build_category_filter(verticals, document_types)

        top_k = options.top_k or self._settings.top_k
        floor = (
            options.min_similarity
            if options.min_similarity is not None
            else self._settings.min_similarity
        )
        generation_options = GenerationOptions(
            temperature=(
                options.temperature
                if options.temperature is not None
                else self._generation_settings.temperature
            ),
            max_tokens=options.max_tokens or self._generation_settings.max_tokens,
        )
        logger.info(
            f"{__name__}:search - START",
            extra={
                "clean_query": parsed.clean_query,
                "state_filter": codes,
                "category_filter": category_filter,
                "top_k": top_k,
            },
        )
        response = SearchResponse(
            answer=NO_RESULTS_ANSWER,
            clean_query=parsed.clean_query,
            state_filter=codes,
            vertical_filter=verticals,
            document_type_filter=document_types,
        )

        vector = await self._vector_client.embed_query(parsed.clean_query)
        if options.per_state_answers and len(codes) > 1:
            return await self._search_per_state(
                response, vector, top_k, floor, category_filter, generation_options
            )

        sources = await self._retrieve(
            vector, top_k, floor, {**(build_state_filter(codes) or {}), **category_filter}
        )
        if not sources:
            return response

        response.answer, response.citations = await self._generate(
            parsed.clean_query, sources, generation_options
        )
        response.related_documents = aggregate_related_documents(sources)
        logger.info(
            f"{__name__}:search - SUCCESS",
            extra={"sources": len(sources), "citations": len(response.citations)},
        )
        return response

    async def _search_per_state(
        self,
        response: SearchResponse,
        vector: list[float],
        top_k: int,
        floor: float,
        category_filter: MetadataFilter,
        generation_options: GenerationOptions,
    ) -> SearchResponse:
        """
        Answer each state from its own sources, one state at a time.

        A state's prompt never contains another state's chunks, and each
        answer numbers its sources from 1.
        """
        all_sources: list[VectorMatch] = []
        for code in response.state_filter:
            sources = await self._retrieve(vector, top_k, floor, {"state": code, **category_filter})
            if not sources:
                response.state_answers.append(StateAnswer(state=code, answer=state_no_results_answer(code)))
                continue
            answer, citations = await self._generate(response.clean_query, sources, generation_options)
            response.state_answers.append(
                StateAnswer(
                    state=code,
                    answer=answer,
                    citations=citations,
                    related_documents=aggregate_related_documents(sources),
                    source_count=len(sources),
                )
            )
            all_sources.extend(sources)

        if all_sources:
            response.answer = "\n\n".join(
                f"{US_STATES.get(item.state, item.state)} ({item.state}):\n{item.answer}"
                for item in response.state_answers
            )
            response.related_documents = aggregate_related_documents(all_sources)
        logger.info(
            f"{__name__}:search - SUCCESS (per state)",
            extra={
                "states": response.state_filter,
                "sources": len(all_sources),
                "citations": sum(len(item.citations) for item in response.state_answers),
            },
        )
        return response

    async def _retrieve(
        self,
        vector: list[float],
        top_k: int,
        floor: float,
        metadata_filter: MetadataFilter,
    ) -> list[VectorMatch]:
        """Search, apply the similarity floor and the existence guard, best first."""
        matches = await self._vector_client.search(vector, top_k, metadata_filter or None)
        above_floor = [match for match in matches if match.score >= floor]
        sources = await self._drop_orphans(above_floor)
        sources.sort(key=lambda match: match.score, reverse=True)
        if not sources:
            logger.info(
                f"{__name__}:_retrieve - No relevant chunks",
                extra={"filter": metadata_filter, "matches": len(matches), "above_floor": len(above_floor)},
            )
        return sources

    async def _generate(
        self,
        clean_query: str,
        sources: list[VectorMatch],
        generation_options: GenerationOptions,
    ) -> tuple[str, list[Citation]]:
        messages = build_answer_messages(clean_query, sources)
        answer = await self._generator.generate(messages, generation_options)
        return answer, self._resolve_citations(answer, sources)

    async def _drop_orphans(self, matches: list[VectorMatch]) -> list[VectorMatch]:
        """Keep only matches whose document row still exists."""
        if not matches:
            return []
        candidate_ids = {match.document_id for match in matches if match.document_id}
        async with self._session_factory() as session:
            existing = await document_crud.get_existing_ids(session, candidate_ids)

        kept = [match for match in matches if match.document_id in existing]
        orphans = sorted(candidate_ids - existing)
        if orphans:
            logger.warning(
                f"{__name__}:_drop_orphans - Dropped chunks of missing documents",
                extra={"orphan_document_ids": orphans, "dropped": len(matches) - len(kept)},
            )
        return kept

    def _resolve_citations(self, answer: str, sources: list[VectorMatch]) -> list[Citation]:
        numbers = [n for n in extract_citation_markers(answer) if 1 <= n <= len(sources)]
        if not numbers:
            fallback_text = strip_markers(answer)
            count = min(self._settings.fallback_citation_count, len(sources))
            return [
                build_citation(number, sources[number - 1], fallback_text)
                for number in range(1, count + 1)
            ]

        citing = sentences_by_source(answer)
        return [
            build_citation(number, sources[number - 1], " ".join(citing.get(number, [])))
            for number in numbers
        ]
