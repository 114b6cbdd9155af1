"""
Integration tests for RetrievalResolver.

Documents are ingested through the real pipeline; answers come from a
scripted LangChain fake chat model.

System role: Verification of cited question answering
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.llm.generation_provider import LangChainGenerationProvider
from compliance_portal.configs.retrieval import GenerationSettings, RetrievalSettings
from compliance_portal.core.exceptions import GenerationError, ValidationError
from compliance_portal.core.retrieval.resolver import NO_RESULTS_ANSWER, RetrievalResolver, state_no_results_answer
from compliance_portal.models.search import SearchOptions

FEE_TOPIC = "annual license fee rules"


@pytest.fixture
def make_resolver(vector_client, session_factory):
    def factory(generator) -> RetrievalResolver:
        return RetrievalResolver(
            vector_client,
            generator,
            session_factory,
            RetrievalSettings(top_k=5, min_similarity=0.2, fallback_citation_count=2),
            GenerationSettings(temperature=0.0, max_tokens=500),
        )

    return factory


@pytest.fixture
async def fee_documents(ingest, make_text):
    """Colorado and Michigan fee rules plus an unrelated Colorado AML notice."""
    colorado = await ingest(make_text(12, FEE_TOPIC), state="CO", title="Colorado Fee Rules")
    michigan = await ingest(make_text(12, FEE_TOPIC), state="MI", title="Michigan Fee Rules")
    aml = await ingest(make_text(12, "anti money laundering audits"), state="CO", title="AML Notice")
    return {"CO": colorado, "MI": michigan, "AML": aml}


class TestJurisdictionScoping:
    @pytest.mark.asyncio
    async def test_state_mention_limits_sources_to_that_state(
        self, fee_documents, make_resolver, make_generator, session_factory
    ) -> None:
        # Arrange
        generator = make_generator("Operators pay the annual license fee [Source 1].")
        resolver = make_resolver(generator)

        # Act
        response = await resolver.search("@CO annual license fee")

        # Assert
        colorado_ids = {str(fee_documents["CO"].id), str(fee_documents["AML"].id)}
        assert response.clean_query == "annual license fee"
        assert response.state_filter == ["CO"]
        assert response.citations
        assert {c.document_id for c in response.citations} <= colorado_ids
        assert {d.document_id for d in response.related_documents} <= colorado_ids
        assert "Michigan Fee Rules" not in generator.prompts[0]
        assert [message.type for message in generator.calls[0]] == ["system", "human"]
        assert "Colorado Fee Rules" in generator.calls[0][1].content
        assert response.related_documents[0].document_id == str(fee_documents["CO"].id)

    @pytest.mark.asyncio
    async def test_citation_span_indexes_document_content(
        self, fee_documents, make_resolver, make_generator, session_factory
    ) -> None:
        resolver = make_resolver(make_generator("Sentence 03 sets out annual license fee rules [Source 1]."))

        response = await resolver.search("annual license fee", SearchOptions(jurisdiction_filter=["co"]))

        citation = response.citations[0]
        async with session_factory() as session:
            document = await document_crud.get_by_id(session, fee_documents["CO"].id)
        assert citation.document_id == str(document.id)
        assert citation.number == 1
        assert document.content[citation.span.start:citation.span.end] == citation.span.text
        assert citation.span.text in citation.text

    @pytest.mark.asyncio
    async def test_all_mention_removes_scoping(self, fee_documents, make_resolver, make_generator) -> None:
        resolver = make_resolver(make_generator("Both states charge fees [Source 1, 2]."))

        response = await resolver.search("@ALL annual license fee", SearchOptions(jurisdiction_filter=["MI"]))

        states = {d.state for d in response.related_documents}
        assert response.state_filter == []
        assert {"CO", "MI"} <= states


class TestCategoryScoping:
    @pytest.mark.asyncio
    async def test_vertical_mention_limits_sources(self, ingest, make_text, make_resolver, make_generator) -> None:
        # Arrange
        lottery = await ingest(
            make_text(12, FEE_TOPIC), title="Lottery Retailer Fees", verticals=["lottery"], document_types=["statute"]
        )
        await ingest(make_text(12, FEE_TOPIC), title="Online Sportsbook Fees")
        generator = make_generator("Lottery retailers pay the annual license fee [Source 1].")

        # Act
        response = await make_resolver(generator).search("#lottery annual license fee")

        # Assert
        assert response.clean_query == "annual license fee"
        assert response.vertical_filter == ["lottery"]
        assert {c.document_id for c in response.citations} == {str(lottery.id)}
        assert "Online Sportsbook Fees" not in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_document_type_option_is_normalized(self, ingest, make_text, make_resolver, make_generator) -> None:
        statute = await ingest(make_text(12, FEE_TOPIC), title="Fee Statute", document_types=["statute"])
        await ingest(make_text(12, FEE_TOPIC), title="Fee Regulation", document_types=["regulation"])

        response = await make_resolver(make_generator("Fees apply [Source 1].")).search(
            "annual license fee", SearchOptions(document_type_filter=[" Statute "])
        )

        assert response.document_type_filter == ["statute"]
        assert {d.document_id for d in response.related_documents} == {str(statute.id)}


class TestPerStateAnswers:
    @pytest.mark.asyncio
    async def test_each_state_is_answered_from_its_own_sources(
        self, fee_documents, make_resolver, make_generator
    ) -> None:
        # Arrange
        generator = make_generator(
            "Colorado operators pay the annual license fee [Source 1].",
            "Michigan operators pay the annual license fee [Source 1].",
        )

        # Act
        response = await make_resolver(generator).search(
            "@CO @MI annual license fee", SearchOptions(per_state_answers=True)
        )

        # Assert
        assert generator.call_count == 2
        assert "Michigan Fee Rules" not in generator.prompts[0]
        assert "Colorado Fee Rules" not in generator.prompts[1]
        colorado, michigan = response.state_answers
        assert (colorado.state, michigan.state) == ("CO", "MI")
        assert colorado.answer.startswith("Colorado operators")
        assert {c.document_id for c in colorado.citations} <= {str(fee_documents["CO"].id), str(fee_documents["AML"].id)}
        assert {c.document_id for c in michigan.citations} == {str(fee_documents["MI"].id)}
        assert [c.number for c in michigan.citations] == [1]
        assert response.citations == []
        assert response.answer.startswith("Colorado (CO):\nColorado operators")
        assert "Michigan (MI):\nMichigan operators" in response.answer

    @pytest.mark.asyncio
    async def test_state_without_sources_gets_its_own_no_results_answer(
        self, fee_documents, make_resolver, make_generator
    ) -> None:
        generator = make_generator("Colorado operators pay the annual license fee [Source 1].")

        response = await make_resolver(generator).search(
            "@CO @NV annual license fee", SearchOptions(per_state_answers=True)
        )

        assert generator.call_count == 1
        nevada = response.state_answers[1]
        assert nevada.answer == state_no_results_answer("NV")
        assert nevada.source_count == 0 and nevada.citations == []

    @pytest.mark.asyncio
    async def test_single_state_uses_combined_answer(self, fee_documents, make_resolver, make_generator) -> None:
        response = await make_resolver(make_generator("Fees apply [Source 1].")).search(
            "@CO annual license fee", SearchOptions(per_state_answers=True)
        )

        assert response.state_answers == []
        assert response.citations


class TestResultGuards:
    @pytest.mark.asyncio
    async def test_deleted_document_chunks_are_not_cited(
        self, ingest, make_text, make_resolver, make_generator, session_factory
    ) -> None:
        # Arrange: vectors left behind by a row delete that did not cascade
        document = await ingest(make_text(12, FEE_TOPIC), state="NJ")
        async with session_factory() as session:
            await document_crud.delete_by_id(session, document.id)
            await session.commit()
        generator = make_generator("Should not be called [Source 1].")

        # Act
        response = await make_resolver(generator).search("@NJ annual license fee")

        # Assert
        assert response.answer == NO_RESULTS_ANSWER
        assert response.citations == []
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_similarity_floor_returns_canned_answer(
        self, fee_documents, make_resolver, make_generator
    ) -> None:
        generator = make_generator("unused")

        response = await make_resolver(generator).search(
            "quarterly tax remittance deadlines", SearchOptions(min_similarity=0.99)
        )

        assert response.answer == NO_RESULTS_ANSWER
        assert response.related_documents == []
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_mention_only_query_is_rejected(self, make_resolver, make_generator) -> None:
        with pytest.raises(ValidationError):
            await make_resolver(make_generator()).search("@CO")


class TestAnswerHandling:
    @pytest.mark.asyncio
    async def test_answer_without_markers_cites_top_sources(
        self, fee_documents, make_resolver, make_generator
    ) -> None:
        resolver = make_resolver(make_generator("The annual license fee applies to every operator."))

        response = await resolver.search("annual license fee")

        assert [c.number for c in response.citations] == [1, 2]
        assert response.citations[0].score >= response.citations[1].score

    @pytest.mark.asyncio
    async def test_out_of_range_markers_are_ignored(self, fee_documents, make_resolver, make_generator) -> None:
        resolver = make_resolver(make_generator("Fees apply [Source 1]. Unknown claim [Source 42]."))

        response = await resolver.search("@MI annual license fee")

        assert [c.number for c in response.citations] == [1]

    @pytest.mark.asyncio
    async def test_generation_failure_raises_generation_error(
        self, fee_documents, make_resolver, fast_retry
    ) -> None:
        # Arrange
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=TimeoutError("model timed out"))
        provider = LangChainGenerationProvider(lambda options: model, "fake", fast_retry)

        # Act / Assert
        with pytest.raises(GenerationError) as exc_info:
            await make_resolver(provider).search("annual license fee")
        assert exc_info.value.details["provider"] == "fake"
        assert model.ainvoke.await_count == fast_retry.max_attempts
