"""
Integration tests for document persistence and the ingestion state machine.

Runs against in-memory SQLite: forward-only transitions, monotonic
progress, FAILED handling, reprocess reset and the status updater.

System role: Verification of document status persistence
"""

import uuid

import pytest

from compliance_portal.boundary.db.CRUD.document_crud import MAX_ERROR_LENGTH, document_crud
from compliance_portal.boundary.db.models.document_model import ProcessingStatus
from compliance_portal.core.document_processing.database import DocumentStatusUpdater
from compliance_portal.core.document_processing.database.document_status_updater import embedding_progress
from compliance_portal.core.exceptions import DocumentNotFoundError, InvalidStatusTransitionError


class TestStateMachine:
    @pytest.mark.asyncio
    async def test_created_document_is_uploaded(self, create_document) -> None:
        document = await create_document(state="co")

        assert document.processing_status == ProcessingStatus.UPLOADED
        assert document.processing_progress == 0
        assert document.state == "CO"
        assert document.content is None

    @pytest.mark.asyncio
    async def test_forward_transitions_allowed(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(session, document.id, ProcessingStatus.EXTRACTING, 10)
            await document_crud.transition(session, document.id, ProcessingStatus.CHUNKING, 30, content="text")
            updated = await document_crud.transition(session, document.id, ProcessingStatus.EMBEDDING, 60)
            await session.commit()

        assert updated.processing_status == ProcessingStatus.EMBEDDING
        assert updated.content == "text"

    @pytest.mark.asyncio
    async def test_backward_transition_rejected(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(session, document.id, ProcessingStatus.CHUNKING, 30)
            with pytest.raises(InvalidStatusTransitionError):
                await document_crud.transition(session, document.id, ProcessingStatus.EXTRACTING, 10)

    @pytest.mark.asyncio
    async def test_terminal_states_are_final(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(session, document.id, ProcessingStatus.COMPLETED, 100)
            with pytest.raises(InvalidStatusTransitionError):
                await document_crud.mark_failed(session, document.id, "late failure")

    @pytest.mark.asyncio
    async def test_progress_never_decreases(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(session, document.id, ProcessingStatus.EMBEDDING, 80)
            updated = await document_crud.transition(session, document.id, ProcessingStatus.EMBEDDING, 65)

        assert updated.processing_progress == 80

    @pytest.mark.asyncio
    async def test_failed_keeps_progress_and_truncates_error(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(session, document.id, ProcessingStatus.CHUNKING, 30)
            failed = await document_crud.mark_failed(session, document.id, "x" * 5000)

        assert failed.processing_status == ProcessingStatus.FAILED
        assert failed.processing_progress == 30
        assert len(failed.error_message) == MAX_ERROR_LENGTH

    @pytest.mark.asyncio
    async def test_reset_clears_run_state(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            await document_crud.transition(
                session, document.id, ProcessingStatus.COMPLETED, 100, content="text", total_chunks=2
            )
            reset = await document_crud.reset_for_reprocess(session, document.id)

        assert reset.processing_status == ProcessingStatus.UPLOADED
        assert reset.processing_progress == 0
        assert reset.content is None
        assert reset.total_chunks is None

    @pytest.mark.parametrize(
        "status",
        [ProcessingStatus.UPLOADED, ProcessingStatus.EXTRACTING, ProcessingStatus.EMBEDDING],
    )
    @pytest.mark.asyncio
    async def test_reset_rejected_while_ingesting(self, session_factory, create_document, status) -> None:
        # Arrange
        document = await create_document()
        async with session_factory() as session:
            await document_crud.transition(session, document.id, status, 60, content="partial")
            await session.commit()

        # Act
        async with session_factory() as session:
            with pytest.raises(InvalidStatusTransitionError):
                await document_crud.reset_for_reprocess(session, document.id)

        # Assert
        async with session_factory() as session:
            stored = await document_crud.get_required(session, document.id)
        assert stored.processing_status == status
        assert stored.content == "partial"

    @pytest.mark.asyncio
    async def test_reset_missing_document_raises(self, session_factory) -> None:
        async with session_factory() as session:
            with pytest.raises(DocumentNotFoundError):
                await document_crud.reset_for_reprocess(session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_missing_document_raises(self, session_factory) -> None:
        async with session_factory() as session:
            with pytest.raises(DocumentNotFoundError):
                await document_crud.transition(session, uuid.uuid4(), ProcessingStatus.EXTRACTING)


class TestQueries:
    @pytest.mark.asyncio
    async def test_existing_ids_ignores_missing_and_malformed(self, session_factory, create_document) -> None:
        document = await create_document()

        async with session_factory() as session:
            existing = await document_crud.get_existing_ids(
                session, [str(document.id), str(uuid.uuid4()), "not-a-uuid"]
            )

        assert existing == {str(document.id)}

    @pytest.mark.asyncio
    async def test_list_and_count_filters(self, session_factory, create_document) -> None:
        await create_document(state="CO")
        await create_document(state="MI")
        failed = await create_document(state="CO")
        async with session_factory() as session:
            await document_crud.mark_failed(session, failed.id, "boom")
            await session.commit()

        async with session_factory() as session:
            co_docs = await document_crud.list_documents(session, state="co")
            co_failed = await document_crud.count(session, state="CO", status=ProcessingStatus.FAILED)
            total = await document_crud.count(session)

        assert len(co_docs) == 2
        assert co_failed == 1
        assert total == 3


class TestDocumentStatusUpdater:
    @pytest.mark.parametrize(
        "processed, total, expected",
        [(0, 5, 60), (1, 5, 67), (4, 5, 91), (5, 5, 99), (3, 0, 60), (9, 5, 99)],
    )
    def test_embedding_progress(self, processed, total, expected) -> None:
        assert embedding_progress(processed, total) == expected

    @pytest.mark.asyncio
    async def test_full_run_persists_each_stage(self, session_factory, create_document) -> None:
        # Arrange
        document = await create_document()
        updater = DocumentStatusUpdater(session_factory)

        # Act
        await updater.mark_extracting(document.id)
        after_extracting = await updater.get_status(document.id)
        await updater.save_content(document.id, "Extracted text")
        await updater.mark_embedding(document.id, total_chunks=4)
        await updater.update_progress(document.id, 2, 4)
        during = await updater.get_status(document.id)
        await updater.mark_completed(document.id, processed=4)

        # Assert
        final = await updater.get_status(document.id)
        stored = await updater.get_document(document.id)
        assert after_extracting.progress == 10
        assert during.status == ProcessingStatus.EMBEDDING
        assert during.progress == 79
        assert final.status == ProcessingStatus.COMPLETED
        assert final.progress == 100
        assert (final.total_chunks, final.processed_chunks) == (4, 4)
        assert stored.content == "Extracted text"

    @pytest.mark.asyncio
    async def test_failed_update_rolls_back_and_raises(self, session_factory, create_document) -> None:
        document = await create_document()
        updater = DocumentStatusUpdater(session_factory)
        await updater.mark_completed(document.id, processed=0)

        with pytest.raises(InvalidStatusTransitionError):
            await updater.mark_extracting(document.id)

        assert (await updater.get_status(document.id)).status == ProcessingStatus.COMPLETED
