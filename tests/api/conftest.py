"""
Fixtures for HTTP API tests.

Provides: TestClient over a fresh app, mocked services, document row stand-ins
Dependencies: fastapi.testclient, unittest.mock
System role: API test infrastructure
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from compliance_portal.boundary.db.models.document_model import ProcessingStatus, SourceKind
from compliance_portal.main import create_app


@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)


@pytest.fixture
def mock_document_service():
    return AsyncMock()


@pytest.fixture
def make_row():
    """Attribute bag shaped like a DocumentModel row."""

    def factory(**overrides) -> SimpleNamespace:
        now = datetime.now(timezone.utc)
        values = {
            "id": uuid.uuid4(),
            "title": "Sports Wagering Rules",
            "source_kind": SourceKind.UPLOADED_FILE,
            "source_uri": "rules.pdf",
            "state": "CO",
            "verticals": ["sports-online"],
            "document_types": ["regulation"],
            "processing_status": ProcessingStatus.UPLOADED,
            "processing_progress": 0,
            "total_chunks": None,
            "processed_chunks": None,
            "error_message": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return SimpleNamespace(**values)

    return factory
