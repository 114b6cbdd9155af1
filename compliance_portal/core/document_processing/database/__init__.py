from compliance_portal.core.document_processing.database.document_status_updater import (
    DocumentStatusUpdater,
    embedding_progress,
)

__all__ = ["DocumentStatusUpdater", "embedding_progress"]
