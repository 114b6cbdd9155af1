"""
Document processing: chunking, ingestion tasks and the pipeline orchestrator.

Import IngestionPipeline from ``compliance_portal.core.document_processing.entrypoint``.
"""
