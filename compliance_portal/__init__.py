"""Compliance document search portal: ingestion, retrieval and citation pipeline."""

__version__ = "0.1.0"
