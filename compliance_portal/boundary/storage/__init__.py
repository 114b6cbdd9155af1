"""Blob storage for original uploads."""

from compliance_portal.boundary.storage.local_file_store import LocalFileStore

__all__ = ["LocalFileStore"]
