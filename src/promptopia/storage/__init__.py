"""Storage layer for Promptopia."""

from promptopia.storage.blobs import BlobNotFoundError, BlobStoreError, LocalBlobStore
from promptopia.storage.prompts import LocalPromptManager

__all__ = ["BlobNotFoundError", "BlobStoreError", "LocalBlobStore", "LocalPromptManager"]
