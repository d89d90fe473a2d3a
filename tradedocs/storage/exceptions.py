class BlobStoreError(Exception):
    """Base exception for blob store failures."""


class BlobNotFoundError(BlobStoreError):
    """Raised when a blob id does not exist in the store."""


class BlobWriteError(BlobStoreError):
    """Raised when bytes could not be durably written."""


class BlobDeleteError(BlobStoreError):
    """Raised when an existing blob could not be removed."""
