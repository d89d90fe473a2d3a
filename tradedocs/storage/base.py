from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import BinaryIO

from tradedocs.storage.models import BlobInfo


class BaseBlobStore(ABC):
    """Binary storage keyed by opaque file identifiers.

    Once ``put`` returns, ``open_read_stream`` for the returned id succeeds.
    """

    @abstractmethod
    def put(self, data: bytes, content_type: str, file_name: str | None = None) -> str:
        """Store bytes and return the new blob id.

        Raises:
            BlobWriteError: if the bytes were not stored.
        """

    @abstractmethod
    def open_read_stream(self, file_id: str) -> BinaryIO:
        """Open the blob for reading. The caller closes the stream.

        Raises:
            BlobNotFoundError: if the id is unknown.
        """

    @abstractmethod
    def stat(self, file_id: str) -> BlobInfo:
        """Return blob metadata.

        Raises:
            BlobNotFoundError: if the id is unknown.
        """

    @abstractmethod
    def delete(self, file_id: str) -> bool:
        """Remove a blob. Returns False when it was already absent.

        Raises:
            BlobDeleteError: if an existing blob could not be removed.
        """

    @abstractmethod
    def list_blobs(self) -> Iterator[BlobInfo]:
        """Yield metadata of every stored blob."""

    def read_bytes(self, file_id: str) -> bytes:
        with self.open_read_stream(file_id) as stream:
            return stream.read()
