from pathlib import Path

from tradedocs.config.settings import Settings
from tradedocs.database.connection import Database
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.local_blob_store import LocalBlobStore
from tradedocs.storage.postgres_blob_store import PostgresBlobStore


class BlobStoreFactory:
    """Builds the blob store named by BLOB_STORE."""

    SUPPORTED = ("local", "postgres")

    @classmethod
    def create(cls, settings: Settings, database: Database) -> BaseBlobStore:
        kind = settings.blob_store.strip().lower()
        if kind == "postgres":
            return PostgresBlobStore(database)
        if kind == "local":
            return LocalBlobStore(Path(settings.blob_files_root))
        raise ValueError(
            f"Unknown blob store '{settings.blob_store}'. Choose from: {list(cls.SUPPORTED)}"
        )
