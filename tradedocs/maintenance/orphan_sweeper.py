from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.logging.logger import Log
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError


@dataclass
class SweepReport:
    scanned: int = 0
    referenced: int = 0
    too_recent: int = 0
    orphaned: list[str] = field(default_factory=list)
    deleted: int = 0
    failed: int = 0
    dry_run: bool = True


class OrphanBlobSweeper:
    """Deletes blobs that no Document references once they are old enough.

    Blobs younger than the grace period are kept, so uploads still in flight
    and freshly regenerated artifacts survive a sweep.
    """

    def __init__(
        self,
        documents_repository: DocumentsRepository,
        blob_store: BaseBlobStore,
        grace_period: timedelta,
    ) -> None:
        self._documents = documents_repository
        self._blob_store = blob_store
        self._grace_period = grace_period

    def sweep(self, now: datetime | None = None, dry_run: bool = True) -> SweepReport:
        now = now or datetime.now(timezone.utc)
        cutoff = now - self._grace_period
        referenced = self._documents.list_file_ids()
        report = SweepReport(dry_run=dry_run)

        for blob in self._blob_store.list_blobs():
            report.scanned += 1
            if blob.id in referenced:
                report.referenced += 1
                continue
            if blob.created_at > cutoff:
                report.too_recent += 1
                continue
            report.orphaned.append(blob.id)
            if dry_run:
                Log.info("Orphaned blob (dry run)", file_id=blob.id, size=blob.size_bytes)
                continue
            try:
                self._blob_store.delete(blob.id)
            except BlobDeleteError as exc:
                report.failed += 1
                Log.warning(f"Could not delete orphaned blob: {exc}", file_id=blob.id)
                continue
            report.deleted += 1
            Log.info("Deleted orphaned blob", file_id=blob.id, size=blob.size_bytes)

        Log.info(
            "Orphan sweep finished",
            scanned=report.scanned,
            orphaned=len(report.orphaned),
            deleted=report.deleted,
            failed=report.failed,
            dry_run=dry_run,
        )
        return report
