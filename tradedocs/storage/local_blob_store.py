import hashlib
import json
import os
import tempfile
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO
from uuid import UUID

from tradedocs.database.identifiers import new_identifier
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError, BlobNotFoundError, BlobWriteError
from tradedocs.storage.models import BlobInfo


def blob_path(files_root: Path, file_id: str) -> Path:
    """Build path to blob file: {files_root}/{id[:2]}/{id}.bin"""
    return files_root / file_id[:2] / f"{file_id}.bin"


class LocalBlobStore(BaseBlobStore):
    """Stores blobs on the local filesystem with a JSON metadata sidecar.

    Both files are written to a temporary name and renamed into place, data
    first, so a blob is never visible before its bytes are complete. A data
    file left without a sidecar is still listed, dated by its mtime, so the
    orphan sweep can reclaim it.
    """

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def put(self, data: bytes, content_type: str, file_name: str | None = None) -> str:
        file_id = new_identifier()
        path = blob_path(self._files_root, file_id)
        meta = {
            "content_type": content_type,
            "file_name": file_name,
            "size_bytes": len(data),
            "sha256": hashlib.sha256(data).hexdigest(),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write(path, data)
            _atomic_write(_meta_path(path), json.dumps(meta).encode("utf-8"))
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise BlobWriteError(f"Failed to write blob {file_id}: {exc}") from exc
        return file_id

    def open_read_stream(self, file_id: str) -> BinaryIO:
        path = self._existing_path(file_id)
        try:
            return path.open("rb")
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob {file_id} not found") from exc

    def stat(self, file_id: str) -> BlobInfo:
        return self._read_info(self._existing_path(file_id), file_id)

    def delete(self, file_id: str) -> bool:
        if not _is_identifier(file_id):
            return False
        path = blob_path(self._files_root, file_id)
        try:
            existed = path.exists()
            path.unlink(missing_ok=True)
            _meta_path(path).unlink(missing_ok=True)
        except OSError as exc:
            raise BlobDeleteError(f"Failed to delete blob {file_id}: {exc}") from exc
        return existed

    def list_blobs(self) -> Iterator[BlobInfo]:
        if not self._files_root.exists():
            return
        for path in sorted(self._files_root.glob("*/*.bin")):
            file_id = path.stem
            if not _is_identifier(file_id):
                continue
            try:
                yield self._read_info(path, file_id)
            except BlobNotFoundError:
                info = _info_without_metadata(path, file_id)
                if info is not None:
                    yield info

    def _existing_path(self, file_id: str) -> Path:
        if not _is_identifier(file_id):
            raise BlobNotFoundError(f"Blob {file_id} not found")
        path = blob_path(self._files_root, file_id)
        if not path.exists():
            raise BlobNotFoundError(f"Blob {file_id} not found")
        return path

    @staticmethod
    def _read_info(path: Path, file_id: str) -> BlobInfo:
        try:
            meta = json.loads(_meta_path(path).read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob {file_id} has no metadata") from exc
        return BlobInfo(
            id=file_id,
            content_type=meta["content_type"],
            size_bytes=meta["size_bytes"],
            sha256=meta["sha256"],
            created_at=datetime.fromisoformat(meta["created_at"]),
            file_name=meta.get("file_name"),
        )


def _info_without_metadata(path: Path, file_id: str) -> BlobInfo | None:
    """Describe a data file whose sidecar was never written, from the file itself."""
    try:
        stat = path.stat()
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
    except FileNotFoundError:
        return None
    return BlobInfo(
        id=file_id,
        content_type="application/octet-stream",
        size_bytes=stat.st_size,
        sha256=digest,
        created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def _meta_path(path: Path) -> Path:
    return path.with_suffix(".json")


def _atomic_write(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _is_identifier(file_id: str) -> bool:
    try:
        return str(UUID(file_id)) == file_id
    except ValueError:
        return False
