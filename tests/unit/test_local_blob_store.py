import hashlib
import os
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from tradedocs.storage.exceptions import BlobNotFoundError, BlobWriteError
from tradedocs.storage.local_blob_store import LocalBlobStore, blob_path


@pytest.fixture
def store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(files_root=tmp_path)


class TestBlobPath:
    def test_shards_by_first_two_characters(self) -> None:
        path = blob_path(Path("/data"), "ab0e8400-e29b-41d4-a716-446655440000")
        assert path == Path("/data/ab/ab0e8400-e29b-41d4-a716-446655440000.bin")


class TestLocalBlobStore:
    def test_put_then_read(self, store: LocalBlobStore) -> None:
        file_id = store.put(b"%PDF-1.4 bol", "application/pdf", "bol.pdf")
        assert store.read_bytes(file_id) == b"%PDF-1.4 bol"

    def test_stat_records_metadata(self, store: LocalBlobStore) -> None:
        file_id = store.put(b"abc", "text/plain", "note.txt")
        info = store.stat(file_id)
        assert info.id == file_id
        assert info.content_type == "text/plain"
        assert info.file_name == "note.txt"
        assert info.size_bytes == 3
        assert info.sha256 == hashlib.sha256(b"abc").hexdigest()
        assert info.created_at.tzinfo is not None

    def test_no_temporary_files_left_behind(self, store: LocalBlobStore, tmp_path: Path) -> None:
        file_id = store.put(b"abc", "text/plain")
        siblings = sorted(p.name for p in blob_path(tmp_path, file_id).parent.iterdir())
        assert siblings == [f"{file_id}.bin", f"{file_id}.json"]

    def test_unknown_id_is_not_found(self, store: LocalBlobStore) -> None:
        with pytest.raises(BlobNotFoundError):
            store.open_read_stream("550e8400-e29b-41d4-a716-446655440000")

    def test_malformed_id_is_not_found(self, store: LocalBlobStore) -> None:
        with pytest.raises(BlobNotFoundError):
            store.stat("../../etc/passwd")

    def test_delete(self, store: LocalBlobStore) -> None:
        file_id = store.put(b"abc", "text/plain")
        assert store.delete(file_id) is True
        assert store.delete(file_id) is False
        with pytest.raises(BlobNotFoundError):
            store.read_bytes(file_id)

    def test_list_blobs(self, store: LocalBlobStore) -> None:
        ids = {store.put(b"a", "text/plain"), store.put(b"b", "text/plain")}
        assert {info.id for info in store.list_blobs()} == ids

    def test_list_blobs_includes_data_file_without_sidecar(
        self, store: LocalBlobStore, tmp_path: Path
    ) -> None:
        file_id = store.put(b"half written", "application/pdf")
        path = blob_path(tmp_path, file_id)
        path.with_suffix(".json").unlink()
        os.utime(path, (1_700_000_000, 1_700_000_000))

        [info] = list(store.list_blobs())

        assert info.id == file_id
        assert info.size_bytes == len(b"half written")
        assert info.sha256 == hashlib.sha256(b"half written").hexdigest()
        assert info.created_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert store.delete(file_id) is True
        assert not path.exists()

    def test_list_blobs_on_missing_root(self, tmp_path: Path) -> None:
        assert list(LocalBlobStore(files_root=tmp_path / "absent").list_blobs()) == []

    def test_write_failure(self, store: LocalBlobStore) -> None:
        with patch(
            "tradedocs.storage.local_blob_store._atomic_write",
            side_effect=OSError("No space left on device"),
        ):
            with pytest.raises(BlobWriteError, match="No space left"):
                store.put(b"abc", "text/plain")
        assert list(store.list_blobs()) == []
