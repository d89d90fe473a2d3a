from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BlobInfo:
    """Metadata of one stored blob."""

    id: str
    content_type: str
    size_bytes: int
    sha256: str
    created_at: datetime
    file_name: str | None = None
