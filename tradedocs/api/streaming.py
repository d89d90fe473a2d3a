from collections.abc import Iterator
from typing import BinaryIO

from fastapi.responses import StreamingResponse

STREAM_CHUNK_BYTES = 64 * 1024


def iter_chunks(stream: BinaryIO) -> Iterator[bytes]:
    with stream:
        while chunk := stream.read(STREAM_CHUNK_BYTES):
            yield chunk


def attachment_response(stream: BinaryIO, media_type: str, file_name: str) -> StreamingResponse:
    return StreamingResponse(
        iter_chunks(stream),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
