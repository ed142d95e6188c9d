from __future__ import annotations

import logging
from typing import IO, AsyncIterator, Callable, Union

import httpx

from fwupload.errors import TransferError


log = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]
Content = Union[bytes, bytearray, memoryview, IO[bytes]]


def content_length(content: Content) -> int | None:
    """Bytes left to send, or None when the handle can't tell us."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return len(content)
    seekable = getattr(content, "seekable", None)
    if seekable is None or not seekable():
        return None
    pos = content.tell()
    end = content.seek(0, 2)
    content.seek(pos)
    return max(0, end - pos)


def _chunks(content: Content, chunk_size: int):
    if isinstance(content, (bytes, bytearray, memoryview)):
        view = memoryview(content)
        for i in range(0, len(view), chunk_size):
            yield bytes(view[i : i + chunk_size])
        return
    while True:
        chunk = content.read(chunk_size)
        if not chunk:
            break
        yield chunk


class TransferEngine:
    """
    Streams an artifact to a presigned storage URL with a raw PUT.

    Holds no per-transfer state; a failed call can be retried by the caller with a
    fresh destination.
    """

    def __init__(
        self,
        timeout_s: float = 300.0,
        chunk_size: int = 64 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.timeout_s = timeout_s
        self.chunk_size = chunk_size
        self._transport = transport

    async def transfer(
        self,
        destination_url: str,
        content: Content,
        content_type: str,
        on_progress: ProgressSink | None = None,
    ) -> None:
        total = content_length(content)
        headers = {"Content-Type": content_type}
        if total is not None:
            headers["Content-Length"] = str(total)

        if total == 0:
            body: bytes | AsyncIterator[bytes] = b""
        else:
            body = self._stream(content, total, on_progress)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=float(self.timeout_s)) as client:
                resp = await client.put(destination_url, content=body, headers=headers)
        except httpx.TransportError as e:
            log.warning("Storage PUT failed without a response: %s", e)
            raise TransferError(None, "Upload error") from e

        if not (200 <= resp.status_code < 300):
            log.warning("Storage PUT returned %s", resp.status_code)
            raise TransferError(resp.status_code, resp.text[:500])

        if total == 0 and on_progress is not None:
            on_progress(1.0)
        log.info("Transferred %s bytes to storage", total if total is not None else "?")

    async def _stream(
        self,
        content: Content,
        total: int | None,
        on_progress: ProgressSink | None,
    ) -> AsyncIterator[bytes]:
        sent = 0
        for chunk in _chunks(content, self.chunk_size):
            yield chunk
            # The transport only asks for the next chunk once this one is written.
            sent += len(chunk)
            if total and on_progress is not None:
                on_progress(min(1.0, sent / total))
