"""Chunked upload of large local files.

A file is streamed through a fixed-size buffer and sent as one multipart
POST per chunk to the same endpoint. Chunks after the first carry the
server-assigned id in ``x-appwrite-id`` so the server appends to the same
resource, and every chunk of a multi-chunk upload carries a
``content-range`` header giving its byte span.

Only one chunk is in flight at a time and at most one chunk of unsent bytes
is held in memory.
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, BinaryIO

import pydantic

from appwritectl.core.client import MULTIPART, InputFile
from appwritectl.core.config import DEFAULT_CHUNK_SIZE
from appwritectl.core.exceptions import (
    ProtocolViolationError,
    SourceUnreadableError,
    ValidationError,
)
from appwritectl.core.logging import log_context
from appwritectl.models.progress import ChunkReceipt, ProgressEvent, UploadPhase

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_READ_SIZE = 64 * 1024
ID_HEADER = "x-appwrite-id"
RANGE_HEADER = "content-range"

Transport = Callable[[str, str, Mapping[str, str], Mapping[str, Any]], Any]
ProgressCallback = Callable[[ProgressEvent], None]


# =============================================================================
# Request and State
# =============================================================================


@dataclass(frozen=True)
class UploadRequest:
    """What to upload and where.

    Attributes:
        source_path: Local file to send.
        api_path: Endpoint that receives every chunk.
        file_field: Multipart field that carries the chunk bytes.
        chunk_size: Maximum bytes per request.
        extra_fields: Metadata sent alongside the file on every chunk.
        filename: Name reported for the file part (defaults to the basename).
    """

    source_path: Path
    api_path: str
    file_field: str = "file"
    chunk_size: int = DEFAULT_CHUNK_SIZE
    extra_fields: Mapping[str, Any] = field(default_factory=dict)
    filename: str | None = None

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError(
                f"Invalid chunk size: {self.chunk_size} (must be positive)",
                field="chunk_size",
                value=self.chunk_size,
            )
        if self.file_field in self.extra_fields:
            raise ValidationError(
                f"Extra field '{self.file_field}' collides with the file field",
                field="extra_fields",
            )
        object.__setattr__(self, "source_path", Path(self.source_path))
        object.__setattr__(self, "extra_fields", MappingProxyType(dict(self.extra_fields)))

    @property
    def upload_name(self) -> str:
        return self.filename or self.source_path.name


@dataclass
class UploadState:
    """Counters for one upload call. Never persisted."""

    total_size: int
    resource_id: str | None = None
    current_chunk: int = 1
    bytes_sent: int = 0


# =============================================================================
# ByteSource
# =============================================================================


class ByteSource:
    """Forward-only reader over a local file that yields its bytes once.

    The size is taken from ``stat`` when the source is opened, before any
    byte is read, and reads are checked against it.
    """

    def __init__(self, path: str | Path, read_size: int = DEFAULT_READ_SIZE) -> None:
        self.path = Path(path)
        self.read_size = read_size
        self.size = 0
        self._handle: BinaryIO | None = None
        self._consumed = False

    @property
    def closed(self) -> bool:
        return self._handle is None or self._handle.closed

    def open(self) -> ByteSource:
        """Stat and open the file.

        Raises:
            SourceUnreadableError: If the path is missing, not a regular file,
                or cannot be opened.
        """
        try:
            st = self.path.stat()
        except OSError as e:
            raise SourceUnreadableError(str(self.path), e.strerror or str(e)) from e
        if not stat.S_ISREG(st.st_mode):
            raise SourceUnreadableError(str(self.path), "not a regular file")

        try:
            self._handle = open(self.path, "rb")
        except OSError as e:
            raise SourceUnreadableError(str(self.path), e.strerror or str(e)) from e

        self.size = st.st_size
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()

    def __enter__(self) -> ByteSource:
        return self.open()

    def __exit__(self, *args: Any) -> None:
        self.close()

    def blocks(self) -> Iterator[bytes]:
        """Yield the file's bytes in order, in blocks of up to ``read_size``.

        Raises:
            SourceUnreadableError: On read failure, or if the file size no
                longer matches the size seen at open time.
        """
        if self._handle is None or self._handle.closed:
            raise SourceUnreadableError(str(self.path), "source is not open")
        if self._consumed:
            raise SourceUnreadableError(str(self.path), "source was already read")
        self._consumed = True

        read = 0
        while True:
            try:
                block = self._handle.read(self.read_size)
            except OSError as e:
                raise SourceUnreadableError(str(self.path), f"read failed: {e}") from e
            if not block:
                break
            read += len(block)
            if read > self.size:
                raise SourceUnreadableError(str(self.path), "file grew during upload")
            yield block

        if read != self.size:
            raise SourceUnreadableError(str(self.path), "file shrank during upload")


# =============================================================================
# ChunkAccumulator
# =============================================================================


class ChunkAccumulator:
    """Fixed-capacity buffer that turns arbitrary blocks into upload chunks."""

    def __init__(self, chunk_size: int) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self._buffer = bytearray(chunk_size)
        self.position = 0

    @property
    def is_full(self) -> bool:
        return self.position == self.chunk_size

    @property
    def is_empty(self) -> bool:
        return self.position == 0

    def fill(self, data: bytes | memoryview) -> int:
        """Copy as much of ``data`` as fits and return the count consumed.

        Raises:
            ValueError: If the buffer is already full.
        """
        if self.is_full:
            raise ValueError("chunk buffer is full; take() it before filling again")
        count = min(len(data), self.chunk_size - self.position)
        self._buffer[self.position : self.position + count] = data[:count]
        self.position += count
        return count

    def take(self) -> bytes:
        """Return exactly the bytes written since the last take, then reset."""
        chunk = bytes(memoryview(self._buffer)[: self.position])
        self.position = 0
        return chunk


def iter_chunks(blocks: Iterable[bytes], accumulator: ChunkAccumulator) -> Iterator[bytes]:
    """Regroup ``blocks`` into chunks of ``accumulator.chunk_size`` bytes.

    The last chunk is trimmed to the remaining byte count. No empty chunk is
    produced when the input length is an exact multiple of the chunk size.
    """
    for block in blocks:
        view = memoryview(block)
        while view:
            consumed = accumulator.fill(view)
            view = view[consumed:]
            if accumulator.is_full:
                yield accumulator.take()

    if not accumulator.is_empty:
        yield accumulator.take()


# =============================================================================
# ProgressReporter
# =============================================================================


class ProgressReporter:
    """Forward progress events to an optional callback.

    A failing callback is logged and otherwise ignored; it never changes the
    outcome of the upload.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self.callback = callback
        self.emitted = 0

    def report(self, event: ProgressEvent) -> None:
        self.emitted += 1
        logger.debug("Upload progress %s", event.to_dict())
        if self.callback is None:
            return
        try:
            self.callback(event)
        except Exception:
            logger.warning("Progress callback failed for chunk %d", event.chunk, exc_info=True)


# =============================================================================
# UploadSession
# =============================================================================


class UploadSession:
    """Drive one chunked upload from the first byte to the final response.

    Sessions are single-use: ``run()`` moves the phase from INIT through
    SENDING to DONE, or to ERROR if any chunk fails.
    """

    def __init__(
        self,
        transport: Transport,
        request: UploadRequest,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.transport = transport
        self.request = request
        self.reporter = ProgressReporter(on_progress)
        self.phase = UploadPhase.INIT
        self.state: UploadState | None = None
        self._response: Any = None
        self._receipt: ChunkReceipt | None = None

    def run(self) -> Any:
        """Upload every chunk and return the response to the last one.

        Raises:
            SourceUnreadableError: If the local file cannot be read.
            ProtocolViolationError: If the server's resource id is missing or
                changes between chunks.
            TransportError: Whatever the transport raised, unchanged.
        """
        if self.phase is not UploadPhase.INIT:
            raise RuntimeError("UploadSession.run() may only be called once")

        req = self.request
        with log_context(
            "chunked upload",
            logger,
            file=req.upload_name,
            path=req.api_path,
            chunk_size=req.chunk_size,
        ) as ctx:
            try:
                with ByteSource(req.source_path) as source:
                    state = self.state = UploadState(total_size=source.size)
                    self.phase = UploadPhase.SENDING
                    if source.size == 0:
                        self._send_chunk(state, b"")
                    else:
                        accumulator = ChunkAccumulator(req.chunk_size)
                        for chunk in iter_chunks(source.blocks(), accumulator):
                            self._send_chunk(state, chunk)
            except BaseException:
                self.phase = UploadPhase.ERROR
                raise

            self.phase = UploadPhase.DONE
            ctx.info(
                "Sent %d bytes in %d chunk(s), resource %s",
                state.bytes_sent,
                state.current_chunk - 1,
                state.resource_id,
            )
            receipt = self._receipt
            if (
                receipt is not None
                and receipt.chunks_total is not None
                and receipt.chunks_uploaded is not None
                and receipt.chunks_uploaded < receipt.chunks_total
            ):
                ctx.warning(
                    "Server reports %d of %d chunks received",
                    receipt.chunks_uploaded,
                    receipt.chunks_total,
                )
        return self._response

    def _headers_for(self, state: UploadState, index: int, size: int) -> dict[str, str]:
        chunk_size = self.request.chunk_size

        headers = {"content-type": MULTIPART}
        if index > 1 or state.total_size > chunk_size:
            start = (index - 1) * chunk_size
            end = start + size - 1
            headers[RANGE_HEADER] = f"bytes {start}-{end}/{state.total_size}"
        if index > 1:
            if state.resource_id is None:
                raise ProtocolViolationError(
                    "Server did not return a resource id for the first chunk",
                    chunk=index,
                )
            headers[ID_HEADER] = state.resource_id
        return headers

    def _send_chunk(self, state: UploadState, chunk: bytes) -> None:
        req = self.request
        index = state.current_chunk

        headers = self._headers_for(state, index, len(chunk))
        payload: dict[str, Any] = dict(req.extra_fields)
        payload[req.file_field] = InputFile(req.upload_name, chunk)

        logger.debug(
            "Sending chunk %d of %s (%s, %d bytes)",
            index,
            req.upload_name,
            headers.get(RANGE_HEADER, "single request"),
            len(chunk),
        )
        response = self.transport("post", req.api_path, headers, payload)
        receipt = self._parse_receipt(response, index)

        if state.resource_id is None:
            state.resource_id = receipt.id
        elif receipt.id != state.resource_id:
            if receipt.id is None:
                message = "Chunk response is missing the upload's resource id"
            else:
                message = "Resource id in chunk response does not match the upload's"
            raise ProtocolViolationError(
                message,
                chunk=index,
                expected_id=state.resource_id,
                received_id=receipt.id,
            )

        state.bytes_sent += len(chunk)
        self._response = response
        self._receipt = receipt
        event = ProgressEvent(
            resource_id=state.resource_id,
            progress=self._percentage(state, index),
            size_uploaded=state.bytes_sent,
            total_size=state.total_size,
            chunk=index,
            chunks_total=receipt.chunks_total,
            chunks_uploaded=receipt.chunks_uploaded,
        )
        state.current_chunk += 1
        self.reporter.report(event)

    @staticmethod
    def _parse_receipt(response: Any, index: int) -> ChunkReceipt:
        if not isinstance(response, Mapping):
            return ChunkReceipt()
        try:
            return ChunkReceipt.model_validate(response)
        except pydantic.ValidationError as e:
            raise ProtocolViolationError(
                f"Malformed chunk response: {e.error_count()} invalid field(s)",
                chunk=index,
            ) from e

    def _percentage(self, state: UploadState, index: int) -> float:
        total = state.total_size
        if total == 0:
            return 100.0
        return min(index * self.request.chunk_size, total) / total * 100


def upload_chunked(
    transport: Transport,
    request: UploadRequest,
    on_progress: ProgressCallback | None = None,
) -> Any:
    """Upload a file in chunks and return the final resource metadata.

    Args:
        transport: ``call(method, path, headers, payload)`` callable, usually
            ``AppwriteClient.call``.
        request: Source file, destination and extra fields.
        on_progress: Called with a ProgressEvent after every chunk.

    Returns:
        Decoded response of the last chunk.
    """
    return UploadSession(transport, request, on_progress).run()
