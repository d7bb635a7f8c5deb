"""Tests for the chunked upload session."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Callable

import pytest

from appwritectl.core.exceptions import (
    NetworkError,
    ProtocolViolationError,
    SourceUnreadableError,
    TransportError,
    ValidationError,
)
from appwritectl.models.progress import ProgressEvent, UploadPhase
from appwritectl.uploaders import chunked
from appwritectl.uploaders.chunked import (
    ID_HEADER,
    RANGE_HEADER,
    ByteSource,
    UploadRequest,
    UploadSession,
    upload_chunked,
)

from conftest import RecordingTransport

C = 1024


def _request(path: Path, chunk_size: int = C, **kwargs) -> UploadRequest:
    return UploadRequest(
        source_path=path,
        api_path="/storage/buckets/media/files",
        chunk_size=chunk_size,
        **kwargs,
    )


def _run(
    transport: RecordingTransport, path: Path, chunk_size: int = C, **kwargs
) -> tuple[object, list[ProgressEvent]]:
    events: list[ProgressEvent] = []
    result = upload_chunked(transport, _request(path, chunk_size, **kwargs), events.append)
    return result, events


# =============================================================================
# Chunk Count and Byte Coverage
# =============================================================================


class TestChunking:
    """Chunk count, byte coverage and trimming of the last chunk."""

    @pytest.mark.parametrize("size", [1, C - 1, C, C + 1, 3 * C, 3 * C + 7, 10 * C + 513])
    def test_chunk_count(
        self, size: int, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(size)

        _run(transport, path)

        assert len(transport.calls) == max(1, math.ceil(size / C))

    @pytest.mark.parametrize("size", [1, C, 2 * C + 1000, 7 * C + 3])
    def test_transmitted_bytes_reproduce_file(
        self, size: int, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(size)

        _run(transport, path)

        assert b"".join(transport.bodies) == path.read_bytes()

    def test_last_chunk_is_trimmed(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(4 * C + 17)

        _run(transport, path)

        assert [len(b) for b in transport.bodies] == [C, C, C, C, 17]

    def test_exact_multiple_sends_no_empty_chunk(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(3 * C)

        _run(transport, path)

        assert [len(b) for b in transport.bodies] == [C, C, C]

    def test_every_chunk_posts_to_same_path(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(3 * C)

        _run(transport, path)

        assert {(c.method, c.path) for c in transport.calls} == {
            ("post", "/storage/buckets/media/files")
        }

    def test_extra_fields_sent_with_every_chunk(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(2 * C + 1)

        _run(transport, path, extra_fields={"fileId": "unique()", "permissions": ["read(\"any\")"]})

        for call in transport.calls:
            assert call.payload["fileId"] == "unique()"
            assert call.payload["permissions"] == ['read("any")']
            assert call.file.filename == "payload.bin"

    def test_filename_override(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(10)

        _run(transport, path, filename="code.tar.gz")

        assert transport.calls[0].file.filename == "code.tar.gz"


# =============================================================================
# Headers
# =============================================================================


class TestHeaders:
    """content-range and x-appwrite-id placement."""

    def test_single_chunk_has_no_range_or_id(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(C - 1)

        _run(transport, path)

        headers = transport.calls[0].headers
        assert RANGE_HEADER not in headers
        assert ID_HEADER not in headers

    def test_exact_chunk_size_is_single_request(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(C)

        _run(transport, path)

        assert len(transport.calls) == 1
        assert RANGE_HEADER not in transport.calls[0].headers
        assert len(transport.bodies[0]) == C

    def test_two_full_chunks(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(2 * C)

        _run(transport, path)

        first, second = transport.calls
        assert first.headers[RANGE_HEADER] == f"bytes 0-{C - 1}/{2 * C}"
        assert ID_HEADER not in first.headers
        assert second.headers[RANGE_HEADER] == f"bytes {C}-{2 * C - 1}/{2 * C}"
        assert second.headers[ID_HEADER] == "res-1"

    def test_trailing_partial_chunk_range(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        size = 2 * C + 1000
        path = make_file(size)

        _run(transport, path)

        assert len(transport.calls) == 3
        last = transport.calls[2]
        assert len(last.body) == 1000
        assert last.headers[RANGE_HEADER] == f"bytes {2 * C}-{2 * C + 999}/{size}"

    def test_id_from_first_response_fixed_for_rest(
        self, make_file: Callable[..., Path]
    ) -> None:
        transport = RecordingTransport(resource_id="server-chosen")
        path = make_file(5 * C)

        _run(transport, path, extra_fields={"fileId": "unique()"})

        assert ID_HEADER not in transport.calls[0].headers
        assert [c.headers[ID_HEADER] for c in transport.calls[1:]] == ["server-chosen"] * 4

    def test_multipart_content_type(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(C + 1)

        _run(transport, path)

        assert all(c.headers["content-type"] == "multipart/form-data" for c in transport.calls)


# =============================================================================
# Progress
# =============================================================================


class TestProgress:
    """Progress events emitted after each chunk."""

    def test_one_event_per_chunk(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(3 * C + 5)

        _, events = _run(transport, path)

        assert [e.chunk for e in events] == [1, 2, 3, 4]

    def test_monotonic_and_reaches_100_on_last_chunk_only(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        size = 6 * C + 100
        path = make_file(size)

        _, events = _run(transport, path)

        sent = [e.size_uploaded for e in events]
        assert sent == sorted(sent)
        assert sent[-1] == size
        assert all(e.progress < 100 for e in events[:-1])
        assert events[-1].progress == 100
        assert events[-1].is_complete

    def test_event_fields(self, make_file: Callable[..., Path]) -> None:
        transport = RecordingTransport(resource_id="abc", chunks_total=2)
        path = make_file(C + 24)

        _, events = _run(transport, path)

        first = events[0]
        assert first.resource_id == "abc"
        assert first.size_uploaded == C
        assert first.total_size == C + 24
        assert first.chunks_total == 2
        assert first.chunks_uploaded == 1
        assert first.to_dict() == {
            "$id": "abc",
            "progress": first.progress,
            "sizeUploaded": C,
            "chunksTotal": 2,
            "chunksUploaded": 1,
        }

    def test_no_callback_still_uploads(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(2 * C)

        result = upload_chunked(transport, _request(path))

        assert result["$id"] == "res-1"
        assert len(transport.calls) == 2

    def test_failing_callback_does_not_abort(
        self,
        make_file: Callable[..., Path],
        transport: RecordingTransport,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = make_file(3 * C)

        def explode(event: ProgressEvent) -> None:
            raise RuntimeError("display gone")

        with caplog.at_level(logging.WARNING, logger="appwritectl.uploaders.chunked"):
            result = upload_chunked(transport, _request(path), explode)

        assert len(transport.calls) == 3
        assert result["$id"] == "res-1"
        assert "Progress callback failed" in caplog.text


# =============================================================================
# Empty File
# =============================================================================


class TestEmptyFile:
    """A zero-length file is sent as one empty request."""

    def test_single_empty_request(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        path = make_file(0)

        result, events = _run(transport, path)

        assert len(transport.calls) == 1
        assert transport.bodies == [b""]
        assert RANGE_HEADER not in transport.calls[0].headers
        assert ID_HEADER not in transport.calls[0].headers
        assert result["$id"] == "res-1"
        assert len(events) == 1
        assert events[0].progress == 100
        assert events[0].size_uploaded == 0


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Error surfacing and resource cleanup."""

    @pytest.fixture
    def tracked_sources(self, monkeypatch: pytest.MonkeyPatch) -> list[ByteSource]:
        opened: list[ByteSource] = []

        class TrackingSource(ByteSource):
            def open(self) -> ByteSource:
                opened.append(self)
                return super().open()

        monkeypatch.setattr(chunked, "ByteSource", TrackingSource)
        return opened

    def test_transport_failure_mid_upload(
        self, make_file: Callable[..., Path], tracked_sources: list[ByteSource]
    ) -> None:
        error = NetworkError("https://appwrite.example.org/v1", "connection reset")
        transport = RecordingTransport(fail_on={2: error})
        path = make_file(2 * C + 10)
        events: list[ProgressEvent] = []

        with pytest.raises(TransportError) as exc_info:
            upload_chunked(transport, _request(path), events.append)

        assert exc_info.value is error
        assert len(transport.calls) == 2
        assert [e.chunk for e in events] == [1]
        assert tracked_sources and all(s.closed for s in tracked_sources)

    def test_transport_failure_sets_error_phase(self, make_file: Callable[..., Path]) -> None:
        transport = RecordingTransport(fail_on={1: NetworkError("https://x", "boom")})
        session = UploadSession(transport, _request(make_file(10)))

        with pytest.raises(NetworkError):
            session.run()

        assert session.phase is UploadPhase.ERROR
        assert session.phase.is_terminal

    def test_missing_file(self, temp_dir: Path, transport: RecordingTransport) -> None:
        with pytest.raises(SourceUnreadableError, match="Cannot read"):
            upload_chunked(transport, _request(temp_dir / "missing.bin"))

        assert transport.calls == []

    def test_directory_is_not_a_source(
        self, temp_dir: Path, transport: RecordingTransport
    ) -> None:
        with pytest.raises(SourceUnreadableError, match="not a regular file"):
            upload_chunked(transport, _request(temp_dir))

        assert transport.calls == []

    def test_first_response_without_id(self, make_file: Callable[..., Path]) -> None:
        transport = RecordingTransport(responses={1: {"chunksUploaded": 1}})
        path = make_file(2 * C)

        with pytest.raises(ProtocolViolationError) as exc_info:
            upload_chunked(transport, _request(path))

        assert exc_info.value.chunk == 2
        assert len(transport.calls) == 1

    def test_changed_id_is_rejected(
        self, make_file: Callable[..., Path], tracked_sources: list[ByteSource]
    ) -> None:
        transport = RecordingTransport(responses={2: {"$id": "other"}})
        path = make_file(3 * C)

        with pytest.raises(ProtocolViolationError) as exc_info:
            upload_chunked(transport, _request(path))

        err = exc_info.value
        assert err.chunk == 2
        assert err.expected_id == "res-1"
        assert err.received_id == "other"
        assert len(transport.calls) == 2
        assert all(s.closed for s in tracked_sources)

    def test_dropped_id_is_rejected(self, make_file: Callable[..., Path]) -> None:
        transport = RecordingTransport(responses={2: {"chunksUploaded": 2}})
        path = make_file(3 * C)

        with pytest.raises(ProtocolViolationError, match="is missing"):
            upload_chunked(transport, _request(path))

    def test_malformed_receipt(self, make_file: Callable[..., Path]) -> None:
        transport = RecordingTransport(responses={1: {"$id": "x", "chunksTotal": "many"}})

        with pytest.raises(ProtocolViolationError, match="Malformed"):
            upload_chunked(transport, _request(make_file(10)))

    def test_session_is_single_use(
        self, make_file: Callable[..., Path], transport: RecordingTransport
    ) -> None:
        session = UploadSession(transport, _request(make_file(10)))
        session.run()

        assert session.phase is UploadPhase.DONE
        with pytest.raises(RuntimeError):
            session.run()


# =============================================================================
# UploadRequest
# =============================================================================


class TestUploadRequest:
    """Validation of upload requests."""

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_rejects_non_positive_chunk_size(self, temp_dir: Path, chunk_size: int) -> None:
        with pytest.raises(ValidationError):
            _request(temp_dir / "f", chunk_size=chunk_size)

    def test_rejects_field_collision(self, temp_dir: Path) -> None:
        with pytest.raises(ValidationError, match="collides"):
            _request(temp_dir / "f", extra_fields={"file": "x"})

    def test_extra_fields_are_read_only(self, temp_dir: Path) -> None:
        fields = {"fileId": "a"}
        request = _request(temp_dir / "f", extra_fields=fields)
        fields["fileId"] = "b"

        assert request.extra_fields["fileId"] == "a"
        with pytest.raises(TypeError):
            request.extra_fields["fileId"] = "c"  # type: ignore[index]


# =============================================================================
# Server Chunk Counters
# =============================================================================


class TestServerCounters:
    """The final response's chunk counters are checked after the last chunk."""

    def test_warns_when_server_is_short_of_chunks(
        self,
        make_file: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        transport = RecordingTransport(
            responses={3: {"$id": "res-1", "chunksTotal": 3, "chunksUploaded": 2}}
        )

        with caplog.at_level(logging.WARNING, logger="appwritectl.uploaders.chunked"):
            result = upload_chunked(transport, _request(make_file(3 * C)))

        assert result["chunksUploaded"] == 2
        assert "Server reports 2 of 3 chunks received" in caplog.text

    def test_quiet_when_server_has_every_chunk(
        self,
        make_file: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        transport = RecordingTransport(chunks_total=3)

        with caplog.at_level(logging.WARNING, logger="appwritectl.uploaders.chunked"):
            upload_chunked(transport, _request(make_file(3 * C)))

        assert "Server reports" not in caplog.text
