"""Pytest configuration and fixtures for appwritectl tests."""

from __future__ import annotations

import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest

from appwritectl.core.client import InputFile


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    endpoint: https://appwrite-test.example.org/v1
    project_id: demo
    self_signed: true
    timeout: 30
    chunk_size: 1024

  production:
    endpoint: https://cloud.appwrite.io/v1
    project_id: prod
    timeout: 60
"""


@pytest.fixture
def make_file(temp_dir: Path) -> Callable[..., Path]:
    """Write a file of ``size`` patterned bytes and return its path."""

    def _make(size: int, name: str = "payload.bin") -> Path:
        path = temp_dir / name
        path.write_bytes(bytes(i % 251 for i in range(size)))
        return path

    return _make


# =============================================================================
# Recording Transport
# =============================================================================


@dataclass
class RecordedCall:
    """One request seen by RecordingTransport."""

    method: str
    path: str
    headers: dict[str, str]
    payload: dict[str, Any]

    @property
    def file(self) -> InputFile:
        return self.payload["file"]

    @property
    def body(self) -> bytes:
        return self.file.content


@dataclass
class RecordingTransport:
    """Fake ``call(method, path, headers, payload)`` that records every request.

    Responses look like the server's: the first one assigns ``resource_id``
    and later ones echo it back. ``responses`` overrides the response for a
    given 1-based call number, and ``fail_on`` raises for one.
    """

    resource_id: str = "res-1"
    responses: dict[int, Any] = field(default_factory=dict)
    fail_on: dict[int, Exception] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    chunks_total: Optional[int] = None

    def __call__(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> Any:
        self.calls.append(RecordedCall(method, path, dict(headers), dict(payload)))
        number = len(self.calls)

        if number in self.fail_on:
            raise self.fail_on[number]
        if number in self.responses:
            return self.responses[number]

        response: dict[str, Any] = {"$id": self.resource_id, "chunksUploaded": number}
        if self.chunks_total is not None:
            response["chunksTotal"] = self.chunks_total
        return response

    @property
    def bodies(self) -> list[bytes]:
        return [call.body for call in self.calls]


@pytest.fixture
def transport() -> RecordingTransport:
    """Recording fake transport."""
    return RecordingTransport()
