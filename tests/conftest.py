"""
Shared pytest fixtures for ByteEdit tests.

This module provides common fixtures including:
- InMemoryEditServer: Transport fake holding session buffers in memory
- RecordingEditPrimitive: Edit primitive test double recording call order
- AsyncMock transports for call-shape tests
"""

import asyncio
import os
import sys
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from byteedit.client import EditClient
from byteedit.modules.api.models import (
    ByteFrequencyProfileRequest,
    ByteFrequencyProfileResponse,
    ChangeKind,
    ChangeRequest,
    ChangeResponse,
    ComputedFileSizeResponse,
    CountKind,
    CountRequest,
    CountResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    IntResponse,
    ObjectId,
    SaveSessionRequest,
    SaveSessionResponse,
    SearchRequest,
    SearchResponse,
    SegmentRequest,
    SegmentResponse,
    SessionCountResponse,
    SingleCount,
)
from byteedit.modules.rpc import RemoteCall, TransportError


# =============================================================================
# In-memory editing server
# =============================================================================


class InMemoryEditServer:
    """
    Transport fake implementing the SessionTransport protocol in memory.

    Searches return non-overlapping matches. Every call is recorded in
    `calls` as (method, request). Failures can be injected per method with
    `fail(method, error)`.

    Each call yields to the event loop once before it is served (unless
    `yield_control` is False), so concurrent callers really interleave.
    `in_flight` and `max_in_flight` track overlapping calls per method,
    `max_concurrent` across all methods.

    Usage:
        async def test_something(server, client):
            session_id = await client.sessions.create_session()
            server.load(session_id, b"foo bar")
            assert await client.query.get_computed_file_size(session_id) == 7
    """

    def __init__(self):
        self.buffers: Dict[str, bytearray] = {}
        self.change_counts: Dict[str, int] = {}
        self.paused: Dict[str, bool] = {}
        self.transactions: Dict[str, int] = {}
        self.files: Dict[str, bytes] = {}
        self.calls: List[Tuple[str, object]] = []
        self.failures: Dict[str, Exception] = {}
        self.accepting_sessions = True
        self.closed = False
        self.yield_control = True
        self.concurrent = 0
        self.max_concurrent = 0
        self.in_flight: Dict[str, int] = {}
        self.max_in_flight: Dict[str, int] = {}
        self._next_id = 1

    # Test helpers

    def load(self, session_id: str, data: bytes) -> None:
        self.buffers[session_id] = bytearray(data)

    def content(self, session_id: str) -> bytes:
        return bytes(self.buffers[session_id])

    def fail(self, method: str, error: Exception) -> None:
        self.failures[method] = error

    def calls_to(self, method: str) -> List[object]:
        return [request for name, request in self.calls if name == method]

    async def _record(self, method: str, request=None) -> None:
        self.calls.append((method, request))
        self.in_flight[method] = self.in_flight.get(method, 0) + 1
        self.max_in_flight[method] = max(self.max_in_flight.get(method, 0), self.in_flight[method])
        self.concurrent += 1
        self.max_concurrent = max(self.max_concurrent, self.concurrent)
        try:
            if self.yield_control:
                await asyncio.sleep(0)
        finally:
            # Everything after the yield runs without suspending
            self.in_flight[method] -= 1
            self.concurrent -= 1
        if method in self.failures:
            raise self.failures[method]

    def _buffer(self, session_id: str) -> bytearray:
        if session_id not in self.buffers:
            raise TransportError(f"Session not found: {session_id}", code="NOT_FOUND")
        return self.buffers[session_id]

    @staticmethod
    def _check_range(buffer: bytearray, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > len(buffer):
            raise TransportError(
                f"Range {offset}+{length} exceeds computed size {len(buffer)}",
                code="OUT_OF_RANGE",
            )

    # SessionTransport protocol

    async def create_session(self, request: CreateSessionRequest) -> CreateSessionResponse:
        await self._record("create_session", request)
        if not self.accepting_sessions:
            return CreateSessionResponse(session_id="")

        session_id = request.session_id_desired
        if not session_id:
            session_id = f"session-{self._next_id}"
            self._next_id += 1
        if session_id in self.buffers:
            raise TransportError(f"Session already exists: {session_id}", code="ALREADY_EXISTS")

        data = self.files.get(request.file_path, b"") if request.file_path else b""
        self.buffers[session_id] = bytearray(data)
        self.change_counts[session_id] = 0
        return CreateSessionResponse(session_id=session_id, file_path=request.file_path, file_size=len(data))

    async def destroy_session(self, request: ObjectId) -> ObjectId:
        await self._record("destroy_session", request)
        self._buffer(request.id)
        del self.buffers[request.id]
        return ObjectId(id=request.id)

    async def save_session(self, request: SaveSessionRequest) -> SaveSessionResponse:
        await self._record("save_session", request)
        buffer = self._buffer(request.session_id)
        path = request.file_path
        if path in self.files and not request.allow_overwrite:
            suffix = 1
            while f"{path}-{suffix}" in self.files:
                suffix += 1
            path = f"{path}-{suffix}"
        self.files[path] = bytes(buffer)
        return SaveSessionResponse(session_id=request.session_id, file_path=path)

    async def get_computed_file_size(self, request: ObjectId) -> ComputedFileSizeResponse:
        await self._record("get_computed_file_size", request)
        return ComputedFileSizeResponse(
            session_id=request.id, computed_file_size=len(self._buffer(request.id))
        )

    async def get_count(self, request: CountRequest) -> CountResponse:
        await self._record("get_count", request)
        buffer = self._buffer(request.session_id)
        values = {
            CountKind.COMPUTED_FILE_SIZE: len(buffer),
            CountKind.CHANGES: self.change_counts.get(request.session_id, 0),
        }
        # Reply in reverse order; callers must not rely on request order
        counts = [SingleCount(kind=kind, count=values.get(kind, 0)) for kind in reversed(request.kinds)]
        return CountResponse(session_id=request.session_id, counts=counts)

    async def pause_session_changes(self, request: ObjectId) -> ObjectId:
        await self._record("pause_session_changes", request)
        self._buffer(request.id)
        self.paused[request.id] = True
        return ObjectId(id=request.id)

    async def resume_session_changes(self, request: ObjectId) -> ObjectId:
        await self._record("resume_session_changes", request)
        self._buffer(request.id)
        self.paused[request.id] = False
        return ObjectId(id=request.id)

    async def session_begin_transaction(self, request: ObjectId) -> ObjectId:
        await self._record("session_begin_transaction", request)
        self._buffer(request.id)
        self.transactions[request.id] = self.transactions.get(request.id, 0) + 1
        return ObjectId(id=request.id)

    async def session_end_transaction(self, request: ObjectId) -> ObjectId:
        await self._record("session_end_transaction", request)
        self._buffer(request.id)
        self.transactions[request.id] = self.transactions.get(request.id, 0) - 1
        return ObjectId(id=request.id)

    async def unsubscribe_to_session_events(self, request: ObjectId) -> ObjectId:
        await self._record("unsubscribe_to_session_events", request)
        return ObjectId(id=request.id)

    async def get_segment(self, request: SegmentRequest) -> SegmentResponse:
        await self._record("get_segment", request)
        buffer = self._buffer(request.session_id)
        self._check_range(buffer, request.offset, request.length)
        data = bytes(buffer[request.offset:request.offset + request.length])
        return SegmentResponse(session_id=request.session_id, offset=request.offset, data=data)

    async def get_session_count(self) -> SessionCountResponse:
        await self._record("get_session_count")
        return SessionCountResponse(count=len(self.buffers))

    async def notify_changed_viewports(self, request: ObjectId) -> IntResponse:
        await self._record("notify_changed_viewports", request)
        self._buffer(request.id)
        return IntResponse(response=0)

    async def get_byte_frequency_profile(
        self, request: ByteFrequencyProfileRequest
    ) -> ByteFrequencyProfileResponse:
        await self._record("get_byte_frequency_profile", request)
        buffer = self._buffer(request.session_id)
        end = request.offset + request.length if request.length else len(buffer)
        frequency = [0] * 256
        for byte in buffer[request.offset:end]:
            frequency[byte] += 1
        return ByteFrequencyProfileResponse(
            session_id=request.session_id,
            offset=request.offset,
            length=request.length,
            frequency=frequency,
        )

    async def search_session(self, request: SearchRequest) -> SearchResponse:
        await self._record("search_session", request)
        buffer = bytes(self._buffer(request.session_id))
        self._check_range(buffer, request.offset, 0)
        end = request.offset + request.length if request.length else len(buffer)
        haystack = buffer[:end]
        pattern = request.pattern
        if request.is_case_insensitive:
            haystack = haystack.lower()
            pattern = pattern.lower()

        matches = []
        position = haystack.find(pattern, request.offset)
        while position != -1:
            matches.append(position)
            if request.limit and len(matches) >= request.limit:
                break
            position = haystack.find(pattern, position + len(pattern))
        return SearchResponse(session_id=request.session_id, match_offsets=matches)

    async def submit_change(self, request: ChangeRequest) -> ChangeResponse:
        await self._record("submit_change", request)
        buffer = self._buffer(request.session_id)
        if request.kind == ChangeKind.INSERT:
            self._check_range(buffer, request.offset, 0)
            buffer[request.offset:request.offset] = request.data
        elif request.kind == ChangeKind.DELETE:
            self._check_range(buffer, request.offset, request.length)
            del buffer[request.offset:request.offset + request.length]
        else:
            self._check_range(buffer, request.offset, request.length)
            buffer[request.offset:request.offset + request.length] = request.data
        self.change_counts[request.session_id] = self.change_counts.get(request.session_id, 0) + 1
        return ChangeResponse(session_id=request.session_id, serial=self.change_counts[request.session_id])

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# Edit primitive test double
# =============================================================================


class RecordingEditPrimitive:
    """
    Edit primitive that records every call and optionally applies it to an
    InMemoryEditServer buffer.

    Set `fail_on_call` to make the Nth call (1-based) raise.
    """

    def __init__(self, server: Optional[InMemoryEditServer] = None, fail_on_call: Optional[int] = None):
        self.server = server
        self.fail_on_call = fail_on_call
        self.calls: List[Tuple[str, int, bytes, bytes]] = []

    @property
    def offsets(self) -> List[int]:
        return [offset for _, offset, _, _ in self.calls]

    async def edit_simple(self, session_id, offset, original, edited, stats=None):
        self.calls.append((session_id, offset, original, edited))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            if stats is not None:
                stats.error_count += 1
            raise TransportError("edit rejected", code="FAILED_PRECONDITION")
        if self.server is not None:
            buffer = self.server.buffers[session_id]
            buffer[offset:offset + len(original)] = edited


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def server():
    """In-memory editing server."""
    return InMemoryEditServer()


@pytest.fixture
def remote_call(server):
    """RemoteCall bound to the in-memory server."""
    return RemoteCall(server)


@pytest.fixture
def client(server):
    """EditClient wired to the in-memory server with the default edit primitive."""
    return EditClient(server)


@pytest_asyncio.fixture
async def session_id(client):
    """A fresh, empty session on the in-memory server."""
    return await client.sessions.create_session()


@pytest.fixture
def mock_transport():
    """Create a mock transport for call-shape assertions."""
    transport = AsyncMock()
    transport.create_session = AsyncMock()
    transport.destroy_session = AsyncMock()
    transport.save_session = AsyncMock()
    transport.get_computed_file_size = AsyncMock()
    transport.get_count = AsyncMock()
    transport.pause_session_changes = AsyncMock()
    transport.resume_session_changes = AsyncMock()
    transport.session_begin_transaction = AsyncMock()
    transport.session_end_transaction = AsyncMock()
    transport.unsubscribe_to_session_events = AsyncMock()
    transport.get_segment = AsyncMock()
    transport.get_session_count = AsyncMock()
    transport.notify_changed_viewports = AsyncMock()
    transport.get_byte_frequency_profile = AsyncMock()
    transport.search_session = AsyncMock()
    transport.submit_change = AsyncMock()
    transport.aclose = AsyncMock()
    return transport


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "replace_core: Tests of the descending-offset replace algorithm"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a running editing server"
    )
