"""
Query Module for ByteEdit.

Read-only session operations: sizes, counts, segment copies, byte
frequency profiles and pattern search. Every read is a fresh round trip;
nothing about a session's bytes is cached client-side.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from ..api.models import (
    ASCII_BYTE_LIMIT,
    ByteFrequencyProfileRequest,
    ByteSegment,
    BytesLike,
    CountKind,
    CountRequest,
    ObjectId,
    SearchRequest,
    SegmentRequest,
    SessionId,
    SingleCount,
    to_bytes,
)
from ..rpc.rpc import RemoteCall, SessionOperationError

logger = logging.getLogger("byteedit.query")


def _unique(items: Iterable) -> List:
    """Collapse duplicates while preserving first-seen order."""
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


class QueryModule:
    """Read-only queries against editing sessions."""

    def __init__(self, remote_call: RemoteCall):
        """
        Initialize query module.

        Args:
            remote_call: Call wrapper bound to the editing server transport
        """
        self.call = remote_call

    async def get_computed_file_size(self, session_id: SessionId) -> int:
        """Computed file size in bytes, including all applied changes."""
        response = await self.call("getComputedFileSize", "get_computed_file_size", ObjectId(id=session_id))
        return response.computed_file_size

    async def get_counts(self, session_id: SessionId, kinds: Iterable[CountKind]) -> List[SingleCount]:
        """
        Get several counts for a session in one round trip.

        Duplicate kinds are requested once; no kinds returns [] without a call.

        Returns:
            One SingleCount per requested kind, in server order

        Raises:
            SessionOperationError: If the server reply does not cover every
                requested kind exactly once
        """
        requested = _unique(CountKind(kind) for kind in kinds)
        if not requested:
            return []

        response = await self.call(
            "getCounts", "get_count", CountRequest(session_id=session_id, kinds=requested)
        )

        returned = [count.kind for count in response.counts]
        if sorted(returned) != sorted(requested):
            missing = [kind.value for kind in requested if kind not in returned]
            logger.error(f"getCounts reply mismatch: requested={requested} returned={returned}")
            raise SessionOperationError(
                "getCounts",
                f"server returned {len(returned)} counts for {len(requested)} kinds (missing: {missing})",
            )
        return response.counts

    async def get_counts_by_kind(self, session_id: SessionId, kinds: Iterable[CountKind]) -> Dict[CountKind, int]:
        """Same as get_counts, keyed by kind."""
        return {count.kind: count.count for count in await self.get_counts(session_id, kinds)}

    async def get_segment(self, session_id: SessionId, offset: int, length: int) -> ByteSegment:
        """
        Copy a segment of session data.

        Out-of-range requests are reported by the server, not clamped here.
        """
        response = await self.call(
            "getSegment",
            "get_segment",
            SegmentRequest(session_id=session_id, offset=offset, length=length),
        )
        return ByteSegment(offset=response.offset, data=response.data)

    async def get_byte_frequency_profile(self, session_id: SessionId, offset: int = 0, length: int = 0) -> List[int]:
        """
        Byte frequency profile of a session range.

        Args:
            session_id: Session to profile
            offset: Where in the session to begin profiling
            length: Bytes to profile from offset; 0 profiles to the end of the session

        Returns:
            256 counts indexed by byte value
        """
        request = ByteFrequencyProfileRequest(
            session_id=session_id,
            offset=offset,
            length=length if length > 0 else None,
        )
        response = await self.call("profileSession", "get_byte_frequency_profile", request)
        return response.frequency

    @staticmethod
    def count_ascii_bytes(profile: Sequence[int]) -> int:
        """Total number of 7-bit ASCII bytes (values 0-127) in a computed profile."""
        return sum(profile[:ASCII_BYTE_LIMIT])

    num_ascii = count_ascii_bytes

    async def search(
        self,
        session_id: SessionId,
        pattern: BytesLike,
        case_insensitive: bool = False,
        offset: int = 0,
        length: int = 0,
        limit: int = 0,
    ) -> List[int]:
        """
        Find offsets where a pattern occurs.

        Args:
            session_id: Session to search
            pattern: Pattern to find (text is UTF-8 encoded)
            case_insensitive: Match ASCII letters regardless of case
            offset: Start searching at this session offset
            length: Search this many bytes from offset; 0 searches to the end
            limit: Maximum number of matches; 0 is unbounded

        Returns:
            Ascending match offsets (empty for an empty pattern, without a server call)
        """
        pattern_bytes = to_bytes(pattern)
        if not pattern_bytes:
            logger.warning("searchSession: empty pattern given")
            return []

        request = SearchRequest(
            session_id=session_id,
            pattern=pattern_bytes,
            is_case_insensitive=case_insensitive,
            offset=offset,
            length=length if length > 0 else None,
            limit=limit if limit > 0 else None,
        )
        response = await self.call("searchSession", "search_session", request)
        return sorted(response.match_offsets)

    async def get_session_count(self) -> int:
        """Number of active sessions on the server (server-wide, not per client)."""
        response = await self.call("getSessionCount", "get_session_count")
        return response.count

    async def notify_changed_viewports(self, session_id: SessionId) -> int:
        """Notify viewports with pending changes; returns how many were notified."""
        response = await self.call("notifyChangedViewports", "notify_changed_viewports", ObjectId(id=session_id))
        return response.response
