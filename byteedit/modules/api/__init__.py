"""
API Module - Black Box Interface

Purpose: Logical request/response shapes shared by all modules
Interface: Pydantic models, to_bytes()
Hidden: Wire encoding (raw bytes travel as base64 in JSON)

Transports translate these models to and from their own wire format.
"""

from .models import (
    ASCII_BYTE_LIMIT,
    BYTE_PROFILE_SIZE,
    ByteFrequencyProfileRequest,
    ByteFrequencyProfileResponse,
    ByteSegment,
    BytesLike,
    ChangeKind,
    ChangeRequest,
    ChangeResponse,
    ComputedFileSizeResponse,
    CountKind,
    CountRequest,
    CountResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    ErrorResponse,
    IntResponse,
    ObjectId,
    SaveSessionRequest,
    SaveSessionResponse,
    SearchRequest,
    SearchResponse,
    SegmentRequest,
    SegmentResponse,
    SessionCountResponse,
    SessionId,
    SingleCount,
    to_bytes,
)

__all__ = [
    "ASCII_BYTE_LIMIT",
    "BYTE_PROFILE_SIZE",
    "ByteFrequencyProfileRequest",
    "ByteFrequencyProfileResponse",
    "ByteSegment",
    "BytesLike",
    "ChangeKind",
    "ChangeRequest",
    "ChangeResponse",
    "ComputedFileSizeResponse",
    "CountKind",
    "CountRequest",
    "CountResponse",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "ErrorResponse",
    "IntResponse",
    "ObjectId",
    "SaveSessionRequest",
    "SaveSessionResponse",
    "SearchRequest",
    "SearchResponse",
    "SegmentRequest",
    "SegmentResponse",
    "SessionCountResponse",
    "SessionId",
    "SingleCount",
    "to_bytes",
]
