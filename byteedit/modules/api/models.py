"""
ByteEdit shared data models.

These models define the logical request and response shapes exchanged
with the editing server, independent of how a transport puts them on
the wire.
"""

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Session identifiers are opaque server-assigned strings; empty means "no session"
SessionId = str

BYTE_PROFILE_SIZE = 256
ASCII_BYTE_LIMIT = 128

# Text or raw bytes, normalized by to_bytes() before any search/replace logic runs
BytesLike = Union[str, bytes, bytearray, memoryview]


class WireModel(BaseModel):
    """Base for all request/response models; raw bytes travel as base64 in JSON."""

    model_config = ConfigDict(
        ser_json_bytes="base64",
        val_json_bytes="base64",
        populate_by_name=True,
    )


# Enums


class CountKind(str, Enum):
    """Session statistics that can be requested together in one call."""

    COMPUTED_FILE_SIZE = "computed_file_size"
    CHANGES = "changes"
    UNDO_CHANGES = "undo_changes"
    VIEWPORTS = "viewports"
    CHECKPOINTS = "checkpoints"
    SEARCH_CONTEXTS = "search_contexts"
    CHANGE_TRANSACTIONS = "change_transactions"
    UNDO_TRANSACTIONS = "undo_transactions"


class ChangeKind(str, Enum):
    """Primitive change kinds applied by the server."""

    INSERT = "insert"
    DELETE = "delete"
    OVERWRITE = "overwrite"


# Request Models


class ObjectId(WireModel):
    """Request or response carrying just a session ID."""

    id: SessionId


class CreateSessionRequest(WireModel):
    """Request to create an editing session."""

    session_id_desired: Optional[str] = Field(
        None, description="Session ID to assign; server generates one if unset"
    )
    file_path: Optional[str] = Field(
        None, description="File to open for read; session starts empty if unset"
    )


class SaveSessionRequest(WireModel):
    """Request to save a session to a file."""

    session_id: SessionId
    file_path: str = Field(..., min_length=1)
    allow_overwrite: bool = False


class CountRequest(WireModel):
    """Request for several session counts in one round trip."""

    session_id: SessionId
    kinds: List[CountKind] = Field(..., min_length=1)


class SegmentRequest(WireModel):
    """Request for a copy of a session data segment; range checks are the server's."""

    session_id: SessionId
    offset: int
    length: int


class ByteFrequencyProfileRequest(WireModel):
    """Request for a byte frequency profile over a session range."""

    session_id: SessionId
    offset: int = 0
    length: Optional[int] = Field(None, gt=0, description="Profile to the end of the session if unset")


class SearchRequest(WireModel):
    """Request to find pattern match offsets within a session range."""

    session_id: SessionId
    pattern: bytes = Field(..., min_length=1)
    is_case_insensitive: bool = False
    offset: int = 0
    length: Optional[int] = Field(None, gt=0, description="Search to the end of the session if unset")
    limit: Optional[int] = Field(None, gt=0, description="Unbounded number of matches if unset")


class ChangeRequest(WireModel):
    """
    Request to apply one primitive change.

    INSERT puts data at offset, DELETE removes length bytes at offset and
    OVERWRITE replaces length bytes at offset with data, which may be
    shorter or longer than length.
    """

    session_id: SessionId
    kind: ChangeKind
    offset: int
    length: int
    data: bytes = b""


# Response Models


class CreateSessionResponse(WireModel):
    """Response after creating a session; empty session_id means creation was blocked."""

    session_id: SessionId = ""
    file_path: Optional[str] = None
    file_size: Optional[int] = None


class SaveSessionResponse(WireModel):
    """Response after saving a session."""

    session_id: SessionId
    file_path: str


class ComputedFileSizeResponse(WireModel):
    """Computed file size of a session."""

    session_id: SessionId
    computed_file_size: int = Field(..., ge=0)


class SingleCount(WireModel):
    """One requested count."""

    kind: CountKind
    count: int


class CountResponse(WireModel):
    """Counts returned for a CountRequest."""

    session_id: SessionId
    counts: List[SingleCount] = Field(default_factory=list)


class SegmentResponse(WireModel):
    """Copy of a session data segment."""

    session_id: SessionId
    offset: int
    data: bytes = b""


class SessionCountResponse(WireModel):
    """Number of active sessions on the server."""

    count: int = Field(..., ge=0)


class IntResponse(WireModel):
    """Generic integer response."""

    response: int


class ByteFrequencyProfileResponse(WireModel):
    """Byte frequency profile of a session range."""

    session_id: SessionId
    offset: int = 0
    length: Optional[int] = None
    frequency: List[int]

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v):
        """Ensure there is one entry per possible byte value."""
        if len(v) != BYTE_PROFILE_SIZE:
            raise ValueError(
                f"Byte frequency profile must have {BYTE_PROFILE_SIZE} entries, got {len(v)}"
            )
        return v


class SearchResponse(WireModel):
    """Offsets where a search pattern was found."""

    session_id: SessionId
    match_offsets: List[int] = Field(default_factory=list)


class ChangeResponse(WireModel):
    """Response after applying a primitive change."""

    session_id: SessionId
    serial: int = 0


# Error Models


class ErrorResponse(WireModel):
    """Error body returned by the editing server."""

    message: Optional[str] = None
    detail: Optional[str] = None
    code: Optional[Union[int, str]] = None
    details: Optional[Any] = None


# Internal Models (Used between modules)


class ByteSegment(BaseModel):
    """Read-only snapshot of a session data segment."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0)
    data: bytes = b""

    @property
    def length(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)


# Conversion Helpers


def to_bytes(value: BytesLike) -> bytes:
    """
    Normalize a pattern or replacement to raw bytes.

    Text is encoded as UTF-8; bytes-like values are copied as-is.

    Raises:
        TypeError: If value is neither text nor bytes-like
    """
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Expected str or bytes-like value, got {type(value).__name__}")
