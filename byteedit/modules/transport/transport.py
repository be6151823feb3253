"""
Transport binding to the editing server.

SessionTransport is the contract every module relies on; any object with
these coroutines can be injected (tests use in-memory fakes).
HttpSessionTransport is the default binding: each operation is a JSON POST
to <server_url>/<operation>.
"""

import logging
from typing import Dict, Optional, Protocol, Type

import httpx
from pydantic import BaseModel, ValidationError

from ..api.models import (
    ByteFrequencyProfileRequest,
    ByteFrequencyProfileResponse,
    ChangeRequest,
    ChangeResponse,
    ComputedFileSizeResponse,
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
)
from ..rpc.rpc import TransportError

logger = logging.getLogger("byteedit.transport")

JSON_HEADERS = {"Content-Type": "application/json"}


class SessionTransport(Protocol):
    """Protocol for editing server transports - allows swappable implementations."""

    async def create_session(self, request: CreateSessionRequest) -> CreateSessionResponse:
        ...

    async def destroy_session(self, request: ObjectId) -> ObjectId:
        ...

    async def save_session(self, request: SaveSessionRequest) -> SaveSessionResponse:
        ...

    async def get_computed_file_size(self, request: ObjectId) -> ComputedFileSizeResponse:
        ...

    async def get_count(self, request: CountRequest) -> CountResponse:
        ...

    async def pause_session_changes(self, request: ObjectId) -> ObjectId:
        ...

    async def resume_session_changes(self, request: ObjectId) -> ObjectId:
        ...

    async def session_begin_transaction(self, request: ObjectId) -> ObjectId:
        ...

    async def session_end_transaction(self, request: ObjectId) -> ObjectId:
        ...

    async def unsubscribe_to_session_events(self, request: ObjectId) -> ObjectId:
        ...

    async def get_segment(self, request: SegmentRequest) -> SegmentResponse:
        ...

    async def get_session_count(self) -> SessionCountResponse:
        ...

    async def notify_changed_viewports(self, request: ObjectId) -> IntResponse:
        ...

    async def get_byte_frequency_profile(
        self, request: ByteFrequencyProfileRequest
    ) -> ByteFrequencyProfileResponse:
        ...

    async def search_session(self, request: SearchRequest) -> SearchResponse:
        ...

    async def submit_change(self, request: ChangeRequest) -> ChangeResponse:
        ...

    async def aclose(self) -> None:
        ...


# Operation routes and the response model each one returns
ROUTES: Dict[str, Type[BaseModel]] = {
    "createSession": CreateSessionResponse,
    "destroySession": ObjectId,
    "saveSession": SaveSessionResponse,
    "getComputedFileSize": ComputedFileSizeResponse,
    "getCount": CountResponse,
    "pauseSessionChanges": ObjectId,
    "resumeSessionChanges": ObjectId,
    "sessionBeginTransaction": ObjectId,
    "sessionEndTransaction": ObjectId,
    "unsubscribeToSessionEvents": ObjectId,
    "getSegment": SegmentResponse,
    "getSessionCount": SessionCountResponse,
    "notifyChangedViewports": IntResponse,
    "getByteFrequencyProfile": ByteFrequencyProfileResponse,
    "searchSession": SearchResponse,
    "submitChange": ChangeResponse,
}


class HttpSessionTransport:
    """JSON-over-HTTP binding of the SessionTransport protocol."""

    def __init__(self, config, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize HTTP transport.

        Args:
            config: TransportConfig with server URL, timeout and TLS settings
            client: Optional pre-built httpx client (not closed by aclose)
        """
        self.config = config
        self._owns_client = client is None
        if client is None:
            headers = {}
            if config.api_key:
                headers["X-API-Key"] = config.api_key
            client = httpx.AsyncClient(
                base_url=config.server_url,
                timeout=config.timeout_seconds,
                verify=config.verify,
                headers=headers,
            )
        self._client = client

        if config.server_url.startswith("http://"):
            logger.warning(f"Using HTTP without TLS for {config.server_url} - local development only")

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, route: str, request: Optional[BaseModel] = None) -> BaseModel:
        response_model = ROUTES[route]
        body = request.model_dump_json(exclude_none=True) if request is not None else "{}"

        try:
            response = await self._client.post(f"/{route}", content=body, headers=JSON_HEADERS)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", code="DEADLINE_EXCEEDED") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}", code="UNAVAILABLE") from e

        if response.status_code >= 400:
            raise self._error_from_response(response)

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            raise TransportError(
                f"Malformed {route} response: {e.error_count()} validation error(s)",
                code="INTERNAL",
                details=e.errors(include_url=False),
            ) from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> TransportError:
        """Build a TransportError from an HTTP error reply."""
        try:
            error = ErrorResponse.model_validate_json(response.content)
        except ValidationError:
            error = ErrorResponse()

        message = error.message or error.detail or response.reason_phrase or f"HTTP {response.status_code}"
        code = error.code if error.code is not None else response.status_code
        return TransportError(message, code=code, details=error.details)

    async def create_session(self, request: CreateSessionRequest) -> CreateSessionResponse:
        return await self._post("createSession", request)

    async def destroy_session(self, request: ObjectId) -> ObjectId:
        return await self._post("destroySession", request)

    async def save_session(self, request: SaveSessionRequest) -> SaveSessionResponse:
        return await self._post("saveSession", request)

    async def get_computed_file_size(self, request: ObjectId) -> ComputedFileSizeResponse:
        return await self._post("getComputedFileSize", request)

    async def get_count(self, request: CountRequest) -> CountResponse:
        return await self._post("getCount", request)

    async def pause_session_changes(self, request: ObjectId) -> ObjectId:
        return await self._post("pauseSessionChanges", request)

    async def resume_session_changes(self, request: ObjectId) -> ObjectId:
        return await self._post("resumeSessionChanges", request)

    async def session_begin_transaction(self, request: ObjectId) -> ObjectId:
        return await self._post("sessionBeginTransaction", request)

    async def session_end_transaction(self, request: ObjectId) -> ObjectId:
        return await self._post("sessionEndTransaction", request)

    async def unsubscribe_to_session_events(self, request: ObjectId) -> ObjectId:
        return await self._post("unsubscribeToSessionEvents", request)

    async def get_segment(self, request: SegmentRequest) -> SegmentResponse:
        return await self._post("getSegment", request)

    async def get_session_count(self) -> SessionCountResponse:
        return await self._post("getSessionCount")

    async def notify_changed_viewports(self, request: ObjectId) -> IntResponse:
        return await self._post("notifyChangedViewports", request)

    async def get_byte_frequency_profile(
        self, request: ByteFrequencyProfileRequest
    ) -> ByteFrequencyProfileResponse:
        return await self._post("getByteFrequencyProfile", request)

    async def search_session(self, request: SearchRequest) -> SearchResponse:
        return await self._post("searchSession", request)

    async def submit_change(self, request: ChangeRequest) -> ChangeResponse:
        return await self._post("submitChange", request)
