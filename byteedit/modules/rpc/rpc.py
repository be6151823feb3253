"""
Remote call plumbing shared by every session module.

Every server round trip goes through RemoteCall, which:
- Logs the request and, on success, the response at debug level
- Notifies an optional CallObserver (structured-logging hook)
- Converts any transport failure into a SessionOperationError carrying
  "<operation> error: <message>" plus the original code and details
- Optionally lets a classifier suppress failures that are not errors
  (shutdown-induced cancellation of passive subscriptions)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel

logger = logging.getLogger("byteedit.rpc")


# Errors


class ByteEditError(Exception):
    """Base class for all byteedit errors."""


class TransportError(ByteEditError):
    """A call to the editing server failed (network failure or server error code)."""

    def __init__(self, message: str, code: Any = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class SessionOperationError(ByteEditError):
    """A session operation failed; wraps the underlying failure."""

    def __init__(self, operation: str, message: str, code: Any = None, details: Any = None):
        super().__init__(f"{operation} error: {message}")
        self.operation = operation
        self.message = message
        self.code = code
        self.details = details

    @classmethod
    def from_exception(cls, operation: str, err: Exception) -> "SessionOperationError":
        """Build from a transport failure, preserving its code and details."""
        if isinstance(err, TransportError):
            return cls(operation, err.message, code=err.code, details=err.details)
        return cls(operation, str(err) or type(err).__name__)


class TransactionStateError(ByteEditError):
    """Transaction brackets were opened or closed out of order."""


# Cancellation classification


@dataclass
class CancellationPolicy:
    """
    Classifies shutdown-induced call cancellation.

    A failure is benign when its code is one of the configured codes or
    its message contains one of the configured markers.
    """

    codes: List[str] = field(default_factory=lambda: ["CANCELLED", "1"])
    messages: List[str] = field(default_factory=lambda: ["Call cancelled"])

    @classmethod
    def from_config(cls, config) -> "CancellationPolicy":
        return cls(codes=list(config.codes), messages=list(config.messages))

    def is_benign(self, err: BaseException) -> bool:
        if not isinstance(err, TransportError):
            return False
        if err.code is not None and str(err.code) in self.codes:
            return True
        return any(marker in err.message for marker in self.messages if marker)


# Observability hook


class CallObserver(Protocol):
    """Structured-logging hook invoked around every remote call."""

    def on_request(self, fn: str, request: Optional[BaseModel]) -> None:
        ...

    def on_response(self, fn: str, request: Optional[BaseModel], response: Any) -> None:
        ...


def _dump(model: Any) -> Any:
    if isinstance(model, BaseModel):
        return model.model_dump(exclude_none=True)
    return model


class RemoteCall:
    """Single-shot request/response wrapper around a transport."""

    def __init__(self, transport, observer: Optional[CallObserver] = None):
        """
        Initialize remote call wrapper.

        Args:
            transport: Object implementing the SessionTransport protocol
            observer: Optional structured-logging hook
        """
        self.transport = transport
        self.observer = observer

    async def __call__(
        self,
        fn: str,
        method: str,
        request: Optional[BaseModel] = None,
        suppress: Optional[Callable[[BaseException], bool]] = None,
    ) -> Any:
        """
        Issue one call and wait for its response.

        Args:
            fn: Operation name used in logs and error messages
            method: Transport method to invoke
            request: Request model, or None for calls without a request
            suppress: Optional classifier; failures it accepts are swallowed

        Returns:
            Transport response, or None when a failure was suppressed

        Raises:
            SessionOperationError: If the call failed and was not suppressed
        """
        logger.debug(f"{fn} request: {_dump(request)}")
        if self.observer is not None:
            self.observer.on_request(fn, request)

        call = getattr(self.transport, method)
        try:
            if request is None:
                response = await call()
            else:
                response = await call(request)
        except Exception as err:
            if suppress is not None and suppress(err):
                logger.debug(f"{fn} suppressed benign failure: {err}")
                return None

            code = getattr(err, "code", None)
            details = getattr(err, "details", None)
            logger.error(f"{fn} failed: msg={err} code={code} details={details}")
            raise SessionOperationError.from_exception(fn, err) from err

        logger.debug(f"{fn} response: {_dump(response)}")
        if self.observer is not None:
            self.observer.on_response(fn, request, response)
        return response

