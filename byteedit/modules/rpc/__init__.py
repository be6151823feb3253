"""
RPC Module - Black Box Interface

Purpose: Request/response plumbing and error classification
Interface: RemoteCall, CancellationPolicy, CallObserver, error types
Hidden: Logging of requests/responses, error wrapping

Every other module talks to the server only through RemoteCall.
"""

from .rpc import (
    ByteEditError,
    CallObserver,
    CancellationPolicy,
    RemoteCall,
    SessionOperationError,
    TransactionStateError,
    TransportError,
)

__all__ = [
    "ByteEditError",
    "CallObserver",
    "CancellationPolicy",
    "RemoteCall",
    "SessionOperationError",
    "TransactionStateError",
    "TransportError",
]
