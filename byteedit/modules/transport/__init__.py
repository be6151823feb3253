"""
Transport Module - Black Box Interface

Purpose: Carry session requests to the editing server
Interface: SessionTransport protocol, HttpSessionTransport
Hidden: Wire format, connection pooling, HTTP error mapping

Can be replaced with any binding (gRPC, in-process engine) that satisfies
the SessionTransport protocol.
"""

from .transport import ROUTES, HttpSessionTransport, SessionTransport

__all__ = ["ROUTES", "HttpSessionTransport", "SessionTransport"]
