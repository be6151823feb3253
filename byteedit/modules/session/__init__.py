"""
Session Module - Black Box Interface

Purpose: Manage editing session lifecycle
Interface: create_session(), destroy_session(), save_session(), transaction()
Hidden: Transaction bracket bookkeeping, cancellation classification

Works against any transport satisfying the SessionTransport protocol.
"""

from .session import SessionModule

__all__ = ["SessionModule"]
