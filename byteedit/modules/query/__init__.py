"""
Query Module - Black Box Interface

Purpose: Read-only session queries
Interface: get_computed_file_size(), get_counts(), get_segment(), search()
Hidden: Request shaping (optional fields), reply validation

Never mutates a session.
"""

from .query import QueryModule

__all__ = ["QueryModule"]
