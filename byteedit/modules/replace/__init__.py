"""
Replace Module - Black Box Interface

Purpose: Bulk and iterative search/replace
Interface: replace_all(), replace_one(), replace_each(), ReplaceStep
Hidden: Descending-offset application order, offset bookkeeping

Depends only on a search provider and an edit primitive.
"""

from .replace import EXHAUSTED, ReplaceModule, ReplaceStep

__all__ = ["EXHAUSTED", "ReplaceModule", "ReplaceStep"]
