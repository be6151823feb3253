"""
Change Module - Black Box Interface

Purpose: Mutate session data
Interface: insert(), overwrite(), delete(), edit(), EditPrimitive
Hidden: Mapping of edits onto primitive INSERT/DELETE/OVERWRITE changes

The edit primitive is injected; replace it to apply edits another way.
"""

from .change import ChangeModule, EditPrimitive, EditStats, TransportEditPrimitive

__all__ = ["ChangeModule", "EditPrimitive", "EditStats", "TransportEditPrimitive"]
