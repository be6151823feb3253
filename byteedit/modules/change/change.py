"""
Change Module for ByteEdit.

All mutations funnel through a single edit primitive: replace the bytes
`original` found at `offset` with `edited`. Insert, overwrite and delete
are expressed in those terms, so the server only ever sees primitive
INSERT / DELETE / OVERWRITE changes.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Protocol

from ..api.models import BytesLike, ChangeKind, ChangeRequest, SessionId, to_bytes
from ..rpc.rpc import RemoteCall

logger = logging.getLogger("byteedit.change")


@dataclass
class EditStats:
    """Running totals of primitive changes applied through an edit primitive."""

    insert_count: int = 0
    delete_count: int = 0
    overwrite_count: int = 0
    error_count: int = 0

    @property
    def change_count(self) -> int:
        return self.insert_count + self.delete_count + self.overwrite_count

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EditPrimitive(Protocol):
    """Protocol for the simple edit primitive."""

    async def edit_simple(
        self,
        session_id: SessionId,
        offset: int,
        original: bytes,
        edited: bytes,
        stats: Optional[EditStats] = None,
    ) -> None:
        """
        Replace `original` at `offset` with `edited`.

        Insert or delete semantics apply when the lengths differ.
        """
        ...


class TransportEditPrimitive:
    """Edit primitive built on the transport's primitive change call."""

    def __init__(self, remote_call: RemoteCall):
        self.call = remote_call

    async def _submit(self, session_id: SessionId, kind: ChangeKind, offset: int, length: int, data: bytes = b"") -> None:
        request = ChangeRequest(session_id=session_id, kind=kind, offset=offset, length=length, data=data)
        await self.call("submitChange", "submit_change", request)

    async def edit_simple(
        self,
        session_id: SessionId,
        offset: int,
        original: bytes,
        edited: bytes,
        stats: Optional[EditStats] = None,
    ) -> None:
        original_length = len(original)
        edited_length = len(edited)
        logger.debug(
            f"editSimple session={session_id} offset={offset} "
            f"original_length={original_length} edited_length={edited_length}"
        )

        try:
            if original_length == 0 and edited_length == 0:
                return
            if original_length == 0:
                await self._submit(session_id, ChangeKind.INSERT, offset, edited_length, edited)
                if stats is not None:
                    stats.insert_count += 1
            elif edited_length == 0:
                await self._submit(session_id, ChangeKind.DELETE, offset, original_length)
                if stats is not None:
                    stats.delete_count += 1
            else:
                # One change replaces original_length bytes with edited, whatever its length
                await self._submit(session_id, ChangeKind.OVERWRITE, offset, original_length, edited)
                if stats is not None:
                    stats.overwrite_count += 1
        except Exception:
            if stats is not None:
                stats.error_count += 1
            raise


class ChangeModule:
    """Session mutations expressed through the edit primitive."""

    def __init__(self, query, editor: EditPrimitive):
        """
        Initialize change module.

        Args:
            query: QueryModule used to read the bytes being replaced
            editor: Edit primitive that applies changes
        """
        self.query = query
        self.editor = editor

    async def edit(
        self,
        session_id: SessionId,
        offset: int,
        original: BytesLike,
        edited: BytesLike,
        stats: Optional[EditStats] = None,
    ) -> None:
        """Replace known `original` bytes at `offset` with `edited`."""
        await self.editor.edit_simple(session_id, offset, to_bytes(original), to_bytes(edited), stats)

    async def insert(self, session_id: SessionId, offset: int, data: BytesLike, stats: Optional[EditStats] = None) -> None:
        """Insert bytes at offset, shifting everything after it."""
        await self.editor.edit_simple(session_id, offset, b"", to_bytes(data), stats)

    async def overwrite(self, session_id: SessionId, offset: int, data: BytesLike, stats: Optional[EditStats] = None) -> None:
        """Overwrite bytes starting at offset with data of the same length."""
        data_bytes = to_bytes(data)
        if not data_bytes:
            return
        current = await self.query.get_segment(session_id, offset, len(data_bytes))
        await self.editor.edit_simple(session_id, offset, current.data, data_bytes, stats)

    async def delete(self, session_id: SessionId, offset: int, length: int, stats: Optional[EditStats] = None) -> None:
        """Delete length bytes starting at offset."""
        if length <= 0:
            return
        current = await self.query.get_segment(session_id, offset, length)
        await self.editor.edit_simple(session_id, offset, current.data, b"", stats)
