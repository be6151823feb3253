"""
Replace Module for ByteEdit.

Bulk and iterative pattern replacement on top of search and the edit
primitive.

Offset rules:
- Match offsets come from a single search and refer to the session as it
  was before any replacement.
- A replacement at offset o shifts every byte after o by
  len(replacement) - len(pattern), but never moves bytes before o.
- replace_all therefore applies matches from the highest offset to the
  lowest: every offset still to be processed lies before all edits made
  so far, so no offset needs adjusting between edits.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Iterator, Optional, Tuple, Union

from ..api.models import BytesLike, SessionId, to_bytes
from ..change.change import EditPrimitive, EditStats

logger = logging.getLogger("byteedit.replace")

# next_offset value meaning "no replacement took place, nothing left to do"
EXHAUSTED = -1


@dataclass(frozen=True)
class ReplaceStep:
    """
    Outcome of one replace_one call, usable as a restartable cursor.

    Unpacks as (did_replace, next_offset) where next_offset is -1 once
    no match remains.
    """

    replaced: bool
    next_offset: int = EXHAUSTED

    @property
    def has_more(self) -> bool:
        return self.replaced and self.next_offset != EXHAUSTED

    def as_tuple(self) -> Tuple[bool, int]:
        return self.replaced, self.next_offset

    def __iter__(self) -> Iterator[Union[bool, int]]:
        return iter(self.as_tuple())


class ReplaceModule:
    """Search/replace orchestration."""

    def __init__(self, query, editor: EditPrimitive):
        """
        Initialize replace module.

        Args:
            query: QueryModule providing search()
            editor: Edit primitive applying each replacement
        """
        self.query = query
        self.editor = editor

    async def replace_all(
        self,
        session_id: SessionId,
        pattern: BytesLike,
        replacement: BytesLike,
        case_insensitive: bool = False,
        offset: int = 0,
        length: int = 0,
        limit: int = 0,
        stats: Optional[EditStats] = None,
    ) -> int:
        """
        Replace every match of pattern in a session range.

        Args:
            session_id: Session to replace patterns in
            pattern: Pattern to replace
            replacement: Bytes inserted verbatim at each match
            case_insensitive: Affects matching only, never the inserted bytes
            offset: Start searching at this offset
            length: Search this many bytes from offset; 0 searches to the end
            limit: Maximum number of matches to replace; 0 is unbounded
            stats: Optional edit stats to update

        Returns:
            Number of replacements done (the number of matches found)

        Raises:
            SessionOperationError: If the search or any edit fails; edits
                applied before the failure stay applied

        Pausing session changes (or opening a transaction) around this call
        keeps viewports from observing the intermediate states.
        """
        pattern_bytes = to_bytes(pattern)
        replacement_bytes = to_bytes(replacement)
        if not pattern_bytes:
            logger.warning("replaceSession: empty pattern given")
            return 0

        match_offsets = await self.query.search(
            session_id, pattern_bytes, case_insensitive, offset, length, limit
        )

        # Highest offset first, one edit at a time
        for match_offset in sorted(match_offsets, reverse=True):
            await self.editor.edit_simple(session_id, match_offset, pattern_bytes, replacement_bytes, stats)

        logger.info(f"Replaced {len(match_offsets)} matches in session {session_id}")
        return len(match_offsets)

    async def replace_one(
        self,
        session_id: SessionId,
        pattern: BytesLike,
        replacement: BytesLike,
        case_insensitive: bool = False,
        offset: int = 0,
        length: int = 0,
        stats: Optional[EditStats] = None,
    ) -> ReplaceStep:
        """
        Replace the first match at or after offset.

        Returns:
            ReplaceStep(True, end of the inserted replacement) when a match was
            replaced, or ReplaceStep(False, -1) when none was found. Feed
            next_offset back as offset to continue.
        """
        pattern_bytes = to_bytes(pattern)
        replacement_bytes = to_bytes(replacement)

        match_offsets = await self.query.search(
            session_id, pattern_bytes, case_insensitive, offset, length, 1
        )
        if not match_offsets:
            return ReplaceStep(False, EXHAUSTED)

        match_offset = match_offsets[0]
        await self.editor.edit_simple(session_id, match_offset, pattern_bytes, replacement_bytes, stats)
        return ReplaceStep(True, match_offset + len(replacement_bytes))

    async def replace_each(
        self,
        session_id: SessionId,
        pattern: BytesLike,
        replacement: BytesLike,
        case_insensitive: bool = False,
        offset: int = 0,
        length: int = 0,
        stats: Optional[EditStats] = None,
    ) -> AsyncIterator[int]:
        """
        Replace matches one at a time, yielding each replaced offset.

        Offsets are in the session's state at the time of the replacement.
        Callers may inspect the session between iterations. With a bounded
        range (length > 0) the end of the range moves with each replacement.
        """
        pattern_bytes = to_bytes(pattern)
        replacement_bytes = to_bytes(replacement)
        if not pattern_bytes:
            logger.warning("replaceOneSession: empty pattern given")
            return

        shift = len(replacement_bytes) - len(pattern_bytes)
        end = offset + length if length > 0 else None
        next_offset = offset

        while True:
            window = 0
            if end is not None:
                window = end - next_offset
                if window <= 0:
                    return

            step = await self.replace_one(
                session_id, pattern_bytes, replacement_bytes, case_insensitive, next_offset, window, stats
            )
            if not step.has_more:
                return

            if end is not None:
                end += shift
            next_offset = step.next_offset
            yield step.next_offset - len(replacement_bytes)
