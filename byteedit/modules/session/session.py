import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Set

from ..api.models import CreateSessionRequest, ObjectId, SaveSessionRequest, SessionId
from ..rpc.rpc import CancellationPolicy, RemoteCall, TransactionStateError

logger = logging.getLogger("byteedit.session")


class SessionModule:
    def __init__(self, remote_call: RemoteCall, cancellation: Optional[CancellationPolicy] = None):
        """
        Initialize session module.

        Args:
            remote_call: Call wrapper bound to the editing server transport
            cancellation: Classifier for shutdown-induced cancellation
        """
        self.call = remote_call
        self.cancellation = cancellation or CancellationPolicy()
        self._source_paths: Dict[SessionId, str] = {}
        self._open_transactions: Set[SessionId] = set()
        self._bracket_locks: Dict[SessionId, asyncio.Lock] = {}

    async def create_session(self, file_path: str = "", session_id_desired: str = "") -> SessionId:
        """
        Create an editing session.

        Args:
            file_path: File to open for read, or empty to start from an empty buffer
            session_id_desired: Session ID to assign, or empty to let the server pick one

        Returns:
            Session ID, or empty string if the server declined (e.g., graceful shutdown)
        """
        request = CreateSessionRequest(
            session_id_desired=session_id_desired or None,
            file_path=file_path or None,
        )
        response = await self.call("createSession", "create_session", request)

        session_id = response.session_id or ""
        if not session_id:
            logger.warning("createSession declined by server (session creation blocked)")
            return ""

        if file_path:
            self._source_paths[session_id] = file_path
        logger.info(f"Created session {session_id}")
        return session_id

    async def destroy_session(self, session_id: SessionId) -> SessionId:
        """
        Destroy a session and all dependent objects (changes, viewports).

        Returns:
            Session ID that was destroyed
        """
        response = await self.call("destroySession", "destroy_session", ObjectId(id=session_id))

        self._source_paths.pop(session_id, None)
        self._open_transactions.discard(session_id)
        self._bracket_locks.pop(session_id, None)
        logger.info(f"Destroyed session {session_id}")
        return response.id

    async def save_session(self, session_id: SessionId, file_path: str, overwrite: bool) -> str:
        """
        Save a session to a file.

        If the file exists and overwrite is False, the server saves under a new
        unique name, so the returned path may differ from file_path. Overwriting
        the file backing the session resets its change history.

        Returns:
            Path of the saved file
        """
        request = SaveSessionRequest(
            session_id=session_id,
            file_path=file_path,
            allow_overwrite=overwrite,
        )
        response = await self.call("saveSession", "save_session", request)
        saved_path = response.file_path

        if overwrite and saved_path == self._source_paths.get(session_id):
            # Offsets from before the save no longer apply
            self._open_transactions.discard(session_id)
            logger.info(f"Session {session_id} overwrote its source file; change history reset")
        elif saved_path != file_path:
            logger.info(f"Session {session_id} saved to {saved_path} instead of {file_path}")

        return saved_path

    async def pause_session_changes(self, session_id: SessionId) -> SessionId:
        """Pause change notifications to dependent viewports; edits still apply."""
        response = await self.call("pauseSessionChanges", "pause_session_changes", ObjectId(id=session_id))
        return response.id

    async def resume_session_changes(self, session_id: SessionId) -> SessionId:
        """Resume change notifications on a previously paused session."""
        response = await self.call("resumeSessionChanges", "resume_session_changes", ObjectId(id=session_id))
        return response.id

    def in_transaction(self, session_id: SessionId) -> bool:
        """Check whether a transaction bracket is open on the session."""
        return session_id in self._open_transactions

    async def begin_transaction(self, session_id: SessionId) -> SessionId:
        """
        Open a transaction bracket.

        Concurrent begin/end calls on one session are serialized, so a second
        begin issued while the first is in flight sees the open bracket.

        Raises:
            TransactionStateError: If a bracket is already open on this session
        """
        async with self._bracket_lock(session_id):
            if session_id in self._open_transactions:
                raise TransactionStateError(f"Transaction already open on session {session_id}")

            response = await self.call(
                "beginSessionTransaction", "session_begin_transaction", ObjectId(id=session_id)
            )
            self._open_transactions.add(session_id)
            return response.id

    async def end_transaction(self, session_id: SessionId) -> SessionId:
        """
        Close the open transaction bracket.

        Raises:
            TransactionStateError: If no bracket is open on this session
        """
        async with self._bracket_lock(session_id):
            if session_id not in self._open_transactions:
                raise TransactionStateError(f"No open transaction on session {session_id}")

            response = await self.call(
                "endSessionTransaction", "session_end_transaction", ObjectId(id=session_id)
            )
            self._open_transactions.discard(session_id)
            return response.id

    def _bracket_lock(self, session_id: SessionId) -> asyncio.Lock:
        # Held across the state check and the server call
        lock = self._bracket_locks.get(session_id)
        if lock is None:
            lock = self._bracket_locks[session_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def transaction(self, session_id: SessionId) -> AsyncIterator[SessionId]:
        """Bracket the enclosed mutations; the bracket is closed even if the block fails."""
        await self.begin_transaction(session_id)
        try:
            yield session_id
        finally:
            await self.end_transaction(session_id)

    async def unsubscribe_session(self, session_id: SessionId) -> SessionId:
        """
        Cancel event delivery for a session.

        Cancellation caused by the server shutting down is not an error here
        and is swallowed; every other failure propagates.

        Returns:
            Session ID that was unsubscribed
        """
        response = await self.call(
            "unsubscribeSession",
            "unsubscribe_to_session_events",
            ObjectId(id=session_id),
            suppress=self.cancellation.is_benign,
        )
        if response is None:
            return session_id
        return response.id
