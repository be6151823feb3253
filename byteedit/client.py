"""
ByteEdit client context and composition root.

EditClient is the explicit connection value passed around instead of a
module-level client: it owns one transport and the modules built on it.

    async with ClientFactory.build(EnvConfigProvider()) as client:
        session_id = await client.sessions.create_session("/tmp/data.bin")
        count = await client.replace.replace_all(session_id, "foo", "q")
"""

import logging
from typing import Optional

from .config.provider import ConfigProvider
from .logging_config import configure_logging
from .modules.change import ChangeModule, EditPrimitive, TransportEditPrimitive
from .modules.query import QueryModule
from .modules.replace import ReplaceModule
from .modules.rpc import CallObserver, CancellationPolicy, RemoteCall
from .modules.session import SessionModule
from .modules.transport import HttpSessionTransport, SessionTransport

logger = logging.getLogger("byteedit.client")


class EditClient:
    """Connection to an editing server plus the session modules bound to it."""

    def __init__(
        self,
        transport: SessionTransport,
        editor: Optional[EditPrimitive] = None,
        cancellation: Optional[CancellationPolicy] = None,
        observer: Optional[CallObserver] = None,
    ):
        """
        Wire the session modules to a transport.

        Args:
            transport: Transport to the editing server
            editor: Edit primitive; defaults to primitive changes over the transport
            cancellation: Benign cancellation classifier for subscriptions
            observer: Optional structured-logging hook for every call
        """
        self.transport = transport
        self.remote_call = RemoteCall(transport, observer=observer)
        self.editor = editor or TransportEditPrimitive(self.remote_call)

        self.sessions = SessionModule(self.remote_call, cancellation=cancellation)
        self.query = QueryModule(self.remote_call)
        self.changes = ChangeModule(self.query, self.editor)
        self.replace = ReplaceModule(self.query, self.editor)
        self._closed = False

    async def close(self) -> None:
        """Release the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self.transport.aclose()
        logger.debug("Editing client closed")

    async def __aenter__(self) -> "EditClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class ClientFactory:
    """
    Factory for building an EditClient from configuration.

    This is the composition root that:
    - Creates the transport from transport configuration
    - Builds the cancellation classifier
    - Returns the wired client
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        observer: Optional[CallObserver] = None,
        setup_logging: bool = False,
    ) -> EditClient:
        """
        Build a client talking HTTP to the configured editing server.

        Args:
            config_provider: Configuration provider
            observer: Optional structured-logging hook
            setup_logging: Apply the byteedit logging configuration at the configured level

        Returns:
            EditClient ready for use (close it, or use it as an async context manager)
        """
        if setup_logging:
            configure_logging(config_provider.get_logging_config().level)

        transport_config = config_provider.get_transport_config()
        cancellation = CancellationPolicy.from_config(config_provider.get_cancellation_config())

        logger.info(f"Building editing client for {transport_config.server_url}")
        transport = HttpSessionTransport(transport_config)
        return EditClient(transport, cancellation=cancellation, observer=observer)
