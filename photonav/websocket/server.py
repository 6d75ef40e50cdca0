from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Set

from websockets.asyncio.server import Server, ServerConnection, serve

from photonav.websocket.connection import ClientConnection

if TYPE_CHECKING:
    from photonav.app.application import Application

logger = logging.getLogger(__name__)


class WebSocketServer:
    """Accepts kiosk displays and runs one client session per socket.

    ``serve_forever`` returns once ``stop`` has closed the listening socket
    and every attached client has been released.
    """

    def __init__(self, application: "Application", host: str = "0.0.0.0", port: int = 8765) -> None:
        self.application = application
        self.host = host
        self.port = port
        self.started = asyncio.Event()
        self._server: Optional[Server] = None
        self._clients: Set[ClientConnection] = set()

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def serve_forever(self) -> None:
        async with serve(self._handle_client, self.host, self.port) as server:
            self._server = server
            logger.info("Kiosk websocket listening on ws://%s:%s", self.host, self.bound_port)
            self.started.set()
            try:
                await server.wait_closed()
            finally:
                self._server = None
                self.started.clear()
        logger.info("Kiosk websocket closed")

    def stop(self) -> None:
        if self._server is not None:
            self._server.close()

    async def _handle_client(self, connection: ServerConnection) -> None:
        client = ClientConnection(connection=connection)
        self._clients.add(client)
        logger.info("Display attached: %s (%d connected)", client.identifier, len(self._clients))
        try:
            await self.application.create_session(client).run()
        finally:
            self._clients.discard(client)
            await client.close()
            logger.info("Display detached: %s", client.identifier)
