from __future__ import annotations

import logging
from typing import Optional

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)


class ClientConnection:
    def __init__(self, connection: ServerConnection, identifier: Optional[str] = None):
        self._connection = connection
        self.identifier = identifier or self._format_identifier(connection)

    async def receive(self) -> Optional[str]:
        try:
            message = await self._connection.recv()
        except ConnectionClosed:
            logger.info("Client %s closed the connection", self.identifier)
            return None
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        logger.debug("Client %s -> %s", self.identifier, message)
        return message

    async def send(self, payload: str) -> None:
        try:
            await self._connection.send(payload)
        except ConnectionClosed:
            logger.info("Send to client %s failed: connection closed", self.identifier)

    async def close(self) -> None:
        try:
            await self._connection.close()
        finally:
            await self._connection.wait_closed()

    @staticmethod
    def _format_identifier(connection: ServerConnection) -> str:
        peer = connection.remote_address
        if peer is None:
            return "unknown"
        host, port = peer[:2]
        return f"{host}:{port}"
