import asyncio
import logging

from photonav.app.application import Application
from photonav.app.config import load_config
from photonav.websocket.server import WebSocketServer

logger = logging.getLogger(__name__)


async def main_async() -> None:
    config = load_config()
    logging.basicConfig(level=config.log_level, format="[%(asctime)s] %(message)s")

    application = Application(config=config)
    server = WebSocketServer(
        application=application,
        host=config.websocket.host,
        port=config.websocket.port,
    )

    logger.info("Loading category manifest")
    await application.startup()

    try:
        await server.serve_forever()
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception("Server stopped on error")
    finally:
        server.stop()
        await application.shutdown()
        logger.info("Shutdown complete")


def main() -> None:
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
