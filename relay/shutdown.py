"""
Graceful shutdown handling for the relay.
"""
import asyncio
import signal

from .connection import ConnectionManager
from .utils.logging import get_logger

logger = get_logger(__name__)


def setup_signal_handlers(manager: ConnectionManager) -> None:
    """Stop the connection manager on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()

    def _request_stop(signum: int) -> None:
        logger.info(f"🔄 Received signal {signum}, initiating graceful shutdown...", extra={"subsys": "shutdown"})
        loop.create_task(manager.stop())

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _request_stop, signum)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            logger.debug(f"Signal handler for {signum} not supported on this platform")
