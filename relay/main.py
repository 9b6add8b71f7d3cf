"""
Relay main entry point - BOOTSTRAP ONLY
This module wires services together; the pipeline lives in its own modules.
"""
import asyncio
import os
import sys
from typing import Any, Dict, NoReturn

from relay.auth_state import CredentialStore
from relay.classifier import SentinelIntentClassifier
from relay.composer import ResponseComposer
from relay.config import load_config, validate_required_env
from relay.connection import ConnectionManager
from relay.core.cli import parse_arguments, show_version_info, validate_configuration_only
from relay.dispatcher import MessageDispatcher
from relay.exceptions import ConfigurationError
from relay.llm_backend import OpenAITextGenerator
from relay.refiner import QueryRefiner
from relay.search import ImageSearchClient
from relay.search.factory import close_search_client, get_image_search_provider
from relay.shutdown import setup_signal_handlers
from relay.transport.discord_session import DiscordTransport
from relay.types import ConnectionState
from relay.utils.logging import init_logging, get_logger, shutdown_logging_and_exit


def seed_credentials(store: CredentialStore, config: Dict[str, Any]) -> None:
    """Store DISCORD_TOKEN as the session credential when none is stored yet."""
    token = config.get("DISCORD_TOKEN")
    if token and not store.load().get("token"):
        store.save({"token": token})


async def build_dispatcher(config: Dict[str, Any], llm: OpenAITextGenerator) -> MessageDispatcher:
    provider = await get_image_search_provider(config)
    return MessageDispatcher(
        classifier=SentinelIntentClassifier(llm),
        refiner=QueryRefiner(llm),
        image_search=ImageSearchClient(provider, per_page=config["IMAGE_SEARCH_PER_PAGE"]),
        composer=ResponseComposer(),
    )


async def main() -> NoReturn:
    """Main relay execution function."""
    args = parse_arguments()
    if args.debug:
        os.environ['LOG_LEVEL'] = 'DEBUG'

    init_logging()
    logger = get_logger(__name__)

    if args.version:
        show_version_info()
        shutdown_logging_and_exit(0)

    if args.config_check:
        validate_configuration_only()
        shutdown_logging_and_exit(0)

    try:
        validate_required_env()
        config = load_config()
    except ConfigurationError as e:
        logger.critical(f"❌ {e}", extra={"subsys": "core", "event": "config_fail"})
        shutdown_logging_and_exit(1)

    logger.info("✅ Language-model and Unsplash keys loaded", extra={"subsys": "core", "event": "config_ok"})

    llm = OpenAITextGenerator.from_config(config)
    store = CredentialStore(config["AUTH_DIR"])
    seed_credentials(store, config)

    manager = ConnectionManager.from_config(
        config,
        transport=DiscordTransport(),
        credential_store=store,
        dispatcher=await build_dispatcher(config, llm),
    )
    setup_signal_handlers(manager)

    try:
        final_state = await manager.run()
    finally:
        await close_search_client()
        await llm.close()

    shutdown_logging_and_exit(1 if final_state == ConnectionState.LOGGED_OUT else 0)


def run_relay() -> None:
    """Entry point for running the relay with proper error handling."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nRelay shutdown requested by user.")
        shutdown_logging_and_exit(0)


if __name__ == "__main__":
    run_relay()
