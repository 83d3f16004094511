"""
RijksChat - Main Entry Point
============================

This is the main entry point for the client. It:
1. Loads configuration
2. Creates the model backend
3. Starts the Rijksmuseum tool provider and discovers its tools
4. Wires the agent to the console front-end
5. Runs until the user quits

Startup is fail-fast: missing configuration, a provider that cannot be
started, or a failed tool listing ends the process with an error.

Run with:
    python -m rijkschat.main

Or after installing:
    rijkschat
"""

import asyncio
import sys

from rijkschat.utils.config import get_config
from rijkschat.utils.logger import Logger

main_logger = Logger("Main")


async def main() -> int:
    """
    Main async entry point.

    Returns:
        Process exit code
    """
    main_logger.info("Starting RijksChat...")

    # 1. Load configuration
    try:
        config = get_config()
    except ValueError as e:
        main_logger.error("Invalid configuration", e)
        return 1

    # 2. Model backend
    from rijkschat.llm import create_llm_service
    try:
        llm = create_llm_service(config.llm)
    except ValueError as e:
        main_logger.error("Could not create model backend", e)
        return 1

    # 3. Tool provider
    from rijkschat.tools import DiscoveryError, ToolRegistry
    from rijkschat.tools.transport import McpStdioTransport, TransportError

    transport = McpStdioTransport(
        command=config.mcp.server_command,
        args=[config.mcp.server_path],
        env={"RIJKSMUSEUM_API_KEY": config.mcp.rijksmuseum_api_key},
    )

    try:
        main_logger.info("Connecting to the Rijksmuseum tool provider...")
        await transport.connect()

        registry = ToolRegistry()
        await registry.discover(transport)

        # 4. Agent and front-end
        from rijkschat.agent import Agent
        from rijkschat.ui import CommandDispatcher, register_handlers
        from rijkschat.ui.console import ConsolePresenter, run_console

        agent = Agent(
            transport,
            registry,
            llm,
            max_retries=config.tools.max_retries,
            retry_delay=config.tools.retry_delay_seconds,
        )

        presenter = ConsolePresenter()
        dispatcher = CommandDispatcher()
        register_handlers(dispatcher, agent, presenter)

        main_logger.info("RijksChat is running! Type /quit to stop.")
        await run_console(dispatcher, presenter)
        return 0

    except (TransportError, DiscoveryError) as e:
        main_logger.error("Failed to initialize the tool provider", e)
        return 1

    finally:
        main_logger.info("Shutting down...")
        await transport.close()
        await llm.aclose()


def run() -> None:
    """
    Synchronous entry point.

    This is called when running with the `rijkschat` command.
    """
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
