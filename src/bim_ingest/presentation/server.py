"""BIM Ingest MCP Server.

Stdio MCP server exposing the ingestion and query tools.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from mcp.server import Server
from mcp.server.stdio import stdio_server

from bim_ingest.infrastructure.database.connection import close_database, init_database
from bim_ingest.presentation.tools import register_bim_tools
from bim_ingest.shared.config import get_settings
from bim_ingest.shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_server() -> Server:
    server = Server(get_settings().app_name)
    register_bim_tools(server)
    return server


@asynccontextmanager
async def lifespan() -> AsyncGenerator[None, None]:
    """Open the database pool on startup and close it on shutdown."""
    settings = get_settings()
    logger.info("Starting BIM ingest server", version=settings.app_version)

    try:
        await init_database(create_schema=settings.database_auto_create)
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    try:
        yield
    finally:
        await close_database()
        logger.info("BIM ingest server stopped")


async def run_server() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, settings.log_file)
    server = create_server()

    async with lifespan():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def main() -> None:
    """Entry point for the MCP server."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
