#!/usr/bin/env python3
"""
Main entry point for the short-link service.

Usage:
    python app.py

Environment variables:
    STORAGE_BACKEND - 'memory' or 'postgres'
    DATABASE_URL - PostgreSQL connection URL
    CACHE_BACKEND - 'none', 'memory' or 'redis'
    REDIS_URL - Redis connection URL
    BASE_URL - Base URL for short links
    SHORT_CODE_LENGTH - Generated code length (4-12)
    DEFAULT_EXPIRATION_DAYS - Default link lifetime (0 = never)
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.common.logging_config import setup_logging
from shortlink.database.factory import build_cache, build_store
from shortlink.service import URLShortenerService
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store, cache and service on startup; close them on shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting short-link service...")

    logger.info(f"Using {config.storage_backend} store")
    db = build_store(config, logger=logger)

    logger.info(f"Using cache backend: {config.cache_backend}")
    cache = await build_cache(config, logger=logger)

    app.state.service = URLShortenerService.from_config(config, db=db, cache=cache, logger=logger)

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down short-link service...")
    await app.state.service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Short-link service")
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
