#!/usr/bin/env python3
"""
Main entry point for the ircplug client
"""

import asyncio
import os
import sys

from ircplug.client import IRCClient
from ircplug.config import ConfigRepository, ServerSettings
from ircplug.errors import ConfigError, InternalError, log_error
from ircplug.logging_config import setup_logging
from ircplug.logs.logger import logger
from ircplug.plugins import AdminPlugin, HelpPlugin


def _config_paths() -> tuple[str, str]:
    config_file = os.environ.get("IRCPLUG_CONF_FILE", "ircplug.json")
    access_file = os.environ.get("IRCPLUG_AUTH_FILE", "ircplug_auth.json")
    return config_file, access_file


async def main():
    """Main function"""
    config_file, access_file = _config_paths()
    client = IRCClient.create(config_file, access_file)
    client.register_plugin(AdminPlugin())
    client.register_plugin(HelpPlugin())

    try:
        await client.connect()
        await client.input_loop()
    except asyncio.CancelledError:
        logger.log_event("client", "disconnect_requested", reason="cancelled")
        await client.disconnect("shutting down")
        raise


if __name__ == "__main__":
    setup_logging()

    # Simple health check mode
    if len(sys.argv) > 1 and sys.argv[1] == "--health-check":
        try:
            settings = ServerSettings.from_store(ConfigRepository(_config_paths()[0]).load())
            print(f"✅ Health check passed - {settings.nick}@{settings.host}:{settings.port}")
            sys.exit(0)
        except ConfigError as e:
            print(f"❌ Health check failed: {e}")
            sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except InternalError as e:
        log_error("Client stopped", e)
        sys.exit(1)
