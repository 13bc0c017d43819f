"""
Bot runner script for the Cashbox Discord Bot.

This module handles configuration loading and bot startup.
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from cashbox.config import (
    LOG_DIR,
    LOG_FILE,
    LOG_FORMAT,
    PROJECT_ROOT,
    ensure_directories,
    get_log_level,
)

from .client import create_bot

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 50


def configure_logging():
    """Log to the bot log file and to stdout."""
    ensure_directories()
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(LOG_DIR / LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def load_environment(env_path: Path = PROJECT_ROOT / ".env"):
    """Load a .env file if it exists."""
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded environment from {env_path}")
    else:
        logger.warning(f".env file not found at {env_path}")


def get_token() -> str:
    """
    Get the Discord bot token from environment variables.

    Returns:
        The bot token string.

    Raises:
        SystemExit: If the token is missing or malformed.
    """
    token = os.environ.get("DISCORD_BOT_TOKEN")

    if not token:
        logger.error("DISCORD_BOT_TOKEN environment variable is not set")
        print("Error: DISCORD_BOT_TOKEN environment variable is not set.")
        print("")
        print("Please set the token using one of these methods:")
        print("  1. Export it: export DISCORD_BOT_TOKEN='your-token-here'")
        print("  2. Create a .env file with: DISCORD_BOT_TOKEN=your-token-here")
        sys.exit(1)

    if len(token) < MIN_TOKEN_LENGTH:
        logger.error("Invalid Discord bot token format")
        print("Error: Discord bot token appears to be invalid.")
        print("Please check that you've copied the complete token.")
        sys.exit(1)

    logger.info("Bot token loaded successfully")
    return token


def run():
    """Run the Discord bot."""
    configure_logging()
    load_environment()
    token = get_token()

    logger.info("Starting Cashbox Discord Bot...")

    try:
        bot = create_bot()
    except Exception as e:
        logger.critical(f"Failed to create bot: {e}", exc_info=True)
        print(f"\nError: {e}")
        sys.exit(1)

    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.critical(f"Error running bot: {e}", exc_info=True)
        print(f"\nError running bot: {e}")
        print(f"Check {LOG_DIR / LOG_FILE} for more details.")
        sys.exit(1)


if __name__ == "__main__":
    run()
