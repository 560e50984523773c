#!/usr/bin/env python3
"""
Flashdeck vocabulary trainer
Main application entry point
"""

import logging
from flashdeck.config import get_settings
from flashdeck.bot_handler import BotHandler


def main():
    """Main application entry point"""
    # Load configuration
    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting Flashdeck...")

    bot_handler = BotHandler(settings)

    try:
        bot_handler.run()
    except KeyboardInterrupt:
        logger.info("Shutdown requested, stopping bot...")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        raise


if __name__ == "__main__":
    main()
