#!/usr/bin/env python3
"""
Core Ledger Entry Point

Starts the FastAPI server with a freshly constructed Bank.
"""

import sys

from core_ledger.api import run_server
from core_ledger.bank import Bank
from core_ledger.config import get_config
from core_ledger.logging_config import setup_logging_from_config


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging_from_config(config)

    bank = Bank(config=config)
    logger.info(f"Starting Core Ledger API on http://{config.api_host}:{config.api_port}")

    try:
        run_server(host=config.api_host, port=config.api_port, bank=bank)
    except KeyboardInterrupt:
        logger.info("Shutting down Core Ledger API")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)
