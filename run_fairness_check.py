#!/usr/bin/env python3
"""Runs a configured fairness check.

Usage: python run_fairness_check.py <config_file.yml>
"""

import sys
from pathlib import Path

from fairness_check_toolkit.check_executor import CheckExecutor
from fairness_check_toolkit.config import ConfigParser, setup_logging
import logging


def main():
    """Main orchestrator function."""
    if len(sys.argv) != 2:
        print("Usage: python run_fairness_check.py <config_file.yml>")
        sys.exit(1)

    config_path = Path(sys.argv[1])

    if not config_path.exists():
        print(f"Configuration file not found: {config_path}")
        sys.exit(1)

    try:
        logger = setup_logging(level="INFO", console_output=True, structured=False)
        logger.info(f"Loading configuration from: {config_path}")
        config = ConfigParser.load(config_path)

        logger.info("Validating configuration...")
        errors = ConfigParser.validate(config)
        if errors:
            logger.error("Configuration validation failed:")
            for error in errors:
                logger.error(f"  - {error}")
            sys.exit(1)

        logger.info("Configuration validated")

        CheckExecutor(config, enable_logging=False).execute()

        logger.info("Fairness check completed successfully")

    except Exception as e:
        logger = logging.getLogger("fairness_check")
        logger.error(f"Fairness check failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
