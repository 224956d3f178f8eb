"""Command line interface for the fairness check toolkit."""

import argparse
import sys
from pathlib import Path

from .check_executor import CheckExecutor
from .config import ConfigParser, get_check_logger
from .exceptions import FairnessCheckError


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Fairness check of binary classifiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "config_path", type=str, help="Path to fairness check configuration YAML file"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration without running the check",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    try:
        config_path = Path(args.config_path)
        print(f"Loading configuration from: {config_path}")

        config = ConfigParser.load(config_path)

        errors = ConfigParser.validate(config)
        get_check_logger("cli").log_config_validation(errors)
        if errors:
            print("Configuration validation failed:")
            for error in errors:
                print(f"  - {error}")
            sys.exit(1)

        print("Configuration validated successfully")

        if args.validate_only:
            print("Validation complete. Exiting.")
            return

        executor = CheckExecutor(config, verbose=args.verbose)
        executor.execute()

        print("Fairness check completed successfully!")

    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except FairnessCheckError as e:
        print(f"Fairness check failed ({type(e).__name__}): {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
