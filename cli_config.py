#!/usr/bin/env python3
"""
CLI tool for inspecting the curation registry configuration and data stores.
"""
import argparse
import sys

from config_system.config_loader import ConfigLoader, ConfigValidationError
from core.registry import CurationRegistry
from exceptions import RegistryError
from logging_config import setup_registry_logging, log_step_start, log_step_complete, log_error


def validate_command(args, logger):
    """Validate the registry configuration file."""
    try:
        log_step_start(logger, "ConfigValidator", "validation", "Starting configuration validation", {
            "config_root": args.config_root
        })

        loader = ConfigLoader(args.config_root)
        loader.validate_all_configs()

        log_step_complete(logger, "ConfigValidator", "validation", "Configuration validation completed", {
            "status": "success",
            "config_root": args.config_root
        })
        return True
    except ConfigValidationError as e:
        log_error(logger, f"Configuration validation failed: {str(e)}", "ConfigValidator", e)
        return False


def show_command(args, logger):
    """Log the effective settings after env overrides."""
    try:
        config = ConfigLoader(args.config_root).load_registry_config()
        log_step_complete(logger, "ConfigViewer", "show", "Effective registry configuration",
                          config.model_dump(mode="json"))
        return True
    except ConfigValidationError as e:
        log_error(logger, f"Error loading configuration: {str(e)}", "ConfigViewer", e)
        return False


def stores_command(args, logger):
    """Summarise record counts in every data store."""
    try:
        config = ConfigLoader(args.config_root).load_registry_config()
        registry = CurationRegistry(config)
        log_step_complete(logger, "StoreInspector", "stores", "Store summary", registry.store_summary())
        return True
    except (ConfigValidationError, RegistryError) as e:
        log_error(logger, f"Error reading stores: {str(e)}", "StoreInspector", e)
        return False


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Curation Registry Configuration CLI",
        epilog="Examples:\n"
               "  %(prog)s validate                    # Validate configuration\n"
               "  %(prog)s show                       # Print effective settings\n"
               "  %(prog)s stores                     # Summarise data stores\n"
               "  %(prog)s --config-root ./my-configs validate  # Use custom config directory",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--config-root",
        default="./config",
        help="Root directory for configuration files (default: ./config)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level (default: INFO)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (equivalent to --log-level DEBUG)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("validate", help="Validate the registry configuration")
    subparsers.add_parser("show", help="Show effective configuration")
    subparsers.add_parser("stores", help="Summarise the contents of the data stores")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    registry_logger = setup_registry_logging(
        log_level=args.log_level,
        verbose=args.verbose
    )
    logger = registry_logger.get_logger("cli_config")

    commands = {
        "validate": validate_command,
        "show": show_command,
        "stores": stores_command,
    }

    success = False
    try:
        success = commands[args.command](args, logger)
    except Exception as e:
        log_error(logger, f"Unexpected error: {str(e)}", "CLI", e)
        sys.exit(1)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
