"""
Main entry point for the Eden Genesis curation registry HTTP service.
"""
import argparse
import sys

import uvicorn

from api.app import create_app
from config_system.config_loader import ConfigLoader, ConfigValidationError
from core.registry import CurationRegistry
from exceptions import RegistryError
from logging_config import setup_registry_logging, log_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Eden Genesis Registry - collaborative curation service'
    )
    parser.add_argument(
        '--config-root',
        default='./config',
        help='Path to configuration directory (default: ./config)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Set the logging level (default: INFO, can also be set via EDEN_REGISTRY_LOG_LEVEL env var)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging (equivalent to --log-level DEBUG)'
    )
    parser.add_argument('--host', help='Bind address (overrides server.host)')
    parser.add_argument('--port', type=int, help='Bind port (overrides server.port)')
    parser.add_argument('--data-dir', help='Data directory (overrides registry.data_directory)')
    return parser


def main():
    """Load configuration, wire the registry and serve it with uvicorn."""
    args = build_parser().parse_args()

    try:
        config = ConfigLoader(args.config_root).load_registry_config()
    except ConfigValidationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        sys.exit(1)

    overrides = {}
    if args.data_dir:
        overrides["data_directory"] = args.data_dir
    server_overrides = {}
    if args.host:
        server_overrides["host"] = args.host
    if args.port:
        server_overrides["port"] = args.port
    if server_overrides:
        overrides["server"] = config.server.model_copy(update=server_overrides)
    if overrides:
        config = config.model_copy(update=overrides)

    registry_logger = setup_registry_logging(
        log_level=args.log_level,
        verbose=args.verbose,
        config_log_level=config.log_level,
    )
    logger = registry_logger.get_logger("main")

    try:
        registry = CurationRegistry(config)
        registry.set_logger(logger)
        app = create_app(config, registry)

        logger.info("Starting curation registry", extra={
            "component": "Main",
            "data": {
                "host": config.server.host,
                "port": config.server.port,
                "api_prefix": config.api_prefix,
                "data_directory": config.data_directory,
            }
        })
        uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)

    except RegistryError as e:
        log_error(logger, f"Registry error: {str(e)}", "Main", e)
        sys.exit(1)
    except Exception as e:
        log_error(logger, f"Unexpected error: {str(e)}", "Main", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
