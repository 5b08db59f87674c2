import argparse, sys
from typing import Optional, Sequence

import structlog

from core.config import AppConfig, ConfigError, ConfigLoader
from core.errors import ConfigurationError, ProviderNotFound
from core.logging_config import configure_logging
from providers.factory import ProviderFactory

EXIT_NOT_FOUND = 1
EXIT_UNKNOWN_PROVIDER = 2
EXIT_CONFIG = 3

def load_config(path: Optional[str]) -> AppConfig:
    return ConfigLoader(path).get_config() if path else AppConfig()

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Locate static resources across registered providers.")
    parser.add_argument("--config", help="TOML configuration file (default: environment / .env only)")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Print the file a resource path resolves to")
    resolve.add_argument("path")
    resolve.add_argument("--provider", help="Only ask this provider")

    sub.add_parser("list", help="List registered providers in lookup order")
    sub.add_parser("serve", help="Run the HTTP server")
    return parser

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.command == "serve":
        import server
        server.main(config, config_path=args.config)
        return 0

    # stdout is reserved for results
    configure_logging(log_level=config.log_level, force_json=config.log_json, stream=sys.stderr)
    log = structlog.get_logger("cli")
    try:
        registry = ProviderFactory(config).build_registry()
    except ConfigurationError as e:
        log.error("Could not build providers", error=str(e))
        return EXIT_CONFIG

    if args.command == "list":
        for name, provider in registry.list_providers().items():
            dev = provider.development_root
            print(f"{name}\t{provider.type_name}" + (f"\tdevelopment={dev}" if dev else ""))
        return 0

    try:
        found = registry.resolve(args.provider, args.path)
    except ProviderNotFound as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_UNKNOWN_PROVIDER
    if found is None:
        print(f"not found: {args.path}", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(found)
    return 0

if __name__ == "__main__":
    sys.exit(main())
