"""Diagnostic CLI for regclient.

Provides commands for checking a registry and inspecting its contents.

Usage:
    python -m regclient.cli_diagnose health
    python -m regclient.cli_diagnose --url unix:///run/registry.sock catalog
    python -m regclient.cli_diagnose --url registry.example.com --tls tags library/alpine
"""

import argparse
import json
import sys

from pydantic import ValidationError

from regclient.logging_config import configure_module_logging, configure_regclient_logging
from regclient.registry.client import Registry
from regclient.registry.exceptions import (
    LikelyTLSMismatchError,
    NotFoundError,
    RegistryError,
)
from regclient.registry.models import RegistryConfig
from regclient.registry.transport import load_tls_config

logger = configure_module_logging("cli_diagnose")


def build_registry(args) -> Registry:
    """Create a Registry from parsed command line options."""
    env_config = RegistryConfig.from_env()
    config = RegistryConfig(
        url=args.url or env_config.url,
        timeout=args.timeout if args.timeout is not None else env_config.timeout,
    )

    tls_config = None
    if args.tls or args.ca_file or args.cert_file or args.insecure:
        tls_config = load_tls_config(
            ca_file=args.ca_file,
            cert_file=args.cert_file,
            key_file=args.key_file,
            insecure=args.insecure,
        )
    return Registry(config, tls_config=tls_config)


def cmd_health(registry: Registry, as_json: bool = False) -> int:
    """Check registry health."""
    alive = registry.is_alive()

    if as_json:
        print(json.dumps({"registry": registry.config.url, "alive": alive}))
    else:
        status = "✓ HEALTHY" if alive else "✗ UNREACHABLE"
        print(f"  {registry.config.url} ({registry.kind.value}): {status}")
    return 0 if alive else 1


def cmd_catalog(registry: Registry, as_json: bool = False) -> int:
    """List repositories in the registry."""
    catalog = registry.list_repositories()

    if as_json:
        print(catalog.model_dump_json())
        return 0

    print("\n[Repositories]")
    if catalog.repositories:
        for repo in catalog.repositories:
            print(f"  - {repo}")
    else:
        print("  (none found)")
    print(f"\n[Total Repositories: {len(catalog.repositories)}]")
    return 0


def cmd_tags(registry: Registry, repo: str, as_json: bool = False) -> int:
    """List tags of one repository."""
    try:
        tags = registry.list_tags(repo)
    except NotFoundError:
        print(f"✗ Repository not found: {repo}")
        return 1

    if as_json:
        print(tags.model_dump_json())
        return 0

    print(f"\n[Tags for {tags.name}]")
    if tags.tags:
        for tag in tags.tags:
            print(f"  - {tag}")
    else:
        print("  (none found)")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regclient",
        description="regclient diagnostics - query a container image registry",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  regclient health
  regclient --url unix:///run/registry.sock catalog
  regclient --url registry.example.com --tls tags library/alpine
  regclient --url https://registry.local --ca-file ca.pem --json catalog
        """,
    )
    parser.add_argument(
        "--url", help="Registry address (default: $REGCLIENT_URL or tcp://localhost:5000)"
    )
    parser.add_argument(
        "--timeout", type=float, help="Dial timeout in seconds (default: 30)"
    )
    parser.add_argument("--tls", action="store_true", help="Use TLS")
    parser.add_argument("--ca-file", help="CA bundle to verify the registry with")
    parser.add_argument("--cert-file", help="Client certificate for mutual TLS")
    parser.add_argument("--key-file", help="Private key for --cert-file")
    parser.add_argument(
        "--insecure", action="store_true", help="Skip TLS certificate verification"
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--log-level", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Diagnostic command")
    subparsers.add_parser("health", help="Check that the registry answers /v2/")
    subparsers.add_parser("catalog", help="List repositories")
    tags_parser = subparsers.add_parser("tags", help="List tags of a repository")
    tags_parser.add_argument("repo", help="Repository name, e.g. library/alpine")
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_regclient_logging(log_level=args.log_level)

    try:
        with build_registry(args) as registry:
            if args.command == "health":
                return cmd_health(registry, args.json)
            elif args.command == "catalog":
                return cmd_catalog(registry, args.json)
            elif args.command == "tags":
                return cmd_tags(registry, args.repo, args.json)
    except ValidationError as e:
        print(f"✗ Invalid configuration: {e}")
        return 1
    except LikelyTLSMismatchError as e:
        print(f"✗ {e}\n  Retry with --tls if the registry serves HTTPS.")
        return 1
    except RegistryError as e:
        logger.debug(f"{args.command} failed: {e}", exc_info=True)
        print(f"✗ Error querying registry: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
