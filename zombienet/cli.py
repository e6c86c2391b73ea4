#!/usr/bin/env python3
"""
zombienet CLI

Spawn ephemeral test networks and run feature files against them.
"""

import argparse
import sys
from typing import Optional

from . import __version__
from .config import AVAILABLE_PROVIDERS, DEFAULT_PROVIDER, CLISettings
from .dispatcher import CommandDispatcher
from .lifecycle import LifecycleGuardian
from .log import configure_logging
from .session_registry import SessionRegistry


def _add_provider_option(parser: argparse.ArgumentParser, default=None) -> None:
    parser.add_argument(
        '--provider', '-p',
        choices=AVAILABLE_PROVIDERS,
        default=default,
        help=f'Override provider to use (default: {DEFAULT_PROVIDER})',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='zombienet',
        description="zombienet - spawn ephemeral test networks and run tests against them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  zombienet spawn network.toml
  zombienet -p podman spawn network.toml
  zombienet spawn network.toml config monitor
  zombienet test smoke.feature --provider podman
  zombienet version
        """
    )

    parser.add_argument('--version', '-v', action='version', version=f'%(prog)s {__version__}')

    # Unset unless given, so spawn keeps the provider from the config
    _add_provider_option(parser)

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Spawn command
    spawn_parser = subparsers.add_parser('spawn', help='Spawn the network defined in the config')
    spawn_parser.add_argument('network_config', metavar='networkConfig', help='Network config file path')
    spawn_parser.add_argument('creds', nargs='?', help='kubectl credentials file')
    spawn_parser.add_argument('monitor', nargs='?',
                              help="Monitor flag, don't teardown the network with the cronjob")
    _add_provider_option(spawn_parser, default=argparse.SUPPRESS)

    # Test command
    test_parser = subparsers.add_parser('test', help='Run tests on the network defined')
    test_parser.add_argument('test_file', metavar='testFile', help='Feature file describing the tests')
    _add_provider_option(test_parser, default=argparse.SUPPRESS)

    # Version command
    subparsers.add_parser('version', help='Prints zombienet version')

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = CLISettings.from_env()
    configure_logging(settings.log_level, debug=settings.debug)

    registry = SessionRegistry()
    guardian = LifecycleGuardian(registry)
    dispatcher = CommandDispatcher(guardian, registry)

    return guardian.run(dispatcher.dispatch(args))


if __name__ == '__main__':
    sys.exit(main())
