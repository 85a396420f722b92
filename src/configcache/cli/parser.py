"""
Command-line argument parsing module.

This module handles parsing and validation of CLI arguments.
"""

import argparse
from typing import List, Optional

from configcache.config.core.values import ValueKind


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the configcache command."""
    parser = argparse.ArgumentParser(
        prog='configcache',
        description='Read typed values from YAML configuration files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  configcache get server.port --type int        # Print one value
  configcache get hosts --type string_slice     # Print a list value
  configcache watch server.port server.name     # Reprint values as the file changes
        """
    )

    parser.add_argument(
        '--file',
        default=None,
        help='Configuration file name without extension (default: config)'
    )
    parser.add_argument(
        '--config-dir',
        default=None,
        help='Directory containing configuration files (default: $CONFIGCACHE_BASE_PATH/configs)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    kinds = [kind.value for kind in ValueKind]
    subparsers = parser.add_subparsers(dest='command', required=True)

    get_parser = subparsers.add_parser('get', help='Print a configuration value')
    get_parser.add_argument('key', help='Dotted key, e.g. server.port')
    get_parser.add_argument('--type', dest='kind', choices=kinds, default=ValueKind.ANY.value,
                            help='Type to read the value as (default: any)')

    watch_parser = subparsers.add_parser('watch', help='Reprint values while watching the file')
    watch_parser.add_argument('keys', nargs='+', help='Dotted keys to print')
    watch_parser.add_argument('--type', dest='kind', choices=kinds, default=ValueKind.ANY.value,
                              help='Type to read the values as (default: any)')
    watch_parser.add_argument('--interval', type=float, default=2.0,
                              help='Seconds between refreshes (default: 2.0)')
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        argparse.Namespace: Parsed arguments, with `kind` as a ValueKind
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'watch' and args.interval <= 0:
        parser.error('--interval must be positive')

    args.kind = ValueKind(args.kind)
    return args
