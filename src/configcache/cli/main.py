"""
Entry point for the configcache command.

Run: configcache get server.port --type int
"""

import logging
import sys
import time
from typing import List, Optional

from configcache.cli.output import ConsoleOutput
from configcache.cli.parser import parse_arguments
from configcache.config import ConfigAccessor, create_config

logger = logging.getLogger(__name__)

_GETTERS = {
    'any': ConfigAccessor.get,
    'string': ConfigAccessor.get_string,
    'bool': ConfigAccessor.get_bool,
    'int': ConfigAccessor.get_int,
    'int32': ConfigAccessor.get_int32,
    'int64': ConfigAccessor.get_int64,
    'float64': ConfigAccessor.get_float64,
    'duration': ConfigAccessor.get_duration,
    'string_slice': ConfigAccessor.get_string_slice,
}


def read_values(config: ConfigAccessor, keys: List[str], kind) -> dict:
    """Read each key with the getter for the given kind."""
    getter = _GETTERS[kind.value]
    return {key: getter(config, key) for key in keys}


def run_watch(config: ConfigAccessor, args, output: ConsoleOutput):
    """Reprint the requested values until interrupted."""
    config.start_watching()
    output.print_watch_banner(config.source.config_file, args.interval)
    try:
        while True:
            output.print_values(read_values(config, args.keys, args.kind))
            output.print_separator()
            time.sleep(args.interval)
    except KeyboardInterrupt:
        logger.info("Stopped watching")
    finally:
        config.stop_watching()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = ConsoleOutput(verbose=args.verbose)
    config = create_config(args.file, config_dir=args.config_dir)

    if args.command == 'get':
        output.print_value(read_values(config, [args.key], args.kind)[args.key])
    elif args.command == 'watch':
        run_watch(config, args, output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
