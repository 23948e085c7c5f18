#!/usr/bin/env python3
"""
Command-line interface for the Docker layer usage tool.
"""

import argparse
import logging
import sys

from docker_layer_usage.core import ScanConfig, scan_host
from docker_layer_usage.errors import LayerUsageError
from docker_layer_usage.layer_lookup import DRIVERS
from docker_layer_usage.report import render_json, render_text

logger = logging.getLogger('docker_layer_usage')

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def build_parser():
    parser = argparse.ArgumentParser(
        description='Report disk usage of Docker container layers and find orphaned diff folders'
    )
    parser.add_argument(
        '--fs',
        default='aufs',
        help=f"The current storage filesystem for docker ({', '.join(sorted(DRIVERS))})"
    )
    parser.add_argument(
        '--lib-path',
        default='/var/lib/docker',
        help='The path to the docker managed files'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the report as JSON'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Number of containers measured in parallel'
    )
    parser.add_argument(
        '--inspect-timeout',
        type=float,
        default=30,
        help='Seconds to wait for each docker inspect call'
    )
    parser.add_argument(
        '--size-timeout',
        type=float,
        default=300,
        help='Seconds allowed for measuring each diff folder (0 for no limit)'
    )
    parser.add_argument(
        '--no-inspect',
        action='store_true',
        help='Do not call docker inspect (for storage roots copied from another host)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    config = ScanConfig(
        docker_root=args.lib_path,
        driver=args.fs,
        workers=max(1, args.workers),
        inspect_timeout=args.inspect_timeout,
        size_timeout=args.size_timeout,
        offline=args.no_inspect,
    )

    try:
        report = scan_host(config)
    except LayerUsageError as e:
        logger.error(f"Error processing containers: {e}")
        return EXIT_FATAL

    print(render_json(report) if args.json else render_text(report))
    return EXIT_OK if report.complete else EXIT_PARTIAL


if __name__ == "__main__":
    sys.exit(main())
