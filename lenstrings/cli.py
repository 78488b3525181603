#!/usr/bin/env python3
"""
Extract length-prefixed strings from a compiled binary.

Prints every unique string recovered from (pointer, length) descriptors,
one per line, in ascending byte order.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from typing_extensions import List, Optional

from . import __version__
from .base import BinaryLoadError, InvalidParameterError, UnsupportedArchitectureError
from .binary import Binary
from .scanner import MAX_LEN, MIN_LEN, ScanConfig

logger = logging.getLogger('lenstrings')


def set_log_config(debug: bool, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    logging.getLogger().setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lenstrings',
        description='Extract length-prefixed (pointer, length) strings from a compiled binary.',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
        help="show program's version number and exit",
    )
    parser.add_argument('path', help='ELF, Mach-O or PE binary to analyze')
    parser.add_argument(
        '-n',
        '--min-length',
        type=int,
        default=MIN_LEN,
        help=f'minimum string length (default: {MIN_LEN})',
    )
    parser.add_argument(
        '-x',
        '--max-length',
        type=int,
        default=MAX_LEN,
        help=f'maximum string length (default: {MAX_LEN})',
    )

    logging_group = parser.add_argument_group('logging arguments')
    logging_group.add_argument(
        '-d', '--debug', action='store_true', help='enable debugging output on STDERR'
    )
    logging_group.add_argument(
        '-q', '--quiet', action='store_true', help='disable all output except fatal errors'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)
    set_log_config(args.debug, args.quiet)

    try:
        config = ScanConfig(min_length=args.min_length, max_length=args.max_length)
        with Binary.open(args.path, config) as binary:
            for item in binary.strings:
                print(item)
    except (BinaryLoadError, UnsupportedArchitectureError, InvalidParameterError) as e:
        logger.error(f'{e}')
        return 1
    except BrokenPipeError:
        # stdout closed early, e.g. piped into `head`
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 0

    return 0


if __name__ == '__main__':
    sys.exit(main())
