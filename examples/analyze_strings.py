#!/usr/bin/env python3
"""
String analysis example for lenstrings.

This example demonstrates how to extract and filter length-prefixed strings.
"""

import argparse

from lenstrings import Binary
from lenstrings.scanner import ScanConfig

INTERESTING_KEYWORDS = [
    'password',
    'passwd',
    'key',
    'secret',
    'token',
    'api',
    'user',
    'login',
    'config',
    'http',
    'https',
    'path',
    'sql',
]


def analyze_strings(path, min_length=4, max_display=20, show_interesting=True):
    """Extract and analyze strings in the binary."""
    with Binary.open(path, ScanConfig(min_length=min_length)) as binary:
        print(f'Analyzing strings (minimum length: {min_length}):')

        all_strings = [str(item) for item in binary.strings]
        print(f'Total strings: {len(all_strings)}')

        print(f'\nFirst {max_display} strings:')
        for string_value in all_strings[:max_display]:
            print(repr(string_value))

        if len(all_strings) > max_display:
            print(f'... (showing first {max_display} of {len(all_strings)} strings)')

        if show_interesting:
            interesting_strings = [
                s for s in all_strings if any(k in s.lower() for k in INTERESTING_KEYWORDS)
            ]
            if interesting_strings:
                print(f'\nInteresting strings found ({len(interesting_strings)}):')
                for string_value in interesting_strings[:10]:  # Limit to 10
                    print(repr(string_value))


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description='String analysis example')
    parser.add_argument(
        '-f', '--input-file', help='Binary input file to be loaded', type=str, required=True
    )
    parser.add_argument(
        '-l', '--min-length', type=int, default=4, help='Minimum string length (default: 4)'
    )
    parser.add_argument(
        '-m', '--max-display', type=int, default=20, help='Maximum displayed strings (default: 20)'
    )
    parser.add_argument(
        '--no-interesting', action='store_true', help='Do not highlight interesting strings'
    )
    args = parser.parse_args()
    analyze_strings(args.input_file, args.min_length, args.max_display, not args.no_interesting)


if __name__ == '__main__':
    main()
