"""
Binary exploration example for lenstrings.

This example demonstrates how to open a binary and explore its basic properties.
"""

import argparse
from dataclasses import asdict

from lenstrings import Binary


def explore_binary(path):
    """Explore basic binary information."""
    with Binary.open(path) as binary:
        # Get metadata
        print('Binary metadata:')
        metadata_dict = asdict(binary.metadata)
        for key, value in metadata_dict.items():
            print(f'  {key}: {value}')

        # List sections
        print(f'Total sections: {len(binary.sections)}')
        for section in binary.sections:
            content = f'{section.size} bytes' if section.has_content else 'no content'
            print(f'  {section.name or "<unnamed>"} @ {hex(section.address)}: {content}')

        print(f'Total strings: {len(binary.strings)}')


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(description='Binary exploration example')
    parser.add_argument(
        '-f', '--input-file', help='Binary input file to be loaded', type=str, required=True
    )
    args = parser.parse_args()
    explore_binary(args.input_file)


if __name__ == '__main__':
    main()
