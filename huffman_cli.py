"""
Командная строка для компрессора Хаффмана.
"""

import argparse
import sys
from archiver import Archiver


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Huffman file compressor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python huffman_cli.py compress file.txt -o file.txt.huf
  python huffman_cli.py decompress file.txt.huf -o file.txt
  python huffman_cli.py inspect file.txt.huf
        """
    )
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress progress output')

    subparsers = parser.add_subparsers(dest='command', help='Command')

    compress_parser = subparsers.add_parser('compress', help='Compress a file')
    compress_parser.add_argument('input', help='File to compress')
    compress_parser.add_argument('-o', '--output', help='Compressed file path (default: INPUT.huf)')

    decompress_parser = subparsers.add_parser('decompress', help='Decompress a file')
    decompress_parser.add_argument('input', help='Compressed file')
    decompress_parser.add_argument('-o', '--output', help='Restored file path')

    inspect_parser = subparsers.add_parser('inspect', help='Show frequency table and codes')
    inspect_parser.add_argument('input', help='Compressed file')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    archiver = Archiver(verbose=not args.quiet)

    try:
        if args.command == 'compress':
            archiver.compress_file(args.input, args.output)

        elif args.command == 'decompress':
            archiver.decompress_file(args.input, args.output)

        elif args.command == 'inspect':
            archiver.inspect_file(args.input)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
