"""
Сжатие и распаковка файлов на диске.
"""

import os
from typing import Optional

from compressor import CompressionStats, compress, decompress
from huffman_format import read_header
from huffman import build_encoding_tree


DEFAULT_SUFFIX = '.huf'
RESTORED_SUFFIX = '.out'


def default_compressed_path(path: str) -> str:
    return path + DEFAULT_SUFFIX


def default_restored_path(path: str) -> str:
    if path.endswith(DEFAULT_SUFFIX) and len(path) > len(DEFAULT_SUFFIX):
        return path[:-len(DEFAULT_SUFFIX)]
    return path + RESTORED_SUFFIX


class Archiver:
    def __init__(self, verbose: bool = True):
        self.verbose = verbose

    def _say(self, message: str, end: str = "\n"):
        if self.verbose:
            print(message, end=end, flush=True)

    def compress_file(self, file_path: str, output_path: Optional[str] = None) -> CompressionStats:
        output_path = output_path or default_compressed_path(file_path)

        self._say(f"Compressing {file_path}...", end=" ")
        with open(file_path, 'rb') as infile, open(output_path, 'wb') as outfile:
            stats = compress(infile, outfile)

        self._say(f"OK ({stats.compression_ratio:.1f}%)")
        if self.verbose:
            stats.print_stats()

        return stats

    def decompress_file(self, file_path: str, output_path: Optional[str] = None) -> int:
        output_path = output_path or default_restored_path(file_path)

        self._say(f"Extracting {file_path}...", end=" ")
        with open(file_path, 'rb') as infile:
            try:
                with open(output_path, 'wb') as outfile:
                    size = decompress(infile, outfile)
            except ValueError:
                self._say("FAILED")
                os.remove(output_path)
                raise

        self._say(f"OK ({size} bytes -> {output_path})")
        return size

    def inspect_file(self, file_path: str):
        with open(file_path, 'rb') as f:
            frequencies = read_header(f)
            header_size = f.tell()

        with build_encoding_tree(frequencies) as tree:
            print(f"{'Symbol':<10} {'Frequency':>12} {'Length':>8}  Code")
            print("-" * 60)

            for symbol in sorted(frequencies):
                code = tree.code_for(symbol)
                print(f"{symbol!r:<10} {frequencies[symbol]:>12} {len(code):>8}  {code}")

            print("-" * 60)
            total = sum(count for symbol, count in frequencies.items() if not symbol.is_eof)
            print(f"{'TOTAL':<10} {total:>12}   header {header_size} bytes, depth {tree.depth()}")
