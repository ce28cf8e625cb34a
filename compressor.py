"""
Кодирование и декодирование потока байтов по дереву Хаффмана.

Сжатый файл состоит из заголовка (см. huffman_format.py) и битового потока:
коды всех входных байтов, затем код маркера конца потока.
"""

import io
from typing import BinaryIO, Dict

from bitio import BitReader, BitWriter
from huffman_format import MalformedTableError, read_header, write_header
from huffman import (CHUNK_SIZE, END_OF_STREAM, FrequencyTable, literal,
                     build_encoding_tree, compute_frequencies, HuffmanTree)


class TruncatedPayloadError(ValueError):
    pass


def encode(source: BinaryIO, tree: HuffmanTree, sink: BitWriter) -> int:
    codes: Dict[int, str] = {}
    encoded = 0

    for chunk in iter(lambda: source.read(CHUNK_SIZE), b''):
        for byte in chunk:
            code = codes.get(byte)
            if code is None:
                code = tree.code_for(literal(byte))
                codes[byte] = code
            sink.write_bits(code)
        encoded += len(chunk)

    sink.write_bits(tree.code_for(END_OF_STREAM))
    sink.flush()
    return encoded


def decode(source: BitReader, tree: HuffmanTree, output: BinaryIO) -> int:
    root = tree.root
    if root is None:
        raise ValueError("Encoding tree has been released")

    if root.is_leaf:
        if not root.symbol.is_eof:
            raise MalformedTableError(
                f"Single-leaf tree for {root.symbol!r} has no end-of-stream code")
        return 0

    buffer = bytearray()
    written = 0
    node = root

    while True:
        bit = source.read_bit()
        if bit < 0:
            raise TruncatedPayloadError(
                f"Payload ended before end-of-stream marker ({written + len(buffer)} bytes decoded)")

        node = node.one if bit else node.zero

        if not node.is_leaf:
            continue

        if node.symbol.is_eof:
            break

        buffer.append(node.symbol.value)
        node = root

        if len(buffer) >= CHUNK_SIZE:
            output.write(buffer)
            written += len(buffer)
            buffer = bytearray()

    output.write(buffer)
    return written + len(buffer)


class CompressionStats:
    def __init__(self, frequencies: FrequencyTable, header_size: int, payload_size: int):
        self.distinct_symbols = sum(1 for symbol in frequencies if not symbol.is_eof)
        self.original_size = sum(count for symbol, count in frequencies.items()
                                 if not symbol.is_eof)
        self.header_size = header_size
        self.payload_size = payload_size
        self.compressed_size = header_size + payload_size

        self.compression_ratio = (
            self.compressed_size / self.original_size * 100
            if self.original_size > 0 else 0
        )

    def print_stats(self):
        print(f"Huffman Compression Statistics:")
        print(f"  Original size:       {self.original_size} bytes")
        print(f"  Distinct symbols:    {self.distinct_symbols}")
        print(f"  Header size:         {self.header_size} bytes")
        print(f"  Payload size:        {self.payload_size} bytes")
        print(f"  Compressed size:     {self.compressed_size} bytes")
        print(f"  Compression ratio:   {self.compression_ratio:.1f}%")


def compress(infile: BinaryIO, outfile: BinaryIO) -> CompressionStats:
    if not infile.seekable():
        infile = io.BytesIO(infile.read())

    start = infile.tell()
    frequencies = compute_frequencies(infile)
    header_size = write_header(frequencies, outfile)

    with build_encoding_tree(frequencies) as tree:
        infile.seek(start)
        sink = BitWriter(outfile)
        encode(infile, tree, sink)

    return CompressionStats(frequencies, header_size, sink.bytes_written)


def decompress(infile: BinaryIO, outfile: BinaryIO) -> int:
    frequencies = read_header(infile)

    with build_encoding_tree(frequencies) as tree:
        return decode(BitReader(infile), tree, outfile)


def compress_data(data: bytes) -> bytes:
    output = io.BytesIO()
    compress(io.BytesIO(data), output)
    return output.getvalue()


def decompress_data(compressed: bytes) -> bytes:
    output = io.BytesIO()
    decompress(io.BytesIO(compressed), output)
    return output.getvalue()
