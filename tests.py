import unittest
import tempfile
import os
import io
import sys
import random
import contextlib
import itertools

from huffman import (END_OF_STREAM, HuffmanTree, SymbolNotFoundError, build_encoding_tree,
                     compute_frequencies, literal)
from bitio import BitReader, BitWriter
from huffman_format import MalformedTableError, read_header, write_header
from compressor import (TruncatedPayloadError, compress, compress_data, decode, decompress,
                        decompress_data, encode)
from archiver import Archiver, default_restored_path
import huffman_cli


class TestFrequencyTable(unittest.TestCase):
    def test_counts_bytes(self):
        table = compute_frequencies(io.BytesIO(b"AAAB"))
        self.assertEqual(table, {literal(65): 3, literal(66): 1, END_OF_STREAM: 1})

    def test_empty_input(self):
        table = compute_frequencies(io.BytesIO(b""))
        self.assertEqual(table, {END_OF_STREAM: 1})

    def test_consumes_stream(self):
        stream = io.BytesIO(b"hello")
        compute_frequencies(stream)
        self.assertEqual(stream.read(), b"")

    def test_literal_range(self):
        self.assertEqual(literal(0xff).value, 255)
        self.assertNotEqual(literal(0), END_OF_STREAM)
        with self.assertRaises(ValueError):
            literal(256)


class TestHuffmanTree(unittest.TestCase):
    def test_aaab_codes(self):
        tree = build_encoding_tree({literal(65): 3, literal(66): 1, END_OF_STREAM: 1})
        self.assertEqual(tree.codes[literal(65)], '1')
        self.assertEqual(tree.codes[literal(66)], '00')
        self.assertEqual(tree.codes[END_OF_STREAM], '01')
        self.assertEqual(tree.root.weight, 5)

    def test_prefix_free(self):
        data = b"The quick brown fox jumps over the lazy dog" * 3
        tree = build_encoding_tree(compute_frequencies(io.BytesIO(data)))

        codes = list(tree.codes.values())
        for first, second in itertools.permutations(codes, 2):
            self.assertFalse(second.startswith(first), f"{first} is a prefix of {second}")

    def test_internal_nodes_have_no_symbol(self):
        tree = build_encoding_tree(compute_frequencies(io.BytesIO(b"abracadabra")))
        stack = [tree.root]
        leaves = 0
        while stack:
            node = stack.pop()
            if node.is_leaf:
                leaves += 1
                self.assertIsNone(node.zero)
                self.assertIsNone(node.one)
            else:
                self.assertIsNotNone(node.zero)
                self.assertIsNotNone(node.one)
                self.assertEqual(node.weight, node.zero.weight + node.one.weight)
                stack.extend([node.zero, node.one])
        self.assertEqual(leaves, 6)

    def test_single_leaf(self):
        tree = build_encoding_tree({END_OF_STREAM: 1})
        self.assertTrue(tree.root.is_leaf)
        self.assertEqual(tree.codes, {END_OF_STREAM: ''})

    def test_empty_table(self):
        with self.assertRaises(ValueError):
            build_encoding_tree({})

    def test_tie_break_is_insertion_order(self):
        table = {literal(1): 1, literal(2): 1, literal(3): 1, END_OF_STREAM: 1}
        tree = build_encoding_tree(table)
        self.assertEqual(tree.codes[literal(1)], '00')
        self.assertEqual(tree.codes[literal(2)], '01')
        self.assertEqual(tree.codes[literal(3)], '10')
        self.assertEqual(tree.codes[END_OF_STREAM], '11')

    def test_lookup_failure(self):
        tree = build_encoding_tree({literal(65): 2, END_OF_STREAM: 1})
        with self.assertRaises(SymbolNotFoundError):
            tree.code_for(literal(66))

    def test_release(self):
        tree = build_encoding_tree(compute_frequencies(io.BytesIO(b"abracadabra")))
        root = tree.root
        self.assertEqual(tree.release(), 11)
        self.assertIsNone(tree.root)
        self.assertIsNone(root.zero)
        self.assertEqual(tree.codes, {})
        self.assertEqual(tree.release(), 0)

    def test_context_manager_releases_on_error(self):
        tree = HuffmanTree()
        with self.assertRaises(RuntimeError):
            with tree.build({literal(65): 1, END_OF_STREAM: 1}):
                raise RuntimeError("boom")
        self.assertIsNone(tree.root)

    def test_deep_tree(self):
        # веса-степени двойки дают дерево-цепочку
        table = {literal(byte): 2 ** byte for byte in range(256)}
        table[END_OF_STREAM] = 1

        tree = build_encoding_tree(table)
        self.assertEqual(tree.depth(), 256)
        self.assertEqual(tree.release(), 2 * 257 - 1)


class TestBitIO(unittest.TestCase):
    def test_msb_first_with_padding(self):
        output = io.BytesIO()
        writer = BitWriter(output)
        writer.write_bits('1110001')
        writer.flush()
        self.assertEqual(output.getvalue(), b'\xe2')
        self.assertEqual(writer.bytes_written, 1)

    def test_flush_empty(self):
        output = io.BytesIO()
        writer = BitWriter(output)
        writer.flush()
        self.assertEqual(output.getvalue(), b'')

    def test_reader(self):
        reader = BitReader(io.BytesIO(b'\xa0'))
        bits = [reader.read_bit() for _ in range(9)]
        self.assertEqual(bits, [1, 0, 1, 0, 0, 0, 0, 0, -1])


class TestHeader(unittest.TestCase):
    def test_aaab_header(self):
        output = io.BytesIO()
        size = write_header({literal(65): 3, literal(66): 1, END_OF_STREAM: 1}, output)
        self.assertEqual(output.getvalue(), b"2 A3 B1 ")
        self.assertEqual(size, 8)

    def test_header_roundtrip(self):
        table = {literal(byte): byte * 7 + 1 for byte in range(256)}
        table[END_OF_STREAM] = 1

        output = io.BytesIO()
        write_header(table, output)
        output.seek(0)
        self.assertEqual(read_header(output), table)

    def test_digit_and_space_symbols(self):
        table = {literal(ord('5')): 12, literal(ord(' ')): 3, literal(ord('\n')): 40,
                 END_OF_STREAM: 1}
        output = io.BytesIO()
        write_header(table, output)
        output.seek(0)
        self.assertEqual(read_header(output), table)

    def test_empty_table_header(self):
        output = io.BytesIO()
        write_header({END_OF_STREAM: 1}, output)
        self.assertEqual(output.getvalue(), b"0 ")

    def test_stops_at_payload(self):
        stream = io.BytesIO(b"1 A3 \xff\x00")
        self.assertEqual(read_header(stream), {literal(65): 3, END_OF_STREAM: 1})
        self.assertEqual(stream.read(), b"\xff\x00")

    def test_any_whitespace_separator(self):
        for data in (b"1\nA3\t", b"1\tA3\n", b"1\rA3\r", b"2\nA3\tB1\r"):
            with self.subTest(data=data):
                expected = {literal(65): 3, END_OF_STREAM: 1}
                if data.startswith(b"2"):
                    expected[literal(66)] = 1
                self.assertEqual(read_header(io.BytesIO(data)), expected)

    def test_missing_eof(self):
        with self.assertRaises(MalformedTableError):
            write_header({literal(65): 3}, io.BytesIO())

    def test_malformed_headers(self):
        cases = [
            b"",
            b"x ",
            b"3 A3 B1 ",
            b"1 A3",
            b"1 A",
            b"1 A3x",
            b"2 A3 A4 ",
            b"1 A0 ",
            b"257 ",
            b"12",
        ]
        for data in cases:
            with self.subTest(data=data):
                with self.assertRaises(MalformedTableError):
                    read_header(io.BytesIO(data))


class TestBitCodec(unittest.TestCase):
    def setUp(self):
        self.tree = build_encoding_tree({literal(65): 3, literal(66): 1, END_OF_STREAM: 1})

    def test_encode(self):
        output = io.BytesIO()
        count = encode(io.BytesIO(b"AAAB"), self.tree, BitWriter(output))
        self.assertEqual(count, 4)
        self.assertEqual(output.getvalue(), b'\xe2')

    def test_encode_unknown_symbol(self):
        with self.assertRaises(SymbolNotFoundError):
            encode(io.BytesIO(b"AC"), self.tree, BitWriter(io.BytesIO()))

    def test_decode(self):
        output = io.BytesIO()
        count = decode(BitReader(io.BytesIO(b'\xe2')), self.tree, output)
        self.assertEqual(count, 4)
        self.assertEqual(output.getvalue(), b"AAAB")

    def test_decode_ignores_padding(self):
        output = io.BytesIO()
        decode(BitReader(io.BytesIO(b'\xe3\xff')), self.tree, output)
        self.assertEqual(output.getvalue(), b"AAAB")

    def test_decode_truncated(self):
        with self.assertRaises(TruncatedPayloadError):
            decode(BitReader(io.BytesIO(b'\xff')), self.tree, io.BytesIO())

    def test_decode_single_eof_leaf(self):
        tree = build_encoding_tree({END_OF_STREAM: 1})
        output = io.BytesIO()
        self.assertEqual(decode(BitReader(io.BytesIO(b"")), tree, output), 0)
        self.assertEqual(output.getvalue(), b"")

    def test_decode_single_literal_leaf(self):
        tree = build_encoding_tree({literal(65): 4})
        with self.assertRaises(MalformedTableError):
            decode(BitReader(io.BytesIO(b"")), tree, io.BytesIO())


class TestPipeline(unittest.TestCase):
    def assertRoundTrip(self, data):
        self.assertEqual(decompress_data(compress_data(data)), data)

    def test_aaab(self):
        compressed = compress_data(b"AAAB")
        self.assertEqual(compressed, b"2 A3 B1 \xe2")
        self.assertEqual(decompress_data(compressed), b"AAAB")

    def test_empty(self):
        compressed = compress_data(b"")
        self.assertEqual(compressed, b"0 ")
        self.assertEqual(decompress_data(compressed), b"")

    def test_single_repeated_byte(self):
        self.assertRoundTrip(b"A")
        self.assertRoundTrip(b"Z" * 5000)

    def test_all_bytes(self):
        self.assertRoundTrip(bytes(range(256)) * 10)

    def test_text(self):
        data = b"Lorem ipsum dolor sit amet " * 200
        compressed = compress_data(data)
        self.assertLess(len(compressed), len(data))
        self.assertEqual(decompress_data(compressed), data)

    def test_random_data(self):
        rng = random.Random(42)
        for size in (1, 2, 17, 1000, 70000):
            with self.subTest(size=size):
                self.assertRoundTrip(bytes(rng.randint(0, 255) for _ in range(size)))

    def test_non_seekable_input(self):
        class UnseekableStream(io.RawIOBase):
            def __init__(self, data):
                self.data = io.BytesIO(data)

            def readable(self):
                return True

            def seekable(self):
                return False

            def readinto(self, buffer):
                chunk = self.data.read(len(buffer))
                buffer[:len(chunk)] = chunk
                return len(chunk)

        data = b"hello hello" * 20
        source = io.BufferedReader(UnseekableStream(data))
        self.assertFalse(source.seekable())

        output = io.BytesIO()
        stats = compress(source, output)
        self.assertEqual(stats.original_size, len(data))
        self.assertEqual(output.getvalue(), compress_data(data))
        self.assertEqual(decompress_data(output.getvalue()), data)

    def test_deterministic(self):
        data = b"mississippi river" * 50
        self.assertEqual(compress_data(data), compress_data(data))

    def test_truncated_payload(self):
        data = b"The quick brown fox jumps over the lazy dog"
        compressed = compress_data(data)
        with self.assertRaises(TruncatedPayloadError):
            decompress_data(compressed[:-1])

    def test_truncated_header(self):
        compressed = compress_data(b"abcdef")
        with self.assertRaises(MalformedTableError):
            decompress_data(compressed[:5])

    def test_rewinds_to_start_position(self):
        source = io.BytesIO(b"skip|payload")
        source.seek(5)
        output = io.BytesIO()
        stats = compress(source, output)
        self.assertEqual(stats.original_size, 7)
        self.assertEqual(decompress_data(output.getvalue()), b"payload")

    def test_stats(self):
        output = io.BytesIO()
        stats = compress(io.BytesIO(b"AAAB"), output)
        self.assertEqual(stats.distinct_symbols, 2)
        self.assertEqual(stats.header_size, 8)
        self.assertEqual(stats.payload_size, 1)
        self.assertEqual(stats.compressed_size, len(output.getvalue()))

    def test_decompress_streams(self):
        compressed = io.BytesIO(compress_data(b"hello world"))
        output = io.BytesIO()
        self.assertEqual(decompress(compressed, output), 11)
        self.assertEqual(output.getvalue(), b"hello world")


class TestArchiver(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.archiver = Archiver(verbose=False)

    def tearDown(self):
        import shutil
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write(self, name, data):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def test_compress_decompress_file(self):
        source = self._write("test.txt", b"Hello World! " * 100)
        compressed = source + ".huf"
        restored = os.path.join(self.temp_dir, "restored.txt")

        stats = self.archiver.compress_file(source)
        self.assertTrue(os.path.isfile(compressed))
        self.assertEqual(stats.compressed_size, os.path.getsize(compressed))
        self.assertLess(stats.compressed_size, stats.original_size)

        self.assertEqual(self.archiver.decompress_file(compressed, restored), 1300)
        with open(restored, 'rb') as f:
            self.assertEqual(f.read(), b"Hello World! " * 100)

    def test_failed_decompress_removes_output(self):
        broken = self._write("broken.huf", compress_data(b"some content")[:-1])
        restored = os.path.join(self.temp_dir, "broken")

        with self.assertRaises(TruncatedPayloadError):
            self.archiver.decompress_file(broken)
        self.assertFalse(os.path.exists(restored))

    def test_default_restored_path(self):
        self.assertEqual(default_restored_path("a.txt.huf"), "a.txt")
        self.assertEqual(default_restored_path("a.bin"), "a.bin.out")

    def test_inspect(self):
        compressed = self._write("aaab.huf", compress_data(b"AAAB"))
        report = io.StringIO()
        with contextlib.redirect_stdout(report):
            self.archiver.inspect_file(compressed)
        self.assertIn("LITERAL(41)", report.getvalue())
        self.assertIn("EOF", report.getvalue())

    def test_verbose_compress_prints_stats(self):
        source = self._write("verbose.txt", b"abracadabra " * 40)
        report = io.StringIO()
        with contextlib.redirect_stdout(report):
            stats = Archiver(verbose=True).compress_file(source)

        output = report.getvalue()
        self.assertIn(f"Compressing {source}... OK", output)
        self.assertIn("Huffman Compression Statistics:", output)
        self.assertIn("Compression ratio", output)
        self.assertIn(f"Compressed size:     {stats.compressed_size} bytes", output)


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_compress_and_decompress(self):
        source = os.path.join(self.temp_dir, "file.txt")
        with open(source, 'wb') as f:
            f.write(b"Content of file\n" * 50)

        self.assertEqual(huffman_cli.main(['-q', 'compress', source]), 0)
        os.remove(source)
        self.assertEqual(huffman_cli.main(['-q', 'decompress', source + '.huf']), 0)

        with open(source, 'rb') as f:
            self.assertEqual(f.read(), b"Content of file\n" * 50)

    def test_inspect(self):
        path = os.path.join(self.temp_dir, "aaab.huf")
        with open(path, 'wb') as f:
            f.write(compress_data(b"AAAB"))

        report = io.StringIO()
        with contextlib.redirect_stdout(report):
            code = huffman_cli.main(['inspect', path])
        self.assertEqual(code, 0)
        self.assertIn("EOF", report.getvalue())
        self.assertIn("header 8 bytes, depth 2", report.getvalue())

    def test_verbose_decompress(self):
        path = os.path.join(self.temp_dir, "text.huf")
        with open(path, 'wb') as f:
            f.write(compress_data(b"hello world"))

        report = io.StringIO()
        with contextlib.redirect_stdout(report):
            code = huffman_cli.main(['decompress', path, '-o', os.path.join(self.temp_dir, "text")])
        self.assertEqual(code, 0)
        self.assertIn("OK (11 bytes", report.getvalue())

    def test_missing_file(self):
        errors = io.StringIO()
        with contextlib.redirect_stderr(errors):
            code = huffman_cli.main(['-q', 'compress', os.path.join(self.temp_dir, "nope")])
        self.assertEqual(code, 1)
        self.assertIn("Error:", errors.getvalue())


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestFrequencyTable))
    suite.addTests(loader.loadTestsFromTestCase(TestHuffmanTree))
    suite.addTests(loader.loadTestsFromTestCase(TestBitIO))
    suite.addTests(loader.loadTestsFromTestCase(TestHeader))
    suite.addTests(loader.loadTestsFromTestCase(TestBitCodec))
    suite.addTests(loader.loadTestsFromTestCase(TestPipeline))
    suite.addTests(loader.loadTestsFromTestCase(TestArchiver))
    suite.addTests(loader.loadTestsFromTestCase(TestCommandLine))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
