"""
Заголовок сжатого файла: таблица частот в текстовом виде.
Формат: "<N> " и далее N записей "<байт><частота> ". Маркер конца потока не пишется.
"""

from typing import BinaryIO, Tuple

from huffman import END_OF_STREAM, FrequencyTable, literal


HEADER_SEPARATOR = b' '
WHITESPACE = b' \t\n\r\v\f'
MAX_ENTRIES = 256


class MalformedTableError(ValueError):
    pass


def write_header(frequencies: FrequencyTable, output: BinaryIO) -> int:
    if END_OF_STREAM not in frequencies:
        raise MalformedTableError("No end-of-stream symbol in frequency table")

    symbols = sorted(symbol for symbol in frequencies if not symbol.is_eof)

    header = bytearray()
    header += str(len(symbols)).encode('ascii') + HEADER_SEPARATOR

    for symbol in symbols:
        header.append(symbol.value)
        header += str(frequencies[symbol]).encode('ascii')
        header += HEADER_SEPARATOR

    output.write(header)
    return len(header)


def _read_byte(stream: BinaryIO, what: str) -> int:
    data = stream.read(1)
    if not data:
        raise MalformedTableError(f"Truncated header: cannot read {what}")
    return data[0]


def _read_number(stream: BinaryIO, what: str) -> Tuple[int, int]:
    """Читает десятичное число и возвращает его вместе с байтом-разделителем."""
    digits = bytearray()

    while True:
        byte = _read_byte(stream, what)
        if not 0x30 <= byte <= 0x39:
            break
        digits.append(byte)

    if not digits:
        raise MalformedTableError(f"Corrupted header: expected decimal {what}")

    return int(digits.decode('ascii')), byte


def _check_separator(byte: int, what: str):
    if byte not in WHITESPACE:
        raise MalformedTableError(
            f"Corrupted header: expected whitespace after {what}, got {bytes([byte])!r}")


def read_header(stream: BinaryIO) -> FrequencyTable:
    count, separator = _read_number(stream, "symbol count")
    _check_separator(separator, "symbol count")

    if count > MAX_ENTRIES:
        raise MalformedTableError(f"Corrupted header: {count} symbols declared")

    frequencies: FrequencyTable = {}

    for i in range(count):
        symbol = literal(_read_byte(stream, f"symbol {i + 1} of {count}"))

        frequency, separator = _read_number(stream, f"frequency of {symbol!r}")
        _check_separator(separator, f"frequency of {symbol!r}")

        if frequency == 0:
            raise MalformedTableError(f"Corrupted header: zero frequency for {symbol!r}")
        if symbol in frequencies:
            raise MalformedTableError(f"Corrupted header: duplicate entry for {symbol!r}")

        frequencies[symbol] = frequency

    frequencies[END_OF_STREAM] = 1
    return frequencies
