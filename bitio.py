"""
Побитовый ввод/вывод поверх байтовых потоков.
Биты упаковываются начиная со старшего, последний байт дополняется нулями.
"""

from typing import BinaryIO


BUFFER_SIZE = 64 * 1024


class BitWriter:
    def __init__(self, output: BinaryIO):
        self.output = output
        self.buffer = bytearray()
        self.rack = 0
        self.mask = 0x80
        self.bytes_written = 0

    def write_bit(self, bit: int):
        if bit:
            self.rack |= self.mask
        self.mask >>= 1

        if self.mask == 0:
            self.buffer.append(self.rack)
            self.rack = 0
            self.mask = 0x80

            if len(self.buffer) >= BUFFER_SIZE:
                self._drain()

    def write_bits(self, code: str):
        for bit in code:
            self.write_bit(bit == '1')

    def flush(self):
        if self.mask != 0x80:
            self.buffer.append(self.rack)
            self.rack = 0
            self.mask = 0x80
        self._drain()

    def _drain(self):
        if self.buffer:
            self.output.write(self.buffer)
            self.bytes_written += len(self.buffer)
            self.buffer = bytearray()


class BitReader:
    def __init__(self, source: BinaryIO):
        self.source = source
        self.buffer = b''
        self.pos = 0
        self.rack = 0
        self.mask = 0

    def read_bit(self) -> int:
        """Возвращает 0 или 1, либо -1 когда данные закончились."""
        if self.mask == 0:
            if self.pos >= len(self.buffer):
                self.buffer = self.source.read(BUFFER_SIZE)
                self.pos = 0
                if not self.buffer:
                    return -1

            self.rack = self.buffer[self.pos]
            self.pos += 1
            self.mask = 0x80

        bit = 1 if self.rack & self.mask else 0
        self.mask >>= 1
        return bit
