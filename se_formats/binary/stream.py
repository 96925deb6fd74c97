"""
Little-endian binary stream primitives and the variable-width integer rule.

Both SE formats store several integer fields at a width that is not written
anywhere in the file: it is derived from a bound that both sides already
know (bone count, vertex count, frame count). ``width_for`` is that rule, and
``BinaryWriter.write_uint`` / ``BinaryReader.read_uint`` apply it.
"""

import os
import struct
from contextlib import contextmanager
from enum import IntEnum
from typing import BinaryIO, Iterator, Sequence, Union

import numpy as np


class IntWidth(IntEnum):
    """Byte width of a variable-width unsigned integer field"""
    U8 = 1
    U16 = 2
    U32 = 4


_UINT_FORMATS = {
    IntWidth.U8: '<B',
    IntWidth.U16: '<H',
    IntWidth.U32: '<I',
}


def width_for(bound: int) -> IntWidth:
    """
    Get the narrowest width able to hold every value up to ``bound``

    Args:
        bound: Largest value the field may take (e.g. bone count)

    Returns:
        IntWidth.U8, IntWidth.U16 or IntWidth.U32
    """
    if bound <= 0xFF:
        return IntWidth.U8
    if bound <= 0xFFFF:
        return IntWidth.U16
    return IntWidth.U32


PathOrStream = Union[str, os.PathLike, BinaryIO]


@contextmanager
def open_stream(target: PathOrStream, mode: str) -> Iterator[BinaryIO]:
    """
    Yield a binary stream for a path or an already open file object

    A path is opened here and closed on exit (also on error). A file object
    is yielded as is and stays owned by the caller.
    """
    if isinstance(target, (str, os.PathLike)):
        with open(target, mode) as f:
            yield f
    else:
        yield target


class BinaryWriter:
    """Writes little-endian primitives to a binary file object"""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write(self, data: bytes) -> None:
        self.stream.write(data)

    def _pack(self, fmt: str, *values) -> None:
        self.stream.write(struct.pack(fmt, *values))

    def write_u8(self, value: int) -> None:
        self._pack('<B', value)

    def write_u16(self, value: int) -> None:
        self._pack('<H', value)

    def write_u32(self, value: int) -> None:
        self._pack('<I', value)

    def write_i16(self, value: int) -> None:
        self._pack('<h', value)

    def write_i32(self, value: int) -> None:
        self._pack('<i', value)

    def write_f32(self, value: float) -> None:
        self._pack('<f', value)

    def write_floats(self, values: Sequence[float], double: bool = False) -> None:
        """
        Write a vector as consecutive f32 (or f64) components

        Args:
            values: Components, e.g. a numpy array of shape (3,)
            double: Write 64-bit floats instead of 32-bit
        """
        code = 'd' if double else 'f'
        self._pack(f'<{len(values)}{code}', *(float(v) for v in values))

    def write_uint(self, value: int, width: IntWidth) -> None:
        self._pack(_UINT_FORMATS[width], int(value))

    def write_padding(self, count: int) -> None:
        self.stream.write(bytes(count))

    def write_string(self, value: str) -> None:
        """Write an ASCII string followed by a single zero byte"""
        self.stream.write((value or '').encode('ascii') + b'\x00')


class BinaryReader:
    """Reads little-endian primitives from a binary file object"""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def read(self, n: int) -> bytes:
        """
        Read exactly ``n`` bytes

        Raises:
            EOFError: If the stream ends first
        """
        data = self.stream.read(n)
        if len(data) != n:
            raise EOFError(f"Expected to read {n} bytes, but got {len(data)} bytes.")
        return data

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))

    def read_u8(self) -> int:
        return self._unpack('<B')[0]

    def read_u16(self) -> int:
        return self._unpack('<H')[0]

    def read_u32(self) -> int:
        return self._unpack('<I')[0]

    def read_i16(self) -> int:
        return self._unpack('<h')[0]

    def read_i32(self) -> int:
        return self._unpack('<i')[0]

    def read_f32(self) -> float:
        return self._unpack('<f')[0]

    def read_floats(self, count: int, double: bool = False) -> np.ndarray:
        """
        Read ``count`` consecutive f32 (or f64) values

        Returns:
            Float64 array of shape (count,)
        """
        dtype = '<f8' if double else '<f4'
        data = self.read(count * np.dtype(dtype).itemsize)
        return np.frombuffer(data, dtype=dtype).astype(np.float64)

    def read_array(self, dtype: str, shape: tuple) -> np.ndarray:
        """Read a packed block of ``dtype`` values in bulk"""
        count = int(np.prod(shape))
        data = self.read(count * np.dtype(dtype).itemsize)
        return np.frombuffer(data, dtype=dtype).reshape(shape)

    def read_uint(self, width: IntWidth) -> int:
        return self._unpack(_UINT_FORMATS[width])[0]

    def skip(self, count: int) -> None:
        self.read(count)

    def read_string(self) -> str:
        """Read bytes up to (and consuming) the next zero byte"""
        buf = bytearray()
        while True:
            ch = self.read(1)
            if ch == b'\x00':
                break
            buf += ch
        return buf.decode('ascii')
