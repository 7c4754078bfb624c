"""Byte sinks used as packet encoder output"""

import abc
import typing

from hat import util


class Sink(abc.ABC):
    """Byte oriented output

    Implementations provide `write`. Single byte and two byte big-endian
    integer writes are built on top of it.

    """

    @abc.abstractmethod
    def write(self, data: util.Bytes):
        """Append raw bytes"""

    def write_u8(self, value: int):
        """Append single byte"""
        if value < 0 or value > 0xff:
            raise ValueError('unsupported one byte integer value')

        self.write(bytes([value]))

    def write_u16(self, value: int):
        """Append two byte big-endian integer"""
        if value < 0 or value > 0xffff:
            raise ValueError('unsupported two byte integer value')

        self.write(bytes([(value >> 8) & 0xff, value & 0xff]))


class BytesSink(Sink):
    """Growable in-memory buffer"""

    def __init__(self):
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        """Buffered data"""
        return bytes(self._data)

    def write(self, data: util.Bytes):
        self._data.extend(data)

    def clear(self):
        self._data.clear()


class StreamSink(Sink):
    """Writable binary stream adapter

    Argument `stream` can be any object providing `write` of bytes-like
    objects (e.g. `io.BytesIO`, `io.BufferedWriter` or file object returned
    by `socket.socket.makefile` in ``'wb'`` mode). Stream errors are not
    handled.

    """

    def __init__(self, stream: typing.BinaryIO):
        self._stream = stream

    @property
    def stream(self) -> typing.BinaryIO:
        return self._stream

    def write(self, data: util.Bytes):
        self._stream.write(data)

    def flush(self):
        self._stream.flush()
