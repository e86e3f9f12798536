import io
from struct import unpack
from typing import BinaryIO, Union

from loguru import logger

from .errors import TruncatedStream

# Marks the end of every region of unknown length
SENTINEL = 0xFFFFFFFF


class ByteCursor:
    """
    Forward-only reader over a binary stream.

    Keeps track of the absolute position and supports looking ahead without
    consuming, so the wrapped stream only needs a `read()` method. Every short
    read raises a [TruncatedStream][axml2xml.errors.TruncatedStream].
    """

    def __init__(self, buff: Union[BinaryIO, bytes, bytearray]) -> None:
        if isinstance(buff, (bytes, bytearray, memoryview)):
            buff = io.BytesIO(bytes(buff))
        self.buff = buff
        self.pos = 0
        self._pending = b""

    def tell(self) -> int:
        return self.pos

    def _fill(self, size: int) -> None:
        while len(self._pending) < size:
            chunk = self.buff.read(size - len(self._pending))
            if not chunk:
                break
            self._pending += chunk

    def read(self, size: int) -> bytes:
        """
        Read exactly `size` bytes

        :raises TruncatedStream: if the stream ends before
        """
        self._fill(size)
        if len(self._pending) < size:
            raise TruncatedStream(self.pos, size, len(self._pending))
        data, self._pending = self._pending[:size], self._pending[size:]
        self.pos += size
        return data

    def peek(self, size: int) -> bytes:
        """
        Return up to `size` bytes without consuming them.
        Fewer bytes are returned at the end of the stream.
        """
        self._fill(size)
        return self._pending[:size]

    def skip(self, size: int) -> None:
        self.read(size)

    def read_u16(self) -> int:
        return unpack('<H', self.read(2))[0]

    def read_u32(self) -> int:
        return unpack('<L', self.read(4))[0]

    def peek_u32(self) -> Union[int, None]:
        """
        Look at the next word, or `None` if less than 4 bytes are left.
        """
        data = self.peek(4)
        if len(data) < 4:
            return None
        return unpack('<L', data)[0]

    def align(self, boundary: int = 4) -> int:
        """
        Discard filler bytes up to the next multiple of `boundary`.

        :returns: the number of discarded bytes
        """
        padding = -self.pos % boundary
        if padding:
            self.skip(padding)
        return padding

    def __repr__(self):
        return "<ByteCursor pos='0x{:08x}'>".format(self.pos)


def skip_to_sentinel(cursor: ByteCursor) -> int:
    """
    Read words until one equals the sentinel `0xFFFFFFFF`.

    :raises TruncatedStream: if the stream ends first
    :returns: the number of bytes skipped, including the sentinel
    """
    start = cursor.tell()
    while cursor.read_u32() != SENTINEL:
        pass
    return cursor.tell() - start


def skip_past_sentinel(cursor: ByteCursor, limit: int = 0) -> int:
    """
    Skip to the next sentinel and then over all the sentinels that directly
    follow it.

    The words after the first sentinel are only looked at and consumed
    while they are sentinels as well. The end of the stream ends the run.

    :param cursor: the cursor to advance
    :param limit: stop after this many sentinels (including the first one),
                  0 means no limit
    :returns: the number of sentinels consumed
    """
    start = cursor.tell()
    skip_to_sentinel(cursor)

    n = 1
    while limit == 0 or n < limit:
        if cursor.peek_u32() != SENTINEL:
            break
        cursor.skip(4)
        n += 1

    logger.debug(f"skipped {n} sentinels, {cursor.tell() - start} bytes")
    return n
