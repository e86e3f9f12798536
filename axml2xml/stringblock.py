from typing import List

from loguru import logger

from .cursor import ByteCursor
from .errors import InvalidStringIndex, InvalidStringOffset


class StringBlock:
    """
    StringBlock is the string pool of an AXML file.
    It contains all strings, which are referenced by their index everywhere
    else in the file.

    The pool starts with a table of byte offsets, one per string, followed by
    the UTF-16 string data. Every string is stored as a 16 bit length (in
    UTF-16 units), the characters, and a 16 bit NUL.
    """

    def __init__(self, buff: ByteCursor, string_count: int) -> None:
        """
        :param buff: cursor set to the start of the offset table
        :param string_count: number of strings, as read from the preamble
        :raises InvalidStringOffset: if the offsets do not match the data
        :raises TruncatedStream: if the pool is cut off
        """
        self.stringCount = string_count
        logger.debug(f"stringCount: {self.stringCount}")

        self.m_stringOffsets = []
        for i in range(self.stringCount):
            self.m_stringOffsets.append(buff.read_u32())
            logger.debug(f"m_stringOffsets[{i}]: {self.m_stringOffsets[i]}")

        # The offset table was serialized from a hash table, so the strings
        # are read in the order of their offsets and not of their index.
        by_offset = {}
        m_lengths = {}
        consumed = 0
        for offset in sorted(self.m_stringOffsets):
            if offset != consumed:
                raise InvalidStringOffset(offset, consumed)
            str_len = buff.read_u16()
            data = buff.read(str_len * 2)
            # NUL terminator, not stored
            buff.read_u16()
            by_offset[offset] = self._decode16(data)
            m_lengths[offset] = str_len
            consumed += self._entry_size(str_len)

        self.m_strings = [by_offset[offset] for offset in self.m_stringOffsets]
        self.m_lengths = [m_lengths[offset] for offset in self.m_stringOffsets]
        self.m_charsize = consumed

        padding = buff.align(4)
        logger.debug(f"string data: {consumed} bytes, {padding} bytes of padding")

    @staticmethod
    def _entry_size(str_len: int) -> int:
        # length prefix + characters + NUL
        return 2 + str_len * 2 + 2

    @staticmethod
    def _decode16(data: bytes) -> str:
        """
        Decode UTF-16LE data, unpaired surrogates are replaced with U+FFFD
        """
        return data.decode('utf-16-le', 'replace')

    def __repr__(self):
        return "<StringPool #strings={}, size={}>".format(
            self.stringCount, self.m_charsize
        )

    def __getitem__(self, idx: int) -> str:
        """
        Returns the string at the index in the string table

        :raises InvalidStringIndex: if the index is out of range
        """
        return self.getString(idx)

    def __len__(self):
        return self.stringCount

    def __iter__(self):
        return iter(self.m_strings)

    def is_valid_index(self, idx: int) -> bool:
        return 0 <= idx < self.stringCount

    def getString(self, idx: int) -> str:
        """
        Return the string at the index in the string table

        :param idx: index in the string table
        :return: the string
        """
        if not self.is_valid_index(idx):
            raise InvalidStringIndex(idx, self.stringCount)
        return self.m_strings[idx]

    @property
    def offsets(self) -> List[int]:
        """
        The offset table in pool order, as stored in the file
        """
        return list(self.m_stringOffsets)

    def byte_length(self, idx: int) -> int:
        """
        Number of bytes the string at `idx` occupies in the string data,
        including its length prefix and terminator.
        """
        if not self.is_valid_index(idx):
            raise InvalidStringIndex(idx, self.stringCount)
        return self._entry_size(self.m_lengths[idx])

    def show(self, file=None) -> None:
        """
        Print some information about the string table

        :param file: text stream to print to, stdout by default
        """
        print(
            "StringBlock(stringsCount=0x%x, size=0x%x)"
            % (self.stringCount, self.m_charsize),
            file=file,
        )

        if self.stringCount > 0:
            print(file=file)
            print("String Table: ", file=file)
            for i, s in enumerate(self):
                print("{:08d} {:08x} {}".format(i, self.m_stringOffsets[i], repr(s)), file=file)
