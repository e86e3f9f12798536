from loguru import logger

from .cursor import ByteCursor

# RES_XML_TYPE chunk with a header size of 8
AXML_MAGIC = 0x00080003

# Number of 32 bit words before the string offsets
PREAMBLE_WORDS = 9


class AXMLHeader:
    """
    The fixed preamble of an AXML file: nine 32 bit words.

    Only the number of strings in the string pool is used. The other values
    are read to move the cursor and are kept for inspection only.

    It will throw a [TruncatedStream][axml2xml.errors.TruncatedStream] if
    less than 36 bytes are available.
    """

    SIZE = PREAMBLE_WORDS * 4

    def __init__(self, buff: ByteCursor) -> None:
        self.start = buff.tell()
        words = [buff.read_u32() for _ in range(PREAMBLE_WORDS)]
        (
            self.magic,
            self.file_size,
            self.pool_type,
            self.pool_size,
            self.string_count,
            self.style_count,
            self.pool_flags,
            self.strings_start,
            self.styles_start,
        ) = words

        for i, v in enumerate(words):
            logger.debug(f"preamble[{i}]: 0x{v:08x}")

        if self.magic != AXML_MAGIC:
            logger.warning(
                "AXML file has an unusual magic: 0x{:08x}. "
                "Trying to parse it anyways.".format(self.magic)
            )

    def get_string_count(self) -> int:
        """
        Number of entries in the string pool
        """
        return self.string_count

    def __repr__(self):
        return "<AXMLHeader magic='0x{:08x}' file_size='{}' strings='{}'>".format(
            self.magic, self.file_size, self.string_count
        )
