class ResParserError(Exception):
    """Exception for the parsers"""

    pass


# Callers outside the parser only need to catch this one.
DecodeError = ResParserError


class TruncatedStream(ResParserError):
    """
    Fewer bytes were available than a field or record requires.
    """

    def __init__(self, offset: int, wanted: int, got: int = 0) -> None:
        self.offset = offset
        self.wanted = wanted
        self.got = got
        super().__init__(
            "Unexpected end of stream: wanted {} bytes, got {}. Offset={}".format(
                wanted, got, offset
            )
        )


class InvalidStringOffset(ResParserError):
    """
    The offset table of the string pool does not match the string data.
    """

    def __init__(self, offset: int, expected: int) -> None:
        self.offset = offset
        self.expected = expected
        super().__init__(
            "Invalid string offset={:#x}, expected {:#x}".format(offset, expected)
        )


class InvalidStringIndex(ResParserError):
    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            "String index {:#x} is outside of the string pool (size={})".format(
                index, size
            )
        )


class UnrecognizedSentinelRegion(ResParserError):
    """
    Reserved for stricter validation of the regions skipped by the
    sentinel scanner. Never raised at the moment.
    """

    pass
