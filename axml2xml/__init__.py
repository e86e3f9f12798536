"""
Decoder for Android binary XML (AXML), as found in the AndroidManifest.xml
of APK files.
"""

from .errors import (
    DecodeError,
    InvalidStringIndex,
    InvalidStringOffset,
    ResParserError,
    TruncatedStream,
    UnrecognizedSentinelRegion,
)
from .parser import TAG_OPEN, TAG_SUPPORTS_CHILDREN, TAG_TEXT, AXMLParser, Tag
from .printer import AXMLPrinter, decode, decode_bytes, render
from .stringblock import StringBlock

__version__ = "0.1.0"
