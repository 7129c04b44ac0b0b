"""nlzss - LZSS11 (LZ11) decompressor library and CLI tool."""

from nlzss.decoder import (
    BackReference,
    DecodeResult,
    LZSS11Decoder,
    LZSS11DecoderProtocol,
    decompress,
)
from nlzss.errors import FormatError, LZSSError, OverrunError, TruncatedInputError
from nlzss.header import LZSS11Header, is_lzss11, read_header

__version__ = "0.1.0"

__all__ = [
    "BackReference",
    "DecodeResult",
    "FormatError",
    "LZSS11Decoder",
    "LZSS11DecoderProtocol",
    "LZSS11Header",
    "LZSSError",
    "OverrunError",
    "TruncatedInputError",
    "decompress",
    "is_lzss11",
    "read_header",
]
