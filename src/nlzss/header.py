"""LZSS11ヘッダー解析モジュール

先頭4バイト（タグ0x11 + 24bitリトルエンディアンの解凍後サイズ）を解析する。
"""

from dataclasses import dataclass

from nlzss.errors import FormatError
from nlzss.reader import ByteReader

MAGIC: int = 0x11
"""LZSS11形式のタグバイト"""

HEADER_SIZE: int = 4
"""ヘッダーサイズ: タグ(1) + 解凍後サイズ(3)"""


@dataclass(frozen=True)
class LZSS11Header:
    """LZSS11ヘッダー情報

    Attributes:
        decompressed_size: 解凍後のサイズ（バイト）
    """

    decompressed_size: int


def parse_header(reader: ByteReader) -> LZSS11Header:
    """リーダーからヘッダーを読み取る

    タグが不正な場合はサイズフィールドを読む前に失敗する。

    Args:
        reader: 先頭位置にあるリーダー

    Returns:
        解析したヘッダー情報

    Raises:
        FormatError: タグが0x11でない場合
        TruncatedInputError: ヘッダーが4バイトに満たない場合
    """
    tag = reader.read_u8("ヘッダータグ")
    if tag != MAGIC:
        raise FormatError(tag)

    size = int.from_bytes(reader.read_block(3, "解凍後サイズ"), "little")
    return LZSS11Header(decompressed_size=size)


def read_header(data: bytes) -> LZSS11Header:
    """バイト列の先頭からヘッダーを読み取る"""
    return parse_header(ByteReader(data))


def is_lzss11(data: bytes) -> bool:
    """LZSS11形式らしいデータかどうかを判定する

    ヘッダー長とタグのみを確認し、例外は送出しない。

    Args:
        data: 判定対象のバイト列

    Returns:
        LZSS11形式と思われる場合True
    """
    return len(data) >= HEADER_SIZE and data[0] == MAGIC
