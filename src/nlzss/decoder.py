"""LZSS11解凍アルゴリズムモジュール

Nintendo系LZ77派生形式（LZ11 / LZSS11）の圧縮データを解凍する。

LZSS11形式の構造:
- ヘッダー: タグ0x11(1) + 解凍後サイズ(3, リトルエンディアン)
- データ: フラグバイト(1) + 8トークンの繰り返し
  - フラグは最上位ビットから消費する
  - ビット0 = リテラル1バイト
  - ビット1 = バックリファレンス（先頭バイト上位4bitで長さの形式が決まる）
"""

from dataclasses import dataclass
from typing import Protocol

from nlzss.errors import OverrunError
from nlzss.header import parse_header
from nlzss.reader import ByteReader


class LZSS11DecoderProtocol(Protocol):
    """LZSS11解凍インターフェース

    LZSS11圧縮されたバイト列を解凍するためのプロトコル定義。
    """

    def decode(self, data: bytes) -> bytes:
        """LZSS11圧縮データを解凍する

        Args:
            data: LZSS11圧縮されたバイト列

        Returns:
            解凍されたバイト列

        Raises:
            LZSSError: 不正な圧縮データの場合
        """
        ...


@dataclass(frozen=True)
class BackReference:
    """バックリファレンス

    Attributes:
        count: コピーするバイト数（1以上）
        offset: 書き込み位置の直前バイトを0とした参照距離（0〜0xFFF）
    """

    count: int
    offset: int


@dataclass(frozen=True)
class DecodeResult:
    """埋め込みコンテナの解凍結果

    Attributes:
        data: 解凍されたバイト列
        bytes_consumed: コンテナが占めていた入力バイト数（ヘッダー含む）
    """

    data: bytes
    bytes_consumed: int


OFFSET_MASK: int = 0xFFF
"""参照距離フィールドのマスク（12bit）"""

SHORT_COUNT_BIAS: int = 0x11
"""制御値0x0（8bit長）の長さバイアス"""

LONG_COUNT_BIAS: int = 0x111
"""制御値0x1（16bit長）の長さバイアス"""


def read_backref(reader: ByteReader) -> BackReference:
    """バックリファレンスを1つ読み取る

    先頭バイト上位4bitの制御値で形式を判定し、必要なバイト数を
    1ブロックとして読んでからマスクでフィールドを取り出す。

    | 制御値 | バイト数 | 長さ |
    |---|---|---|
    | 0x0 | 3 | 8bit + 0x11 |
    | 0x1 | 4 | 16bit + 0x111 |
    | その他n | 2 | n + 1 |

    Args:
        reader: バックリファレンス先頭にあるリーダー

    Returns:
        読み取ったバックリファレンス

    Raises:
        TruncatedInputError: フィールドが途中で終わっている場合
    """
    control = reader.peek_u8("バックリファレンス") >> 4

    if control == 0:
        packed = int.from_bytes(reader.read_block(3, "バックリファレンス(24bit)"), "big")
        count = ((packed >> 12) & 0xFF) + SHORT_COUNT_BIAS
    elif control == 1:
        packed = int.from_bytes(reader.read_block(4, "バックリファレンス(32bit)"), "big")
        count = ((packed >> 12) & 0xFFFF) + LONG_COUNT_BIAS
    else:
        packed = int.from_bytes(reader.read_block(2, "バックリファレンス(16bit)"), "big")
        count = control + 1

    return BackReference(count=count, offset=packed & OFFSET_MASK)


def apply_backref(output: bytearray, ref: BackReference) -> None:
    """バックリファレンスを出力に展開する

    1バイトずつ追記するため、offset < count の自己重複コピーでは
    同じ参照内で追記したバイトが後続のコピー元になる。

    Raises:
        OverrunError: 参照先が出力の先頭より前になる場合
    """
    if ref.offset + 1 > len(output):
        raise OverrunError(
            f"出力範囲外の参照: 距離{ref.offset + 1}に対して出力は{len(output)}バイトです"
        )

    distance = ref.offset + 1
    for _ in range(ref.count):
        output.append(output[-distance])


class LZSS11Decoder:
    """LZSS11解凍クラス

    状態を持たないため、1つのインスタンスを複数のデータに使い回せる。
    """

    FLAG_BITS: int = 8
    """1フラグバイトあたりのトークン数"""

    def decode(self, data: bytes) -> bytes:
        """LZSS11圧縮データを解凍する

        解凍後サイズに達した時点で終了し、それ以降の入力は無視する。

        Args:
            data: LZSS11圧縮されたバイト列

        Returns:
            解凍されたバイト列

        Raises:
            FormatError: タグが0x11でない場合
            TruncatedInputError: 入力が途中で終わっている場合
            OverrunError: 出力が解凍後サイズを超える場合
        """
        return self.decode_at(data).data

    def decode_at(self, data: bytes, offset: int = 0) -> DecodeResult:
        """バイト列の途中に埋め込まれたLZSS11コンテナを解凍する

        Args:
            data: コンテナを含むバイト列
            offset: コンテナの開始位置

        Returns:
            解凍結果と消費した入力バイト数

        Raises:
            ValueError: offsetが負の場合
        """
        reader = ByteReader(data, offset)
        header = parse_header(reader)
        output = self._decode_tokens(reader, header.decompressed_size)
        return DecodeResult(data=output, bytes_consumed=reader.position - offset)

    def _decode_tokens(self, reader: ByteReader, final_size: int) -> bytes:
        """フラグとトークン列を解凍後サイズに達するまで処理する"""
        if final_size == 0:
            return b""

        output = bytearray()
        flags = 0
        flags_left = 0

        while True:
            # 最後のビットを消費済みなら次のフラグバイトを読む
            if flags_left > 1:
                flags = (flags << 1) & 0xFF
                flags_left -= 1
            else:
                flags = reader.read_u8("フラグバイト")
                flags_left = self.FLAG_BITS

            if flags & 0x80:
                ref = read_backref(reader)
                if len(output) + ref.count > final_size:
                    raise OverrunError(
                        f"解凍後サイズ超過: {len(output)}+{ref.count}バイトは"
                        f"宣言サイズ{final_size}バイトを超えます (位置: {reader.position})"
                    )
                apply_backref(output, ref)
            else:
                output.append(reader.read_u8("リテラル"))

            if len(output) == final_size:
                return bytes(output)


def decompress(data: bytes) -> bytes:
    """LZSS11圧縮データを解凍する

    Args:
        data: LZSS11圧縮されたバイト列

    Returns:
        解凍されたバイト列
    """
    return LZSS11Decoder().decode(data)
