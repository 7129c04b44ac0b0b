"""LZSS11解凍エラー定義モジュール

不正または不完全なLZSS11データを検出した際に送出される例外を定義する。
すべての例外はValueErrorを継承するため、呼び出し側はValueErrorで一括捕捉できる。
"""


class LZSSError(ValueError):
    """LZSS11解凍エラーの基底クラス"""

    pass


class FormatError(LZSSError):
    """LZSS11形式ではないデータ（先頭バイトが0x11でない）"""

    def __init__(self, tag: int) -> None:
        self.tag = tag
        super().__init__(f"LZSS11形式ではありません: 先頭バイトが0x{tag:02x}です（期待値: 0x11）")


class TruncatedInputError(LZSSError):
    """必要なバイト数を読み取る前に入力が終端に達した

    Attributes:
        position: 読み取りを開始した入力位置
        needed: 必要だったバイト数
        field: 読み取り対象のフィールド名
    """

    def __init__(self, position: int, needed: int, field: str) -> None:
        self.position = position
        self.needed = needed
        self.field = field
        super().__init__(
            f"不完全な圧縮データ: {field}の読み取りに{needed}バイト必要です (位置: {position})"
        )


class OverrunError(LZSSError):
    """出力が宣言サイズを超える、または存在しない出力を参照した"""

    pass
