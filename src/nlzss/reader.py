"""入力バッファ読み取りモジュール

圧縮データを先頭から順に読み取るカーソルを提供する。
終端を越える読み取りはすべてTruncatedInputErrorになる。
"""

from nlzss.errors import TruncatedInputError


class ByteReader:
    """境界チェック付きバイト列リーダー

    入力バッファは変更せず、読み取り位置のみを進める。

    使用例:
        >>> reader = ByteReader(b"\\x11\\x08\\x00\\x00")
        >>> reader.read_u8("タグ")
        17
    """

    def __init__(self, data: bytes, position: int = 0) -> None:
        """リーダーを初期化する

        Args:
            data: 読み取り対象のバイト列
            position: 読み取り開始位置

        Raises:
            ValueError: positionが負の場合
        """
        if position < 0:
            raise ValueError(f"読み取り開始位置は0以上である必要があります: {position}")
        self._data = bytes(data)
        self._position = position

    @property
    def position(self) -> int:
        """現在の読み取り位置"""
        return self._position

    @property
    def remaining(self) -> int:
        """未読のバイト数"""
        return max(len(self._data) - self._position, 0)

    def peek_u8(self, field: str) -> int:
        """読み取り位置を進めずに1バイト参照する"""
        if self._position >= len(self._data):
            raise TruncatedInputError(self._position, 1, field)
        return self._data[self._position]

    def read_u8(self, field: str) -> int:
        """1バイト読み取る

        Args:
            field: エラーメッセージに使うフィールド名

        Returns:
            読み取ったバイト値

        Raises:
            TruncatedInputError: 入力が終端に達している場合
        """
        value = self.peek_u8(field)
        self._position += 1
        return value

    def read_block(self, size: int, field: str) -> bytes:
        """固定長のブロックを一度に読み取る

        Args:
            size: 読み取るバイト数
            field: エラーメッセージに使うフィールド名

        Returns:
            読み取ったバイト列

        Raises:
            TruncatedInputError: sizeバイトが揃っていない場合
        """
        if self.remaining < size:
            raise TruncatedInputError(self._position, size, field)
        block = self._data[self._position : self._position + size]
        self._position += size
        return block
