"""ログ出力のインターフェース定義

このモジュールは、nlzssの解凍処理のログ出力を定義する。
VerboseLevel (詳細ログレベル)に応じた出力制御を行い、
CLIやバッチ解凍の結果をユーザーにわかりやすく表示するために使用される。
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from nlzss.batch import BatchSummary


class VerboseLevel(IntEnum):
    """詳細ログレベル

    ログ出力の詳細度を制御するための列挙型。
    QUIET: エラーのみ出力
    NORMAL: 結果とサマリ出力
    VERBOSE: 解凍ファイル一覧も出力（-vオプション）
    DEBUG: ヘッダー等の内部情報も出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
        use_emoji: emoji表示を使用するか
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None
    use_emoji: bool = True


class DecodeLogger:
    """解凍ログ出力クラス

    VerboseLevelに応じてメッセージのフィルタリングを行い、
    ログファイルが指定されていればすべてのメッセージを書き出す。

    使用例:
        >>> logger = DecodeLogger(LogConfig(verbose_level=VerboseLevel.VERBOSE))
        >>> logger.info("解凍を開始します")
        >>> logger.verbose("data.bin を処理中")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        """ロガーを初期化する

        Args:
            config: ログ設定
        """
        self._config = config
        self._log_file: TextIO | None = None
        if config.log_file:
            # クラス自体がコンテキストマネージャとして動作し、__exit__でファイルを閉じる
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115

    def __enter__(self) -> DecodeLogger:
        return self

    def __exit__(self, *args: object) -> None:
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        """現在のログ設定"""
        return self._config

    def _print(self, message: str, file: TextIO | None = None) -> None:
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        """ファイルにログ出力する

        Args:
            level: ログレベル文字列
            message: 出力するメッセージ
        """
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._ANSI_ESCAPE_PATTERN.sub("", message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）"""
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）"""
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）"""
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に出力）"""
        self._print(f"エラー: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def warning(self, message: str) -> None:
        """警告メッセージを出力する（QUIET以上）"""
        if self._config.verbose_level > VerboseLevel.QUIET:
            self._print(f"警告: {message}")
        self._log_to_file("WARNING", message)

    def log_decode(self, source: Path, dest: Path | None, status: str) -> None:
        """ファイル解凍をログする（VERBOSE以上）

        Args:
            source: 圧縮ファイルパス
            dest: 解凍先ファイルパス（スキップ・失敗時はNone）
            status: 解凍ステータス
        """
        dest_name = dest.name if dest else "-"
        self.verbose(f"解凍: {source.name} -> {dest_name} [{status}]")

    def log_summary(self, summary: BatchSummary) -> None:
        """バッチ解凍のサマリを出力する（NORMAL以上）

        Args:
            summary: バッチ解凍の集計結果
        """
        if summary.failed == 0:
            mark = "✅" if self._config.use_emoji else "[OK]"
        else:
            mark = "❌" if self._config.use_emoji else "[NG]"
        self.info(f"{mark} Decompression complete!")
        self.info(
            f"   Total: {summary.total}  Success: {summary.success}  "
            f"Skipped: {summary.skipped}  Failed: {summary.failed}"
        )
