"""バッチ解凍モジュール

ディレクトリ内の複数のLZSS11ファイルを並列に解凍するBatchDecoderを提供する。
各ファイルの解凍は互いに独立しており、1ファイルの失敗は他に影響しない。
解凍は決定的な処理のため、失敗したファイルのリトライは行わない。
"""

import fnmatch
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from threading import Lock

from nlzss.config import NLZSSConfig, get_default_config
from nlzss.decoder import LZSS11Decoder, LZSS11DecoderProtocol
from nlzss.errors import LZSSError
from nlzss.header import is_lzss11


class DecodeStatus(Enum):
    """解凍ステータス"""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FileDecodeResult:
    """単一ファイルの解凍結果

    Attributes:
        source_path: 圧縮ファイルのパス
        dest_path: 解凍先ファイルのパス（スキップ・失敗時はNone）
        status: 解凍ステータス
        message: 追加メッセージ（エラー詳細等）
        bytes_before: 圧縮ファイルのサイズ（バイト）
        bytes_after: 解凍後のサイズ（バイト）
    """

    source_path: Path
    dest_path: Path | None
    status: DecodeStatus
    message: str = ""
    bytes_before: int = 0
    bytes_after: int = 0

    @property
    def is_success(self) -> bool:
        """解凍が成功したかどうかを返す"""
        return self.status == DecodeStatus.SUCCESS


@dataclass
class BatchSummary:
    """バッチ解凍サマリー

    結果を蓄積するためmutableとして定義する。

    Attributes:
        total: 処理対象の総ファイル数
        success: 解凍成功数
        failed: 解凍失敗数
        skipped: スキップ数
        results: 個々の解凍結果のリスト
    """

    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[FileDecodeResult] = field(default_factory=list)


# 進捗コールバックの型エイリアス
ProgressCallback = Callable[[int, int], None]


class BatchDecoder:
    """バッチ解凍クラス

    Attributes:
        config: 出力・バッチ設定
        decoder: 使用するLZSS11デコーダー
        max_workers: 最大ワーカー数
        progress_callback: 進捗報告用コールバック
    """

    def __init__(
        self,
        config: NLZSSConfig | None = None,
        decoder: LZSS11DecoderProtocol | None = None,
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """BatchDecoderを初期化する

        Args:
            config: 設定（Noneの場合はデフォルト設定を使用）
            decoder: デコーダー（Noneの場合はLZSS11Decoderを使用）
            max_workers: 最大ワーカー数（Noneの場合は設定値、未設定ならCPUコア数）
            progress_callback: 進捗報告用コールバック関数
        """
        self.config = config or get_default_config()
        self.decoder = decoder or LZSS11Decoder()
        self.max_workers = max_workers or self.config.batch.max_workers or (os.cpu_count() or 1)
        self.progress_callback = progress_callback

    def decode_file(self, source: Path, dest: Path) -> FileDecodeResult:
        """単一ファイルを解凍して書き出す

        Args:
            source: 圧縮ファイルのパス
            dest: 解凍先ファイルのパス

        Returns:
            解凍結果
        """
        if dest.exists() and not self.config.output.overwrite:
            return FileDecodeResult(
                source_path=source,
                dest_path=None,
                status=DecodeStatus.SKIPPED,
                message=f"出力先が既に存在します: {dest}",
            )

        try:
            data = source.read_bytes()
        except OSError as e:
            return FileDecodeResult(
                source_path=source,
                dest_path=None,
                status=DecodeStatus.FAILED,
                message=f"読み込みに失敗しました: {e}",
            )

        if self.config.batch.skip_non_lzss11 and not is_lzss11(data):
            return FileDecodeResult(
                source_path=source,
                dest_path=None,
                status=DecodeStatus.SKIPPED,
                message="LZSS11形式ではありません",
                bytes_before=len(data),
            )

        try:
            decoded = self.decoder.decode(data)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(decoded)
        except (LZSSError, OSError) as e:
            return FileDecodeResult(
                source_path=source,
                dest_path=None,
                status=DecodeStatus.FAILED,
                message=str(e),
                bytes_before=len(data),
            )

        return FileDecodeResult(
            source_path=source,
            dest_path=dest,
            status=DecodeStatus.SUCCESS,
            bytes_before=len(data),
            bytes_after=len(decoded),
        )

    def decode_files(self, files: list[tuple[Path, Path]]) -> BatchSummary:
        """複数ファイルを並列に解凍する

        Args:
            files: (圧縮ファイルパス, 解凍先パス)のタプルのリスト

        Returns:
            解凍結果のサマリー
        """
        summary = BatchSummary(total=len(files))
        completed_count = 0
        lock = Lock()

        def process_file(source: Path, dest: Path) -> FileDecodeResult:
            """ファイルを処理し、進捗を報告する"""
            nonlocal completed_count
            result = self.decode_file(source, dest)

            with lock:
                completed_count += 1
                if self.progress_callback:
                    self.progress_callback(completed_count, summary.total)

            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(process_file, source, dest) for source, dest in files]

            for future in as_completed(futures):
                result = future.result()
                summary.results.append(result)

                if result.status == DecodeStatus.SUCCESS:
                    summary.success += 1
                elif result.status == DecodeStatus.SKIPPED:
                    summary.skipped += 1
                else:
                    summary.failed += 1

        return summary

    def decode_directory(
        self,
        source_dir: Path,
        dest_dir: Path,
        recursive: bool = True,
    ) -> BatchSummary:
        """ディレクトリ内のファイルを解凍する

        ディレクトリ構造を保持したまま、設定の接尾辞を付けたパスに書き出す。
        excludeパターンに一致するファイルは対象外とする。
        出力先が入力ディレクトリ配下の場合、接尾辞付きのファイルも対象外とする。

        Args:
            source_dir: 圧縮ファイルのディレクトリ
            dest_dir: 解凍先ディレクトリ
            recursive: サブディレクトリも再帰的に処理するか

        Returns:
            解凍結果のサマリー
        """
        files: list[tuple[Path, Path]] = []
        # 出力先が入力ディレクトリ配下なら、前回の解凍結果を入力として拾わない
        skip_outputs = dest_dir.resolve().is_relative_to(source_dir.resolve())
        pattern = f"**/{self.config.batch.pattern}" if recursive else self.config.batch.pattern

        for source_file in sorted(source_dir.glob(pattern)):
            if not source_file.is_file():
                continue

            if skip_outputs and source_file.name.endswith(self.config.output.suffix):
                continue

            relative_path = source_file.relative_to(source_dir)
            if self._is_excluded(relative_path):
                continue

            dest_file = dest_dir / relative_path
            files.append((source_file, output_path_for(dest_file, self.config)))

        return self.decode_files(files)

    def _is_excluded(self, relative_path: Path) -> bool:
        """excludeパターンに一致するかを判定する"""
        path_str = relative_path.as_posix()
        return any(fnmatch.fnmatch(path_str, pattern) for pattern in self.config.exclude)


def output_path_for(source: Path, config: NLZSSConfig) -> Path:
    """圧縮ファイルに対応する解凍先パスを決める

    接尾辞を元のファイル名に追加する（例: data.bin -> data.bin.dec）。
    """
    return source.with_name(source.name + config.output.suffix)
