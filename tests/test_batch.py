"""BatchDecoderのテスト

複数ファイルの並列解凍、スキップ判定、進捗報告を検証する。
"""

from pathlib import Path

import pytest

from nlzss.batch import (
    BatchDecoder,
    BatchSummary,
    DecodeStatus,
    FileDecodeResult,
    output_path_for,
)
from nlzss.config import BatchConfig, NLZSSConfig, OutputConfig

# "ABABAB" に解凍される圧縮データ
VALID_DATA = b"\x11\x06\x00\x00" + b"\x20" + b"AB" + b"\x30\x01"
# 出力の先頭より前を参照する不正データ
BROKEN_DATA = b"\x11\x04\x00\x00" + b"\x80" + b"\x20\x00"


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """圧縮ファイルを配置したディレクトリ"""
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "a.lz").write_bytes(VALID_DATA)
    (src / "sub" / "b.lz").write_bytes(VALID_DATA)
    (src / "broken.lz").write_bytes(BROKEN_DATA)
    (src / "readme.txt").write_bytes(b"not compressed")
    return src


class TestDecodeFile:
    """BatchDecoder.decode_fileメソッドのテスト"""

    def test_decode_file_success(self, tmp_path: Path) -> None:
        """解凍結果がファイルに書き出される"""
        source = tmp_path / "data.lz"
        source.write_bytes(VALID_DATA)
        dest = tmp_path / "out" / "data.bin"

        result = BatchDecoder().decode_file(source, dest)

        assert result.is_success
        assert result.dest_path == dest
        assert dest.read_bytes() == b"ABABAB"
        assert result.bytes_before == len(VALID_DATA)
        assert result.bytes_after == 6

    def test_decode_file_failure(self, tmp_path: Path) -> None:
        """不正データは失敗になり出力は作られない"""
        source = tmp_path / "broken.lz"
        source.write_bytes(BROKEN_DATA)
        dest = tmp_path / "broken.bin"

        result = BatchDecoder().decode_file(source, dest)

        assert result.status == DecodeStatus.FAILED
        assert "範囲外" in result.message
        assert not dest.exists()

    def test_decode_file_skips_non_lzss11(self, tmp_path: Path) -> None:
        """LZSS11形式でないファイルはスキップされる"""
        source = tmp_path / "plain.txt"
        source.write_bytes(b"plain text")

        result = BatchDecoder().decode_file(source, tmp_path / "plain.dec")

        assert result.status == DecodeStatus.SKIPPED

    def test_decode_file_non_lzss11_fails_when_not_skipped(self, tmp_path: Path) -> None:
        """skip_non_lzss11がFalseの場合はFormatErrorで失敗する"""
        source = tmp_path / "plain.txt"
        source.write_bytes(b"plain text")
        config = NLZSSConfig(batch=BatchConfig(skip_non_lzss11=False))

        result = BatchDecoder(config).decode_file(source, tmp_path / "plain.dec")

        assert result.status == DecodeStatus.FAILED
        assert "LZSS11形式ではありません" in result.message

    @pytest.mark.parametrize(
        "overwrite, expected_status, expected_content",
        [
            pytest.param(False, DecodeStatus.SKIPPED, b"old", id="上書きなし"),
            pytest.param(True, DecodeStatus.SUCCESS, b"ABABAB", id="上書きあり"),
        ],
    )
    def test_decode_file_existing_output(
        self,
        tmp_path: Path,
        overwrite: bool,
        expected_status: DecodeStatus,
        expected_content: bytes,
    ) -> None:
        """既存の出力ファイルはoverwrite設定に従う"""
        source = tmp_path / "data.lz"
        source.write_bytes(VALID_DATA)
        dest = tmp_path / "data.bin"
        dest.write_bytes(b"old")
        config = NLZSSConfig(output=OutputConfig(overwrite=overwrite))

        result = BatchDecoder(config).decode_file(source, dest)

        assert result.status == expected_status
        assert dest.read_bytes() == expected_content


class TestDecodeDirectory:
    """BatchDecoder.decode_directoryメソッドのテスト"""

    def test_decode_directory_summary(self, source_dir: Path, tmp_path: Path) -> None:
        """ディレクトリ内の全ファイルが処理され集計される"""
        dest_dir = tmp_path / "out"

        summary = BatchDecoder(max_workers=2).decode_directory(source_dir, dest_dir)

        assert summary.total == 4
        assert summary.success == 2
        assert summary.failed == 1
        assert summary.skipped == 1
        assert (dest_dir / "a.lz.dec").read_bytes() == b"ABABAB"
        assert (dest_dir / "sub" / "b.lz.dec").read_bytes() == b"ABABAB"

    def test_decode_directory_not_recursive(self, source_dir: Path, tmp_path: Path) -> None:
        """recursive=Falseではサブディレクトリを処理しない"""
        dest_dir = tmp_path / "out"

        summary = BatchDecoder().decode_directory(source_dir, dest_dir, recursive=False)

        assert summary.total == 3
        assert not (dest_dir / "sub").exists()

    def test_decode_directory_pattern_and_exclude(
        self, source_dir: Path, tmp_path: Path
    ) -> None:
        """patternとexcludeで対象ファイルを絞り込める"""
        config = NLZSSConfig(batch=BatchConfig(pattern="*.lz"), exclude=["broken.lz"])

        summary = BatchDecoder(config).decode_directory(source_dir, tmp_path / "out")

        assert summary.total == 2
        assert summary.success == 2

    def test_decode_directory_progress_callback(
        self, source_dir: Path, tmp_path: Path
    ) -> None:
        """進捗コールバックがファイルごとに呼ばれる"""
        calls: list[tuple[int, int]] = []

        BatchDecoder(progress_callback=lambda c, t: calls.append((c, t))).decode_directory(
            source_dir, tmp_path / "out"
        )

        assert sorted(calls) == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_decode_directory_empty(self, tmp_path: Path) -> None:
        """空ディレクトリでは何も処理しない"""
        empty = tmp_path / "empty"
        empty.mkdir()

        summary = BatchDecoder().decode_directory(empty, tmp_path / "out")

        assert summary == BatchSummary()


class TestBatchDecoderInit:
    """BatchDecoderの初期化テスト"""

    def test_max_workers_from_config(self) -> None:
        """max_workers未指定の場合は設定値を使う"""
        config = NLZSSConfig(batch=BatchConfig(max_workers=3))
        assert BatchDecoder(config).max_workers == 3

    def test_max_workers_argument_wins(self) -> None:
        """引数のmax_workersが設定値より優先される"""
        config = NLZSSConfig(batch=BatchConfig(max_workers=3))
        assert BatchDecoder(config, max_workers=5).max_workers == 5

    def test_max_workers_default_positive(self) -> None:
        """デフォルトのワーカー数は1以上"""
        assert BatchDecoder().max_workers >= 1


class TestOutputPathFor:
    """output_path_for関数のテスト"""

    @pytest.mark.parametrize(
        "suffix, expected",
        [
            pytest.param(".dec", "data.lz.dec", id="デフォルト接尾辞"),
            pytest.param(".bin", "data.lz.bin", id="カスタム接尾辞"),
        ],
    )
    def test_output_path_for(self, suffix: str, expected: str) -> None:
        """接尾辞がファイル名に追加される"""
        config = NLZSSConfig(output=OutputConfig(suffix=suffix))
        assert output_path_for(Path("dir/data.lz"), config) == Path("dir") / expected


class TestFileDecodeResult:
    """FileDecodeResultのテスト"""

    def test_is_success(self) -> None:
        """SUCCESSのみis_successがTrueになる"""
        ok = FileDecodeResult(Path("a"), Path("b"), DecodeStatus.SUCCESS)
        ng = FileDecodeResult(Path("a"), None, DecodeStatus.FAILED)
        assert ok.is_success
        assert not ng.is_success


class TestDecodeDirectoryInPlace:
    """入力ディレクトリへ書き出す場合のテスト"""

    # 解凍結果 11 09 00 00 00 自体がLZSS11ヘッダーに見える圧縮データ
    HEADER_LIKE_DATA = b"\x11\x05\x00\x00" + b"\x00" + b"\x11\x09\x00\x00\x00"

    def test_decode_directory_twice_in_place(self, tmp_path: Path) -> None:
        """2回目の実行で前回の解凍結果を入力として扱わない"""
        (tmp_path / "a.bin").write_bytes(self.HEADER_LIKE_DATA)

        first = BatchDecoder().decode_directory(tmp_path, tmp_path)
        second = BatchDecoder().decode_directory(tmp_path, tmp_path)

        assert (tmp_path / "a.bin.dec").read_bytes() == b"\x11\x09\x00\x00\x00"
        assert first.success == 1
        assert second.total == 1
        assert second.failed == 0
        assert second.skipped == 1
        assert not (tmp_path / "a.bin.dec.dec").exists()

    def test_decode_directory_separate_dest_keeps_suffixed_files(self, tmp_path: Path) -> None:
        """出力先が別ディレクトリなら接尾辞付きのファイルも処理する"""
        src = tmp_path / "src"
        src.mkdir()
        (src / "data.dec").write_bytes(VALID_DATA)

        summary = BatchDecoder().decode_directory(src, tmp_path / "out")

        assert summary.success == 1
        assert (tmp_path / "out" / "data.dec.dec").read_bytes() == b"ABABAB"
