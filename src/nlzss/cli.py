"""CLI entry point for nlzss."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from nlzss import __version__
from nlzss.batch import BatchDecoder, DecodeStatus, output_path_for
from nlzss.config import ConfigError, NLZSSConfig, get_default_config, load_config
from nlzss.decoder import LZSS11Decoder
from nlzss.errors import LZSSError
from nlzss.header import HEADER_SIZE, MAGIC, read_header
from nlzss.logger import DecodeLogger, LogConfig, VerboseLevel
from nlzss.types import ExitCode

app = typer.Typer(help="LZSS11（LZ11）圧縮ファイルを解凍するCLIツール")
console = Console()


def _format_size(size_bytes: int) -> str:
    """バイト数を人間が読みやすい形式に変換する"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def _load_config_or_exit(config_path: Path | None) -> NLZSSConfig:
    """設定ファイルを読み込む。失敗した場合は終了する"""
    if config_path is None:
        return get_default_config()
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e


def _verbose_level(verbose: int, quiet: bool) -> VerboseLevel:
    if quiet:
        return VerboseLevel.QUIET
    return VerboseLevel(min(verbose, VerboseLevel.DEBUG))


@app.command()
def decompress(
    input_path: Annotated[Path, typer.Argument(help="LZSS11圧縮ファイルパス")],
    output: Annotated[Path | None, typer.Option("-o", "--output", help="出力ファイルパス")] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    force: Annotated[bool, typer.Option("-f", "--force", help="既存ファイルを上書き")] = False,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="エラー以外を出力しない")] = False,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """LZSS11ファイルを解凍する"""
    config = _load_config_or_exit(config_path)

    if not input_path.is_file():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    if output is None:
        output = output_path_for(input_path, config)

    log_config = LogConfig(verbose_level=_verbose_level(verbose, quiet), log_file=log_file)
    with DecodeLogger(log_config) as logger:
        if output.exists() and not (force or config.output.overwrite):
            logger.error(f"出力先が既に存在します: {output} (--forceで上書き)")
            raise typer.Exit(ExitCode.ERROR)

        try:
            data = input_path.read_bytes()
            result = LZSS11Decoder().decode_at(data)
        except (LZSSError, OSError) as e:
            logger.error(f"{input_path}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e

        logger.debug(
            f"入力: {len(data)}バイト, コンテナ: {result.bytes_consumed}バイト, "
            f"解凍後: {len(result.data)}バイト"
        )
        trailing = len(data) - result.bytes_consumed
        if trailing > 0:
            logger.warning(f"コンテナの後ろに{trailing}バイトの未使用データがあります")

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(result.data)
        except OSError as e:
            logger.error(f"{output}: {e}")
            raise typer.Exit(ExitCode.ERROR) from e

        logger.info(f"解凍完了: {output} ({_format_size(len(result.data))})")
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def info(
    input_path: Annotated[Path, typer.Argument(help="解析対象ファイルパス")],
) -> None:
    """LZSS11ファイルのヘッダー情報を表示する"""
    if not input_path.is_file():
        console.print(f"[red]Error: ファイルが見つかりません: {input_path}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    data = input_path.read_bytes()
    try:
        header = read_header(data)
    except LZSSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT) from e

    table = Table(title="LZSS11 Info")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Tag", f"0x{MAGIC:02x}")
    table.add_row("Compressed Size", _format_size(len(data)))
    table.add_row("Decompressed Size", _format_size(header.decompressed_size))
    if header.decompressed_size > 0:
        ratio = (len(data) - HEADER_SIZE) / header.decompressed_size
        table.add_row("Ratio", f"{ratio:.1%}")

    try:
        LZSS11Decoder().decode(data)
        table.add_row("Status", "OK")
        exit_code = ExitCode.SUCCESS
    except LZSSError as e:
        table.add_row("Status", f"[red]{e}[/red]")
        exit_code = ExitCode.ERROR

    console.print(table)
    raise typer.Exit(exit_code)


@app.command()
def batch(
    input_dir: Annotated[Path, typer.Argument(help="圧縮ファイルのディレクトリ")],
    output_dir: Annotated[
        Path | None, typer.Option("-o", "--output", help="出力ディレクトリ")
    ] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    workers: Annotated[int | None, typer.Option(min=1, help="並列ワーカー数")] = None,
    recursive: Annotated[bool, typer.Option(help="サブディレクトリも処理")] = True,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="エラー以外を出力しない")] = False,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """ディレクトリ内のLZSS11ファイルをまとめて解凍する"""
    config = _load_config_or_exit(config_path)

    if not input_dir.is_dir():
        console.print(f"[red]Error: ディレクトリを指定してください: {input_dir}[/red]")
        raise typer.Exit(ExitCode.INVALID_INPUT)

    if output_dir is None:
        output_dir = input_dir

    log_config = LogConfig(verbose_level=_verbose_level(verbose, quiet), log_file=log_file)
    with DecodeLogger(log_config) as logger:
        decoder = BatchDecoder(config, max_workers=workers)
        logger.debug(f"ワーカー数: {decoder.max_workers}")
        summary = decoder.decode_directory(input_dir, output_dir, recursive=recursive)

        for result in sorted(summary.results, key=lambda r: r.source_path):
            logger.log_decode(result.source_path, result.dest_path, result.status.value)
            if result.status == DecodeStatus.FAILED:
                logger.error(f"{result.source_path}: {result.message}")
            elif result.message:
                logger.debug(f"  > {result.message}")

        logger.log_summary(summary)

    raise typer.Exit(ExitCode.ERROR if summary.failed else ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"nlzss {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """nlzss CLI - LZSS11圧縮ファイルを解凍"""
    pass
