"""Configuration module for nlzss."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass

@dataclass(frozen=True)
class OutputConfig:
    """出力ファイル設定"""

    suffix: str = ".dec"
    overwrite: bool = False

@dataclass(frozen=True)
class BatchConfig:
    """バッチ解凍設定"""

    pattern: str = "*"
    max_workers: int | None = None
    skip_non_lzss11: bool = True

@dataclass(frozen=True)
class NLZSSConfig:
    """ルート設定"""

    output: OutputConfig = field(default_factory=OutputConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    exclude: list[str] = field(default_factory=list)

def load_config(path: Path) -> NLZSSConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        NLZSSConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    exclude = data.get("exclude", default.exclude)
    if not isinstance(exclude, list):
        exclude = default.exclude

    return NLZSSConfig(
        output=_merge_output_config(data.get("output", {}), default.output),
        batch=_merge_batch_config(data.get("batch", {}), default.batch),
        exclude=[str(pattern) for pattern in exclude],
    )

def get_default_config() -> NLZSSConfig:
    """デフォルト設定を取得する"""
    return NLZSSConfig()

def _merge_output_config(data: dict[str, Any], default: OutputConfig) -> OutputConfig:
    """出力設定をマージする"""
    if not isinstance(data, dict):
        return default
    return OutputConfig(
        suffix=_get_str(data, "suffix", default.suffix),
        overwrite=_get_bool(data, "overwrite", default.overwrite),
    )

def _merge_batch_config(data: dict[str, Any], default: BatchConfig) -> BatchConfig:
    """バッチ設定をマージする"""
    if not isinstance(data, dict):
        return default
    max_workers = data.get("max_workers", default.max_workers)
    if max_workers is not None and (
        isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
    ):
        max_workers = default.max_workers
    return BatchConfig(
        pattern=_get_str(data, "pattern", default.pattern),
        max_workers=max_workers,
        skip_non_lzss11=_get_bool(data, "skip_non_lzss11", default.skip_non_lzss11),
    )

def _get_str(data: dict[str, Any], key: str, default: str) -> str:
    """空でない文字列のみ採用し、それ以外はデフォルトを返す"""
    value = data.get(key, default)
    return value if isinstance(value, str) and value else default

def _get_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    """真偽値のみ採用し、それ以外はデフォルトを返す"""
    value = data.get(key, default)
    return value if isinstance(value, bool) else default
