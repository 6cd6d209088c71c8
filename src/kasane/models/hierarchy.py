"""階層的設定読み込みのモデル。

配列マージポリシー、発見された設定ディレクトリ、読み込みオプションと結果。
"""

from __future__ import annotations

import codecs
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Final

from pydantic import Field, field_validator

from kasane.models._base import KasaneBaseModel, normalize_enum_value
from kasane.models.boundary import TraversalSecurityOptions

DEFAULT_CONFIG_DIR_NAME: Final[str] = ".kasane"
DEFAULT_CONFIG_FILE_NAME: Final[str] = "config.yaml"
DEFAULT_ENCODING: Final[str] = "utf-8"
DEFAULT_MAX_LEVELS: Final[int] = 10


class ArrayOverlapMode(StrEnum):
    """両側が配列のフィールドをどう結合するか。"""

    OVERRIDE = "override"
    APPEND = "append"
    PREPEND = "prepend"


def normalize_field_overlaps(
    overlaps: Mapping[str, ArrayOverlapMode | str] | None,
) -> dict[str, ArrayOverlapMode]:
    """ドット記法パス → モード の対応表を ArrayOverlapMode に正規化する。

    Raises:
        ValueError: 未知のモード文字列が含まれる場合。
    """
    if not overlaps:
        return {}
    return {
        path: ArrayOverlapMode(normalize_enum_value(mode, ArrayOverlapMode))
        for path, mode in overlaps.items()
    }


class DiscoveredConfigDir(KasaneBaseModel):
    """発見された設定ディレクトリ。

    Attributes:
        path: 設定ディレクトリの絶対パス。
        level: 開始ディレクトリからの距離。0 が最も近く最優先。
    """

    path: str = Field(min_length=1)
    level: int = Field(ge=0)


class HierarchicalDiscoveryOptions(KasaneBaseModel):
    """load_hierarchical_config() のオプション。

    Attributes:
        config_dir_name: 各階層で探す設定ディレクトリ名（例: ".kasane"）。
        config_file_name: 設定ディレクトリ内の設定ファイル名。
        starting_dir: 探索開始ディレクトリ。None の場合はカレントディレクトリ。
        max_levels: 辿る最大階層数（開始ディレクトリを含む）。
        encoding: 設定ファイルの文字エンコーディング。
        path_fields: 設定ファイルのディレクトリ基準で解決するパスフィールド
            （ドット記法）。
        resolve_path_array: 配列の各要素もパスとして解決するフィールド。
            path_fields に無くても解決対象に含まれる。
        field_overlaps: 配列フィールドのマージポリシー（ドット記法パス → モード）。
        traversal_security: 指定時は各祖先ディレクトリに境界チェックを適用する。
    """

    config_dir_name: str = Field(default=DEFAULT_CONFIG_DIR_NAME, min_length=1)
    config_file_name: str = Field(default=DEFAULT_CONFIG_FILE_NAME, min_length=1)
    starting_dir: Path | None = None
    max_levels: int = Field(default=DEFAULT_MAX_LEVELS, gt=0)
    encoding: str = Field(default=DEFAULT_ENCODING, min_length=1)
    path_fields: tuple[str, ...] = ()
    resolve_path_array: tuple[str, ...] = ()
    field_overlaps: dict[str, ArrayOverlapMode] = Field(default_factory=dict)
    traversal_security: TraversalSecurityOptions | None = None

    @field_validator("field_overlaps", mode="before")
    @classmethod
    def _normalize_overlaps(cls, v: object) -> object:
        if isinstance(v, Mapping):
            return {
                path: normalize_enum_value(mode, ArrayOverlapMode)
                for path, mode in v.items()
            }
        return v

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            msg = f"Unknown encoding: {v!r}"
            raise ValueError(msg) from e
        return v


class HierarchicalConfigResult(KasaneBaseModel):
    """階層的読み込みの結果。構築後は不変。

    Attributes:
        config: マージ済みの設定。
        discovered_dirs: 発見された全設定ディレクトリ（ファイルを持たない階層も含む）。
            level の昇順。
        resolved_config_dirs: 実際に設定を寄与したディレクトリ。読み込み順
            （遠い → 近い）。
        errors: 非致命的なエラーメッセージ。
    """

    config: dict[str, object] = Field(default_factory=dict)
    discovered_dirs: tuple[DiscoveredConfigDir, ...] = ()
    resolved_config_dirs: tuple[DiscoveredConfigDir, ...] = ()
    errors: tuple[str, ...] = ()
