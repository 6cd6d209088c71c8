"""ディスカバリーモデル。

ルートマーカー、設定ファイル命名パターン、ディスカバリー結果、
階層モードの定義。
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

from pydantic import Field, StrictBool, field_validator

from kasane.models._base import KasaneBaseModel, normalize_enum_value

DEFAULT_ROOT_DETECTION_DEPTH: Final[int] = 20
DEFAULT_WALK_DEPTH: Final[int] = 10


# =============================================================================
# ルートマーカー
# =============================================================================


class RootMarkerKind(StrEnum):
    """ルートマーカーの種別。"""

    FILE = "file"
    DIRECTORY = "directory"


class RootMarker(KasaneBaseModel):
    """「このディレクトリはプロジェクトルート」を示すファイル/ディレクトリ。

    Attributes:
        kind: マーカー種別。kind と一致する種類のエントリのみマッチする。
        name: ディレクトリ直下で探すエントリ名。
    """

    kind: RootMarkerKind
    name: str = Field(min_length=1)

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, v: object) -> object:
        return normalize_enum_value(v, RootMarkerKind)


DEFAULT_ROOT_MARKERS: Final[tuple[RootMarker, ...]] = (
    RootMarker(kind=RootMarkerKind.DIRECTORY, name=".git"),
    RootMarker(kind=RootMarkerKind.FILE, name="pyproject.toml"),
    RootMarker(kind=RootMarkerKind.FILE, name="setup.py"),
    RootMarker(kind=RootMarkerKind.FILE, name="setup.cfg"),
    RootMarker(kind=RootMarkerKind.FILE, name="package.json"),
)
"""既定のルートマーカー。"""


class RootDetectionResult(KasaneBaseModel):
    """find_project_root() の結果。

    Attributes:
        found: ルートが見つかったか。
        root_path: 見つかったルートの絶対パス。
        matched_marker: ルート判定のきっかけになったマーカー。
    """

    found: bool
    root_path: str | None = None
    matched_marker: RootMarker | None = None


# =============================================================================
# 命名パターン
# =============================================================================


class ConfigNamingPattern(KasaneBaseModel):
    """設定ファイル名のテンプレート。

    Attributes:
        template: {app} / {ext} プレースホルダーを含むテンプレート。
            {ext} を含まないテンプレートは拡張子ごとに展開されない。
        priority: 優先度。小さいほど先に評価される。
        hidden: 隠しファイル系のパターンか。search_hidden=False で除外される。
    """

    template: str = Field(min_length=1)
    priority: int
    hidden: StrictBool = False


STANDARD_PATTERNS: Final[tuple[ConfigNamingPattern, ...]] = (
    ConfigNamingPattern(template="{app}.config.{ext}", priority=1),
    ConfigNamingPattern(template="{app}.conf.{ext}", priority=2),
    ConfigNamingPattern(template=".{app}/config.{ext}", priority=3, hidden=True),
    ConfigNamingPattern(template=".{app}rc.{ext}", priority=4, hidden=True),
    ConfigNamingPattern(template=".{app}rc", priority=5, hidden=True),
)
"""標準の命名パターン。可視ファイル・明示的な命名を優先する順序。"""

DEFAULT_EXTENSIONS: Final[tuple[str, ...]] = ("toml", "yaml", "yml", "json")
"""既定の拡張子。この順序で試行される。"""


class ConfigDiscoveryOptions(KasaneBaseModel):
    """命名パターンによる設定ファイル探索のオプション。

    Attributes:
        app_name: {app} に展開するアプリケーション名。
        patterns: 使用する命名パターン。
        extensions: {ext} に展開する拡張子（ドットなし）。指定順に試行する。
        search_hidden: hidden パターンを探索対象に含めるか。
        warn_on_multiple_configs: 最初の一致以降も走査を続け、
            無視された候補を警告として報告するか。
    """

    app_name: str = Field(min_length=1)
    patterns: tuple[ConfigNamingPattern, ...] = STANDARD_PATTERNS
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    search_hidden: StrictBool = True
    warn_on_multiple_configs: StrictBool = True


class DiscoveredConfig(KasaneBaseModel):
    """見つかった設定ファイル。

    Attributes:
        path: 探索ディレクトリからの相対パス（展開済みテンプレート）。
        absolute_path: 絶対パス。
        pattern: 一致したパターン。
    """

    path: str = Field(min_length=1)
    absolute_path: str = Field(min_length=1)
    pattern: ConfigNamingPattern


class MultipleConfigWarning(KasaneBaseModel):
    """1 ディレクトリに複数の候補が存在した場合の警告。

    Attributes:
        used: 採用された設定ファイル。
        ignored: 存在したが無視された設定ファイル（優先度順）。
    """

    used: DiscoveredConfig
    ignored: tuple[DiscoveredConfig, ...] = Field(min_length=1)


class DiscoveryResult(KasaneBaseModel):
    """discover_config() の結果。

    Attributes:
        config: 採用された設定ファイル。見つからなければ None。
        multiple_config_warning: 複数候補警告。
    """

    config: DiscoveredConfig | None = None
    multiple_config_warning: MultipleConfigWarning | None = None


# =============================================================================
# 階層モード
# =============================================================================


class HierarchicalMode(StrEnum):
    """階層的な設定読み込みのモード。"""

    ENABLED = "enabled"
    DISABLED = "disabled"
    ROOT_ONLY = "root-only"
    EXPLICIT = "explicit"


class HierarchicalOptions(KasaneBaseModel):
    """階層モード付きディスカバリーのオプション。

    Attributes:
        mode: 階層モード。
        max_depth: 祖先方向に辿る最大段数。
        stop_at: このベース名のディレクトリに到達したら（yield 前に）停止する。
        root_markers: プロジェクトルート判定に使うマーカー。
        stop_at_root: ルートを yield した後に停止するか。
    """

    mode: HierarchicalMode = HierarchicalMode.ENABLED
    max_depth: int = Field(default=DEFAULT_WALK_DEPTH, ge=0)
    stop_at: tuple[str, ...] = ()
    root_markers: tuple[RootMarker, ...] = DEFAULT_ROOT_MARKERS
    stop_at_root: StrictBool = True

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, v: object) -> object:
        return normalize_enum_value(v, HierarchicalMode)


class ModeDiscoveryResult(KasaneBaseModel):
    """discover_with_mode() の結果。

    Attributes:
        mode: 使用したモード。
        primary_config: 最優先（最も近い）設定ファイル。
        configs: 見つかった設定ファイル。近い順。
        searched_directories: 探索したディレクトリ。探索順。
        should_merge: 呼び出し側が configs をマージすべきか。
    """

    mode: HierarchicalMode
    primary_config: DiscoveredConfig | None = None
    configs: tuple[DiscoveredConfig, ...] = ()
    searched_directories: tuple[str, ...] = ()
    should_merge: bool = False
