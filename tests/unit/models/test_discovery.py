"""ディスカバリー関連モデルのテスト。"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kasane.models.discovery import (
    DEFAULT_EXTENSIONS,
    DEFAULT_ROOT_MARKERS,
    STANDARD_PATTERNS,
    ConfigDiscoveryOptions,
    ConfigNamingPattern,
    DiscoveredConfig,
    HierarchicalMode,
    HierarchicalOptions,
    MultipleConfigWarning,
    RootMarker,
    RootMarkerKind,
)

# =============================================================================
# RootMarker
# =============================================================================


class TestRootMarker:
    """RootMarker の構築を検証。"""

    def test_kind_case_insensitive(self) -> None:
        marker = RootMarker(kind="DIRECTORY", name=".git")  # type: ignore[arg-type]
        assert marker.kind == RootMarkerKind.DIRECTORY

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RootMarker(kind="symlink", name="x")  # type: ignore[arg-type]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RootMarker(kind=RootMarkerKind.FILE, name="")

    def test_default_markers(self) -> None:
        """.git はディレクトリ、それ以外はファイルマーカー。"""
        kinds = {m.name: m.kind for m in DEFAULT_ROOT_MARKERS}
        assert kinds[".git"] == RootMarkerKind.DIRECTORY
        assert kinds["pyproject.toml"] == RootMarkerKind.FILE
        assert kinds["package.json"] == RootMarkerKind.FILE


# =============================================================================
# 命名パターン
# =============================================================================


class TestStandardPatterns:
    """標準パターンの定義を検証。"""

    def test_priorities_are_ascending(self) -> None:
        priorities = [p.priority for p in STANDARD_PATTERNS]
        assert priorities == sorted(priorities) == [1, 2, 3, 4, 5]

    def test_hidden_patterns(self) -> None:
        hidden = [p.template for p in STANDARD_PATTERNS if p.hidden]
        assert hidden == [".{app}/config.{ext}", ".{app}rc.{ext}", ".{app}rc"]

    def test_default_extensions_order(self) -> None:
        assert DEFAULT_EXTENSIONS == ("toml", "yaml", "yml", "json")


class TestConfigDiscoveryOptions:
    """ConfigDiscoveryOptions の既定値を検証。"""

    def test_defaults(self) -> None:
        options = ConfigDiscoveryOptions(app_name="myapp")
        assert options.patterns == STANDARD_PATTERNS
        assert options.extensions == DEFAULT_EXTENSIONS
        assert options.search_hidden is True
        assert options.warn_on_multiple_configs is True

    def test_empty_app_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ConfigDiscoveryOptions(app_name="")


class TestMultipleConfigWarning:
    """MultipleConfigWarning は ignored が 1 件以上必要。"""

    def _config(self, path: str) -> DiscoveredConfig:
        return DiscoveredConfig(
            path=path,
            absolute_path=f"/p/{path}",
            pattern=ConfigNamingPattern(template="{app}.config.{ext}", priority=1),
        )

    def test_empty_ignored_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MultipleConfigWarning(used=self._config("a.toml"), ignored=())

    def test_valid(self) -> None:
        warning = MultipleConfigWarning(
            used=self._config("a.toml"), ignored=(self._config("a.json"),)
        )
        assert warning.ignored[0].path == "a.json"


# =============================================================================
# 階層モード
# =============================================================================


class TestHierarchicalOptions:
    """HierarchicalOptions の構築を検証。"""

    def test_defaults(self) -> None:
        options = HierarchicalOptions()
        assert options.mode == HierarchicalMode.ENABLED
        assert options.max_depth == 10
        assert options.stop_at == ()
        assert options.root_markers == DEFAULT_ROOT_MARKERS
        assert options.stop_at_root is True

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("enabled", HierarchicalMode.ENABLED),
            ("DISABLED", HierarchicalMode.DISABLED),
            ("root_only", HierarchicalMode.ROOT_ONLY),
            ("Explicit", HierarchicalMode.EXPLICIT),
        ],
    )
    def test_mode_normalized(self, raw: str, expected: HierarchicalMode) -> None:
        assert HierarchicalOptions(mode=raw).mode == expected  # type: ignore[arg-type]

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HierarchicalOptions(mode="sometimes")  # type: ignore[arg-type]
