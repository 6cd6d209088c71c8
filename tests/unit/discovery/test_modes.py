"""階層モード別ディスカバリーのテスト。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from kasane.discovery import (
    discover_with_mode,
    get_hierarchical_mode_override,
    get_hierarchical_options_from_config,
)
from kasane.models.discovery import (
    ConfigDiscoveryOptions,
    HierarchicalMode,
    HierarchicalOptions,
    RootMarker,
    RootMarkerKind,
)

_MARKERS = (RootMarker(kind=RootMarkerKind.FILE, name="kasane-test-root.toml"),)

# =============================================================================
# ヘルパー
# =============================================================================


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """root/.myapprc, root/pkg/myapp.config.yaml, root/pkg/src を持つツリー。

    root にはルートマーカーを置き、探索が root で止まるようにする。
    """
    (tmp_path / "kasane-test-root.toml").write_text("", encoding="utf-8")
    (tmp_path / ".myapprc").write_text("", encoding="utf-8")
    (tmp_path / "pkg" / "src").mkdir(parents=True)
    (tmp_path / "pkg" / "myapp.config.yaml").write_text("", encoding="utf-8")
    return tmp_path


def _discovery() -> ConfigDiscoveryOptions:
    return ConfigDiscoveryOptions(app_name="myapp")


def _hier(mode: HierarchicalMode) -> HierarchicalOptions:
    return HierarchicalOptions(mode=mode, root_markers=_MARKERS)


# =============================================================================
# discover_with_mode()
# =============================================================================


class TestEnabledMode:
    """enabled: 全階層を収集し、2 件以上でマージ。"""

    async def test_collects_all_nearest_first(self, tree: Path) -> None:
        result = await discover_with_mode(
            tree / "pkg" / "src", _discovery(), _hier(HierarchicalMode.ENABLED)
        )
        assert result.mode == HierarchicalMode.ENABLED
        assert [c.path for c in result.configs] == ["myapp.config.yaml", ".myapprc"]
        assert result.primary_config == result.configs[0]
        assert result.should_merge
        assert result.searched_directories == (
            os.path.abspath(tree / "pkg" / "src"),
            os.path.abspath(tree / "pkg"),
            os.path.abspath(tree),
        )

    async def test_single_config_no_merge(self, tree: Path) -> None:
        result = await discover_with_mode(
            tree, _discovery(), _hier(HierarchicalMode.ENABLED)
        )
        assert len(result.configs) == 1
        assert not result.should_merge

    async def test_default_options_is_enabled(self, tree: Path) -> None:
        result = await discover_with_mode(tree, _discovery())
        assert result.mode == HierarchicalMode.ENABLED


class TestRootOnlyMode:
    """root-only: 最初の一致のみ。"""

    async def test_first_match(self, tree: Path) -> None:
        result = await discover_with_mode(
            tree / "pkg" / "src", _discovery(), _hier(HierarchicalMode.ROOT_ONLY)
        )
        assert result.primary_config is not None
        assert result.primary_config.path == "myapp.config.yaml"
        assert len(result.configs) == 1
        assert not result.should_merge
        assert len(result.searched_directories) == 2

    async def test_none_found(self, tmp_path: Path) -> None:
        (tmp_path / "kasane-test-root.toml").write_text("", encoding="utf-8")
        result = await discover_with_mode(
            tmp_path, _discovery(), _hier(HierarchicalMode.ROOT_ONLY)
        )
        assert result.primary_config is None
        assert result.configs == ()


class TestSingleDirectoryModes:
    """disabled / explicit: 開始ディレクトリのみ。"""

    @pytest.mark.parametrize(
        "mode", [HierarchicalMode.DISABLED, HierarchicalMode.EXPLICIT]
    )
    async def test_start_only(self, tree: Path, mode: HierarchicalMode) -> None:
        result = await discover_with_mode(tree / "pkg" / "src", _discovery(), _hier(mode))
        assert result.mode == mode
        assert result.configs == ()
        assert result.searched_directories == (os.path.abspath(tree / "pkg" / "src"),)
        assert not result.should_merge

    async def test_disabled_finds_local(self, tree: Path) -> None:
        result = await discover_with_mode(
            tree / "pkg", _discovery(), _hier(HierarchicalMode.DISABLED)
        )
        assert result.primary_config is not None
        assert result.primary_config.path == "myapp.config.yaml"


# =============================================================================
# hierarchical セクション
# =============================================================================


class TestHierarchicalModeOverride:
    """get_hierarchical_mode_override の読み取りを検証。"""

    def test_reads_mode(self) -> None:
        doc = {"hierarchical": {"mode": "disabled"}}
        assert get_hierarchical_mode_override(doc) == HierarchicalMode.DISABLED

    def test_normalizes_case(self) -> None:
        doc = {"hierarchical": {"mode": "Root_Only"}}
        assert get_hierarchical_mode_override(doc) == HierarchicalMode.ROOT_ONLY

    @pytest.mark.parametrize(
        "doc",
        [None, [], {}, {"hierarchical": "on"}, {"hierarchical": {"mode": "never"}}],
    )
    def test_absent_or_invalid(self, doc: object) -> None:
        assert get_hierarchical_mode_override(doc) is None


class TestHierarchicalOptionsFromConfig:
    """get_hierarchical_options_from_config の抽出を検証。"""

    def test_camel_case_keys(self) -> None:
        doc = {
            "hierarchical": {
                "mode": "enabled",
                "maxDepth": 3,
                "stopAt": ["node_modules", 1],
                "stopAtRoot": False,
            }
        }
        partial = get_hierarchical_options_from_config(doc)
        assert partial == {
            "mode": HierarchicalMode.ENABLED,
            "max_depth": 3,
            "stop_at": ("node_modules",),
            "stop_at_root": False,
        }

    def test_snake_case_keys(self) -> None:
        doc = {"hierarchical": {"max_depth": 5, "stop_at_root": True}}
        assert get_hierarchical_options_from_config(doc) == {
            "max_depth": 5,
            "stop_at_root": True,
        }

    def test_usable_as_options(self) -> None:
        partial = get_hierarchical_options_from_config(
            {"hierarchical": {"mode": "root-only", "maxDepth": 2}}
        )
        assert partial is not None
        options = HierarchicalOptions().model_copy(update=partial)
        assert options.mode == HierarchicalMode.ROOT_ONLY
        assert options.max_depth == 2

    def test_wrong_types_ignored(self) -> None:
        doc = {"hierarchical": {"maxDepth": True, "stopAt": "x", "stopAtRoot": "no"}}
        assert get_hierarchical_options_from_config(doc) is None

    def test_missing_section(self) -> None:
        assert get_hierarchical_options_from_config({"other": 1}) is None
