"""階層モード別の設定ファイル探索。

- enabled: 祖先方向へ全探索し、見つかった設定をすべて収集（2 件以上でマージ）
- disabled: 開始ディレクトリのみ
- root-only: 祖先方向へ探索し、最初の一致だけを採用（マージしない）
- explicit: 開始ディレクトリのみ。マージは設定内の明示的な参照に委ねる
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import assert_never

from kasane.discovery._discoverer import discover_config
from kasane.discovery._root import get_directories_to_root
from kasane.models._base import normalize_enum_value
from kasane.models.discovery import (
    ConfigDiscoveryOptions,
    DiscoveredConfig,
    HierarchicalMode,
    HierarchicalOptions,
    ModeDiscoveryResult,
)

logger = logging.getLogger(__name__)

_HIERARCHICAL_KEY = "hierarchical"

# 設定ファイル側のキー → HierarchicalOptions のフィールド。
# JS 系ツールと共有される設定を読めるよう camelCase も受け付ける。
_MAX_DEPTH_KEYS = ("max_depth", "maxDepth")
_STOP_AT_KEYS = ("stop_at", "stopAt")
_STOP_AT_ROOT_KEYS = ("stop_at_root", "stopAtRoot")


async def _walk_directories(start: str, options: HierarchicalOptions) -> list[str]:
    return await get_directories_to_root(
        start,
        max_depth=options.max_depth,
        root_markers=options.root_markers,
        stop_at=options.stop_at,
        stop_at_root=options.stop_at_root,
    )


async def _discover_single_directory(
    mode: HierarchicalMode, start: str, discovery_options: ConfigDiscoveryOptions
) -> ModeDiscoveryResult:
    result = await discover_config(start, discovery_options)
    return ModeDiscoveryResult(
        mode=mode,
        primary_config=result.config,
        configs=(result.config,) if result.config is not None else (),
        searched_directories=(start,),
        should_merge=False,
    )


async def _discover_root_only(
    start: str,
    discovery_options: ConfigDiscoveryOptions,
    options: HierarchicalOptions,
) -> ModeDiscoveryResult:
    quiet = discovery_options.model_copy(update={"warn_on_multiple_configs": False})
    searched: list[str] = []
    for directory in await _walk_directories(start, options):
        searched.append(directory)
        result = await discover_config(directory, quiet)
        if result.config is not None:
            logger.info("Found config in root-only mode: %s", result.config.absolute_path)
            return ModeDiscoveryResult(
                mode=HierarchicalMode.ROOT_ONLY,
                primary_config=result.config,
                configs=(result.config,),
                searched_directories=tuple(searched),
            )
    logger.debug("No config found in root-only mode")
    return ModeDiscoveryResult(
        mode=HierarchicalMode.ROOT_ONLY, searched_directories=tuple(searched)
    )


async def _discover_enabled(
    start: str,
    discovery_options: ConfigDiscoveryOptions,
    options: HierarchicalOptions,
) -> ModeDiscoveryResult:
    quiet = discovery_options.model_copy(update={"warn_on_multiple_configs": False})
    searched: list[str] = []
    configs: list[DiscoveredConfig] = []
    for directory in await _walk_directories(start, options):
        searched.append(directory)
        result = await discover_config(directory, quiet)
        if result.config is not None:
            configs.append(result.config)
    logger.debug("Found %d configs in enabled mode", len(configs))
    return ModeDiscoveryResult(
        mode=HierarchicalMode.ENABLED,
        primary_config=configs[0] if configs else None,
        configs=tuple(configs),
        searched_directories=tuple(searched),
        should_merge=len(configs) > 1,
    )


async def discover_with_mode(
    start_path: str | Path,
    discovery_options: ConfigDiscoveryOptions,
    hierarchical_options: HierarchicalOptions | None = None,
) -> ModeDiscoveryResult:
    """指定モードで設定ファイルを探索する。

    Args:
        start_path: 探索開始ディレクトリ。
        discovery_options: 命名パターン探索のオプション。
        hierarchical_options: 階層モードのオプション。None なら既定値（enabled）。

    Returns:
        モードを含む探索結果。
    """
    options = (
        hierarchical_options
        if hierarchical_options is not None
        else HierarchicalOptions()
    )
    start = os.path.abspath(start_path)
    logger.debug(
        "Starting hierarchical discovery at %s (mode: %s, max_depth: %d)",
        start,
        options.mode,
        options.max_depth,
    )

    match options.mode:
        case HierarchicalMode.DISABLED | HierarchicalMode.EXPLICIT:
            return await _discover_single_directory(
                options.mode, start, discovery_options
            )
        case HierarchicalMode.ROOT_ONLY:
            return await _discover_root_only(start, discovery_options, options)
        case HierarchicalMode.ENABLED:
            return await _discover_enabled(start, discovery_options, options)
        case _ as unreachable:
            assert_never(unreachable)


def _hierarchical_section(config_content: object) -> Mapping[str, object] | None:
    if not isinstance(config_content, Mapping):
        return None
    section = config_content.get(_HIERARCHICAL_KEY)
    if not isinstance(section, Mapping):
        return None
    return section


def _first_present(section: Mapping[str, object], keys: tuple[str, ...]) -> object:
    for key in keys:
        if key in section:
            return section[key]
    return None


def get_hierarchical_mode_override(config_content: object) -> HierarchicalMode | None:
    """設定内容の hierarchical.mode を読み取る。

    `hierarchical: {mode: disabled}` のように親階層とのマージを
    設定ファイル側から止めるために使う。未指定・不正値は None。
    """
    section = _hierarchical_section(config_content)
    if section is None:
        return None
    mode = normalize_enum_value(section.get("mode"), HierarchicalMode)
    if isinstance(mode, str) and mode in {m.value for m in HierarchicalMode}:
        return HierarchicalMode(mode)
    return None


def get_hierarchical_options_from_config(
    config_content: object,
) -> dict[str, object] | None:
    """設定内容の hierarchical セクションから HierarchicalOptions の部分指定を抽出する。

    型の合わない値は無視する。抽出結果は
    `HierarchicalOptions(**partial)` や `model_copy(update=partial)` にそのまま渡せる。

    Returns:
        フィールド名 → 値の辞書。有効な項目がなければ None。
    """
    section = _hierarchical_section(config_content)
    if section is None:
        return None

    partial: dict[str, object] = {}

    mode = get_hierarchical_mode_override(config_content)
    if mode is not None:
        partial["mode"] = mode

    max_depth = _first_present(section, _MAX_DEPTH_KEYS)
    if isinstance(max_depth, int) and not isinstance(max_depth, bool):
        partial["max_depth"] = max_depth

    stop_at = _first_present(section, _STOP_AT_KEYS)
    if isinstance(stop_at, list):
        partial["stop_at"] = tuple(item for item in stop_at if isinstance(item, str))

    stop_at_root = _first_present(section, _STOP_AT_ROOT_KEYS)
    if isinstance(stop_at_root, bool):
        partial["stop_at_root"] = stop_at_root

    return partial or None
