"""プロジェクトルート検出。

マーカーファイル/ディレクトリの有無でプロジェクトルートを判定し、
開始ディレクトリから親方向への探索を提供する。
"""

from __future__ import annotations

import logging
import os
import stat as stat_module
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

from kasane._fs import stat_mode
from kasane.models.discovery import (
    DEFAULT_ROOT_DETECTION_DEPTH,
    DEFAULT_ROOT_MARKERS,
    DEFAULT_WALK_DEPTH,
    RootDetectionResult,
    RootMarker,
    RootMarkerKind,
)

logger = logging.getLogger(__name__)


async def _marker_exists(directory: str, marker: RootMarker) -> bool:
    """directory 直下に marker と同じ種別のエントリがあるか。

    アクセスエラーは「マーカーなし」として扱う。
    """
    try:
        mode = await stat_mode(os.path.join(directory, marker.name))
    except OSError as e:
        logger.debug("Cannot stat marker %s in %s: %s", marker.name, directory, e)
        return False
    if mode is None:
        return False
    if marker.kind is RootMarkerKind.FILE:
        return stat_module.S_ISREG(mode)
    return stat_module.S_ISDIR(mode)


async def _matching_marker(
    directory: str, markers: Sequence[RootMarker]
) -> RootMarker | None:
    for marker in markers:
        if await _marker_exists(directory, marker):
            return marker
    return None


async def is_project_root(
    directory: str | Path,
    markers: Sequence[RootMarker] = DEFAULT_ROOT_MARKERS,
) -> bool:
    """directory がいずれかのルートマーカーを直下に持つか。"""
    marker = await _matching_marker(str(directory), markers)
    if marker is not None:
        logger.debug("Found root marker '%s' in %s", marker.name, directory)
        return True
    return False


async def find_project_root(
    start_path: str | Path,
    markers: Sequence[RootMarker] = DEFAULT_ROOT_MARKERS,
    max_depth: int = DEFAULT_ROOT_DETECTION_DEPTH,
) -> RootDetectionResult:
    """start_path から親方向にプロジェクトルートを探索する。

    マーカーが空の場合は探索せず「見つからない」を返す（エラーではない）。

    Args:
        start_path: 探索開始ディレクトリ。
        markers: ルート判定に使うマーカー。
        max_depth: 調べるディレクトリ数の上限。

    Returns:
        検出結果。
    """
    logger.debug("Finding project root from: %s", start_path)
    if not markers:
        logger.debug("No root markers configured, skipping root detection")
        return RootDetectionResult(found=False)

    current = os.path.abspath(start_path)
    visited: set[str] = set()
    depth = 0

    while depth < max_depth:
        if current in visited:
            logger.debug("Already visited %s, stopping root detection", current)
            break
        visited.add(current)

        marker = await _matching_marker(current, markers)
        if marker is not None:
            logger.info("Found project root at %s (marker: %s)", current, marker.name)
            return RootDetectionResult(
                found=True, root_path=current, matched_marker=marker
            )

        parent = os.path.dirname(current)
        if parent == current:
            logger.debug("Reached filesystem root, no project root found")
            break
        current = parent
        depth += 1
    else:
        logger.debug("Reached max depth (%d), no project root found", max_depth)

    return RootDetectionResult(found=False)


def should_stop_at(directory: str | Path, stop_at_names: Sequence[str]) -> bool:
    """directory のベース名が stop_at_names に含まれるか。

    "/path/to/node_modules" は "node_modules" で停止対象だが、
    "/path/to/node_modules/pkg" は対象外（ベース名のみ比較）。
    """
    if not stop_at_names:
        return False
    return os.path.basename(os.path.normpath(directory)) in stop_at_names


async def walk_up_to_root(
    start_path: str | Path,
    *,
    max_depth: int = DEFAULT_WALK_DEPTH,
    root_markers: Sequence[RootMarker] = DEFAULT_ROOT_MARKERS,
    stop_at: Sequence[str] = (),
    stop_at_root: bool = True,
) -> AsyncIterator[str]:
    """start_path から親方向にディレクトリを順に yield する。

    各ステップの順序:
    1. stop_at に一致するディレクトリは yield せずに停止
    2. 現在のディレクトリを yield
    3. ルートマーカーに一致し stop_at_root なら停止（yield 済み）
    4. 親へ移動。ファイルシステムルート到達・訪問済み・max_depth 到達で停止

    呼び出しごとに新しい探索を生成する。得られたイテレータは再開できない。

    Args:
        start_path: 探索開始ディレクトリ。
        max_depth: yield するディレクトリ数の上限。
        root_markers: ルート判定に使うマーカー。空なら判定しない。
        stop_at: 探索を止めるディレクトリのベース名。
        stop_at_root: ルートで停止するか。

    Yields:
        正規化済み絶対パス。近い順。
    """
    current = os.path.abspath(start_path)
    visited: set[str] = set()
    depth = 0

    while depth < max_depth:
        if current in visited:
            logger.debug("Already visited %s, stopping walk", current)
            break
        visited.add(current)

        if should_stop_at(current, stop_at):
            logger.debug("Stopping at directory: %s (in stop-at list)", current)
            break

        yield current

        if root_markers and stop_at_root:
            if await is_project_root(current, root_markers):
                logger.debug("Stopping at project root: %s", current)
                break

        parent = os.path.dirname(current)
        if parent == current:
            logger.debug("Reached filesystem root")
            break
        current = parent
        depth += 1
    else:
        logger.debug("Reached max depth: %d", max_depth)


async def get_directories_to_root(
    start_path: str | Path,
    *,
    max_depth: int = DEFAULT_WALK_DEPTH,
    root_markers: Sequence[RootMarker] = DEFAULT_ROOT_MARKERS,
    stop_at: Sequence[str] = (),
    stop_at_root: bool = True,
) -> list[str]:
    """walk_up_to_root() の結果をリストとして返す。"""
    return [
        directory
        async for directory in walk_up_to_root(
            start_path,
            max_depth=max_depth,
            root_markers=root_markers,
            stop_at=stop_at,
            stop_at_root=stop_at_root,
        )
    ]
