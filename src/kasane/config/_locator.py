"""設定ディレクトリの階層探索。

開始ディレクトリから親方向へ、各階層に config_dir_name のサブディレクトリが
あるかを調べる。level は開始ディレクトリを 0 とし、親へ 1 段上がるごとに 1 増える。

終了条件:
- ファイルシステムルートに到達
- max_levels 階層を調べ終えた
- 既に訪れたディレクトリに戻った（ループ防止）
- 境界チェックで拒否された、またはソフト境界を処理し終えた（traversal_security 指定時）
"""

from __future__ import annotations

import logging
import os

from kasane import _fs
from kasane.discovery._boundary import BoundaryChecker
from kasane.models.hierarchy import DiscoveredConfigDir, HierarchicalDiscoveryOptions

logger = logging.getLogger(__name__)


def _starting_directory(options: HierarchicalDiscoveryOptions) -> str:
    if options.starting_dir is None:
        return os.path.abspath(os.getcwd())
    return os.path.abspath(options.starting_dir)


async def _config_dir_at(directory: str, config_dir_name: str) -> str | None:
    candidate = os.path.join(directory, config_dir_name)
    try:
        if await _fs.is_directory_readable(candidate):
            return candidate
    except OSError as e:
        logger.debug("Cannot access %s: %s", candidate, e)
    return None


async def walk_config_directories(
    options: HierarchicalDiscoveryOptions,
) -> tuple[list[DiscoveredConfigDir], list[str]]:
    """設定ディレクトリを近い順に収集する。

    個々の階層でのアクセスエラーは「その階層には無い」として扱い、探索は続ける。

    Returns:
        (発見したディレクトリ（level 昇順）, 非致命的エラーメッセージ)。
    """
    start = _starting_directory(options)
    checker = (
        BoundaryChecker(options.traversal_security)
        if options.traversal_security is not None
        else None
    )

    discovered: list[DiscoveredConfigDir] = []
    errors: list[str] = []
    visited: set[str] = set()
    current = start

    for level in range(options.max_levels):
        if current in visited:
            logger.debug("Directory already visited, stopping: %s", current)
            break
        visited.add(current)

        if checker is not None:
            result = checker.check(current, start)
            if not result.allowed:
                errors.append(f"Traversal stopped at {current}: {result.reason}")
                break

        config_dir = await _config_dir_at(current, options.config_dir_name)
        if config_dir is not None:
            logger.debug("Found config directory at level %d: %s", level, config_dir)
            discovered.append(DiscoveredConfigDir(path=config_dir, level=level))

        if checker is not None and checker.is_soft_boundary(current):
            logger.debug("Reached soft boundary, stopping: %s", current)
            break

        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    return discovered, errors


async def discover_config_directories(
    options: HierarchicalDiscoveryOptions | None = None,
) -> list[DiscoveredConfigDir]:
    """設定ディレクトリを近い順（level 昇順）で返す。読み込みは行わない。"""
    discovered, _ = await walk_config_directories(
        options if options is not None else HierarchicalDiscoveryOptions()
    )
    return discovered
