"""命名パターンによる設定ファイル探索。

1 ディレクトリ内で、優先度の最も高いパターンに一致する設定ファイルを探す。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from kasane._fs import is_file_readable
from kasane.discovery._patterns import iter_expansions
from kasane.models.discovery import (
    ConfigDiscoveryOptions,
    ConfigNamingPattern,
    DiscoveredConfig,
    DiscoveryResult,
    MultipleConfigWarning,
)

logger = logging.getLogger(__name__)


def _generate_candidates(
    directory: str, options: ConfigDiscoveryOptions
) -> list[DiscoveredConfig]:
    """評価順に並んだ候補を生成する。存在チェックは行わない。"""
    return [
        DiscoveredConfig(
            path=relative,
            absolute_path=os.path.join(directory, relative),
            pattern=pattern,
        )
        for pattern, relative in iter_expansions(
            options.patterns,
            options.app_name,
            options.extensions,
            options.search_hidden,
        )
    ]


async def _candidate_exists(candidate: DiscoveredConfig) -> bool:
    """読み取り可能な通常ファイルか。アクセスエラーは「存在しない」扱い。"""
    try:
        return await is_file_readable(candidate.absolute_path)
    except OSError as e:
        logger.debug("Cannot access %s: %s", candidate.absolute_path, e)
        return False


def _describe(pattern: ConfigNamingPattern) -> str:
    return f"pattern: {pattern.template}, priority: {pattern.priority}"


async def discover_config(
    directory: str | Path, options: ConfigDiscoveryOptions
) -> DiscoveryResult:
    """directory 内で命名パターンに一致する設定ファイルを探す。

    候補は priority 昇順、同一パターン内では extensions の指定順に評価し、
    最初に見つかった通常ファイルを採用する。warn_on_multiple_configs が有効な
    場合は走査を続け、他の既存候補を無視されたファイルとして警告する。

    Args:
        directory: 探索対象ディレクトリ。
        options: 探索オプション。

    Returns:
        探索結果。一致なし・空ディレクトリは config=None（エラーではない）。
    """
    base = os.path.abspath(directory)
    candidates = _generate_candidates(base, options)
    logger.debug(
        "Discovering config in %s: app=%s, %d candidates",
        base,
        options.app_name,
        len(candidates),
    )

    primary: DiscoveredConfig | None = None
    ignored: list[DiscoveredConfig] = []

    for candidate in candidates:
        if not await _candidate_exists(candidate):
            continue
        if primary is None:
            primary = candidate
            logger.info(
                "Found config: %s (%s)", candidate.path, _describe(candidate.pattern)
            )
            if not options.warn_on_multiple_configs:
                break
        else:
            ignored.append(candidate)
            logger.debug("Found additional config: %s (will be ignored)", candidate.path)

    if primary is None:
        logger.debug("No config file found in %s", base)
        return DiscoveryResult()

    if not ignored:
        return DiscoveryResult(config=primary)

    logger.warning(
        "Multiple config files found. Using '%s' (priority %d). Ignored: %s. "
        "Consider removing unused config files.",
        primary.path,
        primary.pattern.priority,
        ", ".join(f"'{c.path}'" for c in ignored),
    )
    return DiscoveryResult(
        config=primary,
        multiple_config_warning=MultipleConfigWarning(
            used=primary, ignored=tuple(ignored)
        ),
    )


async def discover_configs_in_hierarchy(
    directories: Sequence[str | Path], options: ConfigDiscoveryOptions
) -> list[DiscoveryResult]:
    """複数ディレクトリを順に探索し、設定が見つかった結果だけを返す。

    directories は優先度の高い順（近い順）に渡す。返却値も同じ順序。
    """
    results: list[DiscoveryResult] = []
    for directory in directories:
        result = await discover_config(directory, options)
        if result.config is not None:
            results.append(result)
    logger.debug("Found %d config files across hierarchy", len(results))
    return results


async def has_config_file(directory: str | Path, options: ConfigDiscoveryOptions) -> bool:
    """directory にいずれかの候補が存在するか。最初の一致で打ち切る。"""
    base = os.path.abspath(directory)
    for candidate in _generate_candidates(base, options):
        if await _candidate_exists(candidate):
            return True
    return False
