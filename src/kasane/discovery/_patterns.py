"""設定ファイル命名パターンの展開。"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Final

from kasane.models.discovery import (
    DEFAULT_EXTENSIONS,
    STANDARD_PATTERNS,
    ConfigNamingPattern,
)

_APP_PLACEHOLDER: Final[str] = "{app}"
_EXT_PLACEHOLDER: Final[str] = "{ext}"


def expand_pattern(template: str, app_name: str, extension: str | None = None) -> str:
    """テンプレートの {app} と（指定時は）{ext} を置換する。

    >>> expand_pattern("{app}.config.{ext}", "myapp", "yaml")
    'myapp.config.yaml'
    >>> expand_pattern(".{app}rc", "myapp")
    '.myapprc'
    """
    result = template.replace(_APP_PLACEHOLDER, app_name)
    if extension is not None:
        result = result.replace(_EXT_PLACEHOLDER, extension)
    return result


def active_patterns(
    patterns: Sequence[ConfigNamingPattern], include_hidden: bool
) -> list[ConfigNamingPattern]:
    """hidden を除外（必要なら）し、priority 昇順に並べたパターンを返す。

    priority が同じパターンは入力順を保つ（安定ソート）。
    """
    selected = [p for p in patterns if include_hidden or not p.hidden]
    return sorted(selected, key=lambda p: p.priority)


def iter_expansions(
    patterns: Sequence[ConfigNamingPattern],
    app_name: str,
    extensions: Sequence[str],
    include_hidden: bool,
) -> Iterator[tuple[ConfigNamingPattern, str]]:
    """(パターン, 展開済み相対パス) を評価順に生成する。

    {ext} を含むパターンは拡張子ごとに 1 件、含まないパターンは 1 件。
    """
    for pattern in active_patterns(patterns, include_hidden):
        if _EXT_PLACEHOLDER in pattern.template:
            for ext in extensions:
                yield pattern, expand_pattern(pattern.template, app_name, ext)
        else:
            yield pattern, expand_pattern(pattern.template, app_name)


def get_discovery_paths(
    app_name: str,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    *,
    include_hidden: bool = True,
    patterns: Sequence[ConfigNamingPattern] = STANDARD_PATTERNS,
) -> list[str]:
    """探索対象の相対パスを優先度順に返す。

    >>> get_discovery_paths("myapp", ["yaml"], include_hidden=False)
    ['myapp.config.yaml', 'myapp.conf.yaml']
    """
    return [
        relative
        for _, relative in iter_expansions(
            patterns, app_name, extensions, include_hidden
        )
    ]
