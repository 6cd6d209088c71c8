"""kasane: ディレクトリ階層上の設定を重ね合わせるライブラリ。

主要 API:
    - walk_up_to_root / find_project_root: プロジェクトルート検出
    - discover_config: 命名パターンによる設定ファイル探索
    - load_hierarchical_config: 階層的設定の読み込みとマージ
    - deep_merge_configs: 設定ドキュメントのディープマージ
    - check_traversal_boundary: 探索境界チェック

ライブラリとしてはログを出力しない。出力が必要な場合は呼び出し側で
"kasane" ロガーにハンドラを設定する。
"""

import logging

from kasane.config import (
    deep_merge_configs,
    discover_config_directories,
    load_config_from_directory,
    load_hierarchical_config,
    parse_config_text,
    resolve_config_paths,
)
from kasane.discovery import (
    BoundaryChecker,
    check_traversal_boundary,
    discover_config,
    discover_with_mode,
    find_project_root,
    walk_up_to_root,
)
from kasane.errors import (
    ConfigLoadError,
    KasaneError,
    PathInputError,
    TraversalBoundaryError,
)
from kasane.models import (
    ArrayOverlapMode,
    HierarchicalConfigResult,
    HierarchicalDiscoveryOptions,
    TraversalSecurityOptions,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArrayOverlapMode",
    "BoundaryChecker",
    "ConfigLoadError",
    "HierarchicalConfigResult",
    "HierarchicalDiscoveryOptions",
    "KasaneError",
    "PathInputError",
    "TraversalBoundaryError",
    "TraversalSecurityOptions",
    "check_traversal_boundary",
    "deep_merge_configs",
    "discover_config",
    "discover_config_directories",
    "discover_with_mode",
    "find_project_root",
    "load_config_from_directory",
    "load_hierarchical_config",
    "main",
    "parse_config_text",
    "resolve_config_paths",
    "walk_up_to_root",
]


def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。

    プログラムから kasane.main() として呼び出す場合用。
    """
    from kasane.cli import main as cli_main

    cli_main()
