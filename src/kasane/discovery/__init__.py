"""設定ファイル探索モジュール。

公開 API:
    - 境界チェック: check_traversal_boundary, BoundaryChecker, default_traversal_boundary 等
    - ルート検出: is_project_root, find_project_root, walk_up_to_root 等
    - 命名パターン: expand_pattern, get_discovery_paths, discover_config 等
    - 階層モード: discover_with_mode, get_hierarchical_options_from_config 等
"""

from kasane.discovery._boundary import (
    BoundaryChecker,
    check_traversal_boundary,
    default_traversal_boundary,
    expand_environment_variables,
    filter_allowed_paths,
    get_path_depth,
    is_path_at_or_above,
    is_path_within,
    normalize_path,
    resolve_traversal_boundary,
)
from kasane.discovery._discoverer import (
    discover_config,
    discover_configs_in_hierarchy,
    has_config_file,
)
from kasane.discovery._modes import (
    discover_with_mode,
    get_hierarchical_mode_override,
    get_hierarchical_options_from_config,
)
from kasane.discovery._patterns import expand_pattern, get_discovery_paths
from kasane.discovery._root import (
    find_project_root,
    get_directories_to_root,
    is_project_root,
    should_stop_at,
    walk_up_to_root,
)

__all__ = [
    "BoundaryChecker",
    "check_traversal_boundary",
    "default_traversal_boundary",
    "discover_config",
    "discover_configs_in_hierarchy",
    "discover_with_mode",
    "expand_environment_variables",
    "expand_pattern",
    "filter_allowed_paths",
    "find_project_root",
    "get_directories_to_root",
    "get_discovery_paths",
    "get_hierarchical_mode_override",
    "get_hierarchical_options_from_config",
    "get_path_depth",
    "has_config_file",
    "is_path_at_or_above",
    "is_path_within",
    "is_project_root",
    "normalize_path",
    "resolve_traversal_boundary",
    "should_stop_at",
    "walk_up_to_root",
]
