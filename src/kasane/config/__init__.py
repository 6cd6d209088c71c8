"""階層的設定の読み込み・パス解決・マージ。"""

from kasane.config._loader import (
    ConfigTextParser,
    find_config_file_with_extension,
    load_config_from_directory,
    parse_config_text,
)
from kasane.config._locator import discover_config_directories, walk_config_directories
from kasane.config._merge import (
    deep_merge_configs,
    deep_merge_two,
    get_overlap_mode_for_path,
    merge_arrays,
)
from kasane.config._paths import (
    MISSING,
    get_nested_value,
    is_unsafe_key,
    normalize_path_input,
    resolve_config_paths,
    resolve_path_value,
    resolve_single_path,
    set_nested_value,
)
from kasane.config._resolver import load_hierarchical_config

__all__ = [
    "MISSING",
    "ConfigTextParser",
    "deep_merge_configs",
    "deep_merge_two",
    "discover_config_directories",
    "find_config_file_with_extension",
    "get_nested_value",
    "get_overlap_mode_for_path",
    "is_unsafe_key",
    "load_config_from_directory",
    "load_hierarchical_config",
    "merge_arrays",
    "normalize_path_input",
    "parse_config_text",
    "resolve_config_paths",
    "resolve_path_value",
    "resolve_single_path",
    "set_nested_value",
    "walk_config_directories",
]
