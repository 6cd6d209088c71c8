"""階層的設定の読み込みとマージ。

discover → load → merge の 3 段階で 1 つの設定を組み立てる。
遠い階層から順に読み込んでマージするため、開始ディレクトリに近い設定ほど優先される。
部分的な階層でも有用なため、エラーは送出せず errors に集める。
"""

from __future__ import annotations

import logging

from kasane.config._loader import ConfigTextParser, load_config_from_directory
from kasane.config._locator import walk_config_directories
from kasane.config._merge import deep_merge_configs
from kasane.errors import KasaneError
from kasane.models.hierarchy import (
    DiscoveredConfigDir,
    HierarchicalConfigResult,
    HierarchicalDiscoveryOptions,
)

logger = logging.getLogger(__name__)


async def load_hierarchical_config(
    options: HierarchicalDiscoveryOptions | None = None,
    *,
    parser: ConfigTextParser | None = None,
) -> HierarchicalConfigResult:
    """階層上の設定を読み込み、マージ済みの設定を返す。

    Args:
        options: 探索・読み込みオプション。None の場合は既定値。
        parser: 設定テキストのパーサー。None の場合は拡張子で選択する。

    Returns:
        マージ済み設定、発見したディレクトリ、寄与したディレクトリ、エラー。
    """
    opts = options if options is not None else HierarchicalDiscoveryOptions()
    discovered, errors = await walk_config_directories(opts)

    documents: list[dict[str, object]] = []
    contributed: list[DiscoveredConfigDir] = []
    for config_dir in sorted(discovered, key=lambda d: d.level, reverse=True):
        try:
            document = await load_config_from_directory(
                config_dir.path,
                opts.config_file_name,
                encoding=opts.encoding,
                path_fields=opts.path_fields,
                resolve_path_array=opts.resolve_path_array,
                parser=parser,
            )
        except KasaneError as e:
            errors.append(f"Failed to load config from {config_dir.path}: {e}")
            continue
        if document is None:
            continue
        documents.append(document)
        contributed.append(config_dir)

    for message in errors:
        logger.warning("%s", message)

    merged = deep_merge_configs(documents, opts.field_overlaps)
    logger.debug(
        "Merged %d config(s) from %d discovered director%s",
        len(documents),
        len(discovered),
        "y" if len(discovered) == 1 else "ies",
    )
    return HierarchicalConfigResult(
        config=merged,
        discovered_dirs=tuple(discovered),
        resolved_config_dirs=tuple(contributed),
        errors=tuple(errors),
    )
