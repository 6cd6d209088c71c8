"""設定ファイルローダー。

1 つの設定ディレクトリから設定ファイルを読み込み、パース・パス解決まで行う。
ファイルが無い、読めない、パースできない、トップレベルがマッピングでない場合は
「この階層の寄与なし」として None を返す（debug ログのみ）。
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from collections.abc import Callable, Mapping, Sequence
from typing import Final, TypeAlias

import yaml

from kasane import _fs
from kasane.config._paths import resolve_config_paths
from kasane.errors import ConfigLoadError, PathInputError
from kasane.models.hierarchy import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

ConfigTextParser: TypeAlias = Callable[[str], object]
"""設定テキストをキー/値ツリーへ変換するパーサー。"""

_YAML_SUFFIXES: Final[tuple[str, str]] = (".yaml", ".yml")


def parse_config_text(text: str, path: str = "") -> object:
    """ファイル拡張子に応じて設定テキストをパースする。

    .toml は tomllib、.json は json、それ以外は YAML として扱う。

    Raises:
        tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError:
            構文エラーの場合。
    """
    suffix = os.path.splitext(path)[1].lower()
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _alternative_file_name(file_name: str) -> str | None:
    stem, suffix = os.path.splitext(file_name)
    match suffix.lower():
        case ".yaml":
            return f"{stem}.yml"
        case ".yml":
            return f"{stem}.yaml"
        case _:
            return None


async def find_config_file_with_extension(config_dir: str, file_name: str) -> str | None:
    """config_dir 内の設定ファイルを探す。

    file_name が無く拡張子が .yaml / .yml の場合はもう一方も試す。

    Returns:
        読み取り可能なファイルのパス。見つからなければ None。

    Raises:
        OSError: 存在しない以外のアクセスエラー。
    """
    primary = os.path.join(config_dir, file_name)
    if await _fs.is_file_readable(primary):
        return primary

    alternative = _alternative_file_name(file_name)
    if alternative is None:
        return None
    candidate = os.path.join(config_dir, alternative)
    if await _fs.is_file_readable(candidate):
        logger.debug("Using alternative config file name: %s", candidate)
        return candidate
    return None


async def load_config_from_directory(
    config_dir: str,
    file_name: str,
    *,
    encoding: str = DEFAULT_ENCODING,
    path_fields: Sequence[str] = (),
    resolve_path_array: Sequence[str] = (),
    parser: ConfigTextParser | None = None,
) -> dict[str, object] | None:
    """config_dir の設定ファイルを読み込み、パス解決済みのドキュメントを返す。

    Args:
        config_dir: 設定ディレクトリ（設定ファイルを直接含む）。
        file_name: 設定ファイル名。
        encoding: 文字エンコーディング。
        path_fields: config_dir 基準で解決するパスフィールド。
        resolve_path_array: 配列要素も解決するフィールド。
        parser: テキストパーサー。None の場合は parse_config_text() を拡張子で使う。

    Returns:
        ドキュメント。この階層の寄与が無い場合は None。

    Raises:
        ConfigLoadError: パスフィールドの値が不正な場合。
    """
    try:
        config_path = await find_config_file_with_extension(config_dir, file_name)
    except OSError as e:
        logger.debug("Cannot access config file in %s: %s", config_dir, e)
        return None
    if config_path is None:
        logger.debug("No config file in %s", config_dir)
        return None

    try:
        text = await _fs.read_file(config_path, encoding)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Failed to read %s: %s", config_path, e)
        return None

    try:
        if parser is not None:
            document = parser(text)
        else:
            document = parse_config_text(text, config_path)
    except Exception as e:
        logger.debug("Failed to parse %s: %s", config_path, e)
        return None

    if not isinstance(document, Mapping):
        logger.debug(
            "Ignoring %s: top-level value is %s, not a mapping",
            config_path,
            type(document).__name__,
        )
        return None

    non_str_keys = [key for key in document if not isinstance(key, str)]
    if non_str_keys:
        logger.debug(
            "Ignoring %s: top-level keys must be strings, got %r",
            config_path,
            non_str_keys,
        )
        return None

    try:
        resolved = resolve_config_paths(
            document, config_dir, path_fields, resolve_path_array
        )
    except PathInputError as e:
        raise ConfigLoadError(config_path, str(e)) from e

    logger.debug("Loaded config from %s", config_path)
    return resolved
