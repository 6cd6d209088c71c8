"""設定値内の相対パス解決。

読み込んだ直後のドキュメントに対し、指定されたパスフィールドの相対パスを
そのファイルのディレクトリ基準の絶対パスへ書き換える。マージ後は各値の
出自ディレクトリが失われるため、読み込み時点で解決しておく必要がある。
"""

from __future__ import annotations

import copy
import logging
import os
import re
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Final
from urllib.parse import urlparse
from urllib.request import url2pathname

from kasane.errors import PathInputError

logger = logging.getLogger(__name__)

_PATH_SEPARATOR: Final[str] = "."

# 信頼できない設定ファイル由来のドット記法で構造的な名前を書き換えさせない
_RESERVED_KEYS: Final[frozenset[str]] = frozenset(
    {"__proto__", "constructor", "prototype"}
)

_HTTP_URL_RE: Final[re.Pattern[str]] = re.compile(r"^https?://", re.IGNORECASE)
_FILE_URL_RE: Final[re.Pattern[str]] = re.compile(r"^file://", re.IGNORECASE)


class _Missing:
    """get_nested_value() の「値なし」を None と区別するための番兵。"""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[_Missing] = _Missing()


def is_unsafe_key(key: str) -> bool:
    """予約名、または dunder 形式のキーか。"""
    return key in _RESERVED_KEYS or (key.startswith("__") and key.endswith("__"))


# =============================================================================
# 入力正規化
# =============================================================================


def _normalize_path_string(value: str) -> str:
    if "\0" in value:
        raise PathInputError("Path contains null bytes")
    if _HTTP_URL_RE.match(value):
        raise PathInputError(f"Non-file URLs are not supported in path fields: {value}")
    if not _FILE_URL_RE.match(value):
        return value

    try:
        parsed = urlparse(value)
    except ValueError as e:
        raise PathInputError(f"Invalid file:// URL: {value}") from e
    if parsed.netloc not in ("", "localhost"):
        raise PathInputError(f"Invalid file:// URL: {value}")
    decoded = url2pathname(parsed.path)
    if "\0" in decoded:
        raise PathInputError("Decoded path contains null bytes")
    return decoded


def normalize_path_input(value: object) -> object:
    """パスフィールドの値を正規化する。

    file:// URL は通常のパスへ変換（パーセントデコード込み）、
    その他の文字列はそのまま。リストは文字列要素を、マッピングは値を再帰的に処理する。

    Raises:
        PathInputError: http(s):// URL、NUL バイト、不正な file:// URL の場合。
    """
    if isinstance(value, str):
        return _normalize_path_string(value)
    if isinstance(value, list):
        return [_normalize_path_string(v) if isinstance(v, str) else v for v in value]
    if isinstance(value, Mapping):
        return {k: normalize_path_input(v) for k, v in value.items()}
    return value


# =============================================================================
# ドット記法アクセス
# =============================================================================


def get_nested_value(obj: object, path: str) -> object:
    """ドット記法で値を取得する。途中で辿れなければ MISSING。"""
    current = obj
    for key in path.split(_PATH_SEPARATOR):
        if not isinstance(current, Mapping) or key not in current:
            return MISSING
        current = current[key]
    return current


def set_nested_value(obj: MutableMapping[str, object], path: str, value: object) -> bool:
    """ドット記法で値を設定する。

    いずれかのセグメントが予約名なら何もしない。途中のキーが無ければ
    空の辞書を作り、マッピング以外の値に突き当たった場合も何もしない。

    Returns:
        設定した場合 True。
    """
    keys = path.split(_PATH_SEPARATOR)
    if any(is_unsafe_key(key) for key in keys):
        logger.debug("Refusing to set reserved path: %s", path)
        return False

    current: MutableMapping[str, object] = obj
    for key in keys[:-1]:
        child = current.get(key)
        if child is None:
            child = {}
            current[key] = child
        if not isinstance(child, MutableMapping):
            return False
        current = child
    current[keys[-1]] = value
    return True


# =============================================================================
# パス解決
# =============================================================================


def resolve_single_path(path_str: str, config_dir: str) -> str:
    """相対パスを config_dir 基準で解決する。空文字列・絶対パスはそのまま。"""
    if not path_str or os.path.isabs(path_str):
        return path_str
    return os.path.normpath(os.path.join(config_dir, path_str))


def _resolve_list(items: list[object], config_dir: str) -> list[object]:
    return [resolve_single_path(i, config_dir) if isinstance(i, str) else i for i in items]


def resolve_path_value(
    value: object, config_dir: str, resolve_array_elements: bool
) -> object:
    """パスフィールドの値を解決する。

    - 文字列: config_dir 基準で解決
    - リスト: resolve_array_elements が True の場合のみ文字列要素を解決
    - マッピング: 文字列値とリスト値の文字列要素を解決（1 階層のみ）
    - その他: そのまま
    """
    if isinstance(value, str):
        return resolve_single_path(value, config_dir)
    if isinstance(value, list):
        return _resolve_list(value, config_dir) if resolve_array_elements else value
    if isinstance(value, Mapping):
        resolved: dict[object, object] = {}
        for key, item in value.items():
            if isinstance(item, str):
                resolved[key] = resolve_single_path(item, config_dir)
            elif isinstance(item, list):
                resolved[key] = _resolve_list(item, config_dir)
            else:
                resolved[key] = item
        return resolved
    return value


def resolve_config_paths(
    config: Mapping[str, object],
    config_dir: str,
    path_fields: Sequence[str] = (),
    resolve_path_array: Sequence[str] = (),
) -> dict[str, object]:
    """ドキュメント内のパスフィールドを config_dir 基準で解決する。

    入力は変更せず、解決済みのコピーを返す。存在しないフィールド、
    予約名を含むフィールドは無視する（エラーにしない）。
    resolve_path_array のフィールドは配列の各文字列要素も解決する。

    Args:
        config: 読み込んだ直後のドキュメント。
        config_dir: 設定ファイルを直接含むディレクトリ。
        path_fields: 解決対象のフィールド（ドット記法）。
        resolve_path_array: 配列要素も解決するフィールド。

    Returns:
        解決済みのドキュメント。

    Raises:
        PathInputError: パスフィールドに不正な値がある場合。
    """
    resolved: dict[str, object] = copy.deepcopy(dict(config))
    array_fields = set(resolve_path_array)
    fields = list(dict.fromkeys([*path_fields, *resolve_path_array]))

    for field_path in fields:
        if any(is_unsafe_key(key) for key in field_path.split(_PATH_SEPARATOR)):
            logger.debug("Skipping reserved path field: %s", field_path)
            continue
        value = get_nested_value(resolved, field_path)
        if value is MISSING:
            continue
        normalized = normalize_path_input(value)
        set_nested_value(
            resolved,
            field_path,
            resolve_path_value(normalized, config_dir, field_path in array_fields),
        )

    return resolved
