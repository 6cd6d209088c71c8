"""パス解決のテスト。

相対パスの解決、配列要素の解決、file:// URL の正規化、
予約キーによるパス設定の拒否を検証する。
"""

from __future__ import annotations

import os

import pytest

from kasane.config import (
    MISSING,
    get_nested_value,
    is_unsafe_key,
    normalize_path_input,
    resolve_config_paths,
    resolve_single_path,
    set_nested_value,
)
from kasane.errors import PathInputError

_POSIX_ONLY = pytest.mark.skipif(os.name == "nt", reason="POSIX paths required")

# =============================================================================
# ドット記法アクセス
# =============================================================================


class TestGetNestedValue:
    """get_nested_value の動作を検証。"""

    def test_nested(self) -> None:
        assert get_nested_value({"a": {"b": 1}}, "a.b") == 1

    def test_missing(self) -> None:
        assert get_nested_value({"a": {}}, "a.b") is MISSING

    def test_through_scalar(self) -> None:
        assert get_nested_value({"a": 1}, "a.b") is MISSING

    def test_none_value_is_not_missing(self) -> None:
        assert get_nested_value({"a": None}, "a") is None


class TestSetNestedValue:
    """set_nested_value の動作を検証。"""

    def test_creates_intermediate(self) -> None:
        obj: dict[str, object] = {}
        assert set_nested_value(obj, "a.b.c", 1)
        assert obj == {"a": {"b": {"c": 1}}}

    def test_scalar_in_the_way(self) -> None:
        obj: dict[str, object] = {"a": 1}
        assert not set_nested_value(obj, "a.b", 2)
        assert obj == {"a": 1}

    @pytest.mark.parametrize(
        "path", ["__proto__.x", "a.constructor", "prototype", "a.__class__.b"]
    )
    def test_reserved_keys_rejected(self, path: str) -> None:
        """予約名を含むパスへの設定は何もしない。"""
        obj: dict[str, object] = {"a": {}}
        assert not set_nested_value(obj, path, "polluted")
        assert obj == {"a": {}}

    def test_reserved_key_does_not_leak(self) -> None:
        obj: dict[str, object] = {}
        set_nested_value(obj, "__proto__.x", 1)
        other: dict[str, object] = {}
        assert "x" not in other
        assert obj == {}


class TestIsUnsafeKey:
    """is_unsafe_key の判定を検証。"""

    @pytest.mark.parametrize("key", ["__proto__", "constructor", "prototype", "__dict__"])
    def test_unsafe(self, key: str) -> None:
        assert is_unsafe_key(key)

    @pytest.mark.parametrize("key", ["proto", "_private", "__partial", "name"])
    def test_safe(self, key: str) -> None:
        assert not is_unsafe_key(key)


# =============================================================================
# 入力正規化
# =============================================================================


@_POSIX_ONLY
class TestNormalizePathInput:
    """normalize_path_input の動作を検証。"""

    def test_plain_string_unchanged(self) -> None:
        assert normalize_path_input("./dist") == "./dist"

    def test_file_url_converted(self) -> None:
        assert normalize_path_input("file:///opt/data%20dir/x") == "/opt/data dir/x"

    def test_file_url_localhost(self) -> None:
        assert normalize_path_input("file://localhost/srv/x") == "/srv/x"

    def test_file_url_in_list(self) -> None:
        assert normalize_path_input(["file:///a", "b", 3]) == ["/a", "b", 3]

    def test_remote_host_rejected(self) -> None:
        with pytest.raises(PathInputError, match="Invalid file:// URL"):
            normalize_path_input("file://server/share")

    @pytest.mark.parametrize("value", ["http://example.com/x", "HTTPS://example.com"])
    def test_http_rejected(self, value: str) -> None:
        with pytest.raises(PathInputError, match="Non-file URLs"):
            normalize_path_input(value)

    def test_null_byte_rejected(self) -> None:
        with pytest.raises(PathInputError, match="null bytes"):
            normalize_path_input("dist\0evil")

    def test_encoded_null_byte_rejected(self) -> None:
        with pytest.raises(PathInputError, match="null bytes"):
            normalize_path_input("file:///tmp/a%00b")

    def test_non_string_unchanged(self) -> None:
        assert normalize_path_input(42) == 42


# =============================================================================
# パス解決
# =============================================================================


@_POSIX_ONLY
class TestResolveSinglePath:
    """resolve_single_path の動作を検証。"""

    def test_relative(self) -> None:
        assert resolve_single_path("./dist", "/p/.cfg") == "/p/.cfg/dist"

    def test_parent_reference(self) -> None:
        assert resolve_single_path("../out", "/p/.cfg") == "/p/out"

    def test_absolute_unchanged(self) -> None:
        assert resolve_single_path("/abs/dist", "/p/.cfg") == "/abs/dist"

    def test_empty_unchanged(self) -> None:
        assert resolve_single_path("", "/p/.cfg") == ""


@_POSIX_ONLY
class TestResolveConfigPaths:
    """resolve_config_paths の動作を検証。"""

    def test_path_field_resolved(self) -> None:
        result = resolve_config_paths({"out": "./dist"}, "/p/.cfg", ["out"])
        assert result == {"out": "/p/.cfg/dist"}

    def test_absolute_untouched(self) -> None:
        result = resolve_config_paths({"out": "/abs"}, "/p/.cfg", ["out"])
        assert result == {"out": "/abs"}

    def test_nested_field(self) -> None:
        doc = {"build": {"out": "dist", "name": "x"}}
        result = resolve_config_paths(doc, "/p/.cfg", ["build.out"])
        assert result == {"build": {"out": "/p/.cfg/dist", "name": "x"}}

    def test_missing_field_ignored(self) -> None:
        assert resolve_config_paths({"a": 1}, "/p", ["out", "x.y"]) == {"a": 1}

    def test_array_field_elementwise(self) -> None:
        doc = {"include": ["src", "/abs", 3]}
        result = resolve_config_paths(doc, "/p", resolve_path_array=["include"])
        assert result == {"include": ["/p/src", "/abs", 3]}

    def test_array_untouched_without_array_flag(self) -> None:
        doc = {"include": ["src"]}
        assert resolve_config_paths(doc, "/p", ["include"]) == {"include": ["src"]}

    def test_mapping_values_resolved(self) -> None:
        doc = {"aliases": {"a": "lib/a", "b": ["x", "/y"], "n": 1}}
        result = resolve_config_paths(doc, "/p", ["aliases"])
        assert result == {"aliases": {"a": "/p/lib/a", "b": ["/p/x", "/y"], "n": 1}}

    def test_file_url_resolved(self) -> None:
        result = resolve_config_paths({"out": "file:///srv/out"}, "/p", ["out"])
        assert result == {"out": "/srv/out"}

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(PathInputError):
            resolve_config_paths({"out": "https://example.com"}, "/p", ["out"])

    def test_reserved_field_is_noop(self) -> None:
        doc = {"a": "x"}
        assert resolve_config_paths(doc, "/p", ["__proto__.x", "constructor"]) == doc

    def test_input_not_mutated(self) -> None:
        doc = {"build": {"out": "dist"}, "include": ["src"]}
        resolve_config_paths(doc, "/p", ["build.out"], ["include"])
        assert doc == {"build": {"out": "dist"}, "include": ["src"]}
