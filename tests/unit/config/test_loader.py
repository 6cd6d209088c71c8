"""設定ファイルローダーのテスト。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from kasane.config import (
    find_config_file_with_extension,
    load_config_from_directory,
    parse_config_text,
)
from kasane.errors import ConfigLoadError

_SKIP_PERMISSION = pytest.mark.skipif(
    os.name == "nt" or os.getuid() == 0,
    reason="POSIX permissions required and not running as root",
)


def _write(path: Path, content: str, encoding: str = "utf-8") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding=encoding)
    return path


# =============================================================================
# parse_config_text()
# =============================================================================


class TestParseConfigText:
    """拡張子によるパーサー選択を検証。"""

    def test_yaml(self) -> None:
        assert parse_config_text("a: 1\nb: [x, y]\n", "c.yaml") == {"a": 1, "b": ["x", "y"]}

    def test_toml(self) -> None:
        assert parse_config_text('a = 1\n[b]\nc = "x"\n', "c.toml") == {
            "a": 1,
            "b": {"c": "x"},
        }

    def test_json(self) -> None:
        assert parse_config_text('{"a": [1, 2]}', "c.JSON") == {"a": [1, 2]}

    def test_unknown_suffix_is_yaml(self) -> None:
        assert parse_config_text("a: 1", ".myapprc") == {"a": 1}

    def test_empty_yaml_is_none(self) -> None:
        assert parse_config_text("", "c.yaml") is None

    def test_syntax_error_raises(self) -> None:
        with pytest.raises(yaml.YAMLError):
            parse_config_text("a: [1, 2", "c.yaml")


# =============================================================================
# find_config_file_with_extension()
# =============================================================================


class TestFindConfigFileWithExtension:
    """.yaml / .yml の代替拡張子を検証。"""

    async def test_exact(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "a: 1")
        found = await find_config_file_with_extension(str(tmp_path), "config.yaml")
        assert found == os.path.join(str(tmp_path), "config.yaml")

    async def test_yml_alternative(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yml", "a: 1")
        found = await find_config_file_with_extension(str(tmp_path), "config.yaml")
        assert found == os.path.join(str(tmp_path), "config.yml")

    async def test_yaml_alternative(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "a: 1")
        found = await find_config_file_with_extension(str(tmp_path), "config.yml")
        assert found == os.path.join(str(tmp_path), "config.yaml")

    async def test_no_alternative_for_toml(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "a: 1")
        assert await find_config_file_with_extension(str(tmp_path), "config.toml") is None


# =============================================================================
# load_config_from_directory()
# =============================================================================


class TestLoadConfigFromDirectory:
    """読み込み成功時の動作を検証。"""

    async def test_loads_yaml(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "name: app\n")
        assert await load_config_from_directory(str(tmp_path), "config.yaml") == {
            "name": "app"
        }

    async def test_resolves_paths_against_directory(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "out: ./dist\ninclude: [src, lib]\n")
        result = await load_config_from_directory(
            str(tmp_path),
            "config.yaml",
            path_fields=["out"],
            resolve_path_array=["include"],
        )
        assert result == {
            "out": os.path.join(str(tmp_path), "dist"),
            "include": [
                os.path.join(str(tmp_path), "src"),
                os.path.join(str(tmp_path), "lib"),
            ],
        }

    async def test_custom_parser(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.ini", "key=value\n")

        def parser(text: str) -> object:
            key, _, value = text.strip().partition("=")
            return {key: value}

        result = await load_config_from_directory(
            str(tmp_path), "config.ini", parser=parser
        )
        assert result == {"key": "value"}

    async def test_encoding(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "name: 設定\n", encoding="utf-16")
        result = await load_config_from_directory(
            str(tmp_path), "config.yaml", encoding="utf-16"
        )
        assert result == {"name": "設定"}


class TestLoadConfigFromDirectoryNoContribution:
    """寄与なし（None）として扱われるケースを検証。"""

    async def test_missing_file(self, tmp_path: Path) -> None:
        assert await load_config_from_directory(str(tmp_path), "config.yaml") is None

    async def test_missing_directory(self, tmp_path: Path) -> None:
        missing = str(tmp_path / "missing")
        assert await load_config_from_directory(missing, "config.yaml") is None

    async def test_parse_error(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "a: [1, 2")
        assert await load_config_from_directory(str(tmp_path), "config.yaml") is None

    @pytest.mark.parametrize("content", ["", "null\n", "- a\n- b\n", "42\n"])
    async def test_non_mapping_document(self, tmp_path: Path, content: str) -> None:
        _write(tmp_path / "config.yaml", content)
        assert await load_config_from_directory(str(tmp_path), "config.yaml") is None

    async def test_non_string_top_level_key(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "8080: web\nname: x\n")
        assert await load_config_from_directory(str(tmp_path), "config.yaml") is None

    async def test_decode_error(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_bytes(b"name: \xff\xfe\xfd\n")
        assert await load_config_from_directory(str(tmp_path), "config.yaml") is None

    async def test_parser_exception(self, tmp_path: Path) -> None:
        _write(tmp_path / "config.yaml", "a: 1")

        def parser(text: str) -> object:
            raise RuntimeError("boom")

        result = await load_config_from_directory(
            str(tmp_path), "config.yaml", parser=parser
        )
        assert result is None

    @_SKIP_PERMISSION
    async def test_unreadable_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.yaml", "a: 1")
        path.chmod(0o000)
        try:
            result = await load_config_from_directory(str(tmp_path), "config.yaml")
        finally:
            path.chmod(0o644)
        assert result is None


class TestLoadConfigFromDirectoryErrors:
    """パスフィールドの不正値は ConfigLoadError。"""

    async def test_http_url_in_path_field(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "config.yaml", "out: https://example.com/x\n")
        with pytest.raises(ConfigLoadError) as exc_info:
            await load_config_from_directory(
                str(tmp_path), "config.yaml", path_fields=["out"]
            )
        assert exc_info.value.source == str(path)
        assert "Non-file URLs" in str(exc_info.value)
