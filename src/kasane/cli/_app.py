"""CliApp — Typer アプリケーション定義。

設定階層を調べるための検査用コマンド群。
stdout には結果のみ、警告・エラーは stderr に出力する。
"""

from __future__ import annotations

import asyncio
import importlib.metadata
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from kasane.config import load_hierarchical_config
from kasane.discovery import BoundaryChecker, discover_config, find_project_root
from kasane.models.boundary import TraversalSecurityOptions
from kasane.models.discovery import (
    DEFAULT_ROOT_DETECTION_DEPTH,
    ConfigDiscoveryOptions,
)
from kasane.models.exit_code import ExitCode
from kasane.models.hierarchy import (
    DEFAULT_CONFIG_DIR_NAME,
    DEFAULT_CONFIG_FILE_NAME,
    DEFAULT_ENCODING,
    DEFAULT_MAX_LEVELS,
    HierarchicalConfigResult,
    HierarchicalDiscoveryOptions,
)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_OVERLAP_SEPARATOR = "="

app = typer.Typer(
    name="kasane",
    help="Inspect layered configuration across a directory hierarchy.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("kasane"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def _main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log discovery steps to stderr.")
    ] = False,
) -> None:
    """Inspect layered configuration across a directory hierarchy."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=_LOG_FORMAT, stream=sys.stderr)


# --- 共通オプション ---

DirNameOption = Annotated[
    str, typer.Option("--dir-name", help="Config directory name searched at each level.")
]
FileOption = Annotated[
    str, typer.Option("--file", help="Config file name inside the config directory.")
]
StartOption = Annotated[
    Path | None,
    typer.Option("--start", help="Starting directory (default: current directory)."),
]
MaxLevelsOption = Annotated[
    int,
    typer.Option("--max-levels", help="Maximum number of levels to walk.", min=1),
]
EncodingOption = Annotated[
    str, typer.Option("--encoding", help="Character encoding of config files.")
]
SecureOption = Annotated[
    bool,
    typer.Option("--secure", help="Apply traversal boundary checks while walking."),
]


def _parse_overlaps(values: list[str]) -> dict[str, str]:
    """FIELD=MODE 形式の指定を辞書に変換する。モードの検証はモデル側で行う。

    '=' を含まない、またはフィールド名が空の指定は INPUT_ERROR で終了する。
    """
    overlaps: dict[str, str] = {}
    for value in values:
        field_path, sep, mode = value.rpartition(_OVERLAP_SEPARATOR)
        if not sep or not field_path:
            print(
                f"Error: Invalid --overlap value '{value}'. Expected FIELD=MODE.",
                file=sys.stderr,
            )
            raise typer.Exit(code=ExitCode.INPUT_ERROR)
        overlaps[field_path] = mode
    return overlaps


def _build_options(
    *,
    dir_name: str,
    file_name: str,
    start: Path | None,
    max_levels: int,
    secure: bool,
    encoding: str = DEFAULT_ENCODING,
    path_fields: list[str] | None = None,
    path_array_fields: list[str] | None = None,
    overlaps: dict[str, str] | None = None,
) -> HierarchicalDiscoveryOptions:
    """CLI オプションから HierarchicalDiscoveryOptions を構築する。

    不正な値は stderr にエラーを出力し INPUT_ERROR で終了する。
    """
    try:
        return HierarchicalDiscoveryOptions(
            config_dir_name=dir_name,
            config_file_name=file_name,
            starting_dir=start,
            max_levels=max_levels,
            encoding=encoding,
            path_fields=tuple(path_fields or ()),
            resolve_path_array=tuple(path_array_fields or ()),
            field_overlaps=overlaps or {},
            traversal_security=TraversalSecurityOptions() if secure else None,
        )
    except ValidationError as e:
        print(f"Error: Invalid options: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None


def _print_errors(result: HierarchicalConfigResult) -> None:
    for error in result.errors:
        print(f"Warning: {error}", file=sys.stderr)


@app.command()
def show(
    dir_name: DirNameOption = DEFAULT_CONFIG_DIR_NAME,
    file_name: FileOption = DEFAULT_CONFIG_FILE_NAME,
    start: StartOption = None,
    max_levels: MaxLevelsOption = DEFAULT_MAX_LEVELS,
    path_field: Annotated[
        list[str] | None,
        typer.Option(
            "--path-field", help="Dot-path of a field holding a relative path."
        ),
    ] = None,
    path_array_field: Annotated[
        list[str] | None,
        typer.Option(
            "--path-array-field", help="Dot-path of a field holding a list of paths."
        ),
    ] = None,
    overlap: Annotated[
        list[str] | None,
        typer.Option(
            "--overlap", help="Array merge policy, FIELD=override|append|prepend."
        ),
    ] = None,
    secure: SecureOption = False,
    encoding: EncodingOption = DEFAULT_ENCODING,
) -> None:
    """Print the merged configuration as JSON."""
    options = _build_options(
        dir_name=dir_name,
        file_name=file_name,
        start=start,
        max_levels=max_levels,
        secure=secure,
        encoding=encoding,
        path_fields=path_field,
        path_array_fields=path_array_field,
        overlaps=_parse_overlaps(overlap or []),
    )
    result = asyncio.run(load_hierarchical_config(options))
    _print_errors(result)
    print(json.dumps(result.config, indent=2, ensure_ascii=False, default=str))


@app.command()
def dirs(
    dir_name: DirNameOption = DEFAULT_CONFIG_DIR_NAME,
    file_name: FileOption = DEFAULT_CONFIG_FILE_NAME,
    start: StartOption = None,
    max_levels: MaxLevelsOption = DEFAULT_MAX_LEVELS,
    secure: SecureOption = False,
    encoding: EncodingOption = DEFAULT_ENCODING,
) -> None:
    """List discovered config directories, nearest first."""
    options = _build_options(
        dir_name=dir_name,
        file_name=file_name,
        start=start,
        max_levels=max_levels,
        secure=secure,
        encoding=encoding,
    )
    result = asyncio.run(load_hierarchical_config(options))
    _print_errors(result)

    if not result.discovered_dirs:
        print(f"No '{dir_name}' directories found.", file=sys.stderr)
        raise typer.Exit(code=ExitCode.NOT_FOUND)

    loaded = {d.path for d in result.resolved_config_dirs}
    table = Table(title="Config directories")
    table.add_column("Level", justify="right")
    table.add_column("Path", overflow="fold")
    table.add_column("Loaded")
    for config_dir in result.discovered_dirs:
        table.add_row(
            str(config_dir.level),
            config_dir.path,
            "yes" if config_dir.path in loaded else "no",
        )
    Console().print(table)
    print(
        f"{len(result.discovered_dirs)} found, {len(loaded)} loaded.",
        file=sys.stderr,
    )


@app.command()
def root(
    start: Annotated[
        Path | None, typer.Argument(help="Starting directory (default: cwd).")
    ] = None,
    max_depth: Annotated[
        int,
        typer.Option("--max-depth", help="Maximum directories to inspect.", min=1),
    ] = DEFAULT_ROOT_DETECTION_DEPTH,
) -> None:
    """Print the nearest project root."""
    start_path = start if start is not None else Path.cwd()
    result = asyncio.run(find_project_root(start_path, max_depth=max_depth))
    if not result.found or result.root_path is None:
        print(f"No project root found from {start_path}.", file=sys.stderr)
        raise typer.Exit(code=ExitCode.NOT_FOUND)

    print(result.root_path)
    if result.matched_marker is not None:
        print(f"Marker: {result.matched_marker.name}", file=sys.stderr)


@app.command()
def discover(
    directory: Annotated[Path, typer.Argument(help="Directory to search.")],
    app_name: Annotated[str, typer.Option("--app", help="Application name.")],
    no_hidden: Annotated[
        bool, typer.Option("--no-hidden", help="Skip hidden naming patterns.")
    ] = False,
) -> None:
    """Find the config file for an application in one directory."""
    try:
        options = ConfigDiscoveryOptions(app_name=app_name, search_hidden=not no_hidden)
    except ValidationError as e:
        print(f"Error: Invalid options: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    result = asyncio.run(discover_config(directory, options))
    if result.config is None:
        print(f"No config file for '{app_name}' in {directory}.", file=sys.stderr)
        raise typer.Exit(code=ExitCode.NOT_FOUND)

    if result.multiple_config_warning is not None:
        ignored = ", ".join(c.path for c in result.multiple_config_warning.ignored)
        print(f"Warning: Ignored config files: {ignored}", file=sys.stderr)
    print(result.config.absolute_path)


@app.command()
def check(
    path: Annotated[str, typer.Argument(help="Path to check.")],
    start: Annotated[
        str | None,
        typer.Option("--start", help="Walk start, enables the relative depth check."),
    ] = None,
) -> None:
    """Check a path against the default traversal boundaries."""
    result = BoundaryChecker().check(path, start)
    if not result.allowed:
        print(f"blocked: {result.reason}")
        raise typer.Exit(code=ExitCode.BOUNDARY_VIOLATION)
    print("allowed")
