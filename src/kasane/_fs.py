"""非同期ファイルシステムアクセサー。

各操作は独立した await ポイントであり、呼び出し側は逐次 await する。
存在しないパスは False / None として扱い、それ以外の OSError
（権限エラー等）は呼び出し側へ送出する。
"""

from __future__ import annotations

import os
import stat as stat_module
from pathlib import Path

import anyio
import anyio.to_thread

_MISSING_ERRORS: tuple[type[OSError], ...] = (FileNotFoundError, NotADirectoryError)


async def stat_mode(path: str | Path) -> int | None:
    """path の st_mode を返す。存在しなければ None。

    Raises:
        OSError: 存在しない以外のアクセスエラー。
    """
    try:
        st = await anyio.Path(path).stat()
    except _MISSING_ERRORS:
        return None
    return st.st_mode


async def exists(path: str | Path) -> bool:
    """path が存在するか。"""
    return await stat_mode(path) is not None


async def _access(path: str | Path, mode: int) -> bool:
    return await anyio.to_thread.run_sync(os.access, path, mode)


async def is_directory_readable(path: str | Path) -> bool:
    """path が一覧・走査可能なディレクトリか。"""
    mode = await stat_mode(path)
    if mode is None or not stat_module.S_ISDIR(mode):
        return False
    return await _access(path, os.R_OK | os.X_OK)


async def is_file_readable(path: str | Path) -> bool:
    """path が読み取り可能な通常ファイルか。"""
    mode = await stat_mode(path)
    if mode is None or not stat_module.S_ISREG(mode):
        return False
    return await _access(path, os.R_OK)


async def read_file(path: str | Path, encoding: str) -> str:
    """path をテキストとして読み込む。

    Raises:
        OSError: 読み込みに失敗した場合。
        UnicodeDecodeError: encoding でデコードできない場合。
    """
    return await anyio.Path(path).read_text(encoding=encoding)
