"""ディレクトリ探索の境界チェック。

設定探索が機密性の高いシステムディレクトリへ踏み込まないよう、
禁止ディレクトリ・深さ制限によってパスの可否を判定する。
比較はすべてプレースホルダー展開後の正規化済み絶対パスで行い、
シンボリックリンクは辿らない（純粋なパス計算）。
"""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Iterable
from pathlib import PurePath
from typing import Final

from kasane.errors import TraversalBoundaryError
from kasane.models.boundary import (
    DEFAULT_MAX_ABSOLUTE_DEPTH,
    DEFAULT_MAX_RELATIVE_DEPTH,
    PathEnvironment,
    TraversalBoundary,
    TraversalCheckResult,
    TraversalSecurityOptions,
)

logger = logging.getLogger(__name__)

_POSIX_FORBIDDEN: Final[tuple[str, ...]] = (
    "/etc",
    "/usr",
    "/var",
    "/sys",
    "/proc",
    "/bin",
    "/sbin",
    "/lib",
    "/lib64",
    "/opt",
    "/root",
    "$HOME/.ssh",
    "$HOME/.gnupg",
    "$HOME/.aws",
    "$HOME/.config/gcloud",
)

_WINDOWS_FORBIDDEN: Final[tuple[str, ...]] = (
    "C:\\Windows",
    "C:\\Windows\\System32",
    "C:\\Program Files",
    "C:\\Program Files (x86)",
    "$HOME\\.ssh",
    "$HOME\\.aws",
)

_POSIX_BOUNDARIES: Final[tuple[str, ...]] = ("$HOME", "/tmp", "/private/tmp", "/Users")
_WINDOWS_BOUNDARIES: Final[tuple[str, ...]] = ("$HOME", "C:\\Users")

# (パターン, 置換対象の環境属性)。%VAR% 形式は大文字小文字を区別しない。
_PLACEHOLDERS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"\$HOME"), "home"),
    (re.compile(r"%HOME%", re.IGNORECASE), "home"),
    (re.compile(r"%USERPROFILE%", re.IGNORECASE), "home"),
    (re.compile(r"\$USER"), "user"),
    (re.compile(r"\$TMPDIR"), "tmpdir"),
    (re.compile(r"%TEMP%", re.IGNORECASE), "tmpdir"),
    (re.compile(r"%TMP%", re.IGNORECASE), "tmpdir"),
)


def _is_windows() -> bool:
    return sys.platform == "win32"


# =============================================================================
# パス計算
# =============================================================================


def expand_environment_variables(
    path_str: str, env: PathEnvironment | None = None
) -> str:
    """$HOME / $USER / $TMPDIR（と Windows の %VAR% 形式）を展開する。

    Args:
        path_str: プレースホルダーを含みうるパス文字列。
        env: 展開に使う環境。None の場合は現在のプロセスから取得する。

    Returns:
        展開済みのパス文字列。
    """
    environment = env if env is not None else PathEnvironment.from_process()
    result = path_str
    for pattern, attr in _PLACEHOLDERS:
        value: str = getattr(environment, attr)
        # 置換文字列のバックスラッシュを解釈させないため関数で渡す
        result = pattern.sub(lambda _m, v=value: v, result)
    return result


def _absolute(path_str: str) -> str:
    # POSIX の abspath は先頭 "//" を保持するが、同じファイルを指すため "/" に畳む
    result = os.path.abspath(path_str)
    if os.sep == "/" and result.startswith("//"):
        result = "/" + result.lstrip("/")
    return result


def normalize_path(path_str: str, env: PathEnvironment | None = None) -> str:
    """プレースホルダーを展開し、正規化済みの絶対パスを返す。"""
    return _absolute(expand_environment_variables(path_str, env))


def get_path_depth(path_str: str) -> int:
    """ファイルシステムルートからのセグメント数を返す。

    "/" は 0、"/home" は 1、"/home/user/project" は 3。
    """
    return len(PurePath(_absolute(path_str)).parts) - 1


def _is_within_normalized(check: str, boundary: str) -> bool:
    return PurePath(check).is_relative_to(boundary)


def is_path_within(
    check_path: str, boundary_path: str, env: PathEnvironment | None = None
) -> bool:
    """check_path が boundary_path 自身またはその配下か。"""
    environment = env if env is not None else PathEnvironment.from_process()
    return _is_within_normalized(
        normalize_path(check_path, environment),
        normalize_path(boundary_path, environment),
    )


def is_path_at_or_above(
    check_path: str, boundary_path: str, env: PathEnvironment | None = None
) -> bool:
    """check_path が boundary_path 自身またはその祖先か。"""
    return is_path_within(boundary_path, check_path, env)


# =============================================================================
# 境界定義
# =============================================================================


def default_traversal_boundary(env: PathEnvironment | None = None) -> TraversalBoundary:
    """プラットフォーム既定の境界定義を構築する。

    ユーザーのホームディレクトリそのものに解決される禁止エントリは除外する。
    root ユーザー（ホームが /root）が自分のツリーから締め出されないため。

    Args:
        env: プレースホルダー展開に使う環境。

    Returns:
        既定の TraversalBoundary。
    """
    environment = env if env is not None else PathEnvironment.from_process()
    raw_forbidden = _WINDOWS_FORBIDDEN if _is_windows() else _POSIX_FORBIDDEN
    home = _absolute(environment.home)
    forbidden = tuple(
        entry
        for entry in raw_forbidden
        if normalize_path(entry, environment) != home
    )
    return TraversalBoundary(
        forbidden=forbidden,
        boundaries=_WINDOWS_BOUNDARIES if _is_windows() else _POSIX_BOUNDARIES,
        max_absolute_depth=DEFAULT_MAX_ABSOLUTE_DEPTH,
        max_relative_depth=DEFAULT_MAX_RELATIVE_DEPTH,
    )


def resolve_traversal_boundary(
    options: TraversalSecurityOptions | None = None,
    env: PathEnvironment | None = None,
) -> TraversalBoundary:
    """オプションの未指定項目を既定値で補った境界定義を返す。"""
    defaults = default_traversal_boundary(env)
    if options is None:
        return defaults
    return TraversalBoundary(
        forbidden=(
            options.forbidden if options.forbidden is not None else defaults.forbidden
        ),
        boundaries=(
            options.boundaries
            if options.boundaries is not None
            else defaults.boundaries
        ),
        max_absolute_depth=(
            options.max_absolute_depth
            if options.max_absolute_depth is not None
            else defaults.max_absolute_depth
        ),
        max_relative_depth=(
            options.max_relative_depth
            if options.max_relative_depth is not None
            else defaults.max_relative_depth
        ),
    )


# =============================================================================
# チェック
# =============================================================================


def check_traversal_boundary(
    path_to_check: str,
    boundary: TraversalBoundary,
    start_path: str | None = None,
    env: PathEnvironment | None = None,
) -> TraversalCheckResult:
    """パスが境界定義の範囲内か判定する。

    判定順序:
    1. 禁止ディレクトリ自身またはその配下 → 拒否
    2. 絶対深さが max_absolute_depth を超える → 拒否
    3. start_path 指定時、候補が start_path の祖先で、段数差が
       max_relative_depth を超える → 拒否

    Args:
        path_to_check: 判定対象のパス。
        boundary: 適用する境界定義。
        start_path: 相対深さ計算の起点。
        env: プレースホルダー展開に使う環境。

    Returns:
        判定結果。副作用はない。
    """
    environment = env if env is not None else PathEnvironment.from_process()
    normalized = normalize_path(path_to_check, environment)

    for forbidden in boundary.forbidden:
        normalized_forbidden = normalize_path(forbidden, environment)
        if normalized == normalized_forbidden:
            return TraversalCheckResult(
                allowed=False,
                reason=f"Path '{normalized}' is a forbidden directory",
                violated_boundary=normalized_forbidden,
            )
        if _is_within_normalized(normalized, normalized_forbidden):
            return TraversalCheckResult(
                allowed=False,
                reason=(
                    f"Path '{normalized}' is within forbidden directory "
                    f"'{normalized_forbidden}'"
                ),
                violated_boundary=normalized_forbidden,
            )

    depth = get_path_depth(normalized)
    if depth > boundary.max_absolute_depth:
        return TraversalCheckResult(
            allowed=False,
            reason=(
                f"Path depth ({depth}) exceeds maximum absolute depth "
                f"({boundary.max_absolute_depth})"
            ),
        )

    if start_path is not None:
        normalized_start = normalize_path(start_path, environment)
        if normalized != normalized_start and _is_within_normalized(
            normalized_start, normalized
        ):
            relative_depth = get_path_depth(normalized_start) - depth
            if relative_depth > boundary.max_relative_depth:
                return TraversalCheckResult(
                    allowed=False,
                    reason=(
                        f"Relative traversal depth ({relative_depth}) exceeds "
                        f"maximum ({boundary.max_relative_depth})"
                    ),
                )

    return TraversalCheckResult(allowed=True)


class BoundaryChecker:
    """同一設定で繰り返しチェックするための境界チェッカー。

    環境（ホームディレクトリ等）と境界定義は構築時に一度だけ確定する。
    allow_unsafe_traversal 有効時は常に許可し、warn_on_override が True なら
    構築時に一度だけ警告を出す。
    """

    def __init__(
        self,
        options: TraversalSecurityOptions | None = None,
        env: PathEnvironment | None = None,
    ) -> None:
        self._options = options if options is not None else TraversalSecurityOptions()
        self._env = env if env is not None else PathEnvironment.from_process()
        self._boundary = resolve_traversal_boundary(self._options, self._env)
        self._soft_boundaries = frozenset(
            normalize_path(b, self._env) for b in self._boundary.boundaries
        )

        if self._options.allow_unsafe_traversal and self._options.warn_on_override:
            logger.warning(
                "SECURITY WARNING: Unsafe traversal is enabled. This bypasses "
                "security boundaries and allows access to sensitive directories."
            )

    @property
    def boundary(self) -> TraversalBoundary:
        """適用中の境界定義。"""
        return self._boundary

    @property
    def allow_unsafe_traversal(self) -> bool:
        return self._options.allow_unsafe_traversal

    def check(
        self, path_to_check: str, start_path: str | None = None
    ) -> TraversalCheckResult:
        """path_to_check の可否を判定する。"""
        if self._options.allow_unsafe_traversal:
            logger.debug("Unsafe traversal enabled, allowing: %s", path_to_check)
            return TraversalCheckResult(allowed=True)

        result = check_traversal_boundary(
            path_to_check, self._boundary, start_path, self._env
        )
        if not result.allowed:
            logger.debug("Traversal blocked: %s", result.reason)
        return result

    def is_soft_boundary(self, path: str) -> bool:
        """path がソフト境界そのものか。unsafe モードでは常に False。"""
        if self._options.allow_unsafe_traversal:
            return False
        return normalize_path(path, self._env) in self._soft_boundaries

    def ensure_allowed(self, path_to_check: str, start_path: str | None = None) -> str:
        """許可されていれば正規化済みパスを返し、拒否なら例外を送出する。

        Raises:
            TraversalBoundaryError: 境界違反の場合。
        """
        result = self.check(path_to_check, start_path)
        if not result.allowed:
            raise TraversalBoundaryError(
                path_to_check,
                result.reason or "Traversal blocked",
                result.violated_boundary,
            )
        return normalize_path(path_to_check, self._env)


def filter_allowed_paths(
    paths: Iterable[str],
    options: TraversalSecurityOptions | None = None,
    start_path: str | None = None,
    env: PathEnvironment | None = None,
) -> list[str]:
    """境界内のパスだけを入力順のまま返す。"""
    checker = BoundaryChecker(options, env)
    allowed: list[str] = []
    for path in paths:
        result = checker.check(path, start_path)
        if result.allowed:
            allowed.append(path)
        else:
            logger.debug("Filtered out path: %s (%s)", path, result.reason)
    return allowed
