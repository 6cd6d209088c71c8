"""探索境界モデル。

禁止ディレクトリ・ソフト境界・深さ制限と、プレースホルダー展開に使う
プロセス環境のスナップショットを定義する。
"""

from __future__ import annotations

import getpass
import os
import tempfile
from pathlib import Path
from typing import Final

from pydantic import Field, StrictBool

from kasane.models._base import KasaneBaseModel

DEFAULT_MAX_ABSOLUTE_DEPTH: Final[int] = 20
DEFAULT_MAX_RELATIVE_DEPTH: Final[int] = 10

_UNKNOWN_USER: Final[str] = "unknown"


def _current_user() -> str:
    """現在のユーザー名を返す。

    コンテナ環境では getpass.getuser() が失敗することがあるため、
    環境変数、最後に "unknown" へフォールバックする。
    """
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return os.environ.get("USER") or os.environ.get("USERNAME") or _UNKNOWN_USER


class PathEnvironment(KasaneBaseModel):
    """$HOME / $USER / $TMPDIR 展開に使うプロセス環境のスナップショット。

    境界チェッカー構築時に一度だけ取得し、以後のチェックでは再取得しない。
    テストでは任意の値で構築して注入できる。

    Attributes:
        home: ホームディレクトリの絶対パス。
        user: ユーザー名。
        tmpdir: 一時ディレクトリの絶対パス。
    """

    home: str = Field(min_length=1)
    user: str = Field(min_length=1)
    tmpdir: str = Field(min_length=1)

    @classmethod
    def from_process(cls) -> PathEnvironment:
        """現在のプロセス環境から構築する。"""
        return cls(
            home=os.path.abspath(Path.home()),
            user=_current_user(),
            tmpdir=os.path.abspath(tempfile.gettempdir()),
        )


class TraversalBoundary(KasaneBaseModel):
    """1 回の探索セッションに適用される境界定義。

    パスパターンは $HOME 等のプレースホルダーを含んでよく、
    チェック時に PathEnvironment で展開される。

    Attributes:
        forbidden: 自身および配下へのアクセスを拒否するディレクトリ。
        boundaries: 到達したら探索を止めるソフト境界。
        max_absolute_depth: ファイルシステムルートからの最大セグメント数。
        max_relative_depth: 開始ディレクトリから祖先方向への最大段数。
    """

    forbidden: tuple[str, ...] = ()
    boundaries: tuple[str, ...] = ()
    max_absolute_depth: int = Field(default=DEFAULT_MAX_ABSOLUTE_DEPTH, ge=0)
    max_relative_depth: int = Field(default=DEFAULT_MAX_RELATIVE_DEPTH, ge=0)


class TraversalCheckResult(KasaneBaseModel):
    """境界チェックの結果。

    Attributes:
        allowed: 探索を許可するか。
        reason: 拒否理由。許可時は None。
        violated_boundary: 違反した禁止ディレクトリ（正規化済み）。
            深さ制限による拒否の場合は None。
    """

    allowed: bool
    reason: str | None = None
    violated_boundary: str | None = None


class TraversalSecurityOptions(KasaneBaseModel):
    """境界チェッカーの構築オプション。

    forbidden / boundaries / 深さ制限は None の場合にプラットフォーム既定値を使う。

    Attributes:
        forbidden: 禁止ディレクトリの上書き。
        boundaries: ソフト境界の上書き。
        max_absolute_depth: 絶対深さ制限の上書き。
        max_relative_depth: 相対深さ制限の上書き。
        allow_unsafe_traversal: True の場合すべてのチェックを許可する。
            信頼できる環境・テスト専用。
        warn_on_override: allow_unsafe_traversal 有効時に一度だけ警告を出すか。
    """

    forbidden: tuple[str, ...] | None = None
    boundaries: tuple[str, ...] | None = None
    max_absolute_depth: int | None = Field(default=None, ge=0)
    max_relative_depth: int | None = Field(default=None, ge=0)
    allow_unsafe_traversal: StrictBool = False
    warn_on_override: StrictBool = True
