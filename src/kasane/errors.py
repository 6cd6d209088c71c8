"""kasane の例外階層。

ディレクトリ探索・読み込み・マージで発生する失敗の大半はソフトエラーとして
ログに記録され吸収される。ここで定義する例外は、呼び出し側が明示的に
扱うべき失敗だけを表す。
"""


class KasaneError(Exception):
    """kasane が送出する全例外の基底クラス。"""


class PathInputError(KasaneError):
    """パスフィールドの値がファイルパスとして解釈できない。

    http(s):// URL、NUL バイトを含む値、不正な file:// URL 等。
    """


class ConfigLoadError(KasaneError):
    """設定ファイルは読めたが、その階層の寄与として採用できない。

    Attributes:
        source: 問題のあった設定ファイルのパス。
    """

    def __init__(self, source: str, message: str) -> None:
        super().__init__(message)
        self.source = source


class TraversalBoundaryError(KasaneError):
    """探索境界に違反したパスへのアクセスを拒否した。

    BoundaryChecker.ensure_allowed() からのみ送出される。
    通常の探索では境界違反は errors リストに積まれるだけで例外にはならない。

    Attributes:
        path: 拒否されたパス。
        violated_boundary: 違反した禁止ディレクトリ。深さ制限違反の場合は None。
    """

    def __init__(
        self, path: str, reason: str, violated_boundary: str | None = None
    ) -> None:
        super().__init__(reason)
        self.path = path
        self.violated_boundary = violated_boundary
