"""ExitCode — kasane CLI の終了コード定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    NOT_FOUND は「探した対象が存在しない」、BOUNDARY_VIOLATION は
    境界チェックによる拒否。4 は入力エラー（不正なオプション値等）。
    """

    SUCCESS = 0
    NOT_FOUND = 1
    BOUNDARY_VIOLATION = 2
    INPUT_ERROR = 4
