"""全ドメインモデルの基底クラスと共通ユーティリティ。

すべての値オブジェクトは KasaneBaseModel を継承し、extra="forbid" と
frozen=True により「未知フィールド拒否・構築後不変」を一元管理する。
"""

from enum import StrEnum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict


E = TypeVar("E", bound=StrEnum)


class KasaneBaseModel(BaseModel):
    """全ドメインモデルの基底クラス。厳格かつ不変。"""

    model_config = ConfigDict(extra="forbid", frozen=True)


def _canonical_token(value: str) -> str:
    """比較用の正規形。大文字小文字とハイフン/アンダースコアの差を吸収する。"""
    return value.strip().lower().replace("_", "-")


def normalize_enum_value(v: object, enum_cls: type[E]) -> object:
    """StrEnum 入力を正規化する。

    "Root_Only" や "ROOT-ONLY" のような表記揺れを enum_cls のメンバー値に
    寄せる。マッチしない str や str 以外の入力はそのまま返し、
    後続の Pydantic バリデーションに委ねる。

    Args:
        v: バリデーション対象の入力値。
        enum_cls: マッチ対象の StrEnum クラス。

    Returns:
        正規化された値文字列、またはマッチしない場合は入力値そのまま。
    """
    if not isinstance(v, str):
        return v
    token = _canonical_token(v)
    for member in enum_cls:
        if token == _canonical_token(member.value):
            return member.value
    return v
