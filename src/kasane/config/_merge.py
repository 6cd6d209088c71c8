"""設定ドキュメントのディープマージ。

低優先度 → 高優先度の順に並んだドキュメントを左から畳み込む。
入力は一切変更せず、常に新しい構造を返す。

各キーパスでの規則:
1. source にキーが無ければ target の値を保持する。キーが存在し値が None の場合は
   None で上書きする（「キーなし」と「明示的な null」を区別する）
2. target が None なら source の値を採用する
3. 両方がマッピングならキーの和集合について再帰する
4. 両方がシーケンスなら field_overlaps のモードで結合する
5. それ以外（スカラー、マッピングとシーケンスの不一致）は source で置き換える

マッピングでもシーケンスでもない値（datetime 等）はスカラーとして扱う。
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence

from kasane.models.hierarchy import ArrayOverlapMode, normalize_field_overlaps

_PATH_SEPARATOR = "."


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _join_path(parent: str, key: object) -> str:
    return f"{parent}{_PATH_SEPARATOR}{key}" if parent else str(key)


def get_overlap_mode_for_path(
    field_path: str, field_overlaps: Mapping[str, ArrayOverlapMode]
) -> ArrayOverlapMode:
    """field_path に適用するモードを返す。

    完全一致が最優先。次に最も近い（最も長い）祖先パスの設定。
    どれもなければ override。
    """
    if field_path in field_overlaps:
        return field_overlaps[field_path]
    parts = field_path.split(_PATH_SEPARATOR)
    for i in range(len(parts) - 1, 0, -1):
        parent = _PATH_SEPARATOR.join(parts[:i])
        if parent in field_overlaps:
            return field_overlaps[parent]
    return ArrayOverlapMode.OVERRIDE


def merge_arrays(
    target: Sequence[object], source: Sequence[object], mode: ArrayOverlapMode
) -> list[object]:
    """2 つのシーケンスを mode に従って結合した新しいリストを返す。"""
    match mode:
        case ArrayOverlapMode.APPEND:
            combined = [*target, *source]
        case ArrayOverlapMode.PREPEND:
            combined = [*source, *target]
        case _:
            combined = list(source)
    return copy.deepcopy(combined)


def _merge_values(
    target: object,
    source: object,
    field_overlaps: Mapping[str, ArrayOverlapMode],
    field_path: str,
    active: set[tuple[int, int]],
) -> object:
    if target is None or source is None:
        return copy.deepcopy(source)
    if isinstance(target, Mapping) and isinstance(source, Mapping):
        pair = (id(target), id(source))
        # 循環参照で同じ組に戻った場合はそれ以上再帰せず source を採用する
        if pair in active:
            return copy.deepcopy(source)
        active.add(pair)
        try:
            return _merge_mappings(target, source, field_overlaps, field_path, active)
        finally:
            active.discard(pair)
    if _is_sequence(target) and _is_sequence(source):
        mode = get_overlap_mode_for_path(field_path, field_overlaps)
        return merge_arrays(target, source, mode)  # type: ignore[arg-type]
    return copy.deepcopy(source)


def _merge_mappings(
    target: Mapping[object, object],
    source: Mapping[object, object],
    field_overlaps: Mapping[str, ArrayOverlapMode],
    field_path: str,
    active: set[tuple[int, int]],
) -> dict[object, object]:
    result: dict[object, object] = {}
    for key, value in target.items():
        if key in source:
            result[key] = _merge_values(
                value,
                source[key],
                field_overlaps,
                _join_path(field_path, key),
                active,
            )
        else:
            result[key] = copy.deepcopy(value)
    for key, value in source.items():
        if key not in target:
            result[key] = copy.deepcopy(value)
    return result


def deep_merge_two(
    target: Mapping[str, object],
    source: Mapping[str, object],
    field_overlaps: Mapping[str, ArrayOverlapMode | str] | None = None,
) -> dict[str, object]:
    """2 つのドキュメントをマージする。source が高優先度。

    Raises:
        TypeError: target / source がマッピングでない場合。
        ValueError: field_overlaps に未知のモードが含まれる場合。
    """
    return deep_merge_configs([target, source], field_overlaps)


def deep_merge_configs(
    configs: Sequence[Mapping[str, object]],
    field_overlaps: Mapping[str, ArrayOverlapMode | str] | None = None,
) -> dict[str, object]:
    """複数のドキュメントを優先度順にマージする。

    Args:
        configs: マージ対象。低優先度から高優先度の順。
        field_overlaps: 配列フィールドの結合モード（ドット記法パス → モード）。
            未指定のフィールドは override。

    Returns:
        マージ済みの新しい辞書。空入力なら空辞書、1 件なら構造的コピー。

    Raises:
        TypeError: ドキュメントがマッピングでない場合。
        ValueError: field_overlaps に未知のモードが含まれる場合。
    """
    overlaps = normalize_field_overlaps(field_overlaps)
    merged: dict[object, object] = {}
    for index, config in enumerate(configs):
        if not isinstance(config, Mapping):
            msg = (
                f"Config document at index {index} must be a mapping, "
                f"got {type(config).__name__}"
            )
            raise TypeError(msg)
        merged = _merge_mappings(merged, config, overlaps, "", set())
    return merged  # type: ignore[return-value]
