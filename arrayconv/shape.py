"""入力値の形状分類（shape classification）。

変換のディスパッチはここで 1 度だけ計算した ShapeInfo に対して行う。
分類の優先順位:
    1. 文字列（str は Python ではシーケンスでもあるため最優先）
    2. 配列（numpy.ndarray / array.array / bytes / bytearray / memoryview）
    3. 添字アクセス可能なシーケンス（list, tuple, range, deque など）
    4. サイズが既知のコレクション（set, dict, dict view, pandas.Series など）
    5. サイズ不明の遅延イテラブル（generator, iterator, map など）
    6. それ以外はスカラー
"""

from __future__ import annotations

import array
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .types import PrimitiveKind, ValueShape

# array.array の 'u'（wchar_t）と 'w'（Py_UCS4, 3.13+）は文字配列。
# NumPy の 'u' は符号なし整数なので、dtype に渡す前に区別する。
_CHAR_TYPECODES = frozenset({"u", "w"})


@dataclass(frozen=True)
class ShapeInfo:
    """形状分類の結果。

    Attributes:
        shape: 構造的カテゴリ。
        kind: PRIMITIVE_ARRAY の要素型。要素型がプリミティブだが
            サポート外の場合は None。
        dtype: 配列入力の要素 dtype（CHAR 配列と配列以外では None）。
    """

    shape: ValueShape
    kind: Optional[PrimitiveKind] = None
    dtype: Optional[np.dtype] = None


def classify_value(value: Any) -> ShapeInfo:
    """value の構造的カテゴリを判定する。

    Args:
        value: 任意の値（None 以外を想定。None は呼び出し側で処理する）。

    Returns:
        ShapeInfo。
    """

    if isinstance(value, str):
        return ShapeInfo(ValueShape.TEXT)

    if isinstance(value, np.ndarray):
        return _classify_ndarray(value)

    if isinstance(value, array.array):
        if value.typecode in _CHAR_TYPECODES:
            return ShapeInfo(ValueShape.PRIMITIVE_ARRAY, PrimitiveKind.CHAR)
        dtype = np.dtype(value.typecode)
        return ShapeInfo(ValueShape.PRIMITIVE_ARRAY, PrimitiveKind.from_dtype(dtype), dtype)

    if isinstance(value, (bytes, bytearray)):
        return ShapeInfo(ValueShape.PRIMITIVE_ARRAY, PrimitiveKind.UINT8, np.dtype(np.uint8))

    if isinstance(value, memoryview):
        try:
            return _classify_ndarray(np.asarray(value))
        except (TypeError, ValueError):
            # NumPy が解釈できない buffer format はサポート外のプリミティブ配列。
            return ShapeInfo(ValueShape.PRIMITIVE_ARRAY)

    if isinstance(value, Sequence):
        return ShapeInfo(ValueShape.INDEXED_SEQUENCE)
    if isinstance(value, Collection):
        return ShapeInfo(ValueShape.SIZED_COLLECTION)
    if isinstance(value, Iterable):
        return ShapeInfo(ValueShape.LAZY_ITERABLE)

    return ShapeInfo(ValueShape.SCALAR)


def _classify_ndarray(value: np.ndarray) -> ShapeInfo:
    # 0 次元配列は 1 要素のスカラーとして扱う。
    if value.ndim == 0:
        return ShapeInfo(ValueShape.SCALAR)

    dtype = value.dtype
    # 2 次元以上は「第 1 軸の要素（部分配列）の配列」とみなす。
    # 部分配列は要素変換で失敗する。
    if value.ndim > 1 or dtype.kind in ("O", "U", "S"):
        return ShapeInfo(ValueShape.OBJECT_ARRAY, dtype=dtype)

    return ShapeInfo(ValueShape.PRIMITIVE_ARRAY, PrimitiveKind.from_dtype(dtype), dtype)
