"""共有の型定義。

ArrayLike / ElementConverter の別名と、形状分類で使う閉じた列挙型
（ValueShape / PrimitiveKind）をここにまとめる。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

import numpy as np

# ArrayLike:
# - 変換結果として返す 1 次元配列。
# - 入力側は「任意の Python オブジェクト」なので Any のまま扱う。
ArrayLike = np.ndarray

# ElementConverter:
# - 1 つの値を 1 つの数値要素に変換する委譲先。
# - (value, dtype) を受け取り、dtype に格納可能なスカラーを返す。
ElementConverter = Callable[[Any, np.dtype], Any]


class ValueShape(Enum):
    """入力値の構造的カテゴリ。"""

    SCALAR = "scalar"
    INDEXED_SEQUENCE = "indexed_sequence"
    SIZED_COLLECTION = "sized_collection"
    LAZY_ITERABLE = "lazy_iterable"
    TEXT = "text"
    PRIMITIVE_ARRAY = "primitive_array"
    OBJECT_ARRAY = "object_array"

    @property
    def is_array(self) -> bool:
        return self in (ValueShape.PRIMITIVE_ARRAY, ValueShape.OBJECT_ARRAY)


class PrimitiveKind(Enum):
    """直接の拡大/縮小コピーに対応するプリミティブ要素型。"""

    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    LONGDOUBLE = "longdouble"
    # 文字（コードポイントとして数値化する）。NumPy には対応 dtype が無い。
    CHAR = "char"

    @classmethod
    def from_dtype(cls, dtype: np.dtype) -> Optional["PrimitiveKind"]:
        """NumPy dtype を PrimitiveKind に対応付ける。

        Returns:
            対応する PrimitiveKind。複素数・日時・構造体など
            サポート外のプリミティブ型の場合は None。
        """

        dtype = np.dtype(dtype)
        if dtype.kind == "b":
            return cls.BOOL
        if dtype == np.longdouble and dtype != np.float64:
            return cls.LONGDOUBLE
        if dtype.kind in ("i", "u", "f"):
            try:
                return cls(dtype.name)
            except ValueError:
                return None
        return None
