"""任意の値を 1 次元の数値配列（NumPy 配列）へ変換する変換器。

責務:
    - 入力の形状を 1 度だけ分類し（shape.classify_value）、配列入力と非配列入力に振り分ける
    - 非配列入力: シーケンス / コレクション / 遅延イテラブル / 区切り文字列 / スカラー
    - 配列入力: 同一要素型（そのまま返す）/ プリミティブ要素型（直接キャスト）/
      オブジェクト要素型（要素ごとの変換）

設計意図:
    - 1 要素の変換は注入された ElementConverter に委譲する。
      既定は element.convert_element。
    - 変換器は目的 dtype と委譲先しか持たないため、呼び出し間で状態を共有しない。

注意:
    要素変換の失敗（UnconvertibleElementError）は捕捉せずにそのまま伝播する。
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

import numpy as np

from .element import convert_element
from .errors import UnsupportedPrimitiveElementTypeError
from .shape import ShapeInfo, classify_value
from .text import split_numbers
from .types import ArrayLike, ElementConverter, PrimitiveKind, ValueShape

_INTEGER_KINDS = frozenset(
    {
        PrimitiveKind.INT8,
        PrimitiveKind.INT16,
        PrimitiveKind.INT32,
        PrimitiveKind.INT64,
        PrimitiveKind.UINT8,
        PrimitiveKind.UINT16,
        PrimitiveKind.UINT32,
        PrimitiveKind.UINT64,
    }
)
_FLOAT_KINDS = frozenset(
    {
        PrimitiveKind.FLOAT16,
        PrimitiveKind.FLOAT32,
        PrimitiveKind.FLOAT64,
        PrimitiveKind.LONGDOUBLE,
    }
)


class NumericArrayConverter:
    """任意の値を target_dtype の 1 次元配列へ変換する変換器の基底クラス。

    サブクラスは target_dtype だけを差し替える。

    Args:
        element_converter: 1 要素の変換関数 `(value, dtype) -> scalar`。
            None の場合は convert_element を使う。
    """

    target_dtype: np.dtype = np.dtype(np.float64)

    def __init__(self, element_converter: Optional[ElementConverter] = None) -> None:
        self.element_converter = element_converter or convert_element

    def __call__(self, value: Any) -> Optional[ArrayLike]:
        return self.convert(value)

    def convert(self, value: Any) -> Optional[ArrayLike]:
        """value を target_dtype の配列へ変換する。

        Args:
            value: 任意の値。

        Returns:
            value が None の場合は None。それ以外は 1 次元配列。
            入力が target_dtype の 1 次元 ndarray の場合は入力そのもの（コピーしない）。

        Raises:
            UnconvertibleElementError: いずれかの要素が変換できない場合。
            UnsupportedPrimitiveElementTypeError: 配列の要素型がサポート外のプリミティブ型の場合。
        """

        if value is None:
            return None

        info = classify_value(value)
        if info.shape.is_array:
            return self._convert_array_to_array(value, info)
        return self._convert_value_to_array(value, info)

    def convert_type(self, value: Any) -> Any:
        """1 要素を委譲先で変換する。"""

        return self.element_converter(value, self.target_dtype)

    def _convert_to_single_element_array(self, value: Any) -> ArrayLike:
        target = np.empty(1, dtype=self.target_dtype)
        target[0] = self.convert_type(value)
        return target

    def _convert_value_to_array(self, value: Any, info: ShapeInfo) -> ArrayLike:
        shape = info.shape

        if shape is ValueShape.INDEXED_SEQUENCE:
            # 長さ既知・添字アクセス可能なので、先に確保して位置 i に書き込む。
            size = len(value)
            target = np.empty(size, dtype=self.target_dtype)
            for i in range(size):
                target[i] = self.convert_type(value[i])
            return target

        if shape is ValueShape.SIZED_COLLECTION:
            # 長さ既知だが順次走査のみ。反復順に書き込む。
            size = len(value)
            target = np.empty(size, dtype=self.target_dtype)
            count = 0
            for element in value:
                if count >= size:
                    raise RuntimeError("collection changed size during conversion")
                target[count] = self.convert_type(element)
                count += 1
            if count != size:
                raise RuntimeError("collection changed size during conversion")
            return target

        if shape is ValueShape.LAZY_ITERABLE:
            # 長さ不明のため、いったんリストに溜めてから固定長配列へ確定する。
            staging = [self.convert_type(element) for element in value]
            target = np.empty(len(staging), dtype=self.target_dtype)
            for i, converted in enumerate(staging):
                target[i] = converted
            return target

        if shape is ValueShape.TEXT:
            return self._convert_object_array(split_numbers(value))

        if shape is ValueShape.SCALAR:
            return self._convert_to_single_element_array(value)

        raise ValueError(f"Unexpected value shape: {shape}")

    def _convert_array_to_array(self, value: Any, info: ShapeInfo) -> ArrayLike:
        if isinstance(value, memoryview) and info.dtype is not None:
            value = np.asarray(value)
        if info.shape is ValueShape.OBJECT_ARRAY:
            return self._convert_object_array(value)
        return self._convert_primitive_array_to_array(value, info)

    def _convert_object_array(self, array: Any) -> ArrayLike:
        # オブジェクト要素の配列。要素ごとに委譲先で変換する。
        # 文字列入力のトークン列もここを通る。
        size = len(array)
        target = np.empty(size, dtype=self.target_dtype)
        for i in range(size):
            target[i] = self.convert_type(array[i])
        return target

    def _convert_primitive_array_to_array(self, value: Any, info: ShapeInfo) -> ArrayLike:
        kind = info.kind

        # 同一要素型: コピーも要素変換もせずに返す。
        if isinstance(value, np.ndarray) and value.dtype == self.target_dtype:
            return value

        if kind is PrimitiveKind.CHAR:
            # 文字はコードポイントとして数値化する。
            return np.fromiter(
                (ord(ch) for ch in value), dtype=self.target_dtype, count=len(value)
            )

        if kind is PrimitiveKind.BOOL:
            source = self._as_ndarray(value, info)
            return np.where(source, 1, 0).astype(self.target_dtype)

        if kind in _INTEGER_KINDS or kind in _FLOAT_KINDS:
            source = self._as_ndarray(value, info)
            if source.dtype == self.target_dtype:
                # array.array / bytes の buffer をそのまま参照する（要素変換なし）。
                return source
            return source.astype(self.target_dtype)

        source_type = info.dtype if info.dtype is not None else getattr(value, "format", None)
        raise UnsupportedPrimitiveElementTypeError(source_type, self.target_dtype)

    def _as_ndarray(self, value: Any, info: ShapeInfo) -> np.ndarray:
        if isinstance(value, np.ndarray):
            return value
        return np.frombuffer(value, dtype=info.dtype)


class DoubleArrayConverter(NumericArrayConverter):
    """任意の値を float64 配列へ変換する。"""

    target_dtype = np.dtype(np.float64)


class FloatArrayConverter(NumericArrayConverter):
    """任意の値を float32 配列へ変換する。"""

    target_dtype = np.dtype(np.float32)


class LongArrayConverter(NumericArrayConverter):
    """任意の値を int64 配列へ変換する。"""

    target_dtype = np.dtype(np.int64)


class IntegerArrayConverter(NumericArrayConverter):
    """任意の値を int32 配列へ変換する。"""

    target_dtype = np.dtype(np.int32)


# 目的型の名前（"double" などの別名と NumPy の dtype 名）→ 変換器クラス。
_CONVERTERS: Dict[str, Type[NumericArrayConverter]] = {
    "double": DoubleArrayConverter,
    "float64": DoubleArrayConverter,
    "float": FloatArrayConverter,
    "float32": FloatArrayConverter,
    "long": LongArrayConverter,
    "int64": LongArrayConverter,
    "int": IntegerArrayConverter,
    "int32": IntegerArrayConverter,
}


def converter_for(
    target: Any, element_converter: Optional[ElementConverter] = None
) -> NumericArrayConverter:
    """目的型に対応する配列変換器を返す。

    Args:
        target: 目的型の名前（"double", "float", "long", "int" など）または NumPy dtype。
        element_converter: 変換器に注入する要素変換関数。

    Returns:
        NumericArrayConverter のインスタンス。

    Raises:
        ValueError: 対応する変換器が無い場合。
    """

    if isinstance(target, str):
        key = target.strip().lower()
    else:
        try:
            key = np.dtype(target).name
        except TypeError as exc:
            raise ValueError(f"Unknown array converter target: {target!r}") from exc

    converter_cls = _CONVERTERS.get(key)
    if converter_cls is None:
        raise ValueError(f"Unknown array converter target: {target!r}")
    return converter_cls(element_converter)


def convert_to_double_array(
    value: Any, element_converter: Optional[ElementConverter] = None
) -> Optional[ArrayLike]:
    """value を float64 配列へ変換するショートカット。"""

    return DoubleArrayConverter(element_converter).convert(value)
