"""既定の要素変換（1 値 → 1 数値要素）。

配列変換器はこの関数を委譲先として注入される。差し替える場合は
同じシグネチャ `(value, dtype) -> scalar` の関数を渡せばよい。
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from numbers import Number, Real
from typing import Any

import numpy as np

from .errors import UnconvertibleElementError


def convert_element(value: Any, dtype: Any) -> Any:
    """value を dtype の 1 要素へ変換する。

    変換規則:
        - None は変換不可
        - 0 次元配列（0 次元 memoryview を含む）は中身を取り出す。それ以外の配列は変換不可
        - datetime64 / timedelta64 は変換不可
        - bool は 1 / 0
        - 実数（int, float, Fraction, Decimal, NumPy スカラー）はそのままキャスト
        - bytes は ASCII として復号し、文字列として解釈する
        - 文字列は前後の空白を除いて数値として解釈する
        - その他は str(value) を文字列として解釈する

    Args:
        value: 変換対象の値。
        dtype: 目的の数値 dtype（浮動小数点または整数）。

    Returns:
        dtype のスカラー。

    Raises:
        UnconvertibleElementError: value を dtype として解釈できない場合。
    """

    target = np.dtype(dtype)

    if value is None:
        raise UnconvertibleElementError(value, target, "value is None")

    if isinstance(value, memoryview):
        # 0 次元の buffer も 0 次元配列と同じく中身を取り出す。
        try:
            value = np.asarray(value)
        except (TypeError, ValueError) as exc:
            raise UnconvertibleElementError(value, target, "unreadable buffer") from exc

    if isinstance(value, np.ndarray):
        if value.ndim != 0:
            raise UnconvertibleElementError(value, target, "nested array is not a scalar")
        value = value.item()

    if isinstance(value, (bool, np.bool_)):
        return target.type(1 if value else 0)

    if isinstance(value, (bytes, bytearray)):
        try:
            value = bytes(value).decode("ascii")
        except UnicodeDecodeError as exc:
            raise UnconvertibleElementError(value, target, "bytes are not ASCII") from exc

    if isinstance(value, (np.datetime64, np.timedelta64)):
        # timedelta64 は np.number の派生だが数値としては扱わない。
        raise UnconvertibleElementError(value, target, "date/time value is not a number")

    if isinstance(value, (Real, Decimal, np.number)) and not isinstance(
        value, (complex, np.complexfloating)
    ):
        return _cast_number(value, target)

    if isinstance(value, Number):
        # complex など、実数でない数値。
        raise UnconvertibleElementError(value, target, "not a real number")

    return _parse_text(value if isinstance(value, str) else str(value), target)


def _cast_number(value: Any, target: np.dtype) -> Any:
    try:
        if target.kind == "f":
            return target.type(float(value))
        if target.kind in ("i", "u"):
            # 小数部は切り捨てる（0 方向への丸め）。
            return target.type(int(value))
    except (TypeError, ValueError, OverflowError, InvalidOperation) as exc:
        raise UnconvertibleElementError(value, target, str(exc)) from exc
    raise UnconvertibleElementError(value, target, f"unsupported target dtype {target}")


def _parse_text(text: str, target: np.dtype) -> Any:
    stripped = text.strip()
    if not stripped:
        raise UnconvertibleElementError(text, target, "empty text")

    try:
        if target.kind == "f":
            return target.type(float(stripped))
        if target.kind in ("i", "u"):
            try:
                number = int(stripped, 10)
            except ValueError:
                # "3.0" のように整数値を表す小数表記は受け付ける。
                number_float = float(stripped)
                if not number_float.is_integer():
                    raise ValueError(f"{stripped!r} is not an integral number")
                number = int(number_float)
            return target.type(number)
    except (ValueError, OverflowError) as exc:
        raise UnconvertibleElementError(text, target, str(exc)) from exc
    raise UnconvertibleElementError(text, target, f"unsupported target dtype {target}")
