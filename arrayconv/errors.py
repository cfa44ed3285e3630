"""変換時に送出する例外。"""

from __future__ import annotations

from typing import Any

import numpy as np


class ConversionError(ValueError):
    """arrayconv が送出する変換エラーの基底クラス。"""


class UnconvertibleElementError(ConversionError):
    """1 要素を目的の数値型として解釈できない場合のエラー。

    配列変換の途中で発生した場合も、部分的な結果は返さずにそのまま伝播する。
    """

    def __init__(self, value: Any, target: Any, reason: str = "") -> None:
        self.value = value
        self.target = np.dtype(target)
        message = f"Cannot convert {value!r} to {self.target.name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedPrimitiveElementTypeError(ConversionError, TypeError):
    """配列の要素型がプリミティブだが、拡大/縮小コピーの対象外である場合のエラー。

    例: complex128, datetime64, timedelta64, 構造化 dtype。
    """

    def __init__(self, dtype: Any, target: Any) -> None:
        self.dtype = dtype
        self.target = np.dtype(target)
        super().__init__(
            f"Unsupported primitive element type {dtype!s} for {self.target.name} array conversion"
        )
