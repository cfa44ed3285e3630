"""arrayconv パッケージ。

任意の値を数値配列へ変換する変換器と、その例外をここで再エクスポートする。
利用者は基本的に `from arrayconv import DoubleArrayConverter` の形で import できる。
"""

from .converter import (
    DoubleArrayConverter,
    FloatArrayConverter,
    IntegerArrayConverter,
    LongArrayConverter,
    NumericArrayConverter,
    convert_to_double_array,
    converter_for,
)
from .element import convert_element
from .errors import (
    ConversionError,
    UnconvertibleElementError,
    UnsupportedPrimitiveElementTypeError,
)

__all__ = [
    "ConversionError",
    "DoubleArrayConverter",
    "FloatArrayConverter",
    "IntegerArrayConverter",
    "LongArrayConverter",
    "NumericArrayConverter",
    "UnconvertibleElementError",
    "UnsupportedPrimitiveElementTypeError",
    "convert_element",
    "convert_to_double_array",
    "converter_for",
]
