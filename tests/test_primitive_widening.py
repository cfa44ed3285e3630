from __future__ import annotations

import array
import sys
from pathlib import Path
from typing import Any, List

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from arrayconv.converter import (
    DoubleArrayConverter,
    FloatArrayConverter,
    IntegerArrayConverter,
    LongArrayConverter,
    converter_for,
)
from arrayconv.errors import UnsupportedPrimitiveElementTypeError


def failing_converter(value: Any, dtype: np.dtype) -> Any:
    raise AssertionError(f"element converter must not be called (value={value!r})")


def assert_values(actual: np.ndarray, expected: List[float], dtype: Any, name: str) -> None:
    if actual.dtype != np.dtype(dtype):
        raise AssertionError(f"{name}: dtype mismatch: {actual.dtype} != {np.dtype(dtype)}")
    if actual.tolist() != expected:
        raise AssertionError(f"{name}: {actual.tolist()} != {expected}")


def expect_raises(exc_type: type, func: Any, *args: Any) -> BaseException:
    try:
        func(*args)
    except exc_type as exc:
        return exc
    raise AssertionError(f"{exc_type.__name__} was not raised")


def test_numeric_arrays_are_widened_without_element_converter() -> None:
    converter = DoubleArrayConverter(failing_converter)
    for dtype in (
        np.int8,
        np.int16,
        np.int32,
        np.int64,
        np.uint8,
        np.uint16,
        np.uint32,
        np.uint64,
        np.float16,
        np.float32,
    ):
        source = np.array([1, 2, 3], dtype=dtype)
        result = converter.convert(source)
        assert_values(result, [1.0, 2.0, 3.0], np.float64, f"{np.dtype(dtype).name}")
        if result is source:
            raise AssertionError("widening must produce a new array")

    # long double が float64 と同じ環境では恒等変換になる。
    if np.dtype(np.longdouble) != np.float64:
        result = converter.convert(np.array([0.25], dtype=np.longdouble))
        assert_values(result, [0.25], np.float64, "longdouble")


def test_bool_array_maps_to_one_and_zero() -> None:
    converter = DoubleArrayConverter(failing_converter)
    result = converter.convert(np.array([True, False, True]))
    assert_values(result, [1.0, 0.0, 1.0], np.float64, "bool")


def test_stdlib_arrays_and_buffers() -> None:
    converter = DoubleArrayConverter(failing_converter)
    assert_values(converter.convert(array.array("i", [-1, 7])), [-1.0, 7.0], np.float64, "array i")
    assert_values(converter.convert(array.array("d", [0.5])), [0.5], np.float64, "array d")
    assert_values(converter.convert(array.array("q", [])), [], np.float64, "empty array q")
    assert_values(converter.convert(array.array("u", "AZ")), [65.0, 90.0], np.float64, "chars")
    assert_values(converter.convert(b"\x01\xff"), [1.0, 255.0], np.float64, "bytes")
    assert_values(converter.convert(bytearray(b"\x02")), [2.0], np.float64, "bytearray")
    view = memoryview(array.array("h", [3, -4]))
    assert_values(converter.convert(view), [3.0, -4.0], np.float64, "memoryview")


def test_unsupported_primitive_element_type_fails_loudly() -> None:
    converter = DoubleArrayConverter(failing_converter)
    for source in (
        np.array([1 + 2j, 3 - 1j]),
        np.array(["2024-01-01"], dtype="datetime64[D]"),
        np.array([1, 2], dtype="timedelta64[s]"),
    ):
        exc = expect_raises(UnsupportedPrimitiveElementTypeError, converter.convert, source)
        if exc.dtype != source.dtype:
            raise AssertionError(f"unexpected dtype on error: {exc.dtype}")
        if not isinstance(exc, TypeError):
            raise AssertionError("UnsupportedPrimitiveElementTypeError must be a TypeError")

    # NumPy が解釈できない buffer format（ポインタ "P"）は format 文字列を報告する。
    pointers = memoryview(array.array("L", [1, 2])).cast("B").cast("P")
    exc = expect_raises(UnsupportedPrimitiveElementTypeError, converter.convert, pointers)
    if exc.dtype != "P":
        raise AssertionError(f"unexpected format on error: {exc.dtype!r}")


def test_other_targets_share_the_dispatch() -> None:
    float_result = FloatArrayConverter().convert("1.5 2")
    assert_values(float_result, [1.5, 2.0], np.float32, "float target text")

    long_result = LongArrayConverter().convert(np.array([1.9, -1.9]))
    # float -> int は 0 方向への切り捨て。
    assert_values(long_result, [1, -1], np.int64, "long target narrowing")

    int_source = np.array([4, 5], dtype=np.int32)
    if IntegerArrayConverter().convert(int_source) is not int_source:
        raise AssertionError("int32 array must be returned unchanged for int target")

    bools = LongArrayConverter().convert(np.array([False, True]))
    assert_values(bools, [0, 1], np.int64, "long target bool")

    assert_values(IntegerArrayConverter().convert(["3", 4.7, "5.0"]), [3, 4, 5], np.int32, "int")


def test_converter_lookup() -> None:
    if not isinstance(converter_for("double"), DoubleArrayConverter):
        raise AssertionError("double lookup")
    if not isinstance(converter_for(np.float32), FloatArrayConverter):
        raise AssertionError("float32 dtype lookup")
    if not isinstance(converter_for(" Long "), LongArrayConverter):
        raise AssertionError("long lookup")
    if not isinstance(converter_for("int32"), IntegerArrayConverter):
        raise AssertionError("int32 lookup")
    expect_raises(ValueError, converter_for, "complex")
    expect_raises(ValueError, converter_for, np.complex64)
    expect_raises(ValueError, converter_for, object())


def main() -> None:
    test_numeric_arrays_are_widened_without_element_converter()
    test_bool_array_maps_to_one_and_zero()
    test_stdlib_arrays_and_buffers()
    test_unsupported_primitive_element_type_fails_loudly()
    test_other_targets_share_the_dispatch()
    test_converter_lookup()
    print("OK: primitive widening checks passed")


if __name__ == "__main__":
    main()
