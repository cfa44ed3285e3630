"""区切り文字付き文字列をトークンへ分割する。"""

from __future__ import annotations

import re
from typing import List

# 数値列の区切り文字: カンマ、セミコロン、空白類。
NUMBER_DELIMITERS = ",;" + " \t\n\r\f\v"


def split_numbers(text: str, delimiters: str = NUMBER_DELIMITERS) -> List[str]:
    """text を delimiters のいずれかの文字で分割する。

    連続する区切り文字は 1 つとして扱い、先頭/末尾の区切り文字は無視する。
    空文字列や区切り文字だけの文字列は空リストになる。

    Args:
        text: 分割対象の文字列。
        delimiters: 区切り文字の集合（各文字が 1 つの区切り）。

    Returns:
        空でないトークンのリスト。

    Raises:
        ValueError: delimiters が空の場合。
    """

    if not delimiters:
        raise ValueError("delimiters must not be empty")

    # 空白類は Unicode の空白もまとめて \s で扱う。
    chars = "".join(ch for ch in delimiters if not ch.isspace())
    pattern = "[" + re.escape(chars) + (r"\s" if len(chars) < len(delimiters) else "") + "]+"
    return [token for token in re.split(pattern, str(text)) if token]
