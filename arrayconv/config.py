"""設定ファイル（TOML/JSON）を読み込むユーティリティ。

目的:
    CLI での一括変換（CSV の列 → 数値配列）を設定ファイルで再現可能にするため、
    変換先の型や列名、エラー時の扱いを JSON/TOML として外部化する。
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .converter import converter_for

# on_error の取り得る値:
# - "raise": 1 行でも変換に失敗したら例外をそのまま伝播して中断する
# - "skip": 失敗した行を記録して続行する
ON_ERROR_CHOICES = ("raise", "skip")


def load_config(path: Path) -> Dict[str, Any]:
    """設定ファイルを読み込み、Python の辞書として返す。

    Args:
        path: 設定ファイルへのパス。拡張子でフォーマットを判定する（大文字小文字は区別しない）。

    Returns:
        設定内容を表す辞書。

    Raises:
        FileNotFoundError: 指定パスが存在しない場合。
        ValueError: 対応していない拡張子の場合。
        json.JSONDecodeError: JSON のパースに失敗した場合。
        tomllib.TOMLDecodeError: TOML のパースに失敗した場合。
    """

    # 設定ファイルが存在しない場合は、早期に失敗させて原因を明確化する。
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".toml":
        # tomllib.load はバイナリファイルオブジェクトを想定する。
        with path.open("rb") as handle:
            return tomllib.load(handle)

    if suffix == ".json":
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be an object: {path}")
        return data

    raise ValueError(f"Unsupported config format: {path.suffix}")


@dataclass(frozen=True)
class RunOptions:
    """CLI の一括変換オプション。

    Attributes:
        target: 変換先の型名（"double", "float", "long", "int" など）。
        column: CSV から読み込む列名。None の場合は先頭列。
        on_error: 行の変換に失敗したときの扱い（"raise" または "skip"）。
        progress: tqdm の進捗表示を出すかどうか。
    """

    target: str = "double"
    column: Optional[str] = None
    on_error: str = "raise"
    progress: bool = True

    def __post_init__(self) -> None:
        if self.on_error not in ON_ERROR_CHOICES:
            raise ValueError(
                f"on_error must be one of {ON_ERROR_CHOICES}, got {self.on_error!r}"
            )
        # 未知の target はここで ValueError にする。
        converter_for(self.target)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RunOptions":
        """辞書（設定）から RunOptions を構築する。

        TOML では `[convert]` テーブルにまとめて書いてもよい。

        Raises:
            ValueError: 未知のキー、または値が不正な場合。
        """

        config_dict = dict(config)
        section = config_dict.pop("convert", None)
        if isinstance(section, Mapping):
            config_dict = {**config_dict, **section}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        return cls(**config_dict)

    def with_overrides(self, **overrides: Any) -> "RunOptions":
        """None でない値だけを上書きした RunOptions を返す。"""

        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({key: value for key, value in overrides.items() if value is not None})
        return RunOptions(**values)
