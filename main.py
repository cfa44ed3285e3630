"""CLI エントリポイント。

目的:
    文字列（--value）または CSV の 1 列（--data / --column）を数値配列へ変換し、
    結果の要約を表示する。必要に応じて JSON に書き出し、WandB に記録する。

想定される例外:
    - 設定ファイル / CSV が存在しない: FileNotFoundError
    - 要素が数値として解釈できない（on_error = "raise" の場合）: UnconvertibleElementError
"""

import argparse
import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from arrayconv.config import ON_ERROR_CHOICES, RunOptions, load_config
from arrayconv.converter import NumericArrayConverter, converter_for
from arrayconv.errors import ConversionError
from arrayconv.logger import WandBLogger, wandb_available


def convert_rows(
    cells: Sequence[Any],
    converter: NumericArrayConverter,
    on_error: str = "raise",
    progress: bool = False,
) -> Tuple[List[Optional[np.ndarray]], List[Dict[str, Any]]]:
    """各セルを配列へ変換する。

    Args:
        cells: 変換対象の値の列。
        converter: 使用する配列変換器。
        on_error: "raise" なら最初の失敗で例外を伝播する。"skip" なら失敗を記録して続行する。
        progress: tqdm の進捗表示を出すかどうか。

    Returns:
        (results, failures)
        - results: 行ごとの変換結果。失敗した行は None
        - failures: 失敗した行の {"row": 行番号, "error": メッセージ}
    """

    results: List[Optional[np.ndarray]] = []
    failures: List[Dict[str, Any]] = []
    for row, cell in enumerate(tqdm(cells, desc="convert", leave=False, disable=not progress)):
        try:
            results.append(converter.convert(cell))
        except ConversionError as exc:
            if on_error != "skip":
                raise
            results.append(None)
            failures.append({"row": row, "error": str(exc)})
    return results, failures


def summarize(
    results: Sequence[Optional[np.ndarray]], failures: Sequence[Dict[str, Any]]
) -> Dict[str, Any]:
    """変換結果の要約（行数・要素数・失敗数）を返す。"""

    converted = [array for array in results if array is not None]
    lengths = [int(array.size) for array in converted]
    return {
        "n_rows": len(results),
        "n_converted": len(converted),
        "n_failed": len(failures),
        "n_elements": int(sum(lengths)),
        "max_length": max(lengths) if lengths else 0,
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    """コマンドライン引数を解釈し、変換を実行する。"""

    parser = argparse.ArgumentParser(description="Convert values to numeric arrays")

    # --config 引数: 設定ファイル（任意）。CLI 引数が指定されればそちらを優先する。
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML or JSON config file.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--value",
        type=str,
        help="A delimited string to convert, e.g. '1,2;3 4'.",
    )
    source.add_argument(
        "--data",
        type=Path,
        help="Path to a CSV file whose column cells are converted row by row.",
    )
    parser.add_argument("--column", type=str, default=None, help="CSV column name.")
    parser.add_argument(
        "--target",
        type=str,
        default=None,
        help="Target element type: double, float, long or int.",
    )
    parser.add_argument(
        "--on-error",
        choices=ON_ERROR_CHOICES,
        default=None,
        help="Abort on the first failing row (raise) or record it and continue (skip).",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write result JSON (optional).",
    )
    args = parser.parse_args(argv)

    options = RunOptions()
    if args.config is not None:
        options = RunOptions.from_config(load_config(args.config))
    options = options.with_overrides(
        target=args.target,
        column=args.column,
        on_error=args.on_error,
        progress=False if args.no_progress else None,
    )
    converter = converter_for(options.target)

    # WandB ログの準備（任意）。
    wandb_logger = None
    wandb_project = os.getenv("WANDB_PROJECT")
    wandb_enabled = os.getenv("WANDB_ENABLED", "").lower() in {"1", "true", "yes"}
    if wandb_project or wandb_enabled:
        if wandb_available():
            wandb_logger = WandBLogger(project=wandb_project or "arrayconv", name="arrayconv-run")
            wandb_logger.start_run(config={"options": asdict(options)})
        else:
            print("WandB が利用できないためロギングをスキップします。")

    if args.value is not None:
        # 単一の値は on_error に関係なく失敗を伝播する。
        cells: List[Any] = [args.value]
        column = None
    else:
        # すべてのセルを文字列として読み込み、空セルは空文字列（長さ 0 の配列）にする。
        data = pd.read_csv(args.data, dtype=str, keep_default_na=False)
        column = options.column if options.column is not None else data.columns[0]
        if column not in data.columns:
            raise ValueError(f"Missing column {column!r} in {args.data}")
        cells = data[column].tolist()

    results, failures = convert_rows(
        cells,
        converter,
        on_error=options.on_error if args.data is not None else "raise",
        progress=options.progress and args.data is not None,
    )
    summary = summarize(results, failures)

    print("\n=== Run parameters ===")
    print({"target": options.target, "column": column, "on_error": options.on_error})
    print("\n=== Summary ===")
    print(summary)
    if args.value is not None:
        print("\n=== Result ===")
        print(results[0])
    for failure in failures:
        print(f"row {failure['row']}: {failure['error']}")

    if args.output is not None:
        output_path = args.output
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result = {
            "target": converter.target_dtype.name,
            "column": column,
            "results": [array.tolist() if array is not None else None for array in results],
            "failures": failures,
            "summary": summary,
        }
        with output_path.open("w", encoding="utf-8") as handle:
            json.dump(result, handle, ensure_ascii=False, indent=2)
        print(f"Saved result JSON to {output_path}")

    if wandb_logger is not None:
        wandb_logger.log_lengths(
            [array.size if array is not None else None for array in results]
        )
        wandb_logger.log_metrics(summary, prefix="summary")
        wandb_logger.finish()


if __name__ == "__main__":
    main()
