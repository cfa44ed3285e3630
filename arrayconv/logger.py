"""WandB ロギング用のユーティリティ。

方針:
    - WandB は任意依存。未インストールでも変換自体は動作させる。
    - 変換器本体はロギングしない。ロギングは外側（main 等）で利用する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence


def _import_wandb():
    try:
        import importlib

        return importlib.import_module("wandb")
    except Exception as exc:  # noqa: BLE001 - 任意依存のため広めに捕捉
        raise RuntimeError(
            "wandb がインストールされていません。"
            " `pip install wandb` を実行するか、ロギングを無効化してください。"
        ) from exc


def wandb_available() -> bool:
    """wandb が利用可能かを返す。"""

    try:
        _import_wandb()
        return True
    except RuntimeError:
        return False


@dataclass
class WandBLogger:
    """一括変換の結果を WandB へ記録するクラス。"""

    project: str
    entity: Optional[str] = None
    name: Optional[str] = None
    tags: Optional[Iterable[str]] = None
    enabled: bool = True
    _run: Any = field(default=None, init=False, repr=False)

    def start_run(self, config: Optional[Dict[str, Any]] = None) -> None:
        """WandB run を開始する。"""

        if not self.enabled:
            return
        wandb = _import_wandb()
        self._run = wandb.init(
            project=self.project,
            entity=self.entity,
            name=self.name,
            tags=list(self.tags) if self.tags else None,
            config=config,
        )

    def _sink(self) -> Any:
        # start_run 済みならその run に、未開始ならモジュールの現在の run に送る。
        if self._run is not None:
            return self._run
        return _import_wandb()

    def log_metrics(
        self,
        metrics: Dict[str, Any],
        step: Optional[int] = None,
        prefix: Optional[str] = None,
    ) -> None:
        """集計値をログに送る。"""

        if not self.enabled:
            return
        if prefix:
            payload = {f"{prefix}/{key}": value for key, value in metrics.items()}
        else:
            payload = dict(metrics)
        self._sink().log(payload, step=step)

    def log_lengths(self, lengths: Sequence[Optional[int]], prefix: str = "rows") -> None:
        """行ごとの出力配列長を時系列として記録する。

        変換に失敗した行（None）は記録しない。
        """

        if not self.enabled:
            return
        sink = self._sink()
        for step, length in enumerate(lengths):
            if length is None:
                continue
            sink.log({f"{prefix}/length": length}, step=step)

    def finish(self) -> None:
        """WandB run を終了する。"""

        if not self.enabled:
            return
        self._sink().finish()
        self._run = None
