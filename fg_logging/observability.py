from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time

import numpy as np
import polars as pl

from fg_logging.metrics_log import log_records
from structure.model import FactorGraphModel
from structure.oracle import ArgmaxTrace


@dataclass
class ArgmaxMetricsLogger:
    """Attach to FactorGraphModel.on_argmax and log one row per oracle call.

    Usage:
        logger = ArgmaxMetricsLogger(run_id="epoch0")
        logger.attach(model)
        for i in range(model.get_num_samples()):
            model.argmax(w, i, training=True)
        logger.flush()
    """

    name: str = "argmax_metrics"
    run_id: str = "default"
    buffer: List[Dict[str, Any]] = field(default_factory=list)
    step: int = 0
    log_weight_norm: bool = False
    _last_timestamp: Optional[float] = field(default=None, init=False, repr=False)

    def attach(self, model: FactorGraphModel) -> None:
        model.on_argmax.append(self.on_argmax)
        self._last_timestamp = time.perf_counter()

    def on_argmax(self, trace: ArgmaxTrace) -> None:
        self.step += 1
        now = time.perf_counter()
        compute_cost = 0.0 if self._last_timestamp is None else float(now - self._last_timestamp)
        self._last_timestamp = now
        row: Dict[str, Any] = {
            "run_id": self.run_id,
            "step": int(self.step),
            "example": int(trace.example_index),
            "training": bool(trace.training),
            "score": float(trace.score),
            "delta": float(trace.delta),
            "slack": float(trace.slack),
            "energy_truth": float(trace.energy_truth),
            "energy_pred": float(trace.energy_pred),
            "dot_truth": float(trace.dot_truth),
            "dot_pred": float(trace.dot_pred),
            "hamming": int(np.count_nonzero(trace.states_truth != trace.states_pred)),
            "num_variables": int(trace.states_truth.shape[0]),
            "compute_cost": compute_cost,
        }
        if self.log_weight_norm:
            row["w_norm"] = float(np.linalg.norm(trace.w))
        self.buffer.append(row)

    def summary(self) -> Dict[str, float]:
        """Aggregate the buffered rows (before flushing)."""
        if not self.buffer:
            return {"num_examples": 0, "mean_delta": 0.0, "mean_slack": 0.0, "max_slack": 0.0, "num_violations": 0}
        df = pl.DataFrame(self.buffer)
        agg = df.select(
            pl.len().alias("num_examples"),
            pl.col("delta").mean().alias("mean_delta"),
            pl.col("slack").mean().alias("mean_slack"),
            pl.col("slack").max().alias("max_slack"),
            (pl.col("slack") > 0.0).sum().alias("num_violations"),
        ).row(0, named=True)
        return {
            "num_examples": int(agg["num_examples"]),
            "mean_delta": float(agg["mean_delta"]),
            "mean_slack": float(agg["mean_slack"]),
            "max_slack": float(agg["max_slack"]),
            "num_violations": int(agg["num_violations"]),
        }

    def flush(self) -> None:
        if self.buffer:
            log_records(self.name, self.buffer)
            self.buffer.clear()


@dataclass
class ParameterMappingTracker:
    """Record the global parameter layout after every factor type add/remove."""

    name: str = "parameter_mapping"
    run_id: str = "default"
    buffer: List[Dict[str, Any]] = field(default_factory=list)
    step: int = 0

    def attach(self, model: FactorGraphModel) -> None:
        model.on_mapping_changed.append(self.on_mapping_changed)

    def on_mapping_changed(self, w_map: np.ndarray) -> None:
        self.step += 1
        ids, counts = np.unique(np.asarray(w_map), return_counts=True)
        row: Dict[str, Any] = {
            "run_id": self.run_id,
            "step": int(self.step),
            "dimension": int(np.asarray(w_map).shape[0]),
            "num_types": int(ids.shape[0]),
        }
        for type_id, count in zip(ids, counts):
            row[f"slots:{int(type_id)}"] = int(count)
        self.buffer.append(row)

    def flush(self) -> None:
        if not self.buffer:
            return
        log_records(self.name, self.buffer)
        self.buffer.clear()
