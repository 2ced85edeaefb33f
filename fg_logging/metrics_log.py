"""Append-only CSV metrics logging using Polars."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

LOG_DIR = Path("logs")


def _align(frame: pl.DataFrame, columns: List[str], dtypes: Dict[str, pl.PolarsDataType]) -> pl.DataFrame:
    out = frame
    for c in columns:
        if c not in out.columns:
            out = out.with_columns(pl.lit(None, dtype=dtypes[c]).alias(c))
        elif out.schema[c] != dtypes[c]:
            out = out.with_columns(pl.col(c).cast(dtypes[c]))
    return out.select(columns)


def _union_dtypes(prev: pl.DataFrame, new: pl.DataFrame) -> Dict[str, pl.PolarsDataType]:
    dtypes: Dict[str, pl.PolarsDataType] = {}
    for c in sorted(set(prev.columns) | set(new.columns)):
        dt_prev = prev.schema.get(c, None)
        dt_new = new.schema.get(c, None)
        if dt_prev is None or dt_new is None:
            dtypes[c] = dt_new if dt_prev is None else dt_prev
        elif dt_prev == dt_new:
            dtypes[c] = dt_prev
        elif dt_prev == pl.Utf8 or dt_new == pl.Utf8:
            dtypes[c] = pl.Utf8
        else:
            # numeric mix
            dtypes[c] = pl.Float64
    return dtypes


def log_records(name: str, records: List[Dict[str, Any]], log_dir: Optional[Path] = None) -> Path:
    """Append rows to ``<log_dir>/<name>.csv``.

    Args:
        name: Base filename without extension.
        records: List of dict rows; columns may differ between calls.
        log_dir: Target directory (defaults to ``logs/`` under the cwd).
    Returns:
        Path to the CSV file.
    """
    assert isinstance(name, str) and len(name) > 0, "Invalid log name"
    assert isinstance(records, list), "records must be a list"
    out_dir = LOG_DIR if log_dir is None else Path(log_dir)
    out = out_dir / f"{name}.csv"
    if not records:
        return out
    out_dir.mkdir(parents=True, exist_ok=True)
    df = pl.DataFrame(records)
    if out.exists():
        prev = pl.read_csv(out)
        dtypes = _union_dtypes(prev, df)
        columns = list(dtypes.keys())
        df = pl.concat([_align(prev, columns, dtypes), _align(df, columns, dtypes)], how="vertical")
    df.write_csv(out)
    return out


def log_record(name: str, record: Dict[str, Any], log_dir: Optional[Path] = None) -> Path:
    """Append a single row."""
    return log_records(name, [record], log_dir=log_dir)
