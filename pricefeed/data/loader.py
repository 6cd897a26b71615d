from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

from pricefeed.errors.errors import ReplayError
from pricefeed.types.types import PushRecord, symbol_from_str

logger = logging.getLogger(__name__)

COMPONENT = "push_loader"

REQUIRED_COLUMNS: tuple[str, ...] = ("symbol", "publish_time", "price")
OPTIONAL_COLUMNS: tuple[str, ...] = ("caller", "now")
INT_COLUMNS: tuple[str, ...] = ("publish_time", "price", "now")


def load_pushes(path: Path | str) -> list[PushRecord]:
    """
    Load price pushes from a CSV or Parquet file, in file order.

    Columns: symbol, publish_time, price (required); caller, now (optional).
    `now`, when present and non-null, is the clock time to pin before the push.
    Row numbers on the returned records are 1-based data rows.
    """
    path = Path(path)
    df = _read_frame(path)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ReplayError(
            f"missing required columns: {sorted(missing)}",
            column=missing[0],
            component=COMPONENT,
            details={"path": str(path)},
        )

    present = [c for c in (*REQUIRED_COLUMNS, *OPTIONAL_COLUMNS) if c in df.columns]
    df = df.select(present)

    for col in REQUIRED_COLUMNS:
        nulls = df.get_column(col).is_null()
        if nulls.any():
            first = int(nulls.arg_true()[0])
            raise ReplayError(
                f"null value in required column {col!r}",
                row=first + 1,
                column=col,
                component=COMPONENT,
            )

    df = _cast_columns(df)

    if "now" in df.columns:
        negative = df.get_column("now").fill_null(0) < 0
        if negative.any():
            raise ReplayError(
                "clock time in column 'now' must be >= 0",
                row=int(negative.arg_true()[0]) + 1,
                column="now",
                component=COMPONENT,
            )

    records = [
        PushRecord(
            row=i + 1,
            symbol=symbol_from_str(row["symbol"]),
            publish_time=row["publish_time"],
            price=row["price"],
            caller=row.get("caller"),
            now=row.get("now"),
        )
        for i, row in enumerate(df.iter_rows(named=True))
    ]
    logger.info(f"Loaded {len(records)} pushes from {path}")
    return records


def _read_frame(path: Path) -> pl.DataFrame:
    if not path.is_file():
        raise ReplayError(
            f"input file not found: {path}", component=COMPONENT, details={"path": str(path)}
        )

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            # read everything as strings, casting happens explicitly below
            return pl.read_csv(path, infer_schema_length=0)
        if suffix in (".parquet", ".pq"):
            return pl.read_parquet(path)
    except pl.exceptions.PolarsError as exc:
        raise ReplayError(
            f"cannot read input file: {exc}", component=COMPONENT, details={"path": str(path)}
        ) from exc

    raise ReplayError(
        f"unsupported input format {suffix!r} (expected .csv or .parquet)",
        component=COMPONENT,
        details={"path": str(path)},
    )


def _cast_columns(df: pl.DataFrame) -> pl.DataFrame:
    exprs: list[pl.Expr] = [pl.col("symbol").cast(pl.String)]
    if "caller" in df.columns:
        exprs.append(pl.col("caller").cast(pl.String))

    for col in INT_COLUMNS:
        if col not in df.columns:
            continue
        try:
            df.get_column(col).cast(pl.Int64, strict=True)
        except pl.exceptions.PolarsError as exc:
            raise ReplayError(
                f"column {col!r} must contain integers",
                column=col,
                component=COMPONENT,
            ) from exc
        exprs.append(pl.col(col).cast(pl.Int64, strict=True))

    return df.with_columns(exprs)
