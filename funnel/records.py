from __future__ import annotations

import io
import logging
from dataclasses import astuple, dataclass, fields
from typing import Any, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from funnel.errors import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalesRecord:
    report_month: str
    team: str
    rep: str
    attribution_group: str
    sets: float
    holds: float
    qos: float
    closes: float
    closed_revenue: float
    installs: float
    installed_revenue: float
    lost: float
    lost_revenue: float
    set_to_hold_days: float
    hold_to_qo_days: float
    qo_to_close_days: float
    close_to_install_days: float


STRING_COLUMNS = {
    "report_month": "report_month",
    "team": "team",
    "rep": "rep",
    "attribution_group": "attribution_group",
}

NUMERIC_COLUMNS = {
    "Sets": "sets",
    "Holds": "holds",
    "QOs": "qos",
    "Closes": "closes",
    "Closed_RENR": "closed_revenue",
    "Installs": "installs",
    "Installed_RENR": "installed_revenue",
    "Lost": "lost",
    "Lost_RENR": "lost_revenue",
    "set_hold_days": "set_to_hold_days",
    "hold_qo_days": "hold_to_qo_days",
    "qo_close_days": "qo_to_close_days",
    "close_install_days": "close_to_install_days",
}

COLUMN_MAP = {**STRING_COLUMNS, **NUMERIC_COLUMNS}
CSV_HEADERS = {attr: col for col, attr in COLUMN_MAP.items()}
REQUIRED_COLUMNS = list(COLUMN_MAP)

FIELD_NAMES = [f.name for f in fields(SalesRecord)]
NUMERIC_FIELDS = list(NUMERIC_COLUMNS.values())


def _check_header(columns: Sequence[str]) -> None:
    present = set(columns)
    missing = [c for c in REQUIRED_COLUMNS if c not in present]
    if missing:
        raise ParseError(f"Dataset header is missing required columns: {', '.join(missing)}")


def _numericize_strict(df: pd.DataFrame) -> pd.DataFrame:
    """Cast numeric columns to float, failing on the first bad cell (row-major)."""
    out = df.copy()
    bad = pd.DataFrame(False, index=df.index, columns=list(NUMERIC_COLUMNS))
    for col in NUMERIC_COLUMNS:
        cells = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
        values = pd.to_numeric(cells, errors="coerce").astype(float)
        bad[col] = values.isna() | ~np.isfinite(values.fillna(0.0))
        out[col] = values

    bad_rows = bad.any(axis=1)
    if bad_rows.any():
        row = int(np.flatnonzero(bad_rows.to_numpy())[0])
        col = next(c for c in NUMERIC_COLUMNS if bad[c].iat[row])
        raise ParseError(
            f"Row {row}: column {col!r} is not a finite number: {df[col].iat[row]!r}",
            row=row,
            field=col,
        )

    for col in NUMERIC_COLUMNS:
        negative = out[col] < 0
        if negative.any():
            row = int(np.flatnonzero(negative.to_numpy())[0])
            logger.warning("Negative value in column %s (first at row %d, %d rows total)", col, row, int(negative.sum()))
    return out


def parse_rows(rows: Iterable[Mapping[str, Any]], columns: Optional[Sequence[str]] = None) -> List[SalesRecord]:
    """Build SalesRecords from string-keyed rows of string cells.

    The header is ``columns`` when given, otherwise the keys of the first row.
    Any header or numeric failure raises ParseError; no partial result is returned.
    """
    rows = list(rows)
    if columns is None:
        if not rows:
            return []
        columns = list(rows[0].keys())
    columns = list(columns)
    _check_header(columns)
    if not rows:
        return []

    df = pd.DataFrame.from_records(rows, columns=columns).reset_index(drop=True)
    df = _numericize_strict(df)
    df = df[REQUIRED_COLUMNS].rename(columns=COLUMN_MAP)[FIELD_NAMES]
    return [SalesRecord(**row) for row in df.to_dict(orient="records")]


def load_dataset(raw_text: str) -> List[SalesRecord]:
    """Parse a CSV document into SalesRecords."""
    try:
        df = pd.read_csv(
            io.StringIO(raw_text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise ParseError("Dataset is empty: no header row found") from exc
    except pd.errors.ParserError as exc:
        raise ParseError(f"Dataset is not valid CSV: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    records = parse_rows(df.to_dict(orient="records"), columns=list(df.columns))
    logger.info("Loaded %d sales records", len(records))
    return records


def records_to_frame(records: Iterable[SalesRecord]) -> pd.DataFrame:
    df = pd.DataFrame.from_records([astuple(r) for r in records], columns=FIELD_NAMES)
    return df.astype({f: float for f in NUMERIC_FIELDS})

