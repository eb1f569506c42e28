from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

from funnel.filters import FilterSelection, apply_filter, distinct_values, normalize_filters
from funnel.records import load_dataset

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DATASET_FILENAME = "peek-funnel.csv"
DATASET_PATH_ENV = "FUNNEL_DATASET_PATH"


def get_dataset_path() -> Path:
    override = os.environ.get(DATASET_PATH_ENV, "").strip()
    return Path(override) if override else DATA_DIR / DATASET_FILENAME


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(file_sig: Tuple[str, float]) -> Dict[str, object]:
    path = Path(file_sig[0])
    records = load_dataset(path.read_text(encoding="utf-8-sig"))
    return {
        "path": str(path),
        "records": records,
        "teams": distinct_values(records, "team"),
        "attribution_groups": distinct_values(records, "attribution_group"),
    }


def load_dashboard_data(path: Optional[Path] = None) -> Dict[str, object]:
    """Load and cache the dataset; reloads when the file's mtime changes.

    ParseError propagates: a bad file never yields a partial dataset.
    """
    path = path or get_dataset_path()
    if not path.is_file():
        logger.warning("Dataset not found at %s", path)
        return {"path": str(path), "records": [], "teams": [], "attribution_groups": []}
    return _load_dashboard_data_cached(file_signature(path))


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()


def prepare_context(filters: dict | FilterSelection, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records = list(data_ctx.get("records", []) or [])
    selection = (
        filters
        if isinstance(filters, FilterSelection)
        else normalize_filters(
            filters or {},
            teams=data_ctx.get("teams") or [],
            attribution_groups=data_ctx.get("attribution_groups") or [],
        )
    )
    return {
        "selection": selection,
        "records": records,
        "filtered_records": apply_filter(records, selection),
        "teams": list(data_ctx.get("teams", []) or []),
        "attribution_groups": list(data_ctx.get("attribution_groups", []) or []),
    }
