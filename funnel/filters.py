from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from funnel.records import SalesRecord

# "No filter" on a facet. Facet values are always strings, so None never collides.
ALL = None
ALL_LABEL = "all"

FACET_FIELDS = ("team", "attribution_group")


@dataclass(frozen=True)
class FilterSelection:
    team: Optional[str] = ALL
    attribution_group: Optional[str] = ALL


def distinct_values(records: Iterable[SalesRecord], field: str) -> List[str]:
    """Distinct values of a facet field, in first-seen order."""
    if field not in FACET_FIELDS:
        raise ValueError(f"Unsupported facet field {field!r}; expected one of {FACET_FIELDS}")
    return list(dict.fromkeys(getattr(r, field) for r in records))


def apply_filter(records: Iterable[SalesRecord], selection: FilterSelection) -> List[SalesRecord]:
    out = list(records)
    if selection.team is not ALL:
        out = [r for r in out if r.team == selection.team]
    if selection.attribution_group is not ALL:
        out = [r for r in out if r.attribution_group == selection.attribution_group]
    return out


def _as_facet(value: object, known: Optional[Sequence[str]]) -> Optional[str]:
    if value is None:
        return ALL
    s = str(value).strip()
    if known and s in known:
        return s
    if not s or s.lower() == ALL_LABEL:
        return ALL
    return s


def normalize_filters(
    raw: dict,
    *,
    teams: Optional[Sequence[str]] = None,
    attribution_groups: Optional[Sequence[str]] = None,
) -> FilterSelection:
    """Build a FilterSelection from query params or widget values.

    Blank values and the "all" label mean no filter, unless that value is
    itself a known facet value (e.g. a team stored as "").
    """
    attribution = raw.get("attribution_group")
    if attribution is None:
        attribution = raw.get("attribution")
    return FilterSelection(
        team=_as_facet(raw.get("team"), teams),
        attribution_group=_as_facet(attribution, attribution_groups),
    )
