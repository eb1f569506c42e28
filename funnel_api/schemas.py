from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class FilterSelectionModel(BaseModel):
    team: Optional[str] = None
    attribution_group: Optional[str] = None


class MetaListResponse(BaseModel):
    values: List[str]
