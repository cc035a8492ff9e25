from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class SortModel(BaseModel):
    column: str
    direction: Literal["asc", "desc"] = "asc"


class CrossFilterModel(BaseModel):
    column: str
    value: str


class FilterStateModel(BaseModel):
    search_term: str = ""
    column_filters: Dict[str, str] = Field(default_factory=dict)
    cross_filter: Optional[CrossFilterModel] = None
    sort: Optional[SortModel] = None


class DatasetModel(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class ViewRequest(DatasetModel):
    filters: FilterStateModel = Field(default_factory=FilterStateModel)


class InsightsRequest(DatasetModel):
    y_key: Optional[str] = None
    include_specs: bool = False


class ChartsRequest(ViewRequest):
    x_key: Optional[str] = None
    y_key: Optional[str] = None
    include_specs: bool = False


class ComputedColumnRequest(DatasetModel):
    name: str
    col_a: str
    col_b: str
    op: Literal["add", "sub", "mul", "div", "+", "-", "*", "/"] = "add"


class ImputeRequest(DatasetModel):
    column: str
    method: Literal["mean", "median", "custom"] = "mean"
    custom_value: Optional[Any] = None


class CellEditRequest(DatasetModel):
    row_index: int
    column: str
    value: str = ""


class DatasetResponse(BaseModel):
    columns: List[str]
    rows: List[Dict[str, Any]]
