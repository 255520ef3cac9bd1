"""
OpMon data source schemas - Pydantic models for queries, scope and results.

Python attribute names are snake_case; aliases carry the field names the
OpMon backend expects on the wire.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .static import QueryMode


class Query(BaseModel):
    """One user-defined request unit (a panel target)."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref_id: Optional[str] = Field(None, alias="refId")
    mode: Optional[QueryMode] = None
    # Plain string so variable references such as "$type" survive validation
    object_type: Optional[str] = Field(None, alias="objecttype")
    host: Optional[str] = None
    service: Optional[str] = None
    hostgroup: Optional[str] = None
    servicegroup: Optional[str] = None
    service_catalog: Optional[str] = Field(None, alias="serviceCatalog")
    metric: Optional[str] = None
    time_cut: Optional[str] = Field(None, alias="timeCut")
    result_format: Optional[str] = Field(None, alias="resultformat")
    group_by: Optional[str] = Field(None, alias="groupby")
    hard_state_only: Optional[bool] = Field(None, alias="hardState")
    extended_state: Optional[bool] = None
    downtime_as_ok: Optional[bool] = Field(None, alias="downtimeasok")
    disabled: bool = Field(False, alias="hide")
    alias: Optional[str] = None
    target: Optional[str] = None

    @field_validator("object_type", mode="before")
    @classmethod
    def _object_type_value(cls, value: Any) -> Any:
        return value.value if isinstance(value, Enum) else value

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with backend field names, omitting unset values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VariableKind(str, Enum):
    CUSTOM = "custom"
    QUERY = "query"
    CONSTANT = "constant"
    DATASOURCE = "datasource"
    INTERVAL = "interval"
    TEXTBOX = "textbox"
    ADHOC = "adhoc"
    SYSTEM = "system"


# Kinds carried as request metadata instead of being inlined into fields
NON_SUBSTITUTABLE_KINDS = (VariableKind.ADHOC, VariableKind.SYSTEM)

ALL_VALUE = "$__all"


class Variable(BaseModel):
    """Snapshot of a dashboard template variable."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    kind: VariableKind = Field(VariableKind.CUSTOM, alias="type")
    current: Union[str, List[str], None] = None
    text: Union[str, List[str], None] = None
    multi: bool = False
    include_all: bool = Field(False, alias="includeAll")
    all_value: Optional[str] = Field(None, alias="allValue")
    options: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _default_name(self) -> "Variable":
        if not self.name:
            self.name = self.id
        return self

    @property
    def substitutable(self) -> bool:
        return self.kind not in NON_SUBSTITUTABLE_KINDS


class VariableOption(BaseModel):
    selected: bool = False
    text: Union[str, List[str], None] = None
    value: Union[str, List[str], None] = None


class AdhocFilter(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str
    operator: str = "="
    value: str = ""


class Scope(BaseModel):
    """Read-only variable snapshot passed into every normalization call."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    variables: List[Variable] = Field(default_factory=list)
    scoped_vars: Dict[str, Any] = Field(default_factory=dict, alias="scopedVars")
    adhoc_filters: List[AdhocFilter] = Field(default_factory=list, alias="adhocFilters")


class QueryRequest(BaseModel):
    """Ordered batch of targets plus ambient request context."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    targets: List[Query] = Field(default_factory=list)
    time_range: Optional[Dict[str, Any]] = Field(None, alias="range")
    range_raw: Optional[Dict[str, Any]] = Field(None, alias="rangeRaw")
    interval_ms: Optional[int] = Field(None, alias="intervalMs")
    max_data_points: Optional[int] = Field(None, alias="maxDataPoints")
    scoped_vars: Dict[str, Any] = Field(default_factory=dict, alias="scopedVars")
    adhoc_filters: List[AdhocFilter] = Field(default_factory=list, alias="adhocFilters")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VariableQuery(BaseModel):
    query: str
    format: Literal["string", "json"] = "string"


class SelectableOption(BaseModel):
    label: str
    value: Any = None


class MetricFindValue(BaseModel):
    text: str
    value: Any = None


class QueryResult(BaseModel):
    status: Literal["success", "error"] = "success"
    data: List[Any] = Field(default_factory=list)
    message: Optional[str] = None


class OptionsResult(BaseModel):
    status: Literal["success", "error"] = "success"
    options: List[SelectableOption] = Field(default_factory=list)
    message: Optional[str] = None


class ConnectionStatus(BaseModel):
    status: Literal["success", "error"]
    message: str
    title: Optional[str] = None
