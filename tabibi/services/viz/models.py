"""Visualization service models."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tabibi.config.constants import ResponseType


class ChartDataset(BaseModel):
    """One series of a chart."""

    model_config = ConfigDict(extra="allow")

    label: str
    data: list[int | float] = Field(default_factory=list)
    color: str | None = None


class ChartPayload(BaseModel):
    """Chart annotation payload."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    chart_type: str = Field(alias="chartType")
    title: str
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)

    @classmethod
    def is_valid(cls, data: Any) -> bool:
        try:
            cls.model_validate(data)
        except ValidationError:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TablePayload(BaseModel):
    """Table annotation payload; rows are cell lists or row objects."""

    model_config = ConfigDict(extra="allow")

    title: str
    headers: list[str] = Field(default_factory=list)
    rows: list[list[Any] | dict[str, Any]] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


@dataclass(frozen=True)
class VisualizationDescriptor:
    """Decides whether a chart or table is appended to the prose."""

    type: str
    data: dict[str, Any] | None = None

    @classmethod
    def text(cls) -> "VisualizationDescriptor":
        return cls(type=ResponseType.TEXT.value)

    @property
    def has_annotation(self) -> bool:
        if self.data is None:
            return False
        return self.type in (ResponseType.CHART.value, ResponseType.TABLE.value)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data}
