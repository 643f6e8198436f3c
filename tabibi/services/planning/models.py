"""Planning service models."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from tabibi.config.constants import ResponseType


def _as_string_list(value: Any) -> Any:
    """Accept null for an empty list and stringify scalar items."""
    if value is None:
        return []
    if isinstance(value, list):
        return [item if isinstance(item, str) else str(item) for item in value]
    return value


StringList = Annotated[list[str], BeforeValidator(_as_string_list)]


class DataRequirements(BaseModel):
    """Tables, fields and queries the planner asks for."""

    model_config = ConfigDict(extra="ignore")

    tables: StringList = Field(default_factory=list)
    fields: StringList = Field(default_factory=list)
    queries: StringList = Field(default_factory=list)


class BuildingSpec(BaseModel):
    """How the final answer should be shaped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    response_type: str = Field(default=ResponseType.TEXT.value, alias="responseType")
    chart_type: str | None = Field(default=None, alias="chartType")
    components: StringList = Field(default_factory=list)

    @field_validator("response_type", mode="before")
    @classmethod
    def default_response_type(cls, v: Any) -> Any:
        if v is None or v == "":
            return ResponseType.TEXT.value
        return v


class Plan(BaseModel):
    """Todo list produced by the planning phase."""

    model_config = ConfigDict(extra="ignore")

    requests: StringList = Field(default_factory=list)
    data: DataRequirements = Field(default_factory=DataRequirements)
    actions: StringList = Field(default_factory=list)
    building: BuildingSpec = Field(default_factory=BuildingSpec)

    @field_validator("data", "building", mode="before")
    @classmethod
    def null_section_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def default(cls, user_message: str) -> "Plan":
        """Minimal plan used whenever planning produced nothing usable."""
        return cls(requests=[user_message])

    @property
    def response_type(self) -> str:
        return self.building.response_type

    def to_dict(self) -> dict[str, Any]:
        """Wire shape (camelCase keys, unset chart type omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)
