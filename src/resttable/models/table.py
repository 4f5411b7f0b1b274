"""Tabular representation of API resources."""

from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel


class TableColumnDefinition(BaseModel):
    """Describes one column of a table."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    # OpenAPI primitive type: number, integer, string, boolean, date...
    type: str
    format: str = ""
    description: str = ""
    # Lower is more important. Renderers may drop high values when space is short.
    priority: int = 0


class TableRowCondition(BaseModel):
    """Additional status of a row that is relevant to a human reader."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str
    status: str
    reason: str = ""
    message: str = ""


class TableRow(BaseModel):
    """A single row of a table, with one cell per column definition."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cells: List[Any]
    conditions: List[TableRowCondition] = Field(default_factory=list)
    # The source object, shared with the caller and never modified.
    object: Any = None


class TableOptions(BaseModel):
    """Options for a table request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    no_headers: bool = False


class Table(BaseModel):
    """A tabular representation of a set of API resources."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    resource_version: str = ""
    self_link: str = ""
    continue_: str = Field(default="", alias="continue")
    remaining_item_count: Optional[int] = Field(default=None, ge=0)
    column_definitions: List[TableColumnDefinition] = Field(default_factory=list)
    rows: List[TableRow] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_empty_column_definitions(self, handler: SerializerFunctionWrapHandler) -> Any:
        data = handler(self)
        if not self.column_definitions:
            data.pop("columnDefinitions", None)
            data.pop("column_definitions", None)
        return data
