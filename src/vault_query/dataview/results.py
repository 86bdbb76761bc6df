"""
Render items: the typed output of query execution.

Renderers consume either the models themselves or their `to_dict()` form.
Cell and list values are left as engine values (Date, Link, ...); use
`ResultFormatter.serialize_value` for a JSON-safe form.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class RenderItemBase(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping; optional keys that are unset are left out.

        Unlike model_dump(), engine values in cells are kept as they are.
        """
        data: dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, list) and value and isinstance(value[0], BaseModel):
                value = [item.model_dump() for item in value]
            data[name] = value
        return data


class TableResult(RenderItemBase):
    type: Literal["table"] = "table"
    headers: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    group: str | None = Field(default=None, description="Group key for GROUP BY tables")


class ListResult(RenderItemBase):
    type: Literal["list"] = "list"
    items: list[Any] = Field(default_factory=list)
    group: str | None = None


class TaskItem(BaseModel):
    text: str
    status: str = " "
    completed: bool = False


class TaskGroup(BaseModel):
    name: str
    tasks: list[TaskItem] = Field(default_factory=list)


class TaskListResult(RenderItemBase):
    type: Literal["task_list"] = "task_list"
    groups: list[TaskGroup] = Field(default_factory=list)


class HeaderResult(RenderItemBase):
    type: Literal["header"] = "header"
    level: int = 2
    text: str


class ParagraphResult(RenderItemBase):
    type: Literal["paragraph"] = "paragraph"
    text: str


class ErrorResult(RenderItemBase):
    type: Literal["error"] = "error"
    message: str


RenderItem = Annotated[
    Union[TableResult, ListResult, TaskListResult, HeaderResult, ParagraphResult, ErrorResult],
    Field(discriminator="type"),
]
