"""API schemas for resource operations."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resttable.models.meta import ObjectMeta


class ResourceCreate(BaseModel):
    """Schema for creating a new object. Fields besides metadata are kept as given."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


class APIResourceSchema(BaseModel):
    """Schema for a registered resource."""

    name: str
    group: str
    path: str


class APIResourceListResponse(BaseModel):
    """Schema for listing registered resources."""

    resources: List[APIResourceSchema]
