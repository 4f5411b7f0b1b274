"""Object and list metadata shared by every API resource.

The accessor interfaces defined here let the table conversion read metadata
without knowing the concrete resource type. ``ObjectMeta`` and ``ListMeta``
implement them, and any other type may implement them directly.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CommonMetadataAccessor(ABC):
    """Metadata available on both single objects and lists."""

    @abstractmethod
    def get_resource_version(self) -> str:
        """Return the resource version of the object."""
        pass

    @abstractmethod
    def get_self_link(self) -> str:
        """Return the self link of the object."""
        pass


class MetadataAccessor(CommonMetadataAccessor):
    """Metadata of a single API object."""

    @abstractmethod
    def get_name(self) -> str:
        """Return the name of the object."""
        pass

    @abstractmethod
    def get_namespace(self) -> str:
        """Return the namespace of the object."""
        pass

    @abstractmethod
    def get_creation_timestamp(self) -> Optional[datetime]:
        """Return the creation timestamp, or None when it was never set."""
        pass


class ListMetadataAccessor(CommonMetadataAccessor):
    """Metadata of a collection of API objects."""

    @abstractmethod
    def get_continue(self) -> str:
        """Return the continuation token for the next page."""
        pass

    @abstractmethod
    def get_remaining_item_count(self) -> Optional[int]:
        """Return the number of items left after this page, if known."""
        pass


class GroupResource(BaseModel):
    """A resource name qualified by its API group."""

    model_config = ConfigDict(frozen=True)

    group: str = ""
    resource: str = ""

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"


def parse_group_resource(value: str) -> GroupResource:
    """Parse ``resource.group`` (or a bare ``resource``) into a GroupResource."""
    resource, _, group = value.partition(".")
    return GroupResource(group=group, resource=resource)


class TypeMeta(BaseModel):
    """Kind and API version of a serialized object."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_version: str = ""
    kind: str = ""


class ObjectMeta(BaseModel, MetadataAccessor):
    """Metadata that all persisted resources must have."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(
        default="",
        description=(
            "Name must be unique within a namespace. Is required when creating "
            "resources, although some resources may allow a client to request the "
            "generation of an appropriate name automatically. Name is primarily "
            "intended for creation idempotence and configuration definition. "
            "Cannot be updated."
        ),
    )
    generate_name: str = Field(
        default="",
        description=(
            "GenerateName is an optional prefix, used by the server, to generate "
            "a unique name ONLY IF the Name field has not been provided."
        ),
    )
    namespace: str = Field(
        default="",
        description=(
            "Namespace defines the space within which each name must be unique. "
            "An empty namespace is equivalent to the \"default\" namespace."
        ),
    )
    self_link: str = Field(
        default="",
        description=(
            "Deprecated: selfLink is a legacy read-only field that is no longer "
            "populated by the system."
        ),
    )
    uid: str = Field(
        default="",
        description=(
            "UID is the unique in time and space value for this object. It is "
            "typically generated by the server on successful creation of a "
            "resource and is not allowed to change on PUT operations."
        ),
    )
    resource_version: str = Field(
        default="",
        description=(
            "An opaque value that represents the internal version of this object "
            "that can be used by clients to determine when objects have changed. "
            "Clients must treat these values as opaque and passed unmodified back "
            "to the server."
        ),
    )
    creation_timestamp: Optional[datetime] = Field(
        default=None,
        description=(
            "CreationTimestamp is a timestamp representing the server time when "
            "this object was created. It is not guaranteed to be set in "
            "happens-before order across separate operations. Clients may not set "
            "this value. It is represented in RFC3339 form and is in UTC.\n\n"
            "Populated by the system. Read-only. Null for lists."
        ),
    )
    labels: Dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Map of string keys and values that can be used to organize and "
            "categorize (scope and select) objects."
        ),
    )
    annotations: Dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Annotations is an unstructured key value map stored with a resource "
            "that may be set by external tools to store and retrieve arbitrary "
            "metadata. They are not queryable."
        ),
    )

    @field_validator("name", "generate_name", "namespace", "self_link", "uid", "resource_version", mode="before")
    @classmethod
    def _string_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def _string_map_or_empty(cls, value: Any) -> Any:
        # Unset or malformed maps read as empty, as they do for unstructured objects
        if not isinstance(value, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        ):
            return {}
        return value

    def get_name(self) -> str:
        return self.name

    def get_namespace(self) -> str:
        return self.namespace

    def get_creation_timestamp(self) -> Optional[datetime]:
        return self.creation_timestamp

    def get_resource_version(self) -> str:
        return self.resource_version

    def get_self_link(self) -> str:
        return self.self_link


class ListMeta(BaseModel, ListMetadataAccessor):
    """Metadata that synthetic resources such as lists must have."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    self_link: str = ""
    resource_version: str = ""
    continue_: str = Field(default="", alias="continue")
    remaining_item_count: Optional[int] = Field(default=None, ge=0)

    def get_resource_version(self) -> str:
        return self.resource_version

    def get_self_link(self) -> str:
        return self.self_link

    def get_continue(self) -> str:
        return self.continue_

    def get_remaining_item_count(self) -> Optional[int]:
        return self.remaining_item_count


class Object(TypeMeta):
    """Base model for typed resources carrying ObjectMeta."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


class ObjectList(TypeMeta):
    """Base model for typed collections carrying ListMeta."""

    metadata: ListMeta = Field(default_factory=ListMeta)
    items: List[Any] = Field(default_factory=list)


def object_meta_descriptions() -> Dict[str, str]:
    """Return the ObjectMeta field descriptions keyed by wire name."""
    return {
        field.alias or name: field.description or ""
        for name, field in ObjectMeta.model_fields.items()
    }
