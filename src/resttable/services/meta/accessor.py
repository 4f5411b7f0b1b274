"""Metadata accessors for typed and unstructured API objects.

Typed objects expose their metadata through a ``metadata`` attribute holding
an ``ObjectMeta`` or ``ListMeta``, or implement the accessor interfaces
themselves. Unstructured objects are mappings decoded from JSON, where a
list is any mapping with an ``items`` list.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

from resttable.models.meta import (
    CommonMetadataAccessor,
    ListMeta,
    ListMetadataAccessor,
    MetadataAccessor,
    ObjectMeta,
)

logger = logging.getLogger(__name__)

MetaT = TypeVar("MetaT", bound=BaseModel)


class AccessorError(ValueError):
    """Raised when an object does not expose the requested metadata."""


def accessor(obj: Any) -> MetadataAccessor:
    """Return the object metadata accessor for a single API object."""
    if isinstance(obj, MetadataAccessor):
        return obj
    if isinstance(obj, Mapping):
        metadata = obj.get("metadata")
        if isinstance(metadata, Mapping):
            return _validate_metadata(ObjectMeta, metadata, obj)
    else:
        metadata = getattr(obj, "metadata", None)
        if isinstance(metadata, MetadataAccessor):
            return metadata
    raise AccessorError(f"object of type {type(obj).__name__} does not implement the Object interfaces")


def list_accessor(obj: Any) -> ListMetadataAccessor:
    """Return the list metadata accessor for a collection of API objects."""
    if isinstance(obj, ListMetadataAccessor):
        return obj
    if isinstance(obj, Mapping):
        if _is_unstructured_list(obj):
            return _validate_metadata(ListMeta, obj.get("metadata") or {}, obj)
    else:
        metadata = getattr(obj, "metadata", None)
        if isinstance(metadata, ListMetadataAccessor):
            return metadata
    raise AccessorError(f"object of type {type(obj).__name__} does not implement the List interfaces")


def common_accessor(obj: Any) -> CommonMetadataAccessor:
    """Return the accessor for metadata shared by objects and lists."""
    if isinstance(obj, CommonMetadataAccessor):
        return obj
    if isinstance(obj, Mapping):
        if _is_unstructured_list(obj):
            return list_accessor(obj)
        return accessor(obj)
    metadata = getattr(obj, "metadata", None)
    if isinstance(metadata, CommonMetadataAccessor):
        return metadata
    raise AccessorError(f"object of type {type(obj).__name__} does not implement the common metadata interfaces")


def is_list_type(obj: Any) -> bool:
    """Return True if the object is a collection of API objects."""
    if isinstance(obj, (list, tuple)):
        return True
    if isinstance(obj, Mapping):
        return _is_unstructured_list(obj)
    return isinstance(getattr(obj, "items", None), (list, tuple))


def iter_list_items(obj: Any) -> Iterator[Any]:
    """Yield the items of a collection in order.

    Raises
    ------
    AccessorError
        If the object is not a collection. Raised on the first iteration.
    """
    if isinstance(obj, (list, tuple)):
        items = obj
    elif isinstance(obj, Mapping):
        items = obj.get("items")
    else:
        items = getattr(obj, "items", None)

    if not isinstance(items, (list, tuple)):
        raise AccessorError(f"object of type {type(obj).__name__} is not a list")

    yield from items


def _is_unstructured_list(obj: Mapping) -> bool:
    return isinstance(obj.get("items"), list)


def _validate_metadata(model: Type[MetaT], metadata: Mapping, obj: Any) -> MetaT:
    try:
        return model.model_validate(metadata)
    except ValidationError as e:
        logger.debug(f"Invalid metadata on {type(obj).__name__}: {e}")
        raise AccessorError(f"object of type {type(obj).__name__} has invalid metadata: {e}") from e
