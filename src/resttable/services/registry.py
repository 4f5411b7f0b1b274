"""In-memory storage for registered API resources."""

import base64
import binascii
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from resttable.core.config import Settings
from resttable.models.meta import GroupResource, parse_group_resource
from resttable.services.table_convertor import (
    DefaultTableConvertor,
    TableConvertor,
    format_timestamp,
)

logger = logging.getLogger(__name__)

CORE_GROUP_PATH = "core"


class InvalidContinueError(ValueError):
    """Raised when a continue token cannot be decoded."""


def group_path(group: str) -> str:
    """Return the path segment used for an API group."""
    return group or CORE_GROUP_PATH


def group_from_path(segment: str) -> str:
    """Return the API group addressed by a path segment."""
    return "" if segment == CORE_GROUP_PATH else segment


def encode_continue(start: int, resource_version: str) -> str:
    """Encode the position of the next page as an opaque token."""
    payload = json.dumps({"start": start, "rv": resource_version}).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii")


def decode_continue(token: str) -> int:
    """Decode a continue token into the index of the next item."""
    try:
        payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        start = int(payload["start"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError, OverflowError) as e:
        raise InvalidContinueError(f"invalid continue token: {token!r}") from e
    if start < 0:
        raise InvalidContinueError(f"invalid continue token: {token!r}")
    return start


class ResourceStore:
    """Stores unstructured objects of one resource, in creation order."""

    def __init__(
        self,
        resource: GroupResource,
        api_prefix: str = "",
        table_convertor: Optional[TableConvertor] = None,
    ):
        self.resource = resource
        self.self_link = f"{api_prefix}/{group_path(resource.group)}/{resource.resource}"
        self.table_convertor = table_convertor or DefaultTableConvertor(resource)
        self._objects: Dict[str, Dict[str, Any]] = {}
        self._resource_version = 0

    def create(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new object, filling in the system-populated metadata.

        The caller checks that ``metadata.name`` is set and unused.
        """
        self._resource_version += 1
        metadata = dict(obj.get("metadata") or {})
        name = metadata["name"]
        metadata.update(
            {
                "uid": str(uuid.uuid4()),
                "resourceVersion": str(self._resource_version),
                "selfLink": f"{self.self_link}/{name}",
                "creationTimestamp": format_timestamp(datetime.now(timezone.utc)),
            }
        )
        stored = {**obj, "metadata": metadata}
        self._objects[name] = stored
        logger.info(f"Created {self.resource} {name} at resource version {self._resource_version}")
        return stored

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        """Get an object by name."""
        return self._objects.get(name)

    def list(self, limit: Optional[int] = None, continue_token: Optional[str] = None) -> Dict[str, Any]:
        """List objects as an unstructured list, one page at a time."""
        names = list(self._objects)
        start = decode_continue(continue_token) if continue_token else 0
        end = len(names) if not limit else min(start + limit, len(names))

        metadata: Dict[str, Any] = {
            "resourceVersion": str(self._resource_version),
            "selfLink": self.self_link,
        }
        if end < len(names):
            metadata["continue"] = encode_continue(end, str(self._resource_version))
            metadata["remainingItemCount"] = len(names) - end

        items: List[Dict[str, Any]] = [self._objects[name] for name in names[start:end]]
        return {"kind": "List", "apiVersion": "v1", "metadata": metadata, "items": items}


class ResourceRegistry:
    """Maps qualified resources to their stores."""

    def __init__(self, api_prefix: str = ""):
        self.api_prefix = api_prefix
        self._stores: Dict[GroupResource, ResourceStore] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResourceRegistry":
        """Create a registry with the resources named in the settings."""
        registry = cls(api_prefix=settings.api_prefix)
        for entry in settings.resources:
            registry.register(parse_group_resource(entry))
        return registry

    def register(self, resource: GroupResource, table_convertor: Optional[TableConvertor] = None) -> ResourceStore:
        """Register a resource, returning its store."""
        if resource in self._stores:
            return self._stores[resource]
        store = ResourceStore(resource, api_prefix=self.api_prefix, table_convertor=table_convertor)
        self._stores[resource] = store
        logger.info(f"Registered resource {resource} at {store.self_link}")
        return store

    def get_store(self, resource: GroupResource) -> Optional[ResourceStore]:
        """Get the store of a resource, if it is registered."""
        return self._stores.get(resource)

    def resources(self) -> List[GroupResource]:
        """List the registered resources in registration order."""
        return list(self._stores)
