"""Conversion of API objects into their default table representation."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import status

from resttable.core.context import request_info_from
from resttable.models.meta import GroupResource, object_meta_descriptions
from resttable.models.status import STATUS_FAILURE, Status
from resttable.models.table import Table, TableColumnDefinition, TableOptions, TableRow
from resttable.services.meta.accessor import (
    AccessorError,
    accessor,
    common_accessor,
    is_list_type,
    iter_list_items,
    list_accessor,
)

logger = logging.getLogger(__name__)

SWAGGER_METADATA_DESCRIPTIONS = object_meta_descriptions()

# Rendered for objects that were never given a creation timestamp
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def format_timestamp(timestamp: Optional[datetime]) -> str:
    """Format a timestamp as RFC 3339 in UTC with second precision.

    Naive timestamps are taken to be UTC already. Times whose UTC value falls
    outside the representable range are clamped to the first or last second.
    """
    if timestamp is None:
        timestamp = ZERO_TIME
    offset = timestamp.utcoffset() or timedelta(0)
    local = timestamp.replace(microsecond=0, tzinfo=None)
    try:
        utc = local - offset
    except OverflowError:
        utc = datetime.min if offset > timedelta(0) else datetime.max.replace(microsecond=0)
    return f"{utc.isoformat()}Z"


class NotAcceptableError(Exception):
    """The resource does not support being converted to a Table."""

    def __init__(self, resource: GroupResource):
        self.resource = resource
        super().__init__(f"the resource {resource} does not support being converted to a Table")

    def status(self) -> Status:
        """Return the API status describing this error."""
        return Status(
            status=STATUS_FAILURE,
            code=status.HTTP_406_NOT_ACCEPTABLE,
            reason="NotAcceptable",
            message=str(self),
        )


class TableConvertor(ABC):
    """Abstract base class for table convertors."""

    @abstractmethod
    def convert_to_table(self, ctx: Any, obj: Any, table_options: Any = None) -> Table:
        """Convert an object or a list of objects into a Table."""
        pass


class DefaultTableConvertor(TableConvertor):
    """Renders any object with metadata as a Name / Created At table.

    The default resource is only used in error messages when the request
    context does not say which resource was asked for.
    """

    def __init__(self, default_qualified_resource: GroupResource):
        self.default_qualified_resource = default_qualified_resource

    def convert_to_table(self, ctx: Any, obj: Any, table_options: Any = None) -> Table:
        """
        Convert an object or a list of objects into a Table.

        Parameters
        ----------
        ctx : Any
            The request context, consulted for the resource name on failure.
        obj : Any
            A single API object or a collection of them.
        table_options : Any
            ``TableOptions``; anything else is treated as the defaults.

        Returns
        -------
        Table
            One row per object, in iteration order.

        Raises
        ------
        NotAcceptableError
            If any object does not expose metadata. No partial table is returned.
        """
        table = Table()

        items = iter_list_items(obj) if is_list_type(obj) else [obj]
        for item in items:
            try:
                m = accessor(item)
            except AccessorError as e:
                resource = self._qualified_resource(ctx)
                logger.warning(f"Cannot convert {type(item).__name__} of {resource} to a table: {e}")
                raise NotAcceptableError(resource) from e
            table.rows.append(
                TableRow(
                    cells=[m.get_name(), format_timestamp(m.get_creation_timestamp())],
                    object=item,
                )
            )

        try:
            list_meta = list_accessor(obj)
        except AccessorError:
            list_meta = None

        if list_meta is not None:
            table.resource_version = list_meta.get_resource_version()
            table.self_link = list_meta.get_self_link()
            table.continue_ = list_meta.get_continue()
            remaining_item_count = list_meta.get_remaining_item_count()
            # Negative counts are meaningless and left unset
            if remaining_item_count is not None and remaining_item_count >= 0:
                table.remaining_item_count = remaining_item_count
        else:
            try:
                common_meta = common_accessor(obj)
            except AccessorError:
                common_meta = None
            if common_meta is not None:
                table.resource_version = common_meta.get_resource_version()
                table.self_link = common_meta.get_self_link()

        if not isinstance(table_options, TableOptions) or not table_options.no_headers:
            table.column_definitions = [
                TableColumnDefinition(
                    name="Name",
                    type="string",
                    format="name",
                    description=SWAGGER_METADATA_DESCRIPTIONS["name"],
                ),
                TableColumnDefinition(
                    name="Created At",
                    type="date",
                    description=SWAGGER_METADATA_DESCRIPTIONS["creationTimestamp"],
                ),
            ]

        logger.debug(f"Converted {len(table.rows)} rows to a table")
        return table

    def _qualified_resource(self, ctx: Any) -> GroupResource:
        info = request_info_from(ctx)
        if info is not None:
            return GroupResource(group=info.api_group, resource=info.resource)
        return self.default_qualified_resource
