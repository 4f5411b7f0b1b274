"""Tests for the default table convertor."""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest
from pydantic import Field

from resttable.core.context import RequestContext, RequestInfo, with_request_info
from resttable.models.meta import (
    GroupResource,
    ListMeta,
    ListMetadataAccessor,
    Object,
    ObjectList,
    ObjectMeta,
)
from resttable.models.table import Table, TableOptions
from resttable.services.meta.accessor import AccessorError
from resttable.services.table_convertor import (
    SWAGGER_METADATA_DESCRIPTIONS,
    DefaultTableConvertor,
    NotAcceptableError,
    format_timestamp,
)


class Pod(Object):
    """A typed resource used for testing."""

    spec: Dict[str, Any] = Field(default_factory=dict)


class PodList(ObjectList):
    """A typed collection used for testing."""

    items: List[Pod] = Field(default_factory=list)


class Opaque:
    """An object without any metadata."""


def make_pod(name: str, created: datetime, resource_version: str = "") -> Pod:
    """Create a pod with the given name and creation timestamp."""
    return Pod(
        api_version="v1",
        kind="Pod",
        metadata=ObjectMeta(
            name=name,
            creation_timestamp=created,
            resource_version=resource_version,
            self_link=f"/api/v1/pods/{name}",
        ),
    )


@pytest.fixture
def convertor():
    """Create a convertor with a default resource for testing."""
    return DefaultTableConvertor(GroupResource(group="", resource="pods"))


@pytest.fixture
def pod_list():
    """Create a list of two pods with list metadata."""
    return PodList(
        api_version="v1",
        kind="PodList",
        metadata=ListMeta(
            resource_version="42",
            self_link="/api/v1/pods",
            continue_="next-page",
            remaining_item_count=3,
        ),
        items=[
            make_pod("a", datetime(2024, 1, 1, tzinfo=timezone.utc)),
            make_pod("b", datetime(2024, 1, 2, tzinfo=timezone.utc)),
        ],
    )


def test_convert_single_object(convertor):
    """Test converting a single object into a one-row table."""
    pod = make_pod("web", datetime(2024, 3, 2, 15, 4, 5, tzinfo=timezone.utc), resource_version="7")

    table = convertor.convert_to_table(None, pod, TableOptions())

    assert len(table.rows) == 1
    assert table.rows[0].cells == ["web", "2024-03-02T15:04:05Z"]
    assert table.rows[0].object is pod
    assert table.rows[0].conditions == []

    # Single objects only provide the common metadata
    assert table.resource_version == "7"
    assert table.self_link == "/api/v1/pods/web"
    assert table.continue_ == ""
    assert table.remaining_item_count is None


def test_convert_list_preserves_order_and_metadata(convertor, pod_list):
    """Test converting a list keeps item order and the list metadata."""
    table = convertor.convert_to_table(None, pod_list, TableOptions())

    assert [column.name for column in table.column_definitions] == ["Name", "Created At"]
    assert [row.cells for row in table.rows] == [
        ["a", "2024-01-01T00:00:00Z"],
        ["b", "2024-01-02T00:00:00Z"],
    ]
    assert [row.object for row in table.rows] == pod_list.items
    assert table.rows[1].object is pod_list.items[1]

    assert table.resource_version == "42"
    assert table.self_link == "/api/v1/pods"
    assert table.continue_ == "next-page"
    assert table.remaining_item_count == 3


def test_convert_empty_list(convertor):
    """Test converting an empty list produces headers and no rows."""
    table = convertor.convert_to_table(None, PodList(metadata=ListMeta(resource_version="9")), None)

    assert table.rows == []
    assert len(table.column_definitions) == 2
    assert table.resource_version == "9"


def test_convert_plain_list_has_no_table_metadata(convertor):
    """Test a plain Python list is converted without any table metadata."""
    pods = [
        make_pod("a", datetime(2024, 1, 1, tzinfo=timezone.utc), resource_version="1"),
        make_pod("b", datetime(2024, 1, 2, tzinfo=timezone.utc), resource_version="2"),
    ]

    table = convertor.convert_to_table(None, pods, TableOptions())

    assert [row.cells[0] for row in table.rows] == ["a", "b"]
    assert table.resource_version == ""
    assert table.self_link == ""
    assert table.continue_ == ""
    assert table.remaining_item_count is None


def test_convert_unstructured_list(convertor):
    """Test converting a list decoded from JSON."""
    obj = {
        "kind": "List",
        "apiVersion": "v1",
        "metadata": {"resourceVersion": "12", "continue": "abc", "remainingItemCount": 0},
        "items": [
            {"metadata": {"name": "x", "creationTimestamp": "2024-05-06T07:08:09Z"}},
            {"metadata": {"name": "y", "creationTimestamp": "2024-05-06T09:08:09+02:00"}},
        ],
    }

    table = convertor.convert_to_table(None, obj, TableOptions())

    assert [row.cells for row in table.rows] == [
        ["x", "2024-05-06T07:08:09Z"],
        ["y", "2024-05-06T07:08:09Z"],
    ]
    assert table.rows[0].object is obj["items"][0]
    assert table.resource_version == "12"
    assert table.continue_ == "abc"
    assert table.remaining_item_count == 0


def test_convert_does_not_mutate_input(convertor):
    """Test the input object is left untouched."""
    obj = {"items": [{"metadata": {"name": "x"}, "spec": {"replicas": 1}}]}
    snapshot = copy.deepcopy(obj)

    convertor.convert_to_table(None, obj, TableOptions())

    assert obj == snapshot


def test_missing_creation_timestamp_renders_zero_time(convertor):
    """Test an object without a creation timestamp shows the zero time."""
    table = convertor.convert_to_table(None, {"metadata": {"name": "new"}}, None)

    assert table.rows[0].cells == ["new", "0001-01-01T00:00:00Z"]


def test_no_headers_omits_column_definitions(convertor, pod_list):
    """Test suppressing headers keeps both cells of every row."""
    table = convertor.convert_to_table(None, pod_list, TableOptions(no_headers=True))

    assert table.column_definitions == []
    assert all(len(row.cells) == 2 for row in table.rows)


@pytest.mark.parametrize("options", [None, TableOptions(), {"noHeaders": True}, "noHeaders"])
def test_unrecognized_options_keep_headers(convertor, pod_list, options):
    """Test anything but TableOptions with no_headers set produces headers."""
    table = convertor.convert_to_table(None, pod_list, options)

    name, created_at = table.column_definitions
    assert (name.name, name.type, name.format) == ("Name", "string", "name")
    assert (created_at.name, created_at.type, created_at.format) == ("Created At", "date", "")
    assert name.priority == 0
    assert created_at.priority == 0


def test_column_descriptions_come_from_object_metadata(convertor, pod_list):
    """Test the column descriptions are the documented ObjectMeta fields."""
    table = convertor.convert_to_table(None, pod_list, TableOptions())

    name, created_at = table.column_definitions
    assert name.description == ObjectMeta.model_fields["name"].description
    assert created_at.description == ObjectMeta.model_fields["creation_timestamp"].description
    assert SWAGGER_METADATA_DESCRIPTIONS["creationTimestamp"].startswith("CreationTimestamp is a timestamp")


def test_opaque_object_uses_context_resource(convertor):
    """Test the error names the resource from the request context."""
    ctx = with_request_info(RequestContext(), RequestInfo(api_group="apps", resource="widgets"))

    with pytest.raises(NotAcceptableError) as exc_info:
        convertor.convert_to_table(ctx, Opaque(), TableOptions())

    error = exc_info.value
    assert error.resource == GroupResource(group="apps", resource="widgets")
    assert str(error) == "the resource widgets.apps does not support being converted to a Table"

    status = error.status()
    assert status.status == "Failure"
    assert status.code == 406
    assert status.reason == "NotAcceptable"
    assert status.message == str(error)
    assert status.model_dump(by_alias=True) == {
        "kind": "Status",
        "apiVersion": "v1",
        "status": "Failure",
        "message": "the resource widgets.apps does not support being converted to a Table",
        "reason": "NotAcceptable",
        "code": 406,
    }


def test_opaque_object_falls_back_to_default_resource():
    """Test the error names the default resource without request info."""
    convertor = DefaultTableConvertor(GroupResource(group="batch", resource="jobs"))

    with pytest.raises(NotAcceptableError, match="the resource jobs.batch does not support"):
        convertor.convert_to_table(RequestContext(), Opaque(), None)


def test_last_invalid_item_fails_whole_conversion(convertor, pod_list):
    """Test a single bad item at the end of a list aborts the conversion."""
    items = list(pod_list.items) + [Opaque()]

    with pytest.raises(NotAcceptableError, match="the resource pods does not support"):
        convertor.convert_to_table(None, items, TableOptions())


@patch("resttable.services.table_convertor.accessor")
def test_conversion_stops_at_first_failure(mock_accessor, convertor, pod_list):
    """Test no item after the failing one is inspected."""
    mock_accessor.side_effect = [pod_list.items[0].metadata, AccessorError("no metadata")]
    items = [pod_list.items[0], Opaque(), pod_list.items[1]]

    with pytest.raises(NotAcceptableError):
        convertor.convert_to_table(None, items, TableOptions())

    assert mock_accessor.call_count == 2


def test_table_wire_round_trip(convertor, pod_list):
    """Test the wire form of a table decodes back to the same table."""
    table = convertor.convert_to_table(None, pod_list, TableOptions())

    wire = table.model_dump(by_alias=True, mode="json")

    assert set(wire) == {
        "resourceVersion",
        "selfLink",
        "continue",
        "remainingItemCount",
        "columnDefinitions",
        "rows",
    }
    assert wire["columnDefinitions"][0] == {
        "name": "Name",
        "type": "string",
        "format": "name",
        "description": SWAGGER_METADATA_DESCRIPTIONS["name"],
        "priority": 0,
    }
    assert set(wire["rows"][0]) == {"cells", "conditions", "object"}

    decoded = Table.model_validate(wire)

    assert decoded.model_dump(by_alias=True, mode="json") == wire
    assert decoded.rows[0].object == pod_list.items[0].model_dump(by_alias=True, mode="json")
    assert decoded.rows[1].cells == ["b", "2024-01-02T00:00:00Z"]


def test_table_wire_omits_empty_column_definitions(convertor, pod_list):
    """Test the wire form leaves out column definitions when headers are suppressed."""
    table = convertor.convert_to_table(None, pod_list, TableOptions(no_headers=True))

    wire = table.model_dump(by_alias=True, mode="json")

    assert "columnDefinitions" not in wire
    assert wire["remainingItemCount"] == 3
    assert Table.model_validate(wire).column_definitions == []


def test_format_timestamp():
    """Test timestamps are rendered as RFC 3339 in UTC."""
    offset = timezone(timedelta(hours=2))

    assert format_timestamp(datetime(2024, 3, 2, 17, 4, 5, 999999, tzinfo=offset)) == "2024-03-02T15:04:05Z"
    assert format_timestamp(datetime(2024, 3, 2, 15, 4, 5)) == "2024-03-02T15:04:05Z"
    assert format_timestamp(None) == "0001-01-01T00:00:00Z"


def test_format_timestamp_clamps_out_of_range_values():
    """Test timestamps whose UTC value is not representable are clamped."""
    ahead = datetime(1, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=1)))
    behind = datetime(9999, 12, 31, 23, 30, tzinfo=timezone(timedelta(hours=-1)))

    assert format_timestamp(ahead) == "0001-01-01T00:00:00Z"
    assert format_timestamp(behind) == "9999-12-31T23:59:59Z"


def test_convert_out_of_range_timestamp(convertor):
    """Test an object created just before the first representable UTC second converts."""
    obj = {"metadata": {"name": "a", "creationTimestamp": "0001-01-01T00:30:00+01:00"}}

    table = convertor.convert_to_table(None, obj, TableOptions())

    assert table.rows[0].cells == ["a", "0001-01-01T00:00:00Z"]


def test_convert_unstructured_object_with_null_maps(convertor):
    """Test null labels and annotations do not prevent conversion."""
    obj = {"metadata": {"name": "a", "labels": None, "annotations": None, "uid": None}}

    table = convertor.convert_to_table(None, obj, TableOptions())

    assert table.rows[0].cells == ["a", "0001-01-01T00:00:00Z"]


def test_negative_remaining_item_count_is_left_unset(convertor):
    """Test a negative remaining count from a list accessor is not copied to the table."""

    class Page(ListMetadataAccessor):
        """A list reporting a negative remaining count."""

        items: List[Any] = []

        def get_resource_version(self) -> str:
            return "5"

        def get_self_link(self) -> str:
            return ""

        def get_continue(self) -> str:
            return "c"

        def get_remaining_item_count(self) -> Optional[int]:
            return -1

    table = convertor.convert_to_table(None, Page(), TableOptions())

    assert table.resource_version == "5"
    assert table.remaining_item_count is None
    assert Table.model_validate(table.model_dump(by_alias=True, mode="json")) == table
