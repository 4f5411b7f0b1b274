"""API endpoints for registered resources, with table output on request."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Request, status

from resttable.core.config import Settings
from resttable.core.context import RequestContext, RequestInfo, with_request_info
from resttable.core.dependencies import get_app_settings, get_registry, get_table_convertor
from resttable.models.meta import GroupResource
from resttable.models.table import TableOptions
from resttable.schemas.resource_api import (
    APIResourceListResponse,
    APIResourceSchema,
    ResourceCreate,
)
from resttable.services.registry import (
    InvalidContinueError,
    ResourceRegistry,
    ResourceStore,
    group_from_path,
    group_path,
)
from resttable.services.table_convertor import TableConvertor

logger = logging.getLogger(__name__)

router = APIRouter()

TABLE_MEDIA_PARAM = "as=table"


def wants_table(request: Request, as_: Optional[str]) -> bool:
    """Return True if the client asked for a Table, by query or Accept header."""
    if as_ is not None:
        return as_.lower() == "table"
    for media_range in request.headers.get("accept", "").split(","):
        params = [param.strip().lower() for param in media_range.split(";")[1:]]
        if TABLE_MEDIA_PARAM in params:
            return True
    return False


def render_table(
    convertor: TableConvertor,
    obj: Any,
    info: Optional[RequestInfo],
    no_headers: bool,
) -> Dict[str, Any]:
    """Convert an object to a Table and return its wire form."""
    logger.debug(f"Rendering {type(obj).__name__} as a table for {info.resource if info else 'an anonymous request'}")
    ctx = RequestContext() if info is None else with_request_info(None, info)
    table = convertor.convert_to_table(ctx, obj, TableOptions(no_headers=no_headers))
    return table.model_dump(by_alias=True, mode="json")


def _get_store(registry: ResourceRegistry, group: str, resource: str) -> ResourceStore:
    store = registry.get_store(GroupResource(group=group_from_path(group), resource=resource))
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resource {resource} not found in group {group}",
        )
    return store


def _request_info(settings: Settings, store: ResourceStore, verb: str, name: str = "") -> RequestInfo:
    return RequestInfo(
        api_prefix=settings.api_prefix,
        api_group=store.resource.group,
        resource=store.resource.resource,
        name=name,
        verb=verb,
    )


@router.get(
    "",
    response_model=APIResourceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List registered resources",
    description="List the resources served by this API.",
)
async def list_api_resources(
    registry: ResourceRegistry = Depends(get_registry),
) -> APIResourceListResponse:
    """List registered resources."""
    return APIResourceListResponse(
        resources=[
            APIResourceSchema(
                name=resource.resource,
                group=resource.group,
                path=f"{registry.api_prefix}/{group_path(resource.group)}/{resource.resource}",
            )
            for resource in registry.resources()
        ]
    )


@router.post(
    "/tables",
    status_code=status.HTTP_200_OK,
    summary="Convert objects to a table",
    description="Convert an arbitrary object or list of objects to a Table.",
)
async def convert_to_table(
    obj: Any = Body(...),
    no_headers: bool = Query(False, alias="noHeaders"),
    convertor: TableConvertor = Depends(get_table_convertor),
) -> Dict[str, Any]:
    """Convert the posted object to a Table."""
    return render_table(convertor, obj, None, no_headers)


@router.get(
    "/{group}/{resource}",
    status_code=status.HTTP_200_OK,
    summary="List objects of a resource",
    description="List objects of a resource, as a list or as a Table.",
)
async def list_objects(
    request: Request,
    group: str = Path(..., description="The API group, or 'core' for the core group"),
    resource: str = Path(..., description="The resource name"),
    limit: Optional[int] = Query(None, ge=1),
    continue_: Optional[str] = Query(None, alias="continue"),
    as_: Optional[str] = Query(None, alias="as"),
    no_headers: bool = Query(False, alias="noHeaders"),
    registry: ResourceRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """List objects of a resource."""
    store = _get_store(registry, group, resource)

    try:
        result = store.list(limit=limit or settings.default_page_limit, continue_token=continue_)
    except InvalidContinueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if wants_table(request, as_):
        return render_table(store.table_convertor, result, _request_info(settings, store, "list"), no_headers)
    return result


@router.post(
    "/{group}/{resource}",
    status_code=status.HTTP_201_CREATED,
    summary="Create an object",
    description="Create a new object of a resource.",
)
async def create_object(
    resource_create: ResourceCreate,
    group: str = Path(..., description="The API group, or 'core' for the core group"),
    resource: str = Path(..., description="The resource name"),
    registry: ResourceRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Create an object."""
    store = _get_store(registry, group, resource)

    name = resource_create.metadata.name
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="metadata.name is required",
        )

    if store.get(name) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{store.resource} {name} already exists",
        )

    obj = resource_create.model_dump(by_alias=True, mode="json", exclude_defaults=True)
    obj["metadata"] = resource_create.metadata.model_dump(by_alias=True, mode="json", exclude_defaults=True)
    return store.create(obj)


@router.get(
    "/{group}/{resource}/{name}",
    status_code=status.HTTP_200_OK,
    summary="Get an object by name",
    description="Get an object by name, as itself or as a Table.",
)
async def get_object(
    request: Request,
    group: str = Path(..., description="The API group, or 'core' for the core group"),
    resource: str = Path(..., description="The resource name"),
    name: str = Path(..., description="The object name"),
    as_: Optional[str] = Query(None, alias="as"),
    no_headers: bool = Query(False, alias="noHeaders"),
    registry: ResourceRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Get an object by name."""
    store = _get_store(registry, group, resource)

    obj = store.get(name)
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{store.resource} {name} not found",
        )

    if wants_table(request, as_):
        return render_table(store.table_convertor, obj, _request_info(settings, store, "get", name), no_headers)
    return obj
