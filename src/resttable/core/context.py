"""Request context carried into services that need to know about the request."""

from typing import Optional

from pydantic import BaseModel


class RequestInfo(BaseModel):
    """Information about the resource a request is addressed to."""

    api_prefix: str = ""
    api_group: str = ""
    resource: str = ""
    name: str = ""
    verb: str = ""


class RequestContext(BaseModel):
    """Ambient values of a single request."""

    request_info: Optional[RequestInfo] = None


def with_request_info(ctx: Optional[RequestContext], info: RequestInfo) -> RequestContext:
    """Return a copy of the context carrying the given request info."""
    if ctx is None:
        return RequestContext(request_info=info)
    return ctx.model_copy(update={"request_info": info})


def request_info_from(ctx: object) -> Optional[RequestInfo]:
    """Return the request info from the context, if one was attached."""
    if isinstance(ctx, RequestContext):
        return ctx.request_info
    return None
