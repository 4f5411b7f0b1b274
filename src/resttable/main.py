"""Main module for the REST Table API service."""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from resttable.api.v1.endpoints import resources
from resttable.core.config import Settings, get_settings
from resttable.core.dependencies import get_app_settings
from resttable.models.meta import GroupResource
from resttable.services.registry import ResourceRegistry
from resttable.services.table_convertor import DefaultTableConvertor, NotAcceptableError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def not_acceptable_handler(request: Request, exc: NotAcceptableError) -> JSONResponse:
    """Render a NotAcceptableError as an API status."""
    status = exc.status()
    return JSONResponse(status_code=status.code, content=status.model_dump(by_alias=True))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the application and initialize its services."""
    settings = settings or get_settings()
    logging.getLogger("resttable").setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.project_name,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        redirect_slashes=False,  # Disable automatic redirects for trailing slashes
    )

    logger.info("Initializing application services...")
    app.state.settings = settings
    app.state.registry = ResourceRegistry.from_settings(settings)
    app.state.table_convertor = DefaultTableConvertor(
        GroupResource(group=settings.default_group, resource=settings.default_resource)
    )

    app.add_exception_handler(NotAcceptableError, not_acceptable_handler)
    app.include_router(resources.router, prefix=settings.api_prefix, tags=["resources"])

    @app.get("/ping")
    async def pong(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
        """Ping the API to check if it's running."""
        return {
            "ping": "pong!",
            "environment": settings.environment,
            "testing": settings.testing,
        }

    logger.info("All application services initialized successfully")
    return app


app = create_app()
