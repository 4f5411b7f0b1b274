"""Dependencies for the application using FastAPI app state for singletons."""

import logging

from fastapi import Request

from resttable.core.config import Settings
from resttable.services.registry import ResourceRegistry
from resttable.services.table_convertor import TableConvertor

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    if not hasattr(request.app.state, "settings"):
        raise ValueError("Settings not initialized in application state")

    return request.app.state.settings


def get_registry(request: Request) -> ResourceRegistry:
    """Get the resource registry from application state."""
    if not hasattr(request.app.state, "registry"):
        raise ValueError("Resource registry not initialized in application state")

    return request.app.state.registry


def get_table_convertor(request: Request) -> TableConvertor:
    """Get the fallback table convertor from application state."""
    if not hasattr(request.app.state, "table_convertor"):
        raise ValueError("Table convertor not initialized in application state")

    return request.app.state.table_convertor
