"""Status model returned for failed API calls."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

STATUS_FAILURE = "Failure"


class Status(BaseModel):
    """Result of an operation that does not return an object."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kind: str = "Status"
    api_version: str = "v1"
    status: str = ""
    message: str = ""
    reason: str = ""
    code: int = 0
