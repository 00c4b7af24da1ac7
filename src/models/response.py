"""Common response wrapper."""

from typing import Any, Optional
from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Generic JSON body for responses the relay answers itself."""

    message: str
    route: Optional[str] = None
    data: Optional[Any] = None
