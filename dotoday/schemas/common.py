"""
Error envelope shared by every router.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Returned for all 4xx/5xx responses; branch on `code`, not `message`."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
