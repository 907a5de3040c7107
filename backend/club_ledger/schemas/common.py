"""
Shared schema pieces: the response envelope and the money type.
"""

from decimal import Decimal
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Decimal internally, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    return {"success": True, "data": data, "message": message}
