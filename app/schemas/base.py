"""Shared response envelope and page schemas"""

from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every successful response"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

class Page(BaseModel, Generic[T]):
    """One page of a paginated listing"""
    items: List[T]
    total: int
    page: int
    size: int
    pages: int
