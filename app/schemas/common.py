"""
Response envelopes and shared result schemas
"""

from typing import Any, List, Optional
from pydantic import BaseModel, Field

class StandardResponse(BaseModel):
    """Standard API response"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """Error response schema; ``details`` carries the error context"""
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None

class ImportRowError(BaseModel):
    """One spreadsheet row that could not be added"""
    index: int
    guest: str
    error: str

class BulkImportResult(BaseModel):
    success: int = 0
    failed: int = 0
    errors: List[ImportRowError] = Field(default_factory=list)
