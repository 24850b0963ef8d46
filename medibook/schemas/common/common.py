# medibook/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Optional

class EnvelopeResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None

class ReconcileResponse(BaseModel):
    released: int
