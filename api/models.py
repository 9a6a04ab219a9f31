# api/models.py

from pydantic import BaseModel, Field
from typing import List, Optional


class HealthResponse(BaseModel):
    status: str = "ok"
    tracing: str = Field(..., description="'enabled' when spans are exported to Phoenix")
    current_transaction: Optional[str] = None


class MeasureResponse(BaseModel):
    n: int
    result: int
    transaction: Optional[str] = None


class ReportResponse(BaseModel):
    transaction: Optional[str] = None
    sections: List[str]
    total: int
