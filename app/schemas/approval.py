from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from app.models.enums import Decision, EntityType


class ApprovalCreate(BaseModel):
    entity_type: EntityType
    entity_id: int
    approver_id: int
    decision: Decision = Decision.PENDING
    comments: Optional[str] = None


class ApprovalUpdate(BaseModel):
    decision: Decision
    comments: Optional[str] = None


class Approval(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    approver_id: int
    decision: str
    decision_date: Optional[datetime] = None
    comments: Optional[str] = None
    approver_name: Optional[str] = None
    entity_name: Optional[str] = None

    class Config:
        from_attributes = True
