from typing import Optional
from pydantic import BaseModel


class DecisionRequest(BaseModel):
    """Body of every approve/reject call. ``approver_id`` defaults to the caller."""
    approver_id: Optional[int] = None
    comments: Optional[str] = None
