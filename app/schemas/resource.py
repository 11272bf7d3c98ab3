from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class ResourceBase(BaseModel):
    file_name: str
    file_type: str
    file_size: str
    file_url: str
    category: Optional[str] = None
    description: Optional[str] = None


class ResourceCreate(ResourceBase):
    uploaded_by: int


class ResourceUpdate(BaseModel):
    file_name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class Resource(ResourceBase):
    id: int
    category: str
    uploaded_by: int
    uploaded_on: Optional[datetime] = None
    approval_status: str
    approved_by: Optional[int] = None
    approved_on: Optional[datetime] = None
    uploader_name: Optional[str] = None
    approver_name: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryCount(BaseModel):
    category: str
    count: int


class ResourceStats(BaseModel):
    total: int
    byCategory: List[CategoryCount]
