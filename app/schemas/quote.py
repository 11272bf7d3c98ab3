from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from app.models.enums import QuoteStatus


class QuoteBase(BaseModel):
    formula_id: Optional[int] = None
    created_by: Optional[int] = None
    customer_name: Optional[str] = None
    total_price: Optional[float] = None
    template_id: Optional[int] = None


class QuoteCreate(QuoteBase):
    status: Optional[QuoteStatus] = None


class QuoteUpdate(BaseModel):
    formula_id: Optional[int] = None
    customer_name: Optional[str] = None
    total_price: Optional[float] = None
    template_id: Optional[int] = None
    status: Optional[QuoteStatus] = None


class Quote(QuoteBase):
    id: int
    status: str
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    formula_name: Optional[str] = None
    creator_name: Optional[str] = None
    template_name: Optional[str] = None

    class Config:
        from_attributes = True


class QuoteTemplateCreate(BaseModel):
    template_name: str
    layout: Optional[str] = None
    is_default: bool = False


class QuoteTemplate(QuoteTemplateCreate):
    id: int
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True
