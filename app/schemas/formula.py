from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from app.models.enums import FormulaStatus


class ComponentBase(BaseModel):
    chemical_name: str
    percentage: float
    cost_per_lb: Optional[float] = None
    hazard_class: Optional[str] = None


class ComponentCreate(ComponentBase):
    pass


class ComponentUpdate(BaseModel):
    chemical_name: Optional[str] = None
    percentage: Optional[float] = None
    cost_per_lb: Optional[float] = None
    hazard_class: Optional[str] = None


class Component(ComponentBase):
    id: int
    formula_id: int

    class Config:
        from_attributes = True


class FormulaBase(BaseModel):
    formula_name: str
    created_by: Optional[int] = None
    density: Optional[float] = None
    total_cost: Optional[float] = None
    margin: Optional[float] = None
    container_cost: Optional[float] = None


class FormulaCreate(FormulaBase):
    status: Optional[FormulaStatus] = None
    components: List[ComponentCreate] = Field(default_factory=list)


class FormulaUpdate(BaseModel):
    formula_name: Optional[str] = None
    density: Optional[float] = None
    total_cost: Optional[float] = None
    margin: Optional[float] = None
    container_cost: Optional[float] = None
    status: Optional[FormulaStatus] = None


class Formula(FormulaBase):
    id: int
    status: str
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    creator_name: Optional[str] = None
    components: List[Component] = []

    class Config:
        from_attributes = True
