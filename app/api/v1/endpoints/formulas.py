from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.api import deps
from app.core.exceptions import NotFoundError
from app.core.roles import Capability
from app.models.enums import EntityType, FormulaStatus
from app.schemas import (
    Component,
    ComponentCreate,
    ComponentUpdate,
    DecisionRequest,
    Formula,
    FormulaCreate,
    FormulaUpdate,
    Principal,
)
from app.services.approval_engine import approval_engine
from app import crud

router = APIRouter()


def _get_or_404(db: Session, id: int):
    formula = crud.formula.get(db, id=id)
    if not formula:
        raise NotFoundError("Formula not found")
    return formula


def _get_component_or_404(db: Session, id: int):
    component = crud.formula.get_component(db, id=id)
    if not component:
        raise NotFoundError("Component not found")
    return component


@router.get("/")
def read_formulas(
    db: Session = Depends(deps.get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    status: Optional[FormulaStatus] = None,
    created_by: Optional[int] = None,
):
    result = crud.formula.get_multi(
        db,
        page=page,
        limit=limit,
        sort_by=sortBy,
        sort_order=sortOrder,
        status=status.value if status else None,
        created_by=created_by,
    )
    return {
        "success": True,
        "data": [Formula.model_validate(f) for f in result["data"]],
        "pagination": result["pagination"],
    }


# Component routes are declared before "/{id}" routes that share a prefix
@router.put("/components/{component_id}")
def update_component(
    *,
    component_id: int,
    db: Session = Depends(deps.get_db),
    component_in: ComponentUpdate,
):
    component = crud.formula.update(
        db, db_obj=_get_component_or_404(db, component_id), obj_in=component_in
    )
    return {
        "success": True,
        "data": Component.model_validate(component),
        "message": "Component updated successfully",
    }


@router.delete("/components/{component_id}")
def delete_component(component_id: int, db: Session = Depends(deps.get_db)):
    crud.formula.remove_component(db, component=_get_component_or_404(db, component_id))
    return {"success": True, "message": "Component deleted successfully"}


@router.get("/{id}")
def read_formula(id: int, db: Session = Depends(deps.get_db)):
    return {"success": True, "data": Formula.model_validate(_get_or_404(db, id))}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_formula(
    *,
    db: Session = Depends(deps.get_db),
    principal: Optional[Principal] = Depends(deps.get_optional_principal),
    formula_in: FormulaCreate,
):
    formula = crud.formula.create(db, obj_in=formula_in, role=deps.actor_role(principal))
    return {
        "success": True,
        "data": Formula.model_validate(formula),
        "message": "Formula created successfully",
    }


@router.put("/{id}")
def update_formula(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    formula_in: FormulaUpdate,
):
    formula = crud.formula.update(db, db_obj=_get_or_404(db, id), obj_in=formula_in)
    return {
        "success": True,
        "data": Formula.model_validate(formula),
        "message": "Formula updated successfully",
    }


@router.delete("/{id}")
def delete_formula(id: int, db: Session = Depends(deps.get_db)):
    crud.formula.remove(db, db_obj=_get_or_404(db, id))
    return {"success": True, "message": "Formula deleted successfully"}


@router.post("/{id}/components", status_code=status.HTTP_201_CREATED)
def add_component(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    component_in: ComponentCreate,
):
    component = crud.formula.add_component(db, formula_id=id, obj_in=component_in)
    return {
        "success": True,
        "data": Component.model_validate(component),
        "message": "Component added successfully",
    }


@router.post("/{id}/approve")
def approve_formula(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    formula = approval_engine.approve(
        db, EntityType.FORMULA, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {"success": True, "data": Formula.model_validate(formula), "message": "Formula approved successfully"}


@router.post("/{id}/reject")
def reject_formula(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    formula = approval_engine.reject(
        db, EntityType.FORMULA, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {"success": True, "data": Formula.model_validate(formula), "message": "Formula rejected successfully"}
