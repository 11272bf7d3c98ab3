from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.api import deps
from app.core.exceptions import NotFoundError
from app.core.roles import Capability
from app.models.enums import EntityType, QuoteStatus
from app.schemas import (
    DecisionRequest,
    Principal,
    Quote,
    QuoteCreate,
    QuoteTemplate,
    QuoteTemplateCreate,
    QuoteUpdate,
)
from app.services.approval_engine import approval_engine
from app import crud

router = APIRouter()


def _get_or_404(db: Session, id: int):
    quote = crud.quote.get(db, id=id)
    if not quote:
        raise NotFoundError("Quote not found")
    return quote


@router.get("/")
def read_quotes(
    db: Session = Depends(deps.get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
    created_by: Optional[int] = None,
    formula_id: Optional[int] = None,
):
    result = crud.quote.get_multi(
        db,
        page=page,
        limit=limit,
        sort_by=sortBy,
        sort_order=sortOrder,
        status=status.value if status else None,
        created_by=created_by,
        formula_id=formula_id,
    )
    return {
        "success": True,
        "data": [Quote.model_validate(q) for q in result["data"]],
        "pagination": result["pagination"],
    }


@router.get("/templates")
def read_templates(db: Session = Depends(deps.get_db)):
    templates = crud.quote.get_templates(db)
    return {
        "success": True,
        "data": [QuoteTemplate.model_validate(t) for t in templates],
        "count": len(templates),
    }


@router.post("/templates", status_code=status.HTTP_201_CREATED)
def create_template(*, db: Session = Depends(deps.get_db), template_in: QuoteTemplateCreate):
    template = crud.quote.create_template(db, obj_in=template_in)
    return {
        "success": True,
        "data": QuoteTemplate.model_validate(template),
        "message": "Template created successfully",
    }


@router.get("/{id}")
def read_quote(id: int, db: Session = Depends(deps.get_db)):
    return {"success": True, "data": Quote.model_validate(_get_or_404(db, id))}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_quote(
    *,
    db: Session = Depends(deps.get_db),
    principal: Optional[Principal] = Depends(deps.get_optional_principal),
    quote_in: QuoteCreate,
):
    quote = crud.quote.create(db, obj_in=quote_in, role=deps.actor_role(principal))
    return {"success": True, "data": Quote.model_validate(quote), "message": "Quote created successfully"}


@router.put("/{id}")
def update_quote(*, id: int, db: Session = Depends(deps.get_db), quote_in: QuoteUpdate):
    quote = crud.quote.update(db, db_obj=_get_or_404(db, id), obj_in=quote_in)
    return {"success": True, "data": Quote.model_validate(quote), "message": "Quote updated successfully"}


@router.delete("/{id}")
def delete_quote(id: int, db: Session = Depends(deps.get_db)):
    crud.quote.remove(db, db_obj=_get_or_404(db, id))
    return {"success": True, "message": "Quote deleted successfully"}


@router.post("/{id}/approve")
def approve_quote(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    quote = approval_engine.approve(
        db, EntityType.QUOTE, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {"success": True, "data": Quote.model_validate(quote), "message": "Quote approved successfully"}


@router.post("/{id}/reject")
def reject_quote(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    quote = approval_engine.reject(
        db, EntityType.QUOTE, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {"success": True, "data": Quote.model_validate(quote), "message": "Quote rejected successfully"}
