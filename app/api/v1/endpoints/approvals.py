from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.api import deps
from app.core.exceptions import NotFoundError
from app.models.enums import Decision, EntityType
from app.schemas import Approval, ApprovalCreate, ApprovalUpdate
from app import crud

router = APIRouter()


def _serialize(db: Session, approval) -> Approval:
    return Approval.model_validate(approval).model_copy(
        update={"entity_name": crud.approval.entity_name(db, approval)}
    )


def _get_or_404(db: Session, id: int):
    approval = crud.approval.get(db, id=id)
    if not approval:
        raise NotFoundError("Approval not found")
    return approval


@router.get("/")
def read_approvals(
    db: Session = Depends(deps.get_db),
    entity_type: Optional[EntityType] = None,
    decision: Optional[Decision] = None,
    approver_id: Optional[int] = None,
):
    approvals = crud.approval.get_multi(
        db,
        entity_type=entity_type.value if entity_type else None,
        decision=decision.value if decision else None,
        approver_id=approver_id,
    )
    return {
        "success": True,
        "data": [_serialize(db, a) for a in approvals],
        "count": len(approvals),
    }


@router.get("/stats/pending")
def read_pending_count(db: Session = Depends(deps.get_db)):
    return {"success": True, "data": {"pending_count": crud.approval.count_pending(db)}}


@router.get("/{id}")
def read_approval(id: int, db: Session = Depends(deps.get_db)):
    return {"success": True, "data": _serialize(db, _get_or_404(db, id))}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_approval(*, db: Session = Depends(deps.get_db), approval_in: ApprovalCreate):
    approval = crud.approval.create(db, obj_in=approval_in)
    return {
        "success": True,
        "data": _serialize(db, approval),
        "message": "Approval created successfully",
    }


@router.put("/{id}")
def update_approval(*, id: int, db: Session = Depends(deps.get_db), approval_in: ApprovalUpdate):
    approval = crud.approval.update(db, db_obj=_get_or_404(db, id), obj_in=approval_in)
    return {
        "success": True,
        "data": _serialize(db, approval),
        "message": "Approval updated successfully",
    }


@router.delete("/{id}")
def delete_approval(id: int, db: Session = Depends(deps.get_db)):
    crud.approval.remove(db, db_obj=_get_or_404(db, id))
    return {"success": True, "message": "Approval deleted successfully"}
