from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError
from app.crud.base import CRUDBase
from app.models.approval import Approval
from app.models.enums import Decision, EntityType
from app.models.formula import Formula
from app.models.quote import Quote
from app.models.resource import Resource
from app.schemas.approval import ApprovalCreate, ApprovalUpdate
from app.services.approval_engine import utcnow


class CRUDApproval(CRUDBase):
    model = Approval

    def get_multi(
        self,
        db: Session,
        *,
        entity_type: Optional[str] = None,
        decision: Optional[str] = None,
        approver_id: Optional[int] = None,
    ) -> List[Approval]:
        query = db.query(Approval)
        if entity_type:
            query = query.filter(Approval.entity_type == entity_type)
        if decision:
            query = query.filter(Approval.decision == decision)
        if approver_id:
            query = query.filter(Approval.approver_id == approver_id)
        return query.order_by(Approval.decision_date.desc(), Approval.id.desc()).all()

    def entity_name(self, db: Session, approval: Approval) -> Optional[str]:
        """Display name of the approved entity, or None once it is gone."""
        if approval.entity_type == EntityType.FORMULA.value:
            name = db.query(Formula.formula_name).filter(Formula.id == approval.entity_id).scalar()
            return name
        if approval.entity_type == EntityType.QUOTE.value:
            row = db.query(Quote.id, Quote.customer_name).filter(Quote.id == approval.entity_id).first()
            return f"Quote for {row.customer_name}" if row else None
        if approval.entity_type == EntityType.RESOURCE.value:
            return db.query(Resource.file_name).filter(Resource.id == approval.entity_id).scalar()
        return None

    def count_pending(self, db: Session) -> int:
        return db.query(Approval).filter(Approval.decision == Decision.PENDING.value).count()

    def has_pending(self, db: Session, entity_type: str, entity_id: int) -> bool:
        return (
            db.query(Approval.id)
            .filter(
                Approval.entity_type == entity_type,
                Approval.entity_id == entity_id,
                Approval.decision == Decision.PENDING.value,
            )
            .first()
            is not None
        )

    def create(self, db: Session, *, obj_in: ApprovalCreate) -> Approval:
        if obj_in.decision == Decision.PENDING and self.has_pending(db, obj_in.entity_type.value, obj_in.entity_id):
            raise ConflictError(
                "A pending approval already exists for this entity",
                detail=f"{obj_in.entity_type.value} {obj_in.entity_id}",
            )
        db_obj = Approval(
            entity_type=obj_in.entity_type.value,
            entity_id=obj_in.entity_id,
            approver_id=obj_in.approver_id,
            decision=obj_in.decision.value,
            decision_date=utcnow(),
            comments=obj_in.comments,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, *, db_obj: Approval, obj_in: ApprovalUpdate) -> Approval:
        if (
            obj_in.decision == Decision.PENDING
            and db_obj.decision != Decision.PENDING.value
            and self.has_pending(db, db_obj.entity_type, db_obj.entity_id)
        ):
            raise ConflictError("A pending approval already exists for this entity")
        return super().update(
            db,
            db_obj=db_obj,
            obj_in={"decision": obj_in.decision.value, "comments": obj_in.comments, "decision_date": utcnow()},
        )


approval = CRUDApproval()
