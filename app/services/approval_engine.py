"""
Approval Engine

Decides at creation time whether a Formula, Quote or Resource needs human
approval, and applies approve/reject decisions afterwards.

Lifecycle per entity: ``Pending -> Approved | Rejected``. Entities created
by an auto-approving role (or knowledge resources) start ``Approved`` and
never get an approvals row. ``Returned`` is a legal stored decision that
no path here produces.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.core.roles import Capability, has_capability
from app.models.approval import Approval
from app.models.enums import (
    ApprovalStatus,
    Decision,
    EntityType,
    FormulaStatus,
    QuoteStatus,
    ResourceCategory,
)
from app.models.formula import Formula
from app.models.quote import Quote
from app.models.resource import Resource
from app.models.user import User
from app.schemas.resource import ResourceCreate
from app.services.resource_storage import normalize_category

logger = logging.getLogger(__name__)

ENTITY_MODELS = {
    EntityType.FORMULA: Formula,
    EntityType.QUOTE: Quote,
    EntityType.RESOURCE: Resource,
}

# Column holding the workflow state on each entity table
STATUS_FIELDS = {
    EntityType.FORMULA: "status",
    EntityType.QUOTE: "status",
    EntityType.RESOURCE: "approval_status",
}

PENDING_STATUS = {
    EntityType.FORMULA: FormulaStatus.PENDING.value,
    EntityType.QUOTE: QuoteStatus.PENDING_APPROVAL.value,
    EntityType.RESOURCE: ApprovalStatus.PENDING.value,
}

DRAFT_STATUS = {
    EntityType.FORMULA: FormulaStatus.DRAFT.value,
    EntityType.QUOTE: QuoteStatus.DRAFT.value,
}

FINAL_DECISIONS = (Decision.APPROVED, Decision.REJECTED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _value(item) -> Optional[str]:
    return item.value if hasattr(item, "value") else item


class ApprovalEngine:
    def initial_status(
        self,
        entity_type: EntityType,
        role,
        category: Optional[str] = None,
        requested: Optional[str] = None,
    ) -> str:
        """Status an entity is created with, given the actor's role."""
        entity_type = EntityType(entity_type)
        auto = has_capability(role, Capability.AUTO_APPROVE)

        if entity_type == EntityType.RESOURCE:
            if auto or normalize_category(category) == ResourceCategory.KNOWLEDGE.value:
                return ApprovalStatus.APPROVED.value
            return ApprovalStatus.PENDING.value

        requested = _value(requested) or DRAFT_STATUS[entity_type]
        if requested == PENDING_STATUS[entity_type] and auto:
            return ApprovalStatus.APPROVED.value
        return requested

    def ensure_pending_approval(
        self,
        db: Session,
        entity_type: EntityType,
        entity_id: int,
        requested_by: int,
        comments: Optional[str] = None,
        commit: bool = True,
    ) -> Approval:
        """
        Return the single Pending approvals row for an entity, creating it if needed.

        ``approver_id`` holds the requester until a real approver decides.
        """
        entity_type = EntityType(entity_type)
        existing = (
            db.query(Approval)
            .filter(
                Approval.entity_type == entity_type.value,
                Approval.entity_id == entity_id,
                Approval.decision == Decision.PENDING.value,
            )
            .first()
        )
        if existing:
            return existing

        approval = Approval(
            entity_type=entity_type.value,
            entity_id=entity_id,
            approver_id=requested_by,
            decision=Decision.PENDING.value,
            decision_date=utcnow(),
            comments=comments,
        )
        db.add(approval)
        if commit:
            db.commit()
            db.refresh(approval)
        else:
            db.flush()
        return approval

    def discard_pending(self, db: Session, entity_type: EntityType, entity_id: int) -> int:
        """
        Delete an entity's Pending approvals rows without committing.

        Called from the entity's delete so the queue never points at a
        missing row. Decided rows stay as history.
        """
        entity_type = EntityType(entity_type)
        removed = (
            db.query(Approval)
            .filter(
                Approval.entity_type == entity_type.value,
                Approval.entity_id == entity_id,
                Approval.decision == Decision.PENDING.value,
            )
            .delete(synchronize_session=False)
        )
        if removed:
            logger.info("Discarded %s pending approval(s) for %s %s", removed, entity_type.value, entity_id)
        return removed

    def create_resource(self, db: Session, obj_in: ResourceCreate, role) -> Resource:
        """Insert a resource and, when it starts Pending, its approvals row in one transaction."""
        category = normalize_category(obj_in.category)
        status = self.initial_status(EntityType.RESOURCE, role, category=category)
        db_obj = Resource(
            file_name=obj_in.file_name,
            file_type=obj_in.file_type,
            file_size=obj_in.file_size,
            file_url=obj_in.file_url,
            category=category,
            uploaded_by=obj_in.uploaded_by,
            description=obj_in.description,
            approval_status=status,
        )
        if status == ApprovalStatus.APPROVED.value:
            db_obj.approved_by = obj_in.uploaded_by
            db_obj.approved_on = utcnow()

        try:
            db.add(db_obj)
            db.flush()
            if status == ApprovalStatus.PENDING.value:
                self.ensure_pending_approval(
                    db,
                    EntityType.RESOURCE,
                    db_obj.id,
                    requested_by=obj_in.uploaded_by,
                    comments=f"Resource upload pending approval: {obj_in.file_name}",
                    commit=False,
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_obj)
        logger.info("Created resource %s (%s, %s)", db_obj.id, category, status)
        return db_obj

    def decide(
        self,
        db: Session,
        entity_type: EntityType,
        entity_id: int,
        approver_id: int,
        decision: Decision,
        comments: Optional[str] = None,
    ):
        """
        Apply an Approved/Rejected decision to an entity and its Pending approvals row.

        The entity is updated even when no Pending row matches; both writes
        commit together.
        """
        entity_type = EntityType(entity_type)
        decision = Decision(decision)
        if decision not in FINAL_DECISIONS:
            raise ValidationError(f"Unsupported decision: {decision.value}")

        model = ENTITY_MODELS[entity_type]
        entity = db.query(model).filter(model.id == entity_id).first()
        if not entity:
            raise NotFoundError(f"{entity_type.value} not found")
        if not db.query(User.id).filter(User.id == approver_id).first():
            raise ValidationError("Approver not found", detail=f"No user with id {approver_id}")

        now = utcnow()
        try:
            setattr(entity, STATUS_FIELDS[entity_type], decision.value)
            if entity_type == EntityType.RESOURCE:
                entity.approved_by = approver_id
                entity.approved_on = now

            values = {
                Approval.decision: decision.value,
                Approval.approver_id: approver_id,
                Approval.decision_date: now,
            }
            if comments is not None:
                values[Approval.comments] = comments
            matched = (
                db.query(Approval)
                .filter(
                    Approval.entity_type == entity_type.value,
                    Approval.entity_id == entity_id,
                    Approval.decision == Decision.PENDING.value,
                )
                .update(values, synchronize_session=False)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        if matched:
            logger.info("%s %s %s by user %s", entity_type.value, entity_id, decision.value, approver_id)
        else:
            logger.warning(
                "%s %s marked %s by user %s with no pending approval row",
                entity_type.value, entity_id, decision.value, approver_id,
            )
        db.refresh(entity)
        return entity

    def approve(self, db: Session, entity_type: EntityType, entity_id: int, approver_id: int, comments: Optional[str] = None):
        return self.decide(db, entity_type, entity_id, approver_id, Decision.APPROVED, comments)

    def reject(self, db: Session, entity_type: EntityType, entity_id: int, approver_id: int, comments: Optional[str] = None):
        return self.decide(db, entity_type, entity_id, approver_id, Decision.REJECTED, comments)


approval_engine = ApprovalEngine()
