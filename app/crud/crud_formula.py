import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.core.exceptions import NotFoundError
from app.crud.base import CRUDBase, paginate
from app.models.enums import EntityType
from app.models.formula import Formula, FormulaComponent
from app.schemas.formula import ComponentCreate, FormulaCreate
from app.services.approval_engine import approval_engine

logger = logging.getLogger(__name__)


class CRUDFormula(CRUDBase):
    model = Formula
    SORTABLE_FIELDS = ("formula_name", "status", "total_cost", "density", "margin", "created_on", "updated_on")

    def get_multi(
        self,
        db: Session,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        status: Optional[str] = None,
        created_by: Optional[int] = None,
    ):
        query = db.query(Formula)
        if status:
            query = query.filter(Formula.status == status)
        if created_by:
            query = query.filter(Formula.created_by == created_by)
        return paginate(query, page, limit, *self.resolve_sort(sort_by, sort_order))

    def create(self, db: Session, *, obj_in: FormulaCreate, role=None) -> Formula:
        """Insert the formula and its components in one transaction."""
        status = approval_engine.initial_status(EntityType.FORMULA, role, requested=obj_in.status)
        db_obj = Formula(
            formula_name=obj_in.formula_name,
            created_by=obj_in.created_by,
            density=obj_in.density,
            total_cost=obj_in.total_cost,
            margin=obj_in.margin,
            container_cost=obj_in.container_cost,
            status=status,
        )
        db_obj.components = [FormulaComponent(**c.model_dump()) for c in obj_in.components]
        try:
            db.add(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Rolled back formula %r", obj_in.formula_name)
            raise
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: Formula) -> Formula:
        """Delete components, pending approvals, then the formula, in one transaction."""
        try:
            approval_engine.discard_pending(db, EntityType.FORMULA, db_obj.id)
            # The components cascade flushes child deletes before the parent row
            db.delete(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return db_obj

    def get_component(self, db: Session, id: int) -> Optional[FormulaComponent]:
        return db.query(FormulaComponent).filter(FormulaComponent.id == id).first()

    def add_component(self, db: Session, *, formula_id: int, obj_in: ComponentCreate) -> FormulaComponent:
        if not self.get(db, formula_id):
            raise NotFoundError("Formula not found")
        component = FormulaComponent(formula_id=formula_id, **obj_in.model_dump())
        db.add(component)
        db.commit()
        db.refresh(component)
        return component

    def remove_component(self, db: Session, *, component: FormulaComponent) -> FormulaComponent:
        db.delete(component)
        db.commit()
        return component


formula = CRUDFormula()
