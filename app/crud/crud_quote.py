from typing import List, Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, paginate
from app.models.enums import EntityType
from app.models.quote import Quote, QuoteTemplate
from app.schemas.quote import QuoteCreate, QuoteTemplateCreate
from app.services.approval_engine import approval_engine


class CRUDQuote(CRUDBase):
    model = Quote
    SORTABLE_FIELDS = ("customer_name", "status", "total_price", "created_on", "updated_on")

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
        formula_id: Optional[int] = None,
    ):
        query = db.query(Quote)
        if status:
            query = query.filter(Quote.status == status)
        if created_by:
            query = query.filter(Quote.created_by == created_by)
        if formula_id:
            query = query.filter(Quote.formula_id == formula_id)
        return paginate(query, page, limit, *self.resolve_sort(sort_by, sort_order))

    def create(self, db: Session, *, obj_in: QuoteCreate, role=None) -> Quote:
        data = obj_in.model_dump(exclude={"status"})
        db_obj = Quote(
            **data,
            status=approval_engine.initial_status(EntityType.QUOTE, role, requested=obj_in.status),
        )
        try:
            db.add(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: Quote) -> Quote:
        try:
            approval_engine.discard_pending(db, EntityType.QUOTE, db_obj.id)
            db.delete(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return db_obj

    def get_templates(self, db: Session) -> List[QuoteTemplate]:
        return db.query(QuoteTemplate).order_by(QuoteTemplate.is_default.desc(), QuoteTemplate.template_name).all()

    def create_template(self, db: Session, *, obj_in: QuoteTemplateCreate) -> QuoteTemplate:
        if obj_in.is_default:
            db.query(QuoteTemplate).filter(QuoteTemplate.is_default.is_(True)).update(
                {QuoteTemplate.is_default: False}, synchronize_session=False
            )
        db_obj = QuoteTemplate(**obj_in.model_dump())
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


quote = CRUDQuote()
