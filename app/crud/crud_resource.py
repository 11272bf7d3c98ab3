from typing import List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.enums import ApprovalStatus, EntityType
from app.models.resource import Resource
from app.services.approval_engine import approval_engine
from app.services.resource_storage import CATEGORIES, normalize_category


class CRUDResource(CRUDBase):
    model = Resource

    def get_multi(
        self,
        db: Session,
        *,
        category: Optional[str] = None,
        uploaded_by: Optional[int] = None,
        search: Optional[str] = None,
        approval_status: Optional[str] = ApprovalStatus.APPROVED.value,
    ) -> List[Resource]:
        query = db.query(Resource)
        if approval_status:
            query = query.filter(Resource.approval_status == approval_status)
        if category:
            query = query.filter(Resource.category == category)
        if uploaded_by:
            query = query.filter(Resource.uploaded_by == uploaded_by)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Resource.file_name.ilike(pattern), Resource.description.ilike(pattern)))
        return query.order_by(Resource.uploaded_on.desc(), Resource.id.desc()).all()

    def get_pending(self, db: Session) -> List[Resource]:
        return self.get_multi(db, approval_status=ApprovalStatus.PENDING.value)

    def stats(self, db: Session) -> dict:
        rows = (
            db.query(Resource.category, func.count(Resource.id))
            .group_by(Resource.category)
            .all()
        )
        counts = dict(rows)
        by_category = [{"category": c, "count": counts.get(c, 0)} for c in CATEGORIES]
        return {"total": sum(counts.values()), "byCategory": by_category}

    def update(self, db: Session, *, db_obj: Resource, obj_in):
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        if "category" in update_data:
            update_data["category"] = normalize_category(update_data["category"])
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def remove(self, db: Session, *, db_obj: Resource) -> Resource:
        try:
            approval_engine.discard_pending(db, EntityType.RESOURCE, db_obj.id)
            db.delete(db_obj)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return db_obj


resource = CRUDResource()
