import math
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy.orm import Query, Session

ASC = "ASC"
DESC = "DESC"


def paginate(query: Query, page: int, limit: int, *order_by) -> Dict[str, Any]:
    """Return one page of ``query`` plus ``{page, limit, total, totalPages}``.

    ``order_by`` must end in a unique column or pages can overlap.
    """
    total = query.order_by(None).count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return {
        "data": rows,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }


class CRUDBase:
    """
    Shared get/update/remove for a single model.

    ``SORTABLE_FIELDS`` is the only set of columns a caller may sort by;
    anything else falls back to ``DEFAULT_SORT`` without an error.
    """

    model = None
    SORTABLE_FIELDS: Tuple[str, ...] = ("created_on",)
    SORT_ALIASES: Dict[str, str] = {}
    DEFAULT_SORT = "created_on"

    def get(self, db: Session, id: int):
        return db.query(self.model).filter(self.model.id == id).first()

    def resolve_sort(self, sort_by: Optional[str], sort_order: Optional[str]) -> Tuple:
        """Sort clauses for ``paginate``, with ``id`` as the tie-breaker."""
        field = self.SORT_ALIASES.get(sort_by, sort_by)
        if field not in self.SORTABLE_FIELDS:
            field = self.DEFAULT_SORT
        column = getattr(self.model, field)
        if (sort_order or "").upper() == ASC:
            return column.asc(), self.model.id.asc()
        return column.desc(), self.model.id.asc()

    def update(self, db: Session, *, db_obj, obj_in: Union[Dict[str, Any], Any]):
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value.value if hasattr(value, "value") else value)

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj):
        db.delete(db_obj)
        db.commit()
        return db_obj
