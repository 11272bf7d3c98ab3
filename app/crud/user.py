import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError
from app.crud.base import CRUDBase, paginate
from app.models.enums import UserStatus
from app.models.formula import Formula
from app.models.quote import Quote
from app.models.user import Role, User
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class CRUDUser(CRUDBase):
    model = User
    SORTABLE_FIELDS = ("username", "email", "status", "last_login", "created_on")
    SORT_ALIASES = {"name": "username"}

    def get_by_email(self, db: Session, email: str):
        return db.query(User).filter(User.email == email).first()

    def get_by_username(self, db: Session, username: str):
        return db.query(User).filter(User.username == username).first()

    def get_multi(
        self,
        db: Session,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        status: Optional[str] = None,
        role_id: Optional[int] = None,
    ):
        query = db.query(User)
        if status:
            query = query.filter(User.status == status)
        if role_id:
            query = query.filter(User.role_id == role_id)
        return paginate(query, page, limit, *self.resolve_sort(sort_by, sort_order))

    def create(self, db: Session, obj_in: UserCreate):
        if self.get_by_email(db, obj_in.email):
            raise ConflictError("User with this email already exists")
        if self.get_by_username(db, obj_in.username):
            raise ConflictError("User with this username already exists")
        db_obj = User(
            username=obj_in.username,
            email=obj_in.email,
            role_id=obj_in.role_id,
            status=obj_in.status.value,
            supabase_id=obj_in.supabase_id,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, *, db_obj: User, obj_in: UserUpdate):
        update_data = obj_in.model_dump(exclude_unset=True)
        email = update_data.get("email")
        if email and email != db_obj.email and self.get_by_email(db, email):
            raise ConflictError("User with this email already exists")
        username = update_data.get("username")
        if username and username != db_obj.username and self.get_by_username(db, username):
            raise ConflictError("User with this username already exists")
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def has_dependents(self, db: Session, id: int) -> bool:
        return (
            db.query(Formula.id).filter(Formula.created_by == id).first() is not None
            or db.query(Quote.id).filter(Quote.created_by == id).first() is not None
        )

    def remove(self, db: Session, *, db_obj: User):
        """Hard delete, or deactivate when formulas or quotes still reference the user."""
        if self.has_dependents(db, db_obj.id):
            db_obj.status = UserStatus.INACTIVE.value
            db.commit()
            db.refresh(db_obj)
            logger.info("User %s has dependent records, deactivated instead of deleted", db_obj.id)
            return db_obj, False
        db.delete(db_obj)
        db.commit()
        return db_obj, True

    def get_roles(self, db: Session):
        return db.query(Role).order_by(Role.id).all()


user = CRUDUser()
