from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.api import deps
from app.core.exceptions import NotFoundError
from app.core.roles import Capability
from app.models.enums import UserStatus
from app import crud, schemas

router = APIRouter()

view_users = deps.require_capability(Capability.VIEW_ALL_DATA)
manage_users = deps.require_capability(Capability.MANAGE_USERS)


def _get_or_404(db: Session, id: int):
    user = crud.user.get(db, id=id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("/")
def read_users(
    db: Session = Depends(deps.get_db),
    principal: schemas.Principal = Depends(view_users),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    status: Optional[UserStatus] = None,
    role_id: Optional[int] = None,
):
    result = crud.user.get_multi(
        db,
        page=page,
        limit=limit,
        sort_by=sortBy,
        sort_order=sortOrder,
        status=status.value if status else None,
        role_id=role_id,
    )
    return {
        "success": True,
        "data": [schemas.User.model_validate(u) for u in result["data"]],
        "pagination": result["pagination"],
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_user(
    *,
    db: Session = Depends(deps.get_db),
    principal: schemas.Principal = Depends(manage_users),
    user_in: schemas.UserCreate,
):
    user = crud.user.create(db, obj_in=user_in)
    return {"success": True, "data": schemas.User.model_validate(user), "message": "User created successfully"}


@router.get("/{id}")
def read_user_by_id(
    id: int,
    db: Session = Depends(deps.get_db),
    principal: schemas.Principal = Depends(view_users),
):
    return {"success": True, "data": schemas.User.model_validate(_get_or_404(db, id))}


@router.put("/{id}")
def update_user(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: schemas.Principal = Depends(manage_users),
    user_in: schemas.UserUpdate,
):
    user = crud.user.update(db, db_obj=_get_or_404(db, id), obj_in=user_in)
    return {"success": True, "data": schemas.User.model_validate(user), "message": "User updated successfully"}


@router.delete("/{id}")
def delete_user(
    id: int,
    db: Session = Depends(deps.get_db),
    principal: schemas.Principal = Depends(manage_users),
):
    user, deleted = crud.user.remove(db, db_obj=_get_or_404(db, id))
    if deleted:
        return {"success": True, "message": "User deleted successfully"}
    return {
        "success": True,
        "data": schemas.User.model_validate(user),
        "message": "User has dependent records and was deactivated instead",
    }
