from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api import deps
from app import crud, schemas

router = APIRouter()


@router.get("/")
def read_roles(db: Session = Depends(deps.get_db)):
    roles = crud.user.get_roles(db)
    return {"success": True, "data": [schemas.Role.model_validate(r) for r in roles], "count": len(roles)}
