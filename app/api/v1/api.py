from fastapi import APIRouter
from app.api.v1.endpoints import approvals, formulas, quotes, resources, roles, users

api_router = APIRouter()
api_router.include_router(resources.router, prefix="/resources", tags=["resources"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(formulas.router, prefix="/formulas", tags=["formulas"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
