import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from app.api import deps
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.roles import Capability
from app.models.enums import EntityType
from app.schemas import DecisionRequest, Principal, Resource, ResourceCreate, ResourceStats, ResourceUpdate
from app.services.approval_engine import approval_engine
from app.services.resource_reconciler import reconcile_resource_urls
from app.services.resource_storage import (
    ResourceStorage,
    file_type_label,
    format_file_size,
    normalize_category,
    read_upload,
)
from app import crud

logger = logging.getLogger(__name__)

router = APIRouter()


def _base_url(request: Request) -> str:
    return settings.PUBLIC_BASE_URL or str(request.base_url)


def _get_or_404(db: Session, id: int):
    resource = crud.resource.get(db, id=id)
    if not resource:
        raise NotFoundError("Resource not found")
    return resource


@router.get("/")
def read_resources(
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
    category: Optional[str] = None,
    uploaded_by: Optional[int] = None,
    search: Optional[str] = None,
):
    """
    List approved resources, newest first.
    """
    resources = crud.resource.get_multi(db, category=category, uploaded_by=uploaded_by, search=search)
    return {
        "success": True,
        "data": [Resource.model_validate(r) for r in resources],
        "count": len(resources),
    }


@router.get("/stats")
def read_resource_stats(
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
):
    return {"success": True, "data": ResourceStats(**crud.resource.stats(db))}


@router.get("/pending")
def read_pending_resources(
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
):
    resources = crud.resource.get_pending(db)
    return {
        "success": True,
        "data": [Resource.model_validate(r) for r in resources],
        "count": len(resources),
    }


@router.post("/reconcile")
def reconcile_resources(
    db: Session = Depends(deps.get_db),
    storage: ResourceStorage = Depends(deps.get_storage),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
):
    """
    Repair resources whose file_url points at the wrong category folder.
    """
    report = reconcile_resource_urls(db, storage)
    return {"success": True, "data": report, "message": f"{len(report['fixed'])} resource(s) fixed"}


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_resource(
    request: Request,
    file: UploadFile = File(...),
    uploaded_by: Optional[int] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(deps.get_db),
    storage: ResourceStorage = Depends(deps.get_storage),
    principal: Principal = Depends(deps.get_current_principal),
):
    """
    Store an uploaded file under its category folder and register it as a resource.

    Nothing is written when the type or size is rejected. The stored file is
    removed again if the database insert fails.
    """
    content = await read_upload(file)
    uploaded_by = deps.acting_user_id(principal, uploaded_by, "uploaded_by")

    category = normalize_category(category)
    relative = storage.save(category, file.filename or "upload", content)
    obj_in = ResourceCreate(
        file_name=file.filename or "upload",
        file_type=file_type_label(file.content_type),
        file_size=format_file_size(len(content)),
        file_url=storage.build_file_url(_base_url(request), relative),
        category=category,
        uploaded_by=uploaded_by,
        description=description or None,
    )
    try:
        resource = approval_engine.create_resource(db, obj_in, principal.role)
    except Exception:
        storage.delete(relative)
        raise
    return {
        "success": True,
        "data": Resource.model_validate(resource),
        "message": "File uploaded successfully",
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_resource(
    *,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
    resource_in: ResourceCreate,
):
    resource = approval_engine.create_resource(db, resource_in, principal.role)
    return {
        "success": True,
        "data": Resource.model_validate(resource),
        "message": "Resource created successfully",
    }


@router.get("/{id}")
def read_resource(
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
):
    return {"success": True, "data": Resource.model_validate(_get_or_404(db, id))}


@router.put("/{id}")
def update_resource(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.get_current_principal),
    resource_in: ResourceUpdate,
):
    resource = crud.resource.update(db, db_obj=_get_or_404(db, id), obj_in=resource_in)
    return {
        "success": True,
        "data": Resource.model_validate(resource),
        "message": "Resource updated successfully",
    }


@router.delete("/{id}")
def delete_resource(
    id: int,
    db: Session = Depends(deps.get_db),
    storage: ResourceStorage = Depends(deps.get_storage),
    principal: Principal = Depends(deps.get_current_principal),
):
    """
    Delete the row, then unlink its file. A failed unlink is only logged.
    """
    resource = _get_or_404(db, id)
    relative = storage.relative_path_from_url(resource.file_url) or ""
    url_category, _, filename = relative.rpartition("/")
    found = storage.locate(url_category or resource.category, filename)
    crud.resource.remove(db, db_obj=resource)
    if found:
        storage.delete(f"{found[0]}/{filename}")
    else:
        logger.warning("No file on disk for deleted resource %s (%s)", id, resource.file_url)
    return {"success": True, "message": "Resource deleted successfully"}


@router.get("/{id}/download")
def download_resource(
    id: int,
    db: Session = Depends(deps.get_db),
    storage: ResourceStorage = Depends(deps.get_storage),
    principal: Principal = Depends(deps.get_current_principal),
):
    resource = _get_or_404(db, id)
    relative = storage.relative_path_from_url(resource.file_url) or ""
    url_category, _, filename = relative.rpartition("/")
    found = storage.locate(url_category or resource.category, filename)
    if not found:
        raise NotFoundError("File not found on server")
    _, path = found
    return FileResponse(path, filename=resource.file_name)


@router.post("/{id}/approve")
def approve_resource(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    resource = approval_engine.approve(
        db, EntityType.RESOURCE, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {
        "success": True,
        "data": Resource.model_validate(resource),
        "message": "Resource approved successfully",
    }


@router.post("/{id}/reject")
def reject_resource(
    *,
    id: int,
    db: Session = Depends(deps.get_db),
    principal: Principal = Depends(deps.require_capability(Capability.APPROVE)),
    decision_in: DecisionRequest,
):
    resource = approval_engine.reject(
        db, EntityType.RESOURCE, id, deps.acting_user_id(principal, decision_in.approver_id), decision_in.comments
    )
    return {
        "success": True,
        "data": Resource.model_validate(resource),
        "message": "Resource rejected successfully",
    }
