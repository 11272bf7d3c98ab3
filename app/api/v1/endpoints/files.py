import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from app.api import deps
from app.core.exceptions import error_body
from app.services.resource_storage import CATEGORIES, ResourceStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{category}/{filename}")
def serve_file(
    category: str,
    filename: str,
    storage: ResourceStorage = Depends(deps.get_storage),
):
    """
    Serve a stored file, redirecting when it sits in a different category folder.
    """
    path = storage.resolve(f"{category}/{filename}")
    if path is not None and path.is_file():
        return FileResponse(path)

    found = storage.locate(None, filename)
    if found:
        actual_category, _ = found
        logger.info("Redirecting %s/%s to %s", category, filename, actual_category)
        return RedirectResponse(
            url=f"/uploads/{actual_category}/{filename}",
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body("File not found", searchedIn=list(CATEGORIES), filename=filename),
    )
